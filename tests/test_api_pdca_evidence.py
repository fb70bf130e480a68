import uuid
from unittest.mock import patch

from app.models.user import User
from conftest import bearer, make_evidence, make_meeting, make_ttfu


class TestEvidenceEndpoints:
    def test_submit_link_and_list_newest_first(
        self, client, db_session, auth_headers, supervisor, reviewer, person
    ):
        meeting = make_meeting(db_session, supervisor)
        ttfu = make_ttfu(db_session, meeting, person, reviewer)

        resp = client.post(
            f"/ttfus/{ttfu.id}/evidence",
            json={"kind": "link", "url": "not a url"},
            headers=auth_headers,
        )
        assert resp.status_code == 400

        first = client.post(
            f"/ttfus/{ttfu.id}/evidence",
            json={"kind": "link", "url": "https://example.com/first"},
            headers=auth_headers,
        )
        assert first.status_code == 201
        second = client.post(
            f"/ttfus/{ttfu.id}/evidence",
            json={"kind": "link", "url": "https://example.com/second"},
            headers=auth_headers,
        )
        assert second.status_code == 201

        resp = client.get(f"/ttfus/{ttfu.id}/evidence", headers=auth_headers)
        assert resp.status_code == 200
        ids = [e["id"] for e in resp.json()["data"]]
        assert set(ids) == {first.json()["data"]["id"], second.json()["data"]["id"]}
        created = [e["created_at"] for e in resp.json()["data"]]
        assert created == sorted(created, reverse=True)

    def test_get_evidence(self, client, db_session, auth_headers, supervisor, reviewer, person):
        meeting = make_meeting(db_session, supervisor)
        ttfu = make_ttfu(db_session, meeting, person, reviewer)
        evidence = make_evidence(db_session, ttfu, person)
        resp = client.get(f"/evidence/{evidence.id}", headers=auth_headers)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["kind"] == "link"
        assert data["submitter"]["id"] == str(person.id)
        assert data["reviews"] == []

    def test_upload_url_unconfigured(
        self, client, db_session, auth_headers, supervisor, reviewer, person
    ):
        meeting = make_meeting(db_session, supervisor)
        ttfu = make_ttfu(db_session, meeting, person, reviewer)
        resp = client.post(
            f"/ttfus/{ttfu.id}/evidence/upload-url",
            json={"file_name": "report.pdf", "mime_type": "application/pdf"},
            headers=auth_headers,
        )
        assert resp.status_code == 503
        assert "error" in resp.json()

    @patch("app.services.pdca_storage.StorageService._presign")
    def test_upload_then_submit_file(
        self,
        mock_presign,
        client,
        db_session,
        auth_headers,
        supervisor,
        reviewer,
        person,
    ):
        mock_presign.return_value = "https://s3.example.com/signed"
        meeting = make_meeting(db_session, supervisor)
        ttfu = make_ttfu(db_session, meeting, person, reviewer)
        resp = client.post(
            f"/ttfus/{ttfu.id}/evidence/upload-url",
            json={"file_name": "report.pdf", "mime_type": "application/pdf"},
            headers=auth_headers,
        )
        assert resp.status_code == 200
        upload = resp.json()["data"]
        assert upload["upload_url"] == "https://s3.example.com/signed"
        assert upload["file_ref"].startswith(f"evidence/{ttfu.id}/")

        resp = client.post(
            f"/ttfus/{ttfu.id}/evidence",
            json={"kind": "file", "file_ref": upload["file_ref"]},
            headers=auth_headers,
        )
        assert resp.status_code == 201
        evidence_id = resp.json()["data"]["id"]

        resp = client.get(f"/evidence/{evidence_id}/download-url", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["download_url"] == "https://s3.example.com/signed"


class TestReviewEndpoints:
    def test_non_reviewer_forbidden_regardless_of_payload(
        self, client, db_session, auth_headers, supervisor, reviewer, person
    ):
        meeting = make_meeting(db_session, supervisor)
        ttfu = make_ttfu(db_session, meeting, person, reviewer)
        evidence = make_evidence(db_session, ttfu, person)
        for payload in ({"decision": "approved"}, {"decision": 42}, {}):
            resp = client.post(
                f"/evidence/{evidence.id}/reviews", json=payload, headers=auth_headers
            )
            assert resp.status_code == 403

    def test_non_reviewer_malformed_body_forbidden(
        self, client, db_session, auth_headers, supervisor, reviewer, person
    ):
        meeting = make_meeting(db_session, supervisor)
        ttfu = make_ttfu(db_session, meeting, person, reviewer)
        evidence = make_evidence(db_session, ttfu, person)
        resp = client.post(
            f"/evidence/{evidence.id}/reviews",
            content="{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert resp.status_code == 403

    def test_reviewer_malformed_body_is_validation_error(
        self, client, db_session, reviewer_headers, supervisor, reviewer, person
    ):
        meeting = make_meeting(db_session, supervisor)
        ttfu = make_ttfu(db_session, meeting, person, reviewer)
        evidence = make_evidence(db_session, ttfu, person)
        url = f"/evidence/{evidence.id}/reviews"

        resp = client.post(
            url,
            content="{not json",
            headers={**reviewer_headers, "Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "Validation error"

        resp = client.post(url, json={"comment": "no decision"}, headers=reviewer_headers)
        assert resp.status_code == 400
        assert resp.json()["details"][0]["loc"] == ["body", "decision"]

    def test_duplicate_review_conflicts(
        self, client, db_session, reviewer_headers, admin_headers, supervisor, reviewer, person
    ):
        meeting = make_meeting(db_session, supervisor)
        ttfu = make_ttfu(db_session, meeting, person, reviewer)
        evidence = make_evidence(db_session, ttfu, person)
        url = f"/evidence/{evidence.id}/reviews"
        resp = client.post(url, json={"decision": "approved"}, headers=reviewer_headers)
        assert resp.status_code == 201
        resp = client.post(url, json={"decision": "rejected"}, headers=reviewer_headers)
        assert resp.status_code == 409
        resp = client.post(url, json={"decision": "rejected"}, headers=admin_headers)
        assert resp.status_code == 201

        resp = client.get(url, headers=reviewer_headers)
        assert resp.status_code == 200
        assert len(resp.json()["data"]) == 2

    def test_review_missing_evidence(self, client, reviewer_headers):
        resp = client.post(
            f"/evidence/{uuid.uuid4()}/reviews",
            json={"decision": "approved"},
            headers=reviewer_headers,
        )
        assert resp.status_code == 404


class TestPDCAScenario:
    def test_meeting_to_review_cycle(
        self, client, db_session, supervisor_headers, admin_headers
    ):
        def _create_user(name, role):
            resp = client.post(
                "/users",
                json={
                    "name": name,
                    "email": f"{name.lower()}@example.com",
                    "password": "password123",
                    "global_role": role,
                },
                headers=admin_headers,
            )
            assert resp.status_code == 201
            return resp.json()["data"]

        owner = _create_user("Avery", "user")
        checker = _create_user("Blake", "reviewer")

        def _headers(user_data):
            return bearer(db_session.get(User, uuid.UUID(user_data["id"])))

        owner_headers = _headers(owner)
        checker_headers = _headers(checker)

        resp = client.post(
            "/meetings",
            json={
                "title": "Monthly PDCA",
                "date": "2026-03-02T09:00:00Z",
                "participants": [
                    {"user_id": owner["id"], "role": "owner"},
                    {"user_id": checker["id"], "role": "reviewer"},
                ],
            },
            headers=supervisor_headers,
        )
        assert resp.status_code == 201
        meeting_id = resp.json()["data"]["id"]

        resp = client.post(
            "/ttfus",
            json={
                "meeting_id": meeting_id,
                "title": "Fix the intake form",
                "assignee_id": owner["id"],
                "reviewer_id": checker["id"],
            },
            headers=supervisor_headers,
        )
        assert resp.status_code == 201
        ttfu_id = resp.json()["data"]["id"]

        resp = client.post(
            f"/ttfus/{ttfu_id}/evidence",
            json={"kind": "link", "url": "https://example.com/intake-v2"},
            headers=owner_headers,
        )
        assert resp.status_code == 201
        evidence_id = resp.json()["data"]["id"]

        resp = client.post(
            f"/evidence/{evidence_id}/reviews",
            json={"decision": "approved", "comment": "Ship it"},
            headers=checker_headers,
        )
        assert resp.status_code == 201
        review_id = resp.json()["data"]["id"]

        resp = client.get(f"/ttfus/{ttfu_id}/evidence", headers=owner_headers)
        evidence_list = resp.json()["data"]
        assert [e["id"] for e in evidence_list] == [evidence_id]
        assert [r["id"] for r in evidence_list[0]["reviews"]] == [review_id]
        assert evidence_list[0]["reviews"][0]["decision"] == "approved"

        resp = client.get(f"/ttfus/{ttfu_id}", headers=owner_headers)
        assert resp.json()["data"]["status"] == "open"
