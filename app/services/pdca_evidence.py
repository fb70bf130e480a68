import logging

from fastapi import HTTPException
from pydantic import AnyHttpUrl, TypeAdapter, ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.pdca import TTFU, Evidence, EvidenceKind
from app.schemas.pdca_evidence import EvidenceCreate
from app.services.auth import Principal
from app.services.common import coerce_enum, coerce_uuid
from app.services.pdca_storage import storage

logger = logging.getLogger(__name__)

_http_url = TypeAdapter(AnyHttpUrl)


def _validate_link(url: str | None) -> str:
    if not url or not url.strip():
        raise HTTPException(status_code=400, detail="url is required for link evidence")
    url = url.strip()
    try:
        _http_url.validate_python(url)
    except ValidationError:
        raise HTTPException(status_code=400, detail=f"Invalid url: {url}")
    return url


def _get_ttfu(db: Session, ttfu_id: str) -> TTFU:
    ttfu = db.get(TTFU, coerce_uuid(ttfu_id))
    if not ttfu:
        raise HTTPException(status_code=404, detail="TTFU not found")
    return ttfu


class Evidences:
    @staticmethod
    def create(
        db: Session, principal: Principal, ttfu_id: str, payload: EvidenceCreate
    ) -> Evidence:
        ttfu = _get_ttfu(db, ttfu_id)
        kind = coerce_enum(EvidenceKind, payload.kind, "kind")
        url = None
        file_ref = None
        if kind == EvidenceKind.link:
            if payload.file_ref:
                raise HTTPException(
                    status_code=400,
                    detail="file_ref is not allowed for link evidence",
                )
            url = _validate_link(payload.url)
        else:
            if payload.url:
                raise HTTPException(
                    status_code=400,
                    detail="url is not allowed for file evidence",
                )
            if not payload.file_ref or not payload.file_ref.strip():
                raise HTTPException(
                    status_code=400,
                    detail="file_ref is required for file evidence",
                )
            file_ref = payload.file_ref.strip()

        evidence = Evidence(
            ttfu_id=ttfu.id,
            kind=kind,
            url=url,
            file_ref=file_ref,
            description=payload.description,
            submitted_by=principal.user_id,
        )
        db.add(evidence)
        db.flush()
        db.refresh(evidence)
        logger.info(
            "Evidence %s (%s) submitted for TTFU %s by %s",
            evidence.id,
            kind.value,
            ttfu.id,
            principal.user_id,
        )
        return evidence

    @staticmethod
    def get(db: Session, evidence_id: str) -> Evidence:
        evidence = db.get(Evidence, coerce_uuid(evidence_id))
        if not evidence:
            raise HTTPException(status_code=404, detail="Evidence not found")
        return evidence

    @staticmethod
    def list_for_ttfu(db: Session, ttfu_id: str) -> list[Evidence]:
        ttfu = _get_ttfu(db, ttfu_id)
        stmt = (
            select(Evidence)
            .where(Evidence.ttfu_id == ttfu.id)
            .order_by(Evidence.created_at.desc(), Evidence.id.desc())
        )
        return list(db.scalars(stmt).all())

    @staticmethod
    def create_upload_url(
        db: Session, ttfu_id: str, file_name: str, mime_type: str
    ) -> dict:
        ttfu = _get_ttfu(db, ttfu_id)
        file_ref = storage.generate_file_ref(str(ttfu.id), file_name)
        upload_url = storage.generate_upload_url(file_ref, mime_type)
        logger.info("Issued upload URL for TTFU %s: %s", ttfu.id, file_ref)
        return {"file_ref": file_ref, "upload_url": upload_url}

    @staticmethod
    def download_url(db: Session, evidence_id: str) -> dict:
        evidence = db.get(Evidence, coerce_uuid(evidence_id))
        if not evidence:
            raise HTTPException(status_code=404, detail="Evidence not found")
        if evidence.kind != EvidenceKind.file or not evidence.file_ref:
            raise HTTPException(
                status_code=400,
                detail="Only file evidence can be downloaded",
            )
        return {"download_url": storage.generate_download_url(evidence.file_ref)}


evidences = Evidences()
