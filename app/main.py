from fastapi import Depends, FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from app.api.deps import require_user_auth
from app.api.pdca_evidence import router as evidence_router
from app.api.pdca_meetings import router as meetings_router
from app.api.pdca_ttfus import router as ttfus_router
from app.api.users import router as users_router
from app.errors import register_error_handlers
from app.logging import configure_logging
from app.observability import ObservabilityMiddleware
from app.schemas.common import ErrorResponse

app = FastAPI(title="PDCA Tracker API")

configure_logging()
app.add_middleware(ObservabilityMiddleware)
register_error_handlers(app)


_ERROR_RESPONSES = {
    code: {"model": ErrorResponse} for code in (400, 401, 403, 404, 409, 503)
}


def _include_api_router(router, dependencies=None):
    app.include_router(router, dependencies=dependencies, responses=_ERROR_RESPONSES)
    app.include_router(
        router,
        prefix="/api/v1",
        dependencies=dependencies,
        responses=_ERROR_RESPONSES,
    )


_include_api_router(users_router, dependencies=[Depends(require_user_auth)])
_include_api_router(meetings_router, dependencies=[Depends(require_user_auth)])
_include_api_router(ttfus_router, dependencies=[Depends(require_user_auth)])
_include_api_router(evidence_router, dependencies=[Depends(require_user_auth)])


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
