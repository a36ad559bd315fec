from fastapi import Depends, FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from qa_admin.api.auth import router as auth_router
from qa_admin.api.deps import require_user_auth
from qa_admin.api.evaluations import router as evaluations_router
from qa_admin.api.reports import router as reports_router
from qa_admin.api.reviews import router as reviews_router
from qa_admin.api.sentiment import router as sentiment_router
from qa_admin.api.users import router as users_router
from qa_admin.errors import register_error_handlers
from qa_admin.logging import configure_logging

configure_logging()

app = FastAPI(title="QA Dashboard API")
register_error_handlers(app)


def _include_api_router(router, dependencies=None):
    app.include_router(router, dependencies=dependencies)
    app.include_router(router, prefix="/api/v1", dependencies=dependencies)


# Login/logout are public; /auth/me authenticates on its own.
_include_api_router(auth_router)
_include_api_router(users_router, dependencies=[Depends(require_user_auth)])
_include_api_router(evaluations_router, dependencies=[Depends(require_user_auth)])
_include_api_router(reports_router, dependencies=[Depends(require_user_auth)])
_include_api_router(reviews_router, dependencies=[Depends(require_user_auth)])
_include_api_router(sentiment_router, dependencies=[Depends(require_user_auth)])


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.head("/health")
def head_health():
    return Response(status_code=200)


@app.get("/metrics")
def metrics():
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)
