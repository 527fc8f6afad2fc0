import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.core.config import settings
from app.core.errors import register_error_handlers
from app.core.logging_middleware import LoggingMiddleware
from app.core.security import InMemoryRevocationStore, TokenService
from app.db.init_db import init_db
from app.routers.assessments import router as assessments_router
from app.routers.auth import router as auth_router
from app.routers.class_sessions import router as class_sessions_router
from app.routers.courses import router as courses_router
from app.routers.files import router as files_router
from app.routers.management import router as management_router
from app.routers.materials import router as materials_router
from app.routers.notifications import router as notifications_router
from app.routers.permissions import router as permissions_router
from app.routers.presence import router as presence_router
from app.routers.raports import router as raports_router
from app.services.files import FileStorage

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # fails fast when no signing secret is configured
    app.state.token_service = TokenService(
        secret_key=settings.resolve_secret_key(),
        algorithm=settings.ALGORITHM,
        expires_delta=settings.access_token_expire,
    )
    app.state.revocation_store = InMemoryRevocationStore()
    app.state.file_storage = FileStorage(settings.UPLOAD_DIR)
    init_db()
    logger.info("Classroom backend started")
    yield


app = FastAPI(title="Classroom Raports", lifespan=lifespan)

# Middleware
app.add_middleware(LoggingMiddleware)

register_error_handlers(app)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Include routers
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(courses_router, prefix="/courses", tags=["courses"])
app.include_router(management_router, prefix="/courses", tags=["course management"])
app.include_router(permissions_router, prefix="/courses", tags=["course permissions"])
app.include_router(class_sessions_router, prefix="/courses", tags=["class sessions"])
app.include_router(assessments_router, prefix="/courses", tags=["assessments"])
app.include_router(presence_router, prefix="/courses", tags=["presence"])
app.include_router(materials_router, prefix="/courses", tags=["materials"])
app.include_router(raports_router, prefix="/raports", tags=["raports"])
app.include_router(notifications_router, prefix="/notifications", tags=["notifications"])
app.include_router(files_router, prefix="/files", tags=["files"])
