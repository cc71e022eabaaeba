# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.database import Base, SessionLocal, engine
from app.routes.admin_auth import router as admin_auth_router
from app.routes.admin_quiz import router as admin_quiz_router
from app.routes.credentials import router as credentials_router
from app.routes.responder import router as responder_router
from app.routes.responses import router as responses_router
from app.services.admin_auth import AdminAuthService

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.ENVIRONMENT == "development":
        # Production schemas are managed by alembic
        Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        AdminAuthService(db).ensure_bootstrap_admin()
    finally:
        db.close()
    logger.info(f"🚀 {settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")
    yield


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],  # Allows all methods (GET, POST, PUT, DELETE, etc.)
    allow_headers=["*"],  # Allows all headers
)


@app.get("/")
def read_root():
    return {"message": "Quiz responder backend is running"}


app.include_router(admin_auth_router)
app.include_router(admin_quiz_router)
app.include_router(credentials_router)
app.include_router(responses_router)
app.include_router(responder_router)
