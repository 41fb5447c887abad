from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from sqlmodel import Session

from newsroom.core.config import settings
from newsroom.core.errors import register_exception_handlers
from newsroom.core.logging import configure_logging
from newsroom.db.session import create_db_and_tables, engine

# Import models to ensure they are registered with SQLModel metadata
from newsroom.models import Article, Category, User
from newsroom.routers import admin, articles, auth, categories
from newsroom.services.auth import AuthService
from newsroom.services.storage import DatabaseStorage


def bootstrap_admin():
    if not (settings.ADMIN_USERNAME and settings.ADMIN_PASSWORD):
        return
    with Session(engine) as session:
        AuthService(DatabaseStorage(session)).ensure_admin(settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)

@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    logger.info(f"Starting {settings.PROJECT_NAME}")
    create_db_and_tables()
    bootstrap_admin()
    yield
    logger.info(f"Stopping {settings.PROJECT_NAME}")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        lifespan=lifespan,
        description="API for a categorized news website and its admin dashboard",
    )

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the Newsroom API. Visit /docs for Swagger UI."}

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(categories.router, prefix="/api/categories", tags=["categories"])
    app.include_router(articles.router, prefix="/api/articles", tags=["articles"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()
