# schooldesk/__init__.py
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from schooldesk.core.config import settings
from schooldesk.core.database import Database
from schooldesk.core.errors import register_exception_handlers
from schooldesk.core.logging import logger
from schooldesk.middleware.database import DatabaseConnectionMiddleware
from schooldesk.middleware.request_id import RequestIDMiddleware
from schooldesk.routes import (
    academics,
    announcement,
    auth,
    exam,
    health,
    homework,
    notification,
    parent,
    platform,
    student,
    teacher,
    timetable,
)
from schooldesk.services.admin_service import AdminService
from schooldesk.services.tenant_directory import TenantDirectory
from schooldesk.services.tenant_pool import TenantConnectionPool


async def create_super_admin(database: Database) -> None:
    async with database.session() as db:
        admin = await AdminService(db).ensure_bootstrap_admin(
            settings.SUPER_ADMIN_EMAIL,
            settings.SUPER_ADMIN_PASSWORD,
            settings.SUPER_ADMIN_USERNAME
        )
    if admin is not None:
        logger.info(f"Super admin {admin.admin_id} created successfully")


def create_app(database: Optional[Database] = None) -> FastAPI:
    database = database or Database()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await database.connect()
        await database.init_models()
        await create_super_admin(database)
        logger.info("Application startup completed")
        yield
        await database.disconnect()
        app.state.tenant_pool.clear()
        app.state.tenant_directory.clear()
        logger.info("Application shutdown completed")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Multi-tenant school management API",
        version=settings.VERSION,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    app.state.database = database
    app.state.tenant_directory = TenantDirectory(database)
    app.state.tenant_pool = TenantConnectionPool(database)

    # Middleware added last runs first
    app.add_middleware(DatabaseConnectionMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(health.router, prefix="/api")
    app.include_router(auth.router, prefix="/api")
    app.include_router(platform.router, prefix="/api")
    app.include_router(teacher.router, prefix="/api")
    app.include_router(student.router, prefix="/api")
    app.include_router(parent.router, prefix="/api")
    app.include_router(academics.router, prefix="/api")
    app.include_router(timetable.router, prefix="/api")
    app.include_router(homework.router, prefix="/api")
    app.include_router(exam.router, prefix="/api")
    app.include_router(announcement.router, prefix="/api")
    app.include_router(notification.router, prefix="/api")

    return app
