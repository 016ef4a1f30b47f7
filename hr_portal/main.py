from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hr_portal.api.attendance import router as attendance_router
from hr_portal.api.auth import router as auth_router
from hr_portal.api.dashboard import router as dashboard_router
from hr_portal.api.employees import router as employees_router
from hr_portal.api.health import router as health_router
from hr_portal.api.leave import router as leave_router
from hr_portal.api.me import router as me_router
from hr_portal.api.payroll import router as payroll_router
from hr_portal.api.performance import router as performance_router
from hr_portal.api.recruitment import router as recruitment_router
from hr_portal.api.root import router as root_router
from hr_portal.container import build_container
from hr_portal.core.config import Settings, settings as default_settings
from hr_portal.core.errors import HTTP_STATUS_BY_KIND, PortalError
from hr_portal.core.logger import configure_logging, get_logger

logger = get_logger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)
        # local and test databases are created on startup; others go through alembic
        container = build_container(settings, create_tables=settings.APP_ENV in ("local", "test"))
        app.state.container = container
        logger.info("HR portal started", extra={"app_env": settings.APP_ENV})
        try:
            yield
        finally:
            await container.close()

    app = FastAPI(title="HR Portal", lifespan=lifespan)

    # CORS middleware for frontend access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PortalError)
    async def portal_error_handler(request: Request, exc: PortalError):
        status_code = HTTP_STATUS_BY_KIND[exc.kind]
        log = logger.error if status_code >= 500 else logger.info
        log(
            "Request failed",
            extra={"path": request.url.path, "kind": exc.kind.value, "error_id": exc.error_id, **exc.context},
        )
        return JSONResponse(status_code=status_code, content=exc.to_response().to_dict())

    app.include_router(root_router)
    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(me_router)
    app.include_router(dashboard_router)
    app.include_router(employees_router)
    app.include_router(attendance_router)
    app.include_router(leave_router)
    app.include_router(payroll_router)
    app.include_router(performance_router)
    app.include_router(recruitment_router)
    return app


app = create_app()
