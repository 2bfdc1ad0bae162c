from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from ems.api.routes import health
from ems.core.config import settings
from ems.core.errors import EMSError, ServerError, classify_integrity_error
from ems.core.logging import configure_logging, get_logger
from ems.core.monitoring import configure_error_monitoring
from ems.core.observability import configure_observability
from ems.db.session import Database
from ems.domains.attendance.router import router as attendance_router
from ems.domains.auth.router import router as auth_router
from ems.domains.barcodes.router import router as barcode_router
from ems.domains.dashboard.router import router as dashboard_router
from ems.domains.employees.router import router as employee_router
from ems.domains.hierarchy.router import router as hierarchy_router
from ems.domains.leaves.router import router as leaves_router
from ems.domains.payroll.router import router as payroll_router
from ems.domains.policies.router import router as policies_router

configure_logging(settings.log_level, json_logs=settings.env != "dev")
configure_observability()
configure_error_monitoring()
logger = get_logger(__name__)


def _error_response(exc: EMSError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(EMSError)
    async def handle_ems_error(request: Request, exc: EMSError) -> JSONResponse:
        if isinstance(exc, ServerError):
            logger.error("server_error", path=request.url.path, error=repr(exc.__cause__ or exc))
        return _error_response(exc)

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
        logger.warning("integrity_error", path=request.url.path, error=str(exc.orig))
        return _error_response(classify_integrity_error(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'] if part != 'body')}: {error['msg']}"
            for error in exc.errors()
        )
        return JSONResponse(status_code=400, content={"detail": problems or "Invalid request"})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_error", path=request.url.path)
        return _error_response(ServerError())


def create_app(database: Database | None = None) -> FastAPI:
    app = FastAPI(title=settings.app_name)
    app.state.database = database or Database()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.cors_origins] or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(auth_router)
    app.include_router(employee_router)
    app.include_router(hierarchy_router)
    app.include_router(attendance_router)
    app.include_router(barcode_router)
    app.include_router(leaves_router)
    app.include_router(policies_router)
    app.include_router(payroll_router)
    app.include_router(dashboard_router)

    @app.on_event("startup")
    def startup_event() -> None:
        logger.info("startup_complete", env=settings.env)

    @app.on_event("shutdown")
    def shutdown_event() -> None:
        app.state.database.dispose()
        logger.info("shutdown_complete")

    @app.get("/")
    def root() -> dict[str, str]:
        return {"message": "Employee Management System API is running", "environment": settings.env}

    return app


app = create_app()
