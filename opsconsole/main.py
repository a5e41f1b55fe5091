# opsconsole/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from opsconsole.api.dependencies import get_metrics
from opsconsole.api.middleware import (
    AuditTriggerMiddleware,
    CorrelationIdMiddleware,
    PrincipalContextMiddleware,
)
from opsconsole.api.routers import assets, health, metrics, onboarding, users, vendors
from opsconsole.application.exceptions import ApplicationError, ConflictError, ResourceNotFoundError
from opsconsole.config.logging import configure_logging
from opsconsole.config.settings import get_settings
from opsconsole.domain.exceptions import DomainError, DomainValidationError, EntityNotFoundError
from opsconsole.infrastructure.database.session import init_models
from opsconsole.security.exceptions import (
    AccessDeniedError,
    LastAdminViolationError,
    NotAuthenticatedError,
    ScopeDeniedError,
    SelfDeactivationDeniedError,
    SelfRoleChangeDeniedError,
)

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.create_tables_on_startup:
        await init_models()
        logger.info("database_ready", extra={"database_url": settings.database_url.split("@")[-1]})
    yield


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    debug=settings.debug,
    lifespan=lifespan,
)

# Middleware order: last added runs first (outermost). Request flow: CorrelationId -> PrincipalContext -> AuditTrigger.
app.add_middleware(AuditTriggerMiddleware, metrics=get_metrics())
app.add_middleware(PrincipalContextMiddleware)
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request, exc: NotAuthenticatedError):
    return JSONResponse(status_code=401, content={"detail": exc.message})


@app.exception_handler(ScopeDeniedError)
async def scope_denied_handler(request, exc: ScopeDeniedError):
    if settings.conceal_out_of_scope_resources:
        return JSONResponse(status_code=404, content={"detail": "Resource not found"})
    return JSONResponse(status_code=403, content=exc.to_dict())


@app.exception_handler(AccessDeniedError)
async def access_denied_handler(request, exc: AccessDeniedError):
    return JSONResponse(status_code=403, content=exc.to_dict())


@app.exception_handler(LastAdminViolationError)
@app.exception_handler(SelfRoleChangeDeniedError)
@app.exception_handler(SelfDeactivationDeniedError)
async def role_guard_handler(request, exc):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(ResourceNotFoundError)
@app.exception_handler(EntityNotFoundError)
async def not_found_handler(request, exc):
    return JSONResponse(status_code=404, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def conflict_handler(request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": exc.message})


@app.exception_handler(DomainValidationError)
async def domain_validation_error_handler(request, exc: DomainValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(DomainError)
async def domain_error_handler(request, exc: DomainError):
    return JSONResponse(status_code=400, content={"detail": exc.message})


@app.exception_handler(ApplicationError)
async def application_error_handler(request, exc: ApplicationError):
    return JSONResponse(status_code=500, content={"detail": exc.message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request, exc: Exception):
    logger.exception("unhandled_error", extra={"path": request.url.path})
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Routers: /health, /metrics, /users, /assets, /vendors, /onboarding
app.include_router(health.router)
app.include_router(metrics.router)
app.include_router(users.router, prefix="/users")
app.include_router(assets.router, prefix="/assets")
app.include_router(vendors.router, prefix="/vendors")
app.include_router(onboarding.router, prefix="/onboarding")
