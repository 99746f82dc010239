from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from starlette.exceptions import HTTPException as StarletteHTTPException

from naijatax.config import get_settings
from naijatax.api import rules, tax
from naijatax.api.deps import get_rule_registry
from naijatax.core.errors import ComputationError, TaxValidationError
from naijatax.core.tax_rules.registry import RuleRegistry
from naijatax.core.tax_rules.rulebook import OverrideLoadError
from naijatax.logging import configure_logging, get_logger


settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    configure_logging()
    registry = get_rule_registry()
    if settings.TAX_RULES_OVERRIDE_FILE:
        registry.load_file(settings.TAX_RULES_OVERRIDE_FILE)
    if settings.TAX_RULES_REMOTE_URL:
        await registry.refresh_from_remote(
            settings.TAX_RULES_REMOTE_URL,
            timeout=settings.TAX_RULES_REFRESH_TIMEOUT,
        )
    logger.info(
        "startup_complete",
        environment=settings.ENVIRONMENT,
        rule_version=registry.get_snapshot().metadata.version,
    )
    yield
    # Shutdown


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=86400,
)


@app.exception_handler(TaxValidationError)
async def tax_validation_error_handler(request: Request, exc: TaxValidationError):
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    first = errors[0]
    location = ".".join(str(part) for part in first["loc"] if part != "body") or "body"
    return JSONResponse(status_code=400, content={"error": f"{location}: {first['msg']}"})


@app.exception_handler(OverrideLoadError)
async def override_load_error_handler(request: Request, exc: OverrideLoadError):
    return JSONResponse(status_code=400, content={"error": exc.message, "details": exc.errors})


@app.exception_handler(ComputationError)
async def computation_error_handler(request: Request, exc: ComputationError):
    return JSONResponse(status_code=500, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled_request_error", path=request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": ComputationError.GENERIC_MESSAGE})


app.include_router(tax.router, prefix="/api/v1/tax", tags=["tax"])
app.include_router(rules.router, prefix="/api/v1/rules", tags=["rules"])


@app.get("/health")
async def health_check(registry: RuleRegistry = Depends(get_rule_registry)):
    snapshot = registry.get_snapshot()
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "rule_version": snapshot.metadata.version,
    }
