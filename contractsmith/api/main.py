"""
Contractsmith HTTP Service

    POST /compile   compile the configured template (GET accepted too)
    GET  /health    liveness and configured target

Compilation is blocking, so the compile route is a plain function and runs
in Starlette's threadpool.
"""

from fastapi import Depends, FastAPI
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from ..compiler import CompilationPipeline
from ..config import load_config
from ..constants import SERVICE_VERSION
from ..logger import get_logger
from .function import get_pipeline

logger = get_logger(__name__)

# ============================================================================
# APPLICATION SETUP
# ============================================================================

config = load_config()
config.validate()

app = FastAPI(title="Contractsmith", description="Compiles the contract template into ABI and bytecode.", version=SERVICE_VERSION)

limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.service.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": {"kind": "internal_error", "message": "Internal Server Error", "details": {}}},
    )


# ============================================================================
# API ENDPOINTS
# ============================================================================

@app.get("/health")
def health():
    return {
        "status": "ok",
        "version": SERVICE_VERSION,
        "template": config.template.name,
        "contract": config.template.contract,
    }


@app.api_route("/compile", methods=["GET", "POST"])
@limiter.limit(config.service.rate_limit)
def compile_contract(request: Request, pipeline: CompilationPipeline = Depends(get_pipeline)):
    """Compile the configured template; the request body is ignored."""
    logger.info(f"{request.method} /compile from {get_remote_address(request)}")
    result = pipeline.run()
    return JSONResponse(status_code=result.status_code, content=result.to_body())
