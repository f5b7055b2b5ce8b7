"""
AskDeploy FastAPI Application Entry Point
FastAPI 应用入口
"""

from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from app.config import settings
from app.routers import ask_router
from app.utils.logger import get_logger

logger = get_logger(__name__)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])

# Create FastAPI application / 创建 FastAPI 应用
app = FastAPI(
    title="AskDeploy API",
    description="Evidence-Based Deployment Diagnostics / 基于证据的部署诊断",
    version="0.1.0",
    debug=settings.debug
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


# Global exception handler; internal details stay in the log
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and return a safe 500 response."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# Register routers / 注册路由
# Dual mount: "/" for direct calls, "/api" behind a proxy that keeps the prefix
routers = [
    ask_router,
]

for router in routers:
    app.include_router(router)                  # http://localhost:8000/projects/{id}/ask
    app.include_router(router, prefix="/api")   # http://localhost:8000/api/projects/{id}/ask


@app.get("/health")
async def health_check():
    """Health check endpoint / 健康检查"""
    data_dir = Path(settings.data_dir)

    return {
        "status": "ok",
        "version": app.version,
        "storage_accessible": data_dir.exists(),
        "synthesis_enabled": settings.synthesis_enabled,
    }


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting AskDeploy on %s:%s", settings.host, settings.port)
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
