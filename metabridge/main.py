from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .api import bridge, health
from .config import settings
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    yield


app = FastAPI(
    title="Metabridge Core",
    description="Feature flags, token lists and validated quotes from the bridge aggregation API",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(health.router, tags=["Health"])
app.include_router(bridge.router, tags=["Bridge"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "metabridge.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
