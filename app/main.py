from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import uvicorn

from app.core.config import settings
from app.core.database import create_db_and_tables, check_db, close_db
from app.core.logging import setup_logging
from app.core.redis import check_redis, close_redis
from app.middleware.logging_middleware import LoggingMiddleware, StructlogMiddleware
from app.controllers import product_controller

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup", environment=settings.environment)
    try:
        await create_db_and_tables()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Application shutdown")
    try:
        await close_redis()
        await close_db()
        logger.info("Database and cache connections closed")
    except Exception as e:
        logger.error("Error during shutdown", error=str(e))


app = FastAPI(
    title="Product Catalog API",
    description="Product catalog with featured products, recommendations and image hosting",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.environment == "local" else None,
    redoc_url="/redoc" if settings.environment == "local" else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# LoggingMiddleware must wrap StructlogMiddleware so the request id is set first
app.add_middleware(StructlogMiddleware)
app.add_middleware(LoggingMiddleware)

app.include_router(product_controller.router, prefix=settings.api_prefix)


@app.get("/")
async def root():
    return {
        "message": "Product Catalog API is running",
        "version": "1.0.0",
        "environment": settings.environment,
        "docs_url": "/docs" if settings.environment == "local" else "Documentation disabled in production"
    }


@app.get("/health")
async def health_check():
    dependencies = {}
    for name, check in (("database", check_db), ("redis", check_redis)):
        try:
            await check()
            dependencies[name] = "ok"
        except Exception as e:
            logger.warning("Health check failed", dependency=name, error=str(e))
            dependencies[name] = "down"

    return {
        "status": "healthy" if all(v == "ok" for v in dependencies.values()) else "degraded",
        "environment": settings.environment,
        "dependencies": dependencies,
    }


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    logger.warning(
        "HTTP Exception",
        status_code=exc.status_code,
        detail=exc.detail,
        path=request.url.path,
        method=request.method
    )
    content = dict(exc.detail) if isinstance(exc.detail, dict) else {"message": exc.detail}
    content.update({"success": False, "status_code": exc.status_code})
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    logger.error(
        "Unhandled Exception",
        error=str(exc),
        path=request.url.path,
        method=request.method
    )
    return JSONResponse(
        status_code=500,
        content={
            "message": "Internal server error",
            "success": False,
            "status_code": 500
        }
    )


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.environment == "local",
        log_config=None
    )
