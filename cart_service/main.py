import logging
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError
from sqlalchemy import text

from .config import settings
from .database import engine, Base, SessionLocal
from .api import cart_router
from .exceptions import CartServiceException
from .services.kafka_client import kafka_client

# Настройка логирования
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def wait_for_db(max_retries: int = 30, delay: int = 2):
    """Ожидает готовности базы данных с повторными попытками"""
    retries = 0
    while retries < max_retries:
        try:
            logger.info(f"Attempting to connect to database (attempt {retries + 1}/{max_retries})...")

            db = SessionLocal()
            try:
                db.execute(text("SELECT 1"))
            finally:
                db.close()

            logger.info("✅ Database connection successful!")
            return True

        except OperationalError:
            retries += 1
            if retries >= max_retries:
                logger.error(f"❌ Failed to connect to database after {max_retries} attempts")
                raise

            logger.warning(f"Database not ready, waiting {delay} seconds... (attempt {retries}/{max_retries})")
            time.sleep(delay)

    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Управление жизненным циклом приложения"""
    # Startup
    logger.info("Starting Cart Service...")

    try:
        logger.info("Waiting for database to be ready...")
        wait_for_db()

        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created successfully")

        if settings.kafka_enabled:
            logger.info("Starting Kafka producer...")
            await kafka_client.start_producer()
        else:
            logger.info("Kafka disabled, cart events will not be published")

        logger.info("✅ Cart Service started successfully!")

    except Exception as e:
        logger.error(f"❌ Failed to start Cart Service: {e}")
        raise

    yield

    # Shutdown
    logger.info("Shutting down Cart Service...")
    await kafka_client.stop_producer()
    logger.info("✅ Cart Service shut down successfully!")


app = FastAPI(
    title=settings.app_name,
    description="Микросервис управления корзиной покупок",
    version="1.0.0",
    debug=settings.debug,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # В production указать конкретные домены
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)

app.include_router(cart_router, prefix="/api/v1", tags=["cart"])


@app.get("/health")
async def health_check():
    """Проверка здоровья сервиса"""
    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
            db_status = "connected"
        except Exception as e:
            logger.error(f"Database check failed: {e}")
            db_status = "disconnected"
        finally:
            db.close()

        kafka_status = "connected" if kafka_client.producer else "disconnected"

        return {
            "status": "healthy",
            "service": settings.app_name,
            "database": db_status,
            "kafka": kafka_status,
            "version": "1.0.0"
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise HTTPException(status_code=503, detail="Service unhealthy")


@app.get("/")
async def root():
    """Корневой endpoint"""
    return {
        "service": settings.app_name,
        "version": "1.0.0",
        "status": "running",
        "endpoints": {
            "health": "/health",
            "docs": "/docs",
            "cart": "/api/v1/cart",
            "carts": "/api/v1/carts"
        }
    }


@app.exception_handler(CartServiceException)
async def cart_service_exception_handler(request: Request, exc: CartServiceException):
    if exc.status_code >= 500:
        logger.error(f"{exc!r} on {request.method} {request.url.path}")
    else:
        logger.info(f"{exc!r} on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.__class__.__name__, "detail": exc.message}
    )


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    logger.error(f"Internal server error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "detail": "Something went wrong"}
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cart_service.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
