"""API Gateway principal - Punto de entrada de la aplicación"""
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
import logging
from contextlib import asynccontextmanager

from shared.core.config import settings
from shared.database.connection import init_db, create_tables, close_db
from shared.cache.redis_client import init_redis, close_redis
from shared.utils.rate_limiter import limiter, rate_limit_exceeded_handler

# Configurar logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle events de la aplicación"""
    # Startup
    logger.info("Iniciando aplicación...")
    await init_db()
    if settings.DATABASE_AUTO_CREATE:
        await create_tables()
    await init_redis()
    logger.info("Aplicación iniciada")
    yield
    # Shutdown
    logger.info("Cerrando aplicación...")
    await close_db()
    await close_redis()
    logger.info("Aplicación cerrada")


# Crear aplicación FastAPI
app = FastAPI(
    title="Student Event Entry API",
    description="Verificación de tickets de eventos estudiantiles mediante QR",
    version="1.0.0",
    lifespan=lifespan
)

# En desarrollo, permitir todos los orígenes para facilitar testing
if settings.APP_ENV == "development":
    logger.info("Modo desarrollo: CORS configurado para permitir todos los orígenes")
    allow_origins = ["*"]
    allow_credentials = False  # No se puede usar credentials con allow_origins=["*"]
else:
    allow_origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()]
    allow_credentials = True
    logger.info(f"CORS origins configurados: {allow_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,  # Cache preflight requests por 1 hora
)

# Configurar rate limiting DESPUÉS de CORS
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Incluir routers de cada servicio
from services.ticket_verification.routes.verification import router as verification_router, verify_validation_exception_handler
from services.ticket_verification.routes.tickets import router as tickets_router

app.include_router(verification_router, prefix="/api/tickets", tags=["tickets"])
app.include_router(tickets_router, prefix="/api/tickets", tags=["tickets"])
app.add_exception_handler(RequestValidationError, verify_validation_exception_handler)


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "ok", "service": "student-entry-api"}


@app.get("/ready")
async def ready():
    """Ready check endpoint - verifica conexiones"""
    try:
        # Verificar DB
        from shared.database import connection
        from shared.database.session import ping
        async with connection.async_session_maker() as session:
            await ping(session)

        # Verificar Redis (opcional)
        from shared.cache.redis_client import get_redis
        redis = await get_redis()
        redis_status = "disabled"
        if redis is not None:
            await redis.ping()
            redis_status = "connected"

        return {"status": "ready", "database": "connected", "redis": redis_status}
    except Exception as e:
        logger.error(f"Ready check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "not ready", "error": str(e)})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.APP_DEBUG
    )
