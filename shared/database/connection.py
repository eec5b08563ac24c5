"""Conexión a la base de datos (PostgreSQL en producción, SQLite en desarrollo/tests)"""
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from typing import AsyncGenerator, Optional
import logging
import asyncio

from shared.core.config import settings

logger = logging.getLogger(__name__)

# Base para modelos SQLAlchemy
Base = declarative_base()

# Engine y session factory
engine = None
async_session_maker = None


def _to_async_url(database_url: str) -> str:
    """Convertir la URL al driver async correspondiente"""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgresql+psycopg://"):
        return database_url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


async def init_db(database_url: Optional[str] = None):
    """Inicializar conexión a la base de datos"""
    global engine, async_session_maker

    if engine is not None:
        logger.warning("Database engine already initialized, skipping...")
        return

    database_url = _to_async_url(database_url or settings.DATABASE_URL)

    logger.info(f"Initializing database connection to: {database_url.split('@')[1] if '@' in database_url else database_url}")
    logger.info(f"Using async driver: {database_url.split(':')[0]}")

    engine_kwargs = {}
    if database_url.startswith("postgresql"):
        engine_kwargs = {
            "pool_pre_ping": True,  # Verificar conexiones antes de usar
            "pool_recycle": 300,
            "pool_timeout": 30,
            "pool_use_lifo": True,
            "pool_size": settings.DATABASE_POOL_SIZE,
            "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        }
        logger.info(f"Pool config: size={engine_kwargs['pool_size']}, overflow={engine_kwargs['max_overflow']}")

    engine = create_async_engine(
        database_url,
        echo=settings.APP_DEBUG,
        **engine_kwargs
    )

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    logger.info("Database engine initialized successfully")


async def create_tables():
    """Crear las tablas de los modelos registrados si no existen"""
    if engine is None:
        raise RuntimeError("Database not initialized. Please check application startup.")

    # Registrar modelos en Base.metadata
    import shared.database.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables ensured")


MAX_CONNECT_RETRIES = 3
RETRY_DELAY = 0.5  # Segundos iniciales


async def open_session() -> AsyncSession:
    """
    Abrir sesión con conexión ya establecida, con retry para errores transitorios.

    La sesión async conecta de forma perezosa; se fuerza la conexión aquí
    para que los errores de DNS/socket se reintenten antes de entregarla.
    """
    if async_session_maker is None:
        logger.error("Database not initialized! Call init_db() first.")
        raise RuntimeError("Database not initialized. Please check application startup.")

    last_exception = None

    for attempt in range(MAX_CONNECT_RETRIES):
        session = async_session_maker()
        try:
            await session.connection()
            return session
        except OSError as e:
            # Captura errores de DNS y socket (socket.gaierror es subclase de OSError)
            await session.close()
            last_exception = e
            if attempt < MAX_CONNECT_RETRIES - 1:
                delay = RETRY_DELAY * (2 ** attempt)  # Exponential backoff
                logger.warning(
                    f"Database connection error (attempt {attempt + 1}/{MAX_CONNECT_RETRIES}): {type(e).__name__}: {e}. "
                    f"Retrying in {delay:.1f}s..."
                )
                await asyncio.sleep(delay)
            else:
                logger.error(f"Database connection failed after {MAX_CONNECT_RETRIES} attempts: {e}")
        except Exception:
            await session.close()
            raise

    raise last_exception


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency para obtener sesión de base de datos (los reintentos ocurren al conectar)"""
    session = await open_session()
    try:
        yield session
    finally:
        await session.close()


async def close_db():
    """Cerrar conexiones a la base de datos"""
    global engine, async_session_maker
    if engine:
        logger.info("Closing database connections...")
        await engine.dispose()
        engine = None
        async_session_maker = None
        logger.info("Database connections closed")
