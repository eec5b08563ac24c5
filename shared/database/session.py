"""Sesiones de base de datos"""
from shared.database.connection import get_db
from sqlalchemy import text


async def ping(session) -> bool:
    """Verificar que la conexión responde"""
    await session.execute(text("SELECT 1"))
    return True

__all__ = ["get_db", "ping"]
