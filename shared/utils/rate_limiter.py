"""
Rate limiting usando slowapi (storage en Redis o memoria local)
Protege el endpoint de verificación contra escáneres desbocados
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request, Response
from starlette.responses import JSONResponse
import logging

from shared.core.config import settings

logger = logging.getLogger(__name__)


def get_real_client_ip(request: Request) -> str:
    """
    Obtener IP real del cliente considerando proxies/load balancers.
    Importante para rate limiting correcto detrás de nginx/cloudflare.
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # X-Forwarded-For puede tener múltiples IPs: client, proxy1, proxy2
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    # Fallback a IP directa
    return get_remote_address(request)


def _storage_uri() -> str:
    return settings.RATE_LIMIT_STORAGE_URI or settings.REDIS_URL or "memory://"


# Crear limiter; con Redis el límite se comparte entre instancias de la API
try:
    limiter = Limiter(
        key_func=get_real_client_ip,
        storage_uri=_storage_uri(),
        strategy="fixed-window",
        headers_enabled=False,  # Deshabilitado para compatibilidad con respuestas dict de FastAPI
    )
    logger.info(f"Rate limiter inicializado: {_storage_uri().split('@')[-1]}")
except Exception as e:
    # Fallback a memoria si el storage no está disponible
    logger.warning(f"Storage de rate limiting no disponible, usando memoria local: {e}")
    limiter = Limiter(
        key_func=get_real_client_ip,
        strategy="fixed-window",
        headers_enabled=False,
    )


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Handler personalizado para rate limit exceeded.
    Mantiene el formato de error del endpoint de verificación.
    """
    retry_after = exc.detail.split(" ")[-1] if exc.detail else "60"

    logger.warning(
        f"Rate limit exceeded - IP: {get_real_client_ip(request)}, "
        f"Path: {request.url.path}, "
        f"Retry-After: {retry_after}"
    )

    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please wait before scanning again.",
            "retry_after_seconds": int(retry_after) if retry_after.isdigit() else 60,
        },
        headers={"Retry-After": str(retry_after)}
    )
