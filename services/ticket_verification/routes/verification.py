"""Rutas de verificación de tickets"""
from fastapi import APIRouter, Depends, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
import logging
from shared.core.config import settings
from shared.database.session import get_db
from shared.utils.rate_limiter import limiter
from services.ticket_verification.exceptions import TicketVerificationError, MalformedPayloadError
from services.ticket_verification.models.ticket import (
    TicketVerifyRequest,
    TicketVerifyResponse
)
from services.ticket_verification.services.verification_service import TicketVerificationService

logger = logging.getLogger(__name__)

router = APIRouter()

VERIFY_ROUTE_SUFFIX = "/tickets/verify"


async def verify_validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Body inválido en /verify (JSON roto, ticketId no string) -> 400 malformed_payload.
    El resto de rutas mantiene el 422 estándar de FastAPI.
    """
    if request.url.path.rstrip("/").endswith(VERIFY_ROUTE_SUFFIX):
        logger.info(f"Payload de verificación inválido: {exc.errors()}")
        return JSONResponse(status_code=400, content=MalformedPayloadError().to_dict())
    return await request_validation_exception_handler(request, exc)


@router.post("/verify", response_model=TicketVerifyResponse)
@limiter.limit(settings.VERIFY_RATE_LIMIT)
async def verify_ticket(
    request: Request,
    payload: TicketVerifyRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Verificar ticket escaneado y marcarlo como usado

    Acepta ID de ticket, código QR, roll number o email en `ticketId`.
    - 200: primera verificación, el ticket pasa a `used`
    - 404: ticket no encontrado
    - 409: ticket ya utilizado (incluye el ticket con su scannedAt)
    - 400: ticketId vacío, no string o body que no es JSON
    """
    service = TicketVerificationService()

    try:
        ticket = await service.verify_ticket(db, payload.ticket_id)
    except TicketVerificationError as e:
        return JSONResponse(status_code=e.status_code, content=e.to_dict())

    return {
        "success": True,
        "message": "Ticket verified",
        "ticket": ticket
    }
