"""Servicio de verificación de tickets (check-and-set atómico)"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func, or_, case
from typing import Optional, Dict
from datetime import datetime, timezone
import logging

from shared.database.models import Ticket, TICKET_STATUS_VALID, TICKET_STATUS_USED
from shared.cache.redis_client import cache_delete
from services.ticket_verification.exceptions import (
    MalformedPayloadError,
    TicketNotFoundError,
    TicketAlreadyUsedError,
)

logger = logging.getLogger(__name__)

STATS_CACHE_KEY = "tickets:stats"


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def ticket_to_dict(ticket: Ticket) -> Dict:
    """Serializar ticket al formato del cliente scanner"""
    return {
        "id": ticket.id,
        "qrCode": ticket.qr_code,
        "studentName": ticket.student_name,
        "rollNumber": ticket.roll_number,
        "email": ticket.email,
        "eventName": ticket.event_name,
        "status": ticket.status,
        "generatedAt": _isoformat(ticket.generated_at),
        "scannedAt": _isoformat(ticket.scanned_at),
    }


class TicketVerificationService:
    """Servicio para verificar tickets y marcarlos como usados"""

    @staticmethod
    async def find_ticket(db: AsyncSession, identifier: str) -> Optional[Ticket]:
        """
        Buscar ticket por ID, código QR, roll number o email

        Si varios tickets coinciden se prefiere el que coincide por ID.
        """
        stmt = (
            select(Ticket)
            .where(
                or_(
                    Ticket.id == identifier,
                    Ticket.qr_code == identifier,
                    Ticket.roll_number == identifier,
                    func.lower(Ticket.email) == identifier.lower(),
                )
            )
            .order_by(case((Ticket.id == identifier, 0), else_=1), Ticket.id)
            .limit(1)
        )
        result = await db.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def verify_ticket(db: AsyncSession, identifier: Optional[str]) -> Dict:
        """
        Verificar un ticket y marcarlo como usado

        La transición valid -> used se hace con un UPDATE condicionado a
        status='valid'; de varias verificaciones concurrentes solo una
        afecta la fila y el resto recibe TicketAlreadyUsedError.

        Returns:
            dict del ticket actualizado

        Raises:
            MalformedPayloadError: identificador vacío
            TicketNotFoundError: ningún ticket coincide
            TicketAlreadyUsedError: el ticket ya fue escaneado
        """
        identifier = (identifier or "").strip()
        if not identifier:
            raise MalformedPayloadError()

        ticket = await TicketVerificationService.find_ticket(db, identifier)

        if not ticket:
            logger.info(f"Verificación rechazada, ticket no encontrado: {identifier}")
            raise TicketNotFoundError()

        if ticket.status == TICKET_STATUS_USED:
            logger.warning(f"Ticket {ticket.id} ya utilizado (scanned_at={ticket.scanned_at})")
            raise TicketAlreadyUsedError(ticket=ticket_to_dict(ticket))

        stmt = (
            update(Ticket)
            .where(Ticket.id == ticket.id, Ticket.status == TICKET_STATUS_VALID)
            .values(status=TICKET_STATUS_USED, scanned_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(stmt)
        await db.commit()
        await db.refresh(ticket)

        if result.rowcount != 1:
            # Otra verificación concurrente ganó la carrera
            logger.warning(f"Ticket {ticket.id} marcado como usado por otra verificación concurrente")
            raise TicketAlreadyUsedError(ticket=ticket_to_dict(ticket))

        await cache_delete(STATS_CACHE_KEY)

        logger.info(f"Ticket {ticket.id} verificado ({ticket.student_name})")
        return ticket_to_dict(ticket)
