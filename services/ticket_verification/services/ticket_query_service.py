"""Servicio de consultas de solo lectura sobre tickets"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from typing import List, Optional, Dict, Tuple

from shared.core.config import settings
from shared.database.models import Ticket, TICKET_STATUS_VALID, TICKET_STATUS_USED
from shared.cache.redis_client import cache_get, cache_set
from services.ticket_verification.services.verification_service import STATS_CACHE_KEY


class TicketQueryService:
    """Listado, búsqueda y estadísticas de tickets"""

    async def list_tickets(
        self,
        db: AsyncSession,
        search: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> Tuple[List[Ticket], int]:
        """
        Listar tickets con filtros

        Args:
            db: Sesión de base de datos
            search: Texto a buscar en nombre, roll number, ID o email (sin distinguir mayúsculas)
            status: valid | used
            limit: Máximo de resultados
            offset: Desplazamiento

        Returns:
            (tickets, total de coincidencias)
        """
        filters = []
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            filters.append(
                or_(
                    func.lower(Ticket.student_name).like(pattern),
                    func.lower(Ticket.roll_number).like(pattern),
                    func.lower(Ticket.id).like(pattern),
                    func.lower(Ticket.email).like(pattern),
                )
            )
        if status:
            filters.append(Ticket.status == status)

        stmt_total = select(func.count(Ticket.id)).where(*filters)
        total = (await db.execute(stmt_total)).scalar() or 0

        stmt = (
            select(Ticket)
            .where(*filters)
            .order_by(Ticket.generated_at, Ticket.id)
            .limit(limit)
            .offset(offset)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all()), total

    async def get_ticket(self, db: AsyncSession, ticket_id: str) -> Optional[Ticket]:
        stmt = select(Ticket).where(Ticket.id == ticket_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_stats(self, db: AsyncSession) -> Dict:
        """Totales por estado; cacheado por STATS_CACHE_SECONDS"""
        cached = await cache_get(STATS_CACHE_KEY)
        if cached:
            return cached

        stmt = select(Ticket.status, func.count(Ticket.id)).group_by(Ticket.status)
        result = await db.execute(stmt)
        counts = {status: count for status, count in result.all()}

        stats = {
            "total": sum(counts.values()),
            "used": counts.get(TICKET_STATUS_USED, 0),
            "valid": counts.get(TICKET_STATUS_VALID, 0),
        }
        await cache_set(STATS_CACHE_KEY, stats, expire=settings.STATS_CACHE_SECONDS)
        return stats
