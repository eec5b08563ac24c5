"""Rutas de consulta de tickets (solo lectura)"""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from shared.database.session import get_db
from services.ticket_verification.models.ticket import (
    TicketPayload,
    TicketListResponse,
    TicketStatsResponse
)
from services.ticket_verification.services.ticket_query_service import TicketQueryService
from services.ticket_verification.services.verification_service import ticket_to_dict


router = APIRouter()


@router.get("", response_model=TicketListResponse)
async def list_tickets(
    search: Optional[str] = Query(None, description="Búsqueda por nombre, roll number, ID o email"),
    status_filter: Optional[str] = Query(None, alias="status", pattern="^(valid|used)$"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db)
):
    """Listar tickets con búsqueda y filtro por estado"""
    service = TicketQueryService()
    tickets, total = await service.list_tickets(
        db=db,
        search=search,
        status=status_filter,
        limit=limit,
        offset=offset
    )
    return {
        "tickets": [ticket_to_dict(t) for t in tickets],
        "total": total
    }


@router.get("/stats", response_model=TicketStatsResponse)
async def get_stats(db: AsyncSession = Depends(get_db)):
    """Totales de tickets: total, usados y válidos"""
    service = TicketQueryService()
    return await service.get_stats(db)


@router.get("/{ticket_id}", response_model=TicketPayload)
async def get_ticket(
    ticket_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Obtener un ticket por ID (no modifica su estado)"""
    service = TicketQueryService()
    ticket = await service.get_ticket(db, ticket_id)

    if not ticket:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Ticket not found"
        )

    return ticket_to_dict(ticket)
