#!/usr/bin/env python3
"""
Script para cargar los tickets de demostración en la base de datos
Ejecuta: python scripts/seed_tickets.py [--database-url URL]
"""
import argparse
import asyncio
import os
import sys
from datetime import datetime, timezone

# Agregar el directorio raíz al path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from shared.database import connection
from shared.database.models import Ticket
from shared.utils.qr_generator import generate_qr_code, build_qr_payload

DEMO_EVENT = "Annual Tech Fest 2024"

DEMO_TICKETS = [
    {
        "id": "STU-2024-001",
        "student_name": "Rahul Kumar",
        "email": "rahul@student.edu",
        "roll_number": "CS21B001",
        "status": "valid",
        "generated_at": datetime(2024, 11, 1, 10, 0, tzinfo=timezone.utc),
        "scanned_at": None,
    },
    {
        "id": "STU-2024-002",
        "student_name": "Priya Sharma",
        "email": "priya@student.edu",
        "roll_number": "CS21B002",
        "status": "used",
        "generated_at": datetime(2024, 11, 1, 10, 5, tzinfo=timezone.utc),
        "scanned_at": datetime(2024, 11, 4, 9, 30, tzinfo=timezone.utc),
    },
    {
        "id": "STU-2024-003",
        "student_name": "Amit Patel",
        "email": "amit@student.edu",
        "roll_number": "CS21B003",
        "status": "valid",
        "generated_at": datetime(2024, 11, 1, 10, 10, tzinfo=timezone.utc),
        "scanned_at": None,
    },
]


async def seed_tickets(session, tickets=DEMO_TICKETS, event_name: str = DEMO_EVENT) -> int:
    """Insertar tickets que aún no existen; retorna cuántos se crearon"""
    created = 0
    for data in tickets:
        existing = await session.execute(select(Ticket.id).where(Ticket.id == data["id"]))
        if existing.scalar_one_or_none():
            continue
        session.add(Ticket(
            qr_code=generate_qr_code(data["id"]),
            event_name=event_name,
            **data
        ))
        created += 1
    await session.commit()
    return created


async def main(database_url=None) -> int:
    await connection.init_db(database_url)
    try:
        await connection.create_tables()
        async with connection.async_session_maker() as session:
            created = await seed_tickets(session)
    finally:
        await connection.close_db()

    print(f"✅ {created} ticket(s) creados")
    for data in DEMO_TICKETS:
        print(f"   {data['id']}  {generate_qr_code(data['id'])}  QR: {build_qr_payload(data['id'])}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Cargar tickets de demostración")
    parser.add_argument("--database-url", default=None, help="Por defecto DATABASE_URL")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(args.database_url)))
