"""Modelos SQLAlchemy del servicio de verificación"""
from sqlalchemy import Column, String, DateTime, CheckConstraint
from sqlalchemy.sql import func
from shared.database.connection import Base


TICKET_STATUS_VALID = "valid"
TICKET_STATUS_USED = "used"


class Ticket(Base):
    """
    Ticket de entrada de un estudiante.

    El status solo avanza valid -> used, y únicamente a través de la
    verificación (UPDATE condicional sobre status='valid').
    """
    __tablename__ = "tickets"
    __table_args__ = (
        CheckConstraint("status IN ('valid', 'used')", name="ck_tickets_status"),
    )

    id = Column(String, primary_key=True)  # STU-2024-001
    qr_code = Column(String, unique=True, index=True, nullable=False)
    student_name = Column(String, nullable=False)
    roll_number = Column(String, nullable=False, index=True)
    email = Column(String, nullable=False, index=True)
    event_name = Column(String, nullable=True)
    status = Column(String, nullable=False, default=TICKET_STATUS_VALID, server_default=TICKET_STATUS_VALID)
    generated_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    scanned_at = Column(DateTime(timezone=True), nullable=True)  # Se fija junto con status=used
