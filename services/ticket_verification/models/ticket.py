"""Modelos Pydantic para verificación y consulta de tickets"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List


class TicketVerifyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    ticket_id: Optional[str] = Field(None, alias="ticketId")


class TicketPayload(BaseModel):
    """Ticket tal como viaja por el cable (camelCase)"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    qr_code: Optional[str] = Field(None, alias="qrCode")
    student_name: str = Field(..., alias="studentName")
    roll_number: str = Field(..., alias="rollNumber")
    email: str
    event_name: Optional[str] = Field(None, alias="eventName")
    status: str
    generated_at: Optional[str] = Field(None, alias="generatedAt")
    scanned_at: Optional[str] = Field(None, alias="scannedAt")


class TicketVerifyResponse(BaseModel):
    success: bool
    message: str
    ticket: TicketPayload


class TicketListResponse(BaseModel):
    tickets: List[TicketPayload]
    total: int


class TicketStatsResponse(BaseModel):
    total: int
    used: int
    valid: int
