"""Modelos del cliente scanner"""
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class ScanError(str, Enum):
    NOT_FOUND = "not_found"
    ALREADY_USED = "already_used"
    MALFORMED_PAYLOAD = "malformed_payload"
    CONNECTION_ERROR = "connection_error"
    SERVICE_ERROR = "service_error"  # Otro non-2xx (429, 500...)


class ScannedTicket(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    student_name: Optional[str] = Field(None, alias="studentName")
    roll_number: Optional[str] = Field(None, alias="rollNumber")
    email: Optional[str] = None
    event_name: Optional[str] = Field(None, alias="eventName")
    status: Optional[str] = None
    scanned_at: Optional[str] = Field(None, alias="scannedAt")


class ScanResult(BaseModel):
    """Resultado mostrado al operador tras un escaneo"""
    success: bool
    message: str
    details: str
    error: Optional[ScanError] = None
    ticket: Optional[ScannedTicket] = None
