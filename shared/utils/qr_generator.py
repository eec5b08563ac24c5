"""Utilidades para generar el contenido QR de los tickets"""
import hashlib
import hmac
import json
from typing import Optional

from shared.core.config import settings


def generate_qr_code(ticket_id: str, secret: Optional[str] = None) -> str:
    """
    Generar el código QR opaco de un ticket

    Usa HMAC-SHA256 sobre el ticket_id, de modo que el código es
    determinístico para un mismo secret y no se puede adivinar sin él.

    Args:
        ticket_id: ID del ticket (ej: STU-2024-001)
        secret: Secret key para HMAC (default: settings.QR_SECRET)

    Returns:
        String con formato QR-{12 hex}
    """
    if secret is None:
        secret = settings.QR_SECRET

    message = f"ticket:{ticket_id}"
    signature = hmac.new(
        secret.encode('utf-8'),
        message.encode('utf-8'),
        hashlib.sha256
    ).hexdigest()

    return f"QR-{signature[:12]}"


def build_qr_payload(ticket_id: str) -> str:
    """Payload JSON que se imprime en el QR del ticket"""
    return json.dumps({"ticketId": ticket_id}, separators=(",", ":"))
