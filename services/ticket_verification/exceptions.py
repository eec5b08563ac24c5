"""Errores de negocio de la verificación de tickets"""
from typing import Optional, Dict


class TicketVerificationError(Exception):
    """Rechazo de verificación; la ruta lo traduce a respuesta JSON"""
    code = "verification_failed"
    status_code = 400
    default_message = "Verification Failed"

    def __init__(self, message: Optional[str] = None, ticket: Optional[Dict] = None):
        self.message = message or self.default_message
        self.ticket = ticket
        super().__init__(self.message)

    def to_dict(self) -> Dict:
        body = {
            "success": False,
            "error": self.code,
            "message": self.message,
        }
        if self.ticket is not None:
            body["ticket"] = self.ticket
        return body


class MalformedPayloadError(TicketVerificationError):
    code = "malformed_payload"
    status_code = 400
    default_message = "Ticket ID is required"


class TicketNotFoundError(TicketVerificationError):
    code = "not_found"
    status_code = 404
    default_message = "Ticket not found"


class TicketAlreadyUsedError(TicketVerificationError):
    code = "already_used"
    status_code = 409
    default_message = "Ticket already used"
