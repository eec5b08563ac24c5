"""Extracción del identificador de ticket desde el texto escaneado"""
import json


class MalformedPayloadError(ValueError):
    """El contenido del QR no contiene un identificador utilizable"""


def extract_ticket_id(raw_text: str) -> str:
    """
    Obtener el identificador a verificar desde el texto del QR

    - Objeto JSON: se usa su campo `ticketId` (string no vacío).
    - Cualquier otro texto (incluidos escalares JSON como `12345`):
      el texto mismo es el identificador.

    Raises:
        MalformedPayloadError: texto vacío, o JSON sin `ticketId` válido
    """
    text = (raw_text or "").strip()
    if not text:
        raise MalformedPayloadError("QR code is empty")

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return text

    if not isinstance(data, dict):
        return text

    ticket_id = data.get("ticketId")
    if not isinstance(ticket_id, str) or not ticket_id.strip():
        raise MalformedPayloadError("QR code does not contain a ticket ID")

    return ticket_id.strip()
