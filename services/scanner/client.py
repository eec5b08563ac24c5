"""Cliente HTTP del scanner: envía el identificador al servicio de verificación"""
import asyncio
import logging
from typing import Optional, Dict

import httpx
from pydantic import ValidationError
from shared.core.config import settings
from services.scanner.models import ScanError, ScanResult, ScannedTicket
from services.scanner.payload import extract_ticket_id, MalformedPayloadError

logger = logging.getLogger(__name__)

VERIFY_PATH = "/api/tickets/verify"

_STATUS_ERRORS = {
    400: ScanError.MALFORMED_PAYLOAD,
    404: ScanError.NOT_FOUND,
    409: ScanError.ALREADY_USED,
}


class ScannerBusyError(RuntimeError):
    """Ya hay una verificación en curso para este scanner"""


def connection_error_result() -> ScanResult:
    return ScanResult(
        success=False,
        message="Connection Error",
        details="Unable to connect to server. Please check your connection.",
        error=ScanError.CONNECTION_ERROR,
    )


def malformed_payload_result(reason: str) -> ScanResult:
    return ScanResult(
        success=False,
        message="Invalid QR Code",
        details=reason,
        error=ScanError.MALFORMED_PAYLOAD,
    )


def _failure_error(status_code: int, data: Dict) -> ScanError:
    code = data.get("error")
    try:
        return ScanError(code)
    except ValueError:
        return _STATUS_ERRORS.get(status_code, ScanError.SERVICE_ERROR)


class VerificationClient:
    """
    Cliente del endpoint POST /api/tickets/verify

    Una sola verificación en curso por cliente, sin reintentos: cualquier
    fallo se reporta una vez como ScanResult y el cliente sigue utilizable.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or settings.SCANNER_API_URL).rstrip("/")
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.SCANNER_TIMEOUT,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        self._lock = asyncio.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    async def scan(self, raw_text: str) -> ScanResult:
        """Extraer identificador del QR y verificarlo"""
        try:
            identifier = extract_ticket_id(raw_text)
        except MalformedPayloadError as e:
            logger.info(f"QR descartado: {e}")
            return malformed_payload_result(str(e))
        return await self.verify(identifier)

    async def verify(self, identifier: str) -> ScanResult:
        """
        Verificar un identificador contra el servicio

        Raises:
            ScannerBusyError: si ya hay una verificación en curso
        """
        if self._lock.locked():
            raise ScannerBusyError("A verification is already in progress")

        async with self._lock:
            identifier = identifier.strip()
            logger.info(f"Verificando ticket: {identifier}")
            try:
                response = await self._http.post(VERIFY_PATH, json={"ticketId": identifier})
                data = response.json()
                if not isinstance(data, dict):
                    raise ValueError(f"Unexpected response body: {data!r}")
                return self._to_result(response, data)
            except (httpx.HTTPError, ValueError) as e:
                # ValueError cubre JSON inválido y ValidationError de pydantic
                logger.warning(f"Error de verificación para {identifier}: {type(e).__name__}: {e}")
                return connection_error_result()

    @staticmethod
    def _to_result(response: httpx.Response, data: Dict) -> ScanResult:
        if response.is_success and data.get("success"):
            if not isinstance(data.get("ticket"), dict):
                raise ValueError("Success response without ticket")
            ticket = ScannedTicket.model_validate({**data["ticket"], "status": "used"})
            return ScanResult(
                success=True,
                message="Entry Approved ✓",
                details="Student verified successfully",
                ticket=ticket,
            )

        ticket = None
        if isinstance(data.get("ticket"), dict):
            try:
                ticket = ScannedTicket.model_validate(data["ticket"])
            except ValidationError as e:
                # Ticket opcional en un rechazo
                logger.debug(f"Ticket inválido en respuesta de rechazo: {e}")

        message = data.get("message")
        return ScanResult(
            success=False,
            message=message or "Verification Failed",
            details=message or "Unable to verify ticket",
            error=_failure_error(response.status_code, data),
            ticket=ticket,
        )

