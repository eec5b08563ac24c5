#!/usr/bin/env python3
"""
Scanner de tickets por línea de comandos (entrada manual o lector QR tipo teclado)

Uso:
    ticket-scanner STU-2024-001 '{"ticketId":"STU-2024-003"}'
    ticket-scanner            # lee un código por línea desde stdin
"""
import argparse
import asyncio
import logging
import sys
from typing import Iterable, List, Optional, TextIO

from shared.core.config import settings
from services.scanner.client import VerificationClient
from services.scanner.models import ScanResult


# Colores para output
class Colors:
    GREEN = '\033[92m'
    RED = '\033[91m'
    YELLOW = '\033[93m'
    RESET = '\033[0m'
    BOLD = '\033[1m'


def format_result(result: ScanResult) -> str:
    """Texto a mostrar al operador para un resultado"""
    if result.success:
        lines = [f"{Colors.GREEN}✅ {result.message}{Colors.RESET}"]
    elif result.ticket is not None:
        lines = [f"{Colors.YELLOW}⚠️  {result.message}{Colors.RESET}"]
    else:
        lines = [f"{Colors.RED}❌ {result.message}{Colors.RESET}"]
    lines.append(f"   {result.details}")

    ticket = result.ticket
    if ticket is not None:
        lines.append(f"   Ticket:  {ticket.id}")
        lines.append(f"   Student: {ticket.student_name} ({ticket.roll_number})")
        lines.append(f"   Email:   {ticket.email}")
        if ticket.event_name:
            lines.append(f"   Event:   {ticket.event_name}")
        if ticket.scanned_at:
            lines.append(f"   Scanned: {ticket.scanned_at}")
    return "\n".join(lines)


def _read_codes(stream: TextIO) -> Iterable[str]:
    for line in stream:
        if line.strip():
            yield line


async def run_scans(
    codes: Iterable[str],
    client: VerificationClient,
    as_json: bool = False,
    out: TextIO = sys.stdout
) -> List[ScanResult]:
    """Verificar cada código en orden, uno a la vez"""
    results = []
    for code in codes:
        result = await client.scan(code)
        results.append(result)
        if as_json:
            print(result.model_dump_json(), file=out)
        else:
            print(format_result(result), file=out)
            print(file=out)
    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Verificar tickets de eventos estudiantiles")
    parser.add_argument("codes", nargs="*", help="ID de ticket, roll number, email o payload JSON del QR")
    parser.add_argument("--api-url", default=settings.SCANNER_API_URL, help="URL base del servicio de verificación")
    parser.add_argument("--timeout", type=float, default=settings.SCANNER_TIMEOUT, help="Timeout HTTP en segundos")
    parser.add_argument("--json", action="store_true", dest="as_json", help="Imprimir cada resultado como JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Logging detallado")
    return parser


async def _main(args: argparse.Namespace, stdin: TextIO) -> int:
    codes = args.codes or _read_codes(stdin)
    async with VerificationClient(base_url=args.api_url, timeout=args.timeout) as client:
        results = await run_scans(codes, client, as_json=args.as_json)
    return 0 if results and all(r.success for r in results) else 1


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    return asyncio.run(_main(args, sys.stdin))


if __name__ == "__main__":
    sys.exit(main())
