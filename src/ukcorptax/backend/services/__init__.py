"""Service-layer helpers for the UK corporation tax backend."""

from ukcorptax.backend.app.services.calculation_service import calculate_corporation_tax

from .request_parser import parse_calculation_payload
from .response_builder import build_calculation_response

__all__ = [
    "build_calculation_response",
    "calculate_corporation_tax",
    "parse_calculation_payload",
]
