"""REST endpoints for corporation tax calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from ukcorptax.backend.services import (
    build_calculation_response,
    calculate_corporation_tax,
    parse_calculation_payload,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/calculations")
def create_calculation() -> tuple[Any, int]:
    """Compute corporation tax for the submitted accounting period."""

    payload = parse_calculation_payload(request)
    result = calculate_corporation_tax(payload)

    return build_calculation_response(result)
