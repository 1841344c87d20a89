"""REST endpoints producing CT return packages."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from ukcorptax.backend.app.services.mappers import (
    build_ct_package,
    build_ct_packages_for_long_period,
)
from ukcorptax.backend.services import build_calculation_response, parse_calculation_payload

blueprint = Blueprint("packages", __name__, url_prefix="/api/v1")


@blueprint.post("/packages")
def create_package() -> tuple[Any, int]:
    """Build one CT package; periods over 12 months are rejected."""

    payload = parse_calculation_payload(request)
    return build_calculation_response(build_ct_package(payload))


@blueprint.post("/packages/split")
def create_split_packages() -> tuple[Any, int]:
    """Build one CT package per submission period of a long accounting period."""

    payload = parse_calculation_payload(request)
    packages = build_ct_packages_for_long_period(payload)
    return jsonify({"packages": packages, "count": len(packages)}), 200
