"""Helpers for extracting calculation payloads from incoming requests."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from flask import Request
from werkzeug.exceptions import BadRequest


def parse_calculation_payload(req: Request) -> dict[str, Any]:
    """Extract a JSON object from ``req``.

    Field validation happens in the engine; this only guarantees a mapping.
    """

    data = req.get_json(silent=True)
    if data is None:
        raise BadRequest("Request body must be valid JSON")
    if not isinstance(data, Mapping):
        raise BadRequest("Request JSON must be an object")

    return dict(data)
