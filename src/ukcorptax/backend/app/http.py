"""HTTP helper utilities shared across Flask blueprints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from flask import jsonify

from ukcorptax.backend.exceptions import CorporationTaxError


@dataclass(frozen=True)
class ProblemResponse:
    """Error payload of the form ``{"error": ..., "message": ...}``."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        if self.extra:
            payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        """Convert the problem payload into a Flask response tuple."""

        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    additional: Mapping[str, Any] | None = extra or None
    return ProblemResponse(error=error, status=status, message=message, extra=additional)


def problem_from_error(error: Exception, kind: str, *, status: int) -> ProblemResponse:
    """Describe ``error`` as a problem, exposing engine error codes when present."""

    if isinstance(error, CorporationTaxError):
        return problem_response(kind, status=status, message=str(error), code=error.code)
    return problem_response(kind, status=status, message=str(error))


__all__ = ["ProblemResponse", "problem_from_error", "problem_response"]
