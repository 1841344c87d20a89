"""Expose the tax-year reference table to API clients.

Clients use these endpoints to show which financial years are supported and
the limits and rates each one applies, without duplicating the YAML data.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify

from ukcorptax.backend.app.http import problem_response
from ukcorptax.backend.config.schema import TaxYearDefinition
from ukcorptax.backend.config.year_config import (
    load_manifest,
    load_tax_year_table,
    manifest_entries,
)
from ukcorptax.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    manifest = load_manifest()
    supported_years = list(manifest.supported_years)
    default_year = supported_years[-1] if supported_years else None
    return {
        "version": get_project_version(),
        "supported_years": supported_years,
        "default_year": default_year,
    }


def _serialise_tax_year(definition: TaxYearDefinition) -> dict[str, Any]:
    return {
        "fy_year": definition.fy_year,
        "start_date": definition.start_date.isoformat(),
        "end_date": definition.end_date.isoformat(),
        "total_days": definition.total_days,
        "small_profits_rate": float(definition.small_rate),
        "main_rate": float(definition.main_rate),
        "marginal_relief_fraction": float(definition.relief_fraction),
        "lower_limit": float(definition.lower_threshold),
        "upper_limit": float(definition.upper_threshold),
        "aia_limit": float(definition.aia_limit),
        "tiers": [
            {
                "index": tier.index,
                "threshold": float(tier.threshold),
                "rate": float(tier.rate),
                "relief_fraction": float(tier.relief_fraction),
            }
            for tier in definition.tiers
        ],
        "notes": definition.notes,
    }


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    return jsonify(get_configuration_metadata()), 200


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return every configured financial year with its manifest status."""

    table = load_tax_year_table()
    status_by_year = {entry.year: entry.status for entry in manifest_entries()}
    years = []
    for definition in table.years:
        entry = _serialise_tax_year(definition)
        entry["status"] = status_by_year.get(definition.fy_year)
        years.append(entry)

    metadata = get_configuration_metadata()
    payload = {
        "years": years,
        "default_year": metadata["default_year"],
        "supported_years": metadata["supported_years"],
        "gaps": [
            {"start": start.isoformat(), "end": end.isoformat()}
            for start, end in table.gaps()
        ],
    }
    return jsonify(payload), 200


@blueprint.get("/<int:fy_year>")
def get_tax_year(fy_year: int) -> tuple[Any, int]:
    """Return the definition of one financial year."""

    try:
        definition = load_tax_year_table().get(fy_year)
    except KeyError:
        return problem_response(
            "not_found", status=404, message=f"FY{fy_year} is not configured"
        ).to_response()
    return jsonify(_serialise_tax_year(definition)), 200
