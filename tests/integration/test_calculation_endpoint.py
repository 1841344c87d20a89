"""Integration tests for the corporation tax calculation REST endpoint."""

from __future__ import annotations

import json
from http import HTTPStatus
from pathlib import Path
from typing import Dict, Iterable

import pytest
from flask.testing import FlaskClient

DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"


def _load_scenarios() -> Iterable[Dict[str, object]]:
    with DATA_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


@pytest.mark.parametrize("scenario", _load_scenarios(), ids=lambda item: item["name"])
def test_calculation_endpoint_matches_regression_scenarios(
    client: FlaskClient, scenario: Dict[str, object]
) -> None:
    """Each regression scenario should remain stable over time."""

    response = client.post("/api/v1/calculations", json=scenario["payload"])
    assert response.status_code == HTTPStatus.OK

    result = response.get_json()["result"]
    expected = scenario["expectations"]

    for section in ("computation", "tax", "metadata"):
        for key, value in expected.get(section, {}).items():
            assert result[section][key] == pytest.approx(value)
    assert len(result["slices"]) == expected["slice_count"]


def test_calculation_endpoint_returns_normalised_input(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={
            "apStart": "2024-04-01",
            "apEnd": "2025-03-31",
            "turnover": "100000.40",
            "costOfSales": 40000,
        },
    )

    assert response.status_code == HTTPStatus.OK
    normalised = response.get_json()["normalized_input"]
    assert normalised["accounting_period_start"] == "2024-04-01"
    assert normalised["accounting_period_days"] == 365
    assert normalised["trading_turnover"] == 100000
    assert normalised["cost_of_goods_sold"] == 40000
    assert normalised["trading_loss_usage_requested"] is None


def test_calculation_endpoint_returns_validation_error(client: FlaskClient) -> None:
    """Invalid payloads should return a structured 400 response."""

    response = client.post(
        "/api/v1/calculations",
        json={
            "accounting_period_start": "2024-04-01",
            "accounting_period_end": "2025-03-31",
            "trading_turnover": -5,
        },
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert payload["code"] == "INVALID_INPUT"
    assert "trading_turnover: value cannot be negative" in payload["message"]


def test_calculation_endpoint_rejects_unknown_fields(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={
            "accounting_period_start": "2024-04-01",
            "accounting_period_end": "2025-03-31",
            "turnvoer": 10,
        },
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert "turnvoer: unknown field" in response.get_json()["message"]


def test_calculation_endpoint_rejects_reversed_period(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={
            "accounting_period_start": "2025-03-31",
            "accounting_period_end": "2024-04-01",
        },
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["code"] == "INVALID_PERIOD"


def test_calculation_endpoint_reports_unsupported_period(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={
            "accounting_period_start": "2010-01-01",
            "accounting_period_end": "2010-12-31",
            "trading_turnover": 1000,
        },
    )

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    payload = response.get_json()
    assert payload["error"] == "unsupported_period"
    assert payload["code"] == "NO_APPLICABLE_TAX_YEAR"


def test_calculation_endpoint_requires_json_object(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        data="not json",
        content_type="application/json",
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "bad_request"

    response = client.post("/api/v1/calculations", json=[1, 2, 3])
    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["message"] == "Request JSON must be an object"
