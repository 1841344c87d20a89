"""Integration tests for the CT package endpoints."""

from http import HTTPStatus

from flask.testing import FlaskClient

FY2024 = {
    "accounting_period_start": "2024-04-01",
    "accounting_period_end": "2025-03-31",
}
LONG_PERIOD = {
    "accounting_period_start": "2023-01-01",
    "accounting_period_end": "2024-06-30",
}


def test_package_endpoint_returns_mapped_views(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/packages",
        json={**FY2024, "turnover": 250_000, "costOfSales": 150_000, "companyName": "Acme Ltd"},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["ct600_header"]["company_name"] == "Acme Ltd"
    assert payload["ct600_boxes"]["box_435_marginal_relief"] == 2_250
    assert payload["tax_computation"]["summary"]["tax_payable"] == 22_750
    assert payload["metadata"]["schema_version"]


def test_package_endpoint_rejects_long_period(client: FlaskClient) -> None:
    response = client.post("/api/v1/packages", json={**LONG_PERIOD, "turnover": 1_000})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert payload["code"] == "SUBMISSION_PERIOD_TOO_LONG"
    assert "2023-12-31" in payload["message"]


def test_split_endpoint_returns_one_package_per_submission(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/packages/split",
        json={**LONG_PERIOD, "turnover": 547_000, "tradingLossBF": 400_000},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["count"] == 2
    first, second = payload["packages"]
    assert first["metadata"]["submission_index"] == 1
    assert first["ct600_boxes"]["box_160_trading_losses_bfwd_used"] == 365_000
    assert second["ct600_boxes"]["_trading_losses_bfwd"] == 35_000
    assert second["ct600_boxes"]["box_315_taxable_profit"] == 147_000


def test_split_endpoint_propagates_unsupported_period(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/packages/split",
        json={
            "accounting_period_start": "2009-01-01",
            "accounting_period_end": "2010-06-30",
        },
    )

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert response.get_json()["code"] == "NO_APPLICABLE_TAX_YEAR"
