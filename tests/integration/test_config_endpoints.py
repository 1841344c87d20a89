"""Integration coverage for configuration metadata endpoints."""

from http import HTTPStatus
from shutil import copy2
from unittest.mock import patch

import pytest
import yaml
from flask.testing import FlaskClient

from ukcorptax.backend.config import year_config
from ukcorptax.backend.version import get_project_version


def test_meta_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/meta")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload == {
        "version": get_project_version(),
        "supported_years": list(range(2020, 2031)),
        "default_year": 2030,
    }


def test_list_years_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/years")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["default_year"] == 2030
    assert payload["gaps"] == []

    years = {entry["fy_year"]: entry for entry in payload["years"]}
    assert set(years) == set(range(2020, 2031))
    assert years[2024]["status"] == "active"
    assert years[2027]["status"] == "projected"

    single_rate = years[2022]
    assert single_rate["small_profits_rate"] == pytest.approx(0.19)
    assert single_rate["main_rate"] == pytest.approx(0.19)
    assert single_rate["marginal_relief_fraction"] == 0

    current = years[2024]
    assert current["start_date"] == "2024-04-01"
    assert current["end_date"] == "2025-03-31"
    assert current["main_rate"] == pytest.approx(0.25)
    assert current["marginal_relief_fraction"] == pytest.approx(0.015)
    assert current["lower_limit"] == 50_000
    assert current["upper_limit"] == 250_000
    assert current["aia_limit"] == 1_000_000
    assert [tier["index"] for tier in current["tiers"]] == [1, 2, 3]


def test_tax_year_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/2023")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["fy_year"] == 2023
    assert payload["total_days"] == 366


def test_tax_year_endpoint_unknown_year(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/1999")

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json() == {
        "error": "not_found",
        "message": "FY1999 is not configured",
    }


def test_list_years_endpoint_reports_gaps(client: FlaskClient, tmp_path) -> None:
    original_directory = year_config.CONFIG_DIRECTORY
    for filename in ("2023.yaml", "2025.yaml"):
        copy2(original_directory / filename, tmp_path / filename)
    manifest_path = tmp_path / "manifest.yaml"
    manifest_path.write_text(
        yaml.safe_dump({"years": [{"year": 2023}, {"year": 2025, "status": "projected"}]})
    )

    year_config.clear_caches()
    with patch.object(year_config, "CONFIG_DIRECTORY", tmp_path), patch.object(
        year_config, "MANIFEST_FILE", manifest_path
    ):
        response = client.get("/api/v1/config/years")
        year_config.clear_caches()

    year_config.clear_caches()

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert [entry["fy_year"] for entry in payload["years"]] == [2023, 2025]
    assert payload["default_year"] == 2025
    assert payload["gaps"] == [{"start": "2024-04-01", "end": "2025-03-31"}]
