#!/usr/bin/env python3
"""Tests for farm document schema validation."""
from datetime import date

from fleet.validation import (
    load_schema,
    normalize_document,
    validate_document,
    validate_farm_file,
)


class TestLoadSchema:
    """Tests for load_schema function."""

    def test_returns_dict(self):
        """Schema loads as a dict."""
        schema = load_schema()
        assert isinstance(schema, dict)

    def test_has_expected_structure(self):
        """Schema describes the farm collections."""
        properties = load_schema()["properties"]
        assert "machines" in properties
        assert "fuelLogs" in properties
        assert "warehouseItems" in properties


class TestValidateDocument:
    """Tests for validate_document function."""

    def test_minimal_document_valid(self):
        """Only machines is required."""
        assert validate_document({"machines": []}, load_schema()) == []

    def test_missing_machine_field(self):
        """Missing machine fields are reported."""
        document = {"machines": [{"id": "machine_1", "name": "Tractor"}]}
        errors = validate_document(document, load_schema())
        assert len(errors) >= 1
        assert "Schema validation error" in errors[0]

    def test_unknown_fuel_type(self):
        """Unknown fuel types are reported with their path."""
        document = {
            "machines": [],
            "fuelPrices": [{"fuelType": "Kerosene", "price": 5}],
        }
        errors = validate_document(document, load_schema())
        assert any("fuelPrices" in e for e in errors)

    def test_zero_fuel_quantity_invalid(self):
        """Fuel quantity must be above zero."""
        document = {
            "machines": [],
            "fuelLogs": [
                {
                    "id": "fuel_1",
                    "date": "2025-02-01T10:00:00+00:00",
                    "machineId": "machine_1",
                    "collaboratorId": "collab_1",
                    "fuelType": "Diesel S10",
                    "quantity": 0,
                    "totalValue": 550,
                    "odometer": 1240,
                }
            ],
        }
        assert validate_document(document, load_schema()) != []

    def test_negative_stock_allowed(self):
        """Stock quantities may be negative."""
        document = {
            "machines": [],
            "warehouseItems": [
                {
                    "id": "item_1",
                    "name": "Oil filter",
                    "code": "FLT-001",
                    "unitValue": 45,
                    "stockQuantity": -1,
                    "createdAt": "2025-01-01T00:00:00+00:00",
                }
            ],
        }
        assert validate_document(document, load_schema()) == []


class TestValidateFarmFile:
    """Tests for validate_farm_file function."""

    def test_valid_file(self, tmp_path):
        """A complete farm file validates."""
        path = tmp_path / "farm.yaml"
        path.write_text(
            """
name: Fazenda Boa Vista
machines:
  - id: machine_1
    name: Tractor 1
    type: Tractor
    hourMeter: 1240
    status: Active
    maintenanceConfig:
      engineOilHours: 250
      transmissionOilHours: 1000
      fuelFilterHours: 500
      airFilterHours: 500
    lastMaintenance:
      engineOilHour: 1005
      transmissionOilHour: 1005
      fuelFilterHour: 1005
      airFilterHour: 1005
    hourMeterHistory:
      - date: 2025-02-01T10:00:00Z
        value: 1240
        collaboratorId: collab_1
        source: Fueling
        sourceId: fuel_1
"""
        )
        assert validate_farm_file(path, load_schema()) == []

    def test_bad_status(self, tmp_path):
        """Unknown machine status is reported with its path."""
        path = tmp_path / "farm.yaml"
        path.write_text(
            """
machines:
  - id: machine_1
    name: Tractor 1
    type: Tractor
    hourMeter: 1240
    status: Broken
"""
        )
        errors = validate_farm_file(path, load_schema())
        assert any("machines.0.status" in e for e in errors)

    def test_yaml_parse_error(self, tmp_path):
        """Broken YAML is reported."""
        path = tmp_path / "farm.yaml"
        path.write_text("machines: [unclosed\n")
        errors = validate_farm_file(path, load_schema())
        assert errors[0].startswith("YAML parse error")

    def test_missing_file(self, tmp_path):
        """A missing file is reported."""
        errors = validate_farm_file(tmp_path / "absent.yaml", load_schema())
        assert errors[0].startswith("Error:")

    def test_empty_file(self, tmp_path):
        """An empty file is reported."""
        path = tmp_path / "farm.yaml"
        path.write_text("")
        assert validate_farm_file(path, load_schema()) == ["Error: empty document"]


class TestNormalizeDocument:
    """Tests for normalize_document function."""
    def test_dates_become_strings(self):
        """Dates become ISO strings."""
        normalized = normalize_document({"createdAt": date(2025, 1, 1)})
        assert normalized == {"createdAt": "2025-01-01"}
