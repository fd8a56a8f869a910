#!/usr/bin/env python3
"""Tests for farm document (de)serialization and the document stores."""

import pytest
import yaml

from fleet import (
    Farm,
    FuelEvent,
    FuelKind,
    HourMeterLogEntry,
    HourMeterSource,
    LastMaintenance,
    Machine,
    MachineStatus,
    MaintenanceConfig,
    MaintenanceEvent,
    MaintenanceType,
    MemoryStore,
    PartUsage,
    PersistenceError,
    WarehouseItem,
    YamlFileStore,
    farm_from_document,
    farm_to_document,
)
from fleet.warehouse import StockHistoryEntry


@pytest.fixture
def farm():
    machine = Machine(
        "machine_1",
        "Tractor 1",
        "Tractor",
        hour_meter=1240,
        status=MachineStatus.IN_MAINTENANCE,
        brand_model="John Deere 6110J",
        year=2019,
        default_fuel_kind=FuelKind.DIESEL_S10,
        maintenance_config=MaintenanceConfig(250, 1000, 500, 0),
        last_maintenance=LastMaintenance(1005, 1005, 1005, 1005),
        hour_meter_history=[
            HourMeterLogEntry(
                "2025-02-01T10:00:00+00:00",
                1240,
                "collab_1",
                HourMeterSource.FUELING,
                "fuel_1",
            )
        ],
    )
    return Farm(
        name="Fazenda Boa Vista",
        version=7,
        machines=[machine],
        fuel_logs=[
            FuelEvent(
                "fuel_1",
                "2025-02-01T10:00:00+00:00",
                "machine_1",
                "collab_1",
                FuelKind.DIESEL_S10,
                100,
                550.0,
                1240,
            )
        ],
        maintenance_logs=[
            MaintenanceEvent(
                "maint_1",
                MaintenanceType.OIL_CHANGE,
                "2025-01-20T10:00:00+00:00",
                "machine_1",
                1005,
                "collab_1",
                total_cost=120.0,
                parts_used=[PartUsage("item_1", 1)],
            )
        ],
        warehouse_items=[
            WarehouseItem(
                "item_1",
                "Oil filter",
                "FLT-001",
                45.0,
                4,
                "2025-01-01T00:00:00+00:00",
                stock_history=[
                    StockHistoryEntry(
                        "2025-01-20T10:00:00+00:00", "Maintenance", "maint_1", -1, 4
                    )
                ],
            )
        ],
    )


# =============================================================================
# Document conversion
# =============================================================================


class TestFarmToDocument:
    """Tests for farm_to_document."""

    def test_camel_case_keys(self, farm):
        """Fields are written with camelCase keys."""
        document = farm_to_document(farm)
        machine = document["machines"][0]
        assert machine["hourMeter"] == 1240
        assert machine["status"] == "InMaintenance"
        assert machine["defaultFuelType"] == "Diesel S10"
        assert machine["maintenanceConfig"]["airFilterHours"] == 0
        assert machine["lastMaintenance"]["engineOilHour"] == 1005
        assert machine["hourMeterHistory"][0]["source"] == "Fueling"
        assert document["fuelLogs"][0]["fuelType"] == "Diesel S10"
        assert document["maintenanceLogs"][0]["partsUsed"] == [
            {"itemId": "item_1", "quantity": 1}
        ]

    def test_unset_optionals_omitted(self, farm):
        """None fields are left out."""
        machine = farm_to_document(farm)["machines"][0]
        assert "serialNumber" not in machine
        assert "notes" not in machine
        assert "observations" not in farm_to_document(farm)["fuelLogs"][0]


class TestFarmFromDocument:
    """Tests for farm_from_document."""

    def test_round_trip(self, farm):
        """A farm survives serialization."""
        loaded = farm_from_document(farm_to_document(farm))
        assert farm_to_document(loaded) == farm_to_document(farm)
        machine = loaded.get_machine("machine_1")
        assert machine.status == MachineStatus.IN_MAINTENANCE
        assert machine.last_maintenance == LastMaintenance(1005, 1005, 1005, 1005)
        assert loaded.maintenance_logs[0].type == MaintenanceType.OIL_CHANGE
        assert loaded.version == 7

    def test_minimal_document(self):
        """Missing collections load as empty lists."""
        loaded = farm_from_document({"machines": []})
        assert loaded.name is None
        assert loaded.version == 0
        assert loaded.collaborators == []
        assert loaded.warehouse_items == []

    def test_machine_without_plan(self):
        """Plan and counters are optional."""
        loaded = farm_from_document(
            {
                "machines": [
                    {
                        "id": "machine_1",
                        "name": "Sprayer",
                        "type": "Sprayer",
                        "hourMeter": 10,
                        "status": "Active",
                    }
                ]
            }
        )
        machine = loaded.machines[0]
        assert machine.maintenance_config is None
        assert machine.last_maintenance is None
        assert machine.hour_meter_history == []

    def test_yaml_timestamps_become_strings(self):
        """Unquoted YAML timestamps load as strings."""
        document = yaml.safe_load(
            """
machines: []
fuelLogs:
  - id: fuel_1
    date: 2025-02-01T10:00:00Z
    machineId: machine_1
    collaboratorId: collab_1
    fuelType: Diesel S10
    quantity: 100
    totalValue: 550
    odometer: 1240
"""
        )
        loaded = farm_from_document(document)
        assert isinstance(loaded.fuel_logs[0].date, str)
        assert loaded.fuel_logs[0].date.startswith("2025-02-01")


# =============================================================================
# Stores
# =============================================================================


class TestMemoryStore:
    """Tests for MemoryStore."""
    def test_missing_key(self):
        """Unknown key returns None."""
        assert MemoryStore().get("farm") is None

    def test_documents_are_copied(self):
        """Stored documents are isolated from callers."""
        store = MemoryStore()
        document = {"machines": []}
        store.put("farm", document)
        document["machines"].append("changed")
        fetched = store.get("farm")
        fetched["name"] = "changed"
        assert store.get("farm") == {"machines": []}


class TestYamlFileStore:
    """Tests for the YAML file store."""

    def test_put_then_get(self, tmp_path, farm):
        """A written document reads back unchanged."""
        store = YamlFileStore(tmp_path / "data")
        store.put("farm", farm_to_document(farm))
        assert (tmp_path / "data" / "farm.yaml").exists()
        assert store.get("farm") == farm_to_document(farm)

    def test_keys_kept_in_order(self, tmp_path, farm):
        """Keys are written in document order."""
        store = YamlFileStore(tmp_path)
        store.put("farm", farm_to_document(farm))
        text = (tmp_path / "farm.yaml").read_text()
        assert text.index("name:") < text.index("machines:")

    def test_missing_file(self, tmp_path):
        """A missing file returns None."""
        assert YamlFileStore(tmp_path).get("farm") is None

    def test_unreadable_yaml(self, tmp_path):
        """Broken YAML raises PersistenceError."""
        (tmp_path / "farm.yaml").write_text("machines: [unclosed\n")
        with pytest.raises(PersistenceError):
            YamlFileStore(tmp_path).get("farm")

    def test_unwritable_directory(self, tmp_path):
        """A failed write raises PersistenceError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        with pytest.raises(PersistenceError):
            YamlFileStore(blocker / "data").put("farm", {"machines": []})
