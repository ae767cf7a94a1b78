#!/usr/bin/env python3
"""Tests for MaintenanceCycle and CycleTable."""
import pytest
from servicetrack import DEFAULT_CYCLES, CycleTable, MaintenanceCycle


class TestMaintenanceCycle:
    """Tests for MaintenanceCycle class."""

    def test_fields(self):
        cycle = MaintenanceCycle(early=8, standard=10, late=12)
        assert (cycle.early, cycle.standard, cycle.late) == (8, 10, 12)

    def test_equal_thresholds_allowed(self):
        cycle = MaintenanceCycle(early=5, standard=5, late=5)
        assert cycle.standard == 5

    def test_out_of_order_rejected(self):
        with pytest.raises(ValueError):
            MaintenanceCycle(early=10, standard=8, late=12)
        with pytest.raises(ValueError):
            MaintenanceCycle(early=8, standard=10, late=9)

    def test_standard_must_be_positive(self):
        with pytest.raises(ValueError):
            MaintenanceCycle(early=0, standard=0, late=1)


class TestCycleTable:
    """Tests for CycleTable lookups."""

    @pytest.fixture
    def table(self):
        return CycleTable(
            {
                "Exterior-Paint": {"early": 8, "standard": 10, "late": 12},
                "gutter": (5, 7, 9),
                "other": MaintenanceCycle(1, 2, 3),
            }
        )

    def test_requires_other(self):
        with pytest.raises(ValueError):
            CycleTable({"gutter": (5, 7, 9)})

    def test_lookup_case_insensitive(self, table):
        assert table.lookup("EXTERIOR-paint") == MaintenanceCycle(8, 10, 12)
        assert table.lookup("  gutter ") == MaintenanceCycle(5, 7, 9)

    def test_unknown_falls_back_to_other(self, table):
        assert table.resolve("chimney") == "other"
        assert table.lookup("chimney") == MaintenanceCycle(1, 2, 3)

    def test_missing_type_falls_back_to_other(self, table):
        assert table.resolve(None) == "other"
        assert table.resolve("") == "other"

    def test_contains(self, table):
        assert "exterior-paint" in table
        assert "chimney" not in table

    def test_default_table(self):
        assert DEFAULT_CYCLES.lookup("exterior-paint") == MaintenanceCycle(8, 10, 12)
        assert DEFAULT_CYCLES.lookup("gutter") == MaintenanceCycle(5, 7, 9)
        assert "other" in DEFAULT_CYCLES
