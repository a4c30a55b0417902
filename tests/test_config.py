"""Tests für das Konfigurationssystem."""

from pathlib import Path

import pytest

from config.defaults import (
    APPLICANT_REQUIRED,
    DEFAULT_PREFERENCE_WEIGHTS,
    FACULTY_MAPPING,
    NUM_PREFERENCES,
    PREFERENCE_COLUMNS,
    default_placement_config,
)
from config.manager import ConfigManager
from config.schema import CatalogConfig, PlacementConfig, SolverConfig
from models.enums import Faculty


# ─── DEFAULT-KONFIGURATION ────────────────────────────────────────────────────

class TestDefaultConfig:
    def test_default_config_valid(self):
        config = default_placement_config()
        assert config.solver.preference_weights == [1, 2, 3, 4, 5, 6]
        assert config.catalog.synthetic_capacity == 10000
        assert config.catalog.non_scaling_agreement_types == []
        assert config.solver.decision_threshold == 0.9

    def test_weights_constant(self):
        assert len(DEFAULT_PREFERENCE_WEIGHTS) == NUM_PREFERENCES
        assert len(PREFERENCE_COLUMNS) == NUM_PREFERENCES

    def test_faculty_mapping_covers_all_faculties(self):
        assert {Faculty(f) for f in FACULTY_MAPPING} == set(Faculty)

    def test_faculty_mapping_unique_fields(self):
        """Ein Studienfach gehört zu genau einer Fakultät."""
        fields = [f.lower() for fs in FACULTY_MAPPING.values() for f in fs]
        assert len(fields) == len(set(fields))

    def test_required_columns(self):
        assert "ID of application" in APPLICANT_REQUIRED


# ─── PYDANTIC-VALIDIERUNG ─────────────────────────────────────────────────────

class TestPydanticValidation:
    def test_wrong_number_of_weights(self):
        with pytest.raises(Exception):
            SolverConfig(preference_weights=[1, 2, 3])

    def test_negative_weight(self):
        with pytest.raises(Exception):
            SolverConfig(preference_weights=[1, 2, 3, 4, 5, -6])

    def test_zero_weights_allowed(self):
        assert SolverConfig(preference_weights=[0] * 6).preference_weights == [0] * 6

    def test_threshold_bounds(self):
        with pytest.raises(Exception):
            SolverConfig(decision_threshold=1.0)

    def test_synthetic_capacity_positive(self):
        with pytest.raises(Exception):
            CatalogConfig(synthetic_capacity=0)


# ─── CONFIG-MANAGER ───────────────────────────────────────────────────────────

class TestConfigManager:
    def _manager(self, tmp_path: Path) -> ConfigManager:
        mgr = ConfigManager()
        mgr.CONFIG_DIR = tmp_path
        mgr.DEFAULT_CONFIG = tmp_path / "placement_config.yaml"
        return mgr

    def test_save_and_load_roundtrip(self, tmp_path: Path):
        """Config speichern und wieder laden ergibt dieselbe Konfiguration."""
        config = default_placement_config().model_copy(update={
            "academic_year": "2025-2026",
            "solver": SolverConfig(preference_weights=[1, 4, 9, 16, 25, 36], num_workers=2),
        })
        mgr = self._manager(tmp_path)
        mgr.save(config)
        assert mgr.DEFAULT_CONFIG.exists()

        loaded = mgr.load(mgr.DEFAULT_CONFIG)
        assert loaded == config

    def test_saved_file_has_comments(self, tmp_path: Path):
        mgr = self._manager(tmp_path)
        mgr.save(default_placement_config())
        text = mgr.DEFAULT_CONFIG.read_text(encoding="utf-8")
        assert text.startswith("# ====")
        assert "preference_weights" in text
        assert "0 = alle Kerne" in text

    def test_first_run_check(self, tmp_path: Path):
        mgr = self._manager(tmp_path)
        assert mgr.first_run_check() is True
        mgr.save(default_placement_config())
        assert mgr.first_run_check() is False

    def test_load_nonexistent_raises(self, tmp_path: Path):
        """Laden einer nicht-existenten Datei → FileNotFoundError."""
        mgr = ConfigManager()
        with pytest.raises(FileNotFoundError):
            mgr.load(tmp_path / "not_there.yaml")

    def test_load_invalid_raises_value_error(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("solver:\n  preference_weights: [1, 2]\n", encoding="utf-8")
        with pytest.raises(ValueError, match="ungültig"):
            ConfigManager().load(path)

    def test_load_partial_file_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "partial.yaml"
        path.write_text("programme_name: Erasmus\n", encoding="utf-8")
        config = ConfigManager().load(path)
        assert config.programme_name == "Erasmus"
        assert config.solver == SolverConfig()

    def test_load_or_default(self, tmp_path: Path):
        mgr = ConfigManager()
        assert mgr.load_or_default(tmp_path / "fehlt.yaml") == default_placement_config()
        assert isinstance(mgr.load_or_default(tmp_path / "fehlt.yaml"), PlacementConfig)
