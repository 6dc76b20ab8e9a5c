"""Test configuration loading, saving and merging."""

import pytest
import yaml
from pydantic import ValidationError

from sixstroke.core.config import (
    SixStrokeConfig,
    default_config,
    load_config,
    merge_config,
    save_config,
)


def test_defaults_match_reference_engine():
    cfg = default_config()
    assert cfg.engine.bore == 0.086
    assert cfg.engine.compression_ratio == 11.0
    assert cfg.engine.cylinders == 3
    assert (cfg.engine.idle_rpm, cfg.engine.max_rpm) == (800.0, 6000.0)
    assert cfg.gearbox.ratios == [3.42, 2.14, 1.45, 1.0, 0.83]
    assert cfg.vehicle.final_drive_ratio == 3.73
    assert cfg.simulation.tick_rate == 60.0


def test_save_load_roundtrip(tmp_path):
    cfg = merge_config(default_config(), {"simulation": {"seed": 3, "upgrades": ["turbocharger"]}})
    path = tmp_path / "nested" / "sim.yaml"
    save_config(cfg, path)

    loaded = load_config(path)
    assert loaded == cfg


def test_partial_yaml_fills_defaults(tmp_path):
    path = tmp_path / "partial.yaml"
    path.write_text(yaml.safe_dump({"engine": {"cylinders": 4}}))

    cfg = load_config(path)
    assert cfg.engine.cylinders == 4
    assert cfg.engine.bore == 0.086


def test_empty_yaml_is_default(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(path) == SixStrokeConfig()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_merge_is_deep():
    cfg = merge_config(default_config(), {"engine": {"max_rpm": 7000.0}})
    assert cfg.engine.max_rpm == 7000.0
    assert cfg.engine.idle_rpm == 800.0


@pytest.mark.parametrize(
    "overrides",
    [
        {"engine": {"idle_rpm": 7000.0}},
        {"engine": {"initial_rpm": 100.0}},
        {"engine": {"initial_temperature": 120.0}},
        {"gearbox": {"ratios": []}},
        {"gearbox": {"ratios": [3.0, -1.0]}},
        {"gearbox": {"downshift_rpm": 5000.0}},
        {"dynamics": {"water_injection_toggle_probability": 1.5}},
    ],
)
def test_invalid_overrides_rejected(overrides):
    with pytest.raises(ValidationError):
        merge_config(default_config(), overrides)


def test_geometry_from_config():
    geom = default_config().engine.geometry()
    assert geom.stroke == 0.086
    assert geom.mean_effective_pressure == 1.0e6
