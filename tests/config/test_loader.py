from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from tick_forwarder.config import ConfigLocator, ConfigRepository, ForwarderConfig, SinkKind


def test_config_locator_uses_env_and_creates_directories(tmp_path: Path) -> None:
    locator = ConfigLocator()
    assert locator.project_root == tmp_path.resolve()
    for path in (locator.data_dir, locator.outputs_dir, locator.logs_dir):
        assert path.exists()
    assert locator.config_path() == tmp_path.resolve() / "data" / "forwarder_config.yaml"


def test_load_creates_default_file(temp_config_repository: ConfigRepository) -> None:
    config = temp_config_repository.load_config()
    path = temp_config_repository.locator.config_path()
    assert path.exists()
    assert config == ForwarderConfig()
    payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    assert payload["sink"] == "file"
    assert payload["socket"]["port"] == 9999


def test_config_roundtrip(tmp_path: Path) -> None:
    repo = ConfigRepository(ConfigLocator(project_root=tmp_path))
    config = ForwarderConfig(enabled=True, sink=SinkKind.SOCKET, log_every=10)
    repo.save_config(config)
    fresh = ConfigRepository(ConfigLocator(project_root=tmp_path))
    assert fresh.load_config() == config


def test_load_explicit_json_file(temp_config_repository: ConfigRepository, tmp_path: Path) -> None:
    path = tmp_path / "custom.json"
    path.write_text(json.dumps({"enabled": True, "file": {"max_size_kb": 0}}), encoding="utf-8")
    config = temp_config_repository.load_file(path)
    assert config.enabled
    assert config.file.max_size_kb == 0


def test_load_file_errors(temp_config_repository: ConfigRepository, tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        temp_config_repository.load_file(tmp_path / "missing.yaml")
    listing = tmp_path / "list.yaml"
    listing.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError):
        temp_config_repository.load_file(listing)
    bad = tmp_path / "bad.yaml"
    bad.write_text("socket:\n  port: 0\n", encoding="utf-8")
    with pytest.raises(ValidationError):
        temp_config_repository.load_file(bad)


def test_resolved_anchors_at_project_root(temp_config_repository: ConfigRepository, tmp_path: Path) -> None:
    resolved = temp_config_repository.resolved()
    assert resolved.file.path == tmp_path.resolve() / "data" / "outputs" / "ticks.jsonl"
