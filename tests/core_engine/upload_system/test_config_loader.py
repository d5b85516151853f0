from __future__ import annotations

import sys
from pathlib import Path

import pytest
import yaml

# Ensure the project root is on the Python path
PKG_ROOT: Path = Path(__file__).resolve().parents[3]
if str(PKG_ROOT) not in sys.path:
    sys.path.insert(0, str(PKG_ROOT))

from nft_batch_uploader.core_engine.config_loader import (
    build_uploader_config,
    get_config_value_by_key_path,
    load_and_merge_configs,
    load_config,
)


@pytest.fixture
def user_config(tmp_path: Path) -> Path:
    """Writes a partial user config on top of the packaged defaults."""
    path = tmp_path / "uploader_config.yaml"
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump({"input": {"upload_folder": str(tmp_path / "drop")}, "upload": {"mode": "item"}}, f)
    return path


def test_load_and_merge_configs_layers(user_config: Path, tmp_path: Path):
    """Defaults, user YAML and overrides merge with overrides on top."""
    cfg = load_and_merge_configs(user_config, overrides={"input": {"layout": "flat"}})

    assert cfg["input"]["upload_folder"] == str(tmp_path / "drop")
    assert cfg["input"]["layout"] == "flat"
    # Untouched defaults survive the deep merge.
    assert cfg["input"]["images_subfolder"] == "images"
    assert cfg["upload"]["mode"] == "item"


def test_load_config_missing_primary_without_fallback_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(primary_config_path=tmp_path / "missing.yaml")


def test_load_config_rejects_non_mapping(tmp_path: Path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(primary_config_path=path)


def test_load_config_malformed_yaml_raises_value_error(tmp_path: Path):
    path = tmp_path / "bad.yaml"
    path.write_text("input: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Malformed YAML"):
        load_config(primary_config_path=path)


def test_get_config_value_by_key_path():
    cfg = {"storage": {"timeout_seconds": 30}}

    assert get_config_value_by_key_path(cfg, "storage.timeout_seconds") == 30
    assert get_config_value_by_key_path(cfg, "storage.missing", default="x") == "x"


def test_build_uploader_config_defaults():
    config = build_uploader_config({}, env={})

    assert config.upload_folder == Path("uploads")
    assert config.layout == "auto"
    assert config.json_files_per_image == 1
    assert config.image_extensions == frozenset({".png", ".jpg", ".jpeg", ".gif"})
    assert config.api_token == ""
    assert config.upload_mode == "directory"
    assert config.results_path == Path("results.json")
    assert config.timeout_seconds is None
    assert config.continue_on_error is False


def test_build_uploader_config_env_wins_for_json_count():
    cfg = {"validation": {"json_files_per_image": 3}}

    config = build_uploader_config(cfg, env={"JSON_FILES_PER_IMAGE": "2", "NFT_STORAGE_KEY": "tok"})

    assert config.json_files_per_image == 2
    assert config.api_token == "tok"


def test_build_uploader_config_normalizes_extensions():
    config = build_uploader_config({"input": {"image_extensions": ["PNG", ".Webp"]}}, env={})

    assert config.image_extensions == frozenset({".png", ".webp"})


def test_build_uploader_config_accepts_single_extension_string():
    config = build_uploader_config({"input": {"image_extensions": "png"}}, env={})

    assert config.image_extensions == frozenset({".png"})


def test_build_uploader_config_continue_on_error_flag():
    assert build_uploader_config({"metadata": {"continue_on_error": True}}, env={}).continue_on_error is True
    assert build_uploader_config({"metadata": {"continue_on_error": None}}, env={}).continue_on_error is False


@pytest.mark.parametrize(
    "cfg, env",
    [
        ({"input": {"layout": "nested"}}, {}),
        ({"upload": {"mode": "stream"}}, {}),
        ({}, {"JSON_FILES_PER_IMAGE": "zero"}),
        ({"validation": {"json_files_per_image": 0}}, {}),
        ({"metadata": {"continue_on_error": "false"}}, {}),
        ({"metadata": {"continue_on_error": 1}}, {}),
    ],
)
def test_build_uploader_config_rejects_invalid_values(cfg: dict, env: dict):
    with pytest.raises(ValueError):
        build_uploader_config(cfg, env=env)
