"""Configuration loader for the NFT batch uploader.

Configuration is assembled in layers, highest precedence first:
    1) in-memory overrides (CLI options)
    2) primary YAML file (``--config-path``)
    3) fallback YAML file (packaged defaults)

Secrets and the required metadata count come from the environment (``.env``
is loaded through python-dotenv). The merged mapping is then frozen into an
:class:`UploaderConfig` that is passed explicitly to the workflow.
"""

from __future__ import annotations

import copy
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional, Union

import yaml
from dotenv import find_dotenv, load_dotenv

from .constants import (
    DEFAULT_API_ENDPOINT,
    DEFAULT_IMAGES_SUBFOLDER,
    DEFAULT_JSON_FILES_PER_IMAGE,
    DEFAULT_METADATA_SUBFOLDER,
    DEFAULT_RESULTS_FILENAME,
    DEFAULT_UPLOAD_FOLDER,
    ENV_API_KEY,
    ENV_API_KEY_ALIAS,
    ENV_JSON_FILES_PER_IMAGE,
    KNOWN_IMAGE_EXTENSIONS,
    LAYOUT_AUTO,
    SUPPORTED_LAYOUTS,
    SUPPORTED_UPLOAD_MODES,
    UPLOAD_MODE_DIRECTORY,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploaderConfig:
    """Immutable settings for one uploader run.

    Attributes:
        upload_folder: Root folder holding the files to upload.
        layout: ``flat``, ``split`` or ``auto``.
        images_subfolder: Image folder name under ``upload_folder`` (split layout).
        metadata_subfolder: Metadata folder name under ``upload_folder`` (split layout).
        image_extensions: Lowercase extensions (with dot) accepted as images.
        json_files_per_image: Required number of metadata files per image.
        api_token: Bearer token for the storage service; may be empty for ``check``.
        api_endpoint: Base URL of the storage service.
        timeout_seconds: Per-request timeout; None leaves requests' default.
        upload_mode: ``directory`` or ``item``.
        results_path: Where the results document is written.
        json_indent: Indent used when rewriting metadata; None writes compact JSON.
        continue_on_error: Keep going after a metadata rewrite failure.
    """

    upload_folder: Path
    layout: str
    images_subfolder: str
    metadata_subfolder: str
    image_extensions: FrozenSet[str]
    json_files_per_image: int
    api_token: str
    api_endpoint: str
    timeout_seconds: Optional[float]
    upload_mode: str
    results_path: Path
    json_indent: Optional[int]
    continue_on_error: bool


def load_project_dotenv(filename: str = ".env") -> Optional[Path]:
    """Locate and load a project-level .env file without overriding the environment.

    Args:
        filename: Name of the environment file to search for from the CWD upward.

    Returns:
        The resolved path if a .env was found and loaded; otherwise None.
    """
    path_str = find_dotenv(filename=filename, usecwd=True)
    if not path_str:
        return None
    load_dotenv(dotenv_path=path_str, override=False)
    logger.debug("Loaded environment from %s", path_str)
    return Path(path_str).resolve()


def _deep_merge_dicts(base_dict: Dict[str, Any], merge_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge merge_dict into a copy of base_dict.

    For keys where both values are dictionaries, a recursive merge is performed;
    otherwise the value from merge_dict overwrites the base.

    Args:
        base_dict (Dict[str, Any]): Base mapping to start from.
        merge_dict (Dict[str, Any]): Mapping whose values take precedence.

    Returns:
        Dict[str, Any]: A new merged dictionary.
    """
    result_dict = copy.deepcopy(base_dict)
    for key, value_to_merge in merge_dict.items():
        if isinstance(value_to_merge, dict) and isinstance(result_dict.get(key), dict):
            result_dict[key] = _deep_merge_dicts(result_dict[key], value_to_merge)
        else:
            result_dict[key] = value_to_merge
    return result_dict


def _read_yaml_mapping(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Malformed YAML in '{path.resolve()}': {e}") from e
    if data is None:
        logger.info("Configuration file %s is empty.", path.resolve())
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration in '{path.resolve()}' is not a mapping.")
    return data


def load_config(
    primary_config_path: Optional[Union[str, Path]] = None,
    fallback_config_path: Optional[Union[str, Path]] = None,
    config_dict: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Load configuration from YAML file(s) and in-memory overrides.

    A missing fallback file is skipped with a warning. A missing primary file is
    tolerated when a fallback was loaded; otherwise it is an error.

    Args:
        primary_config_path: Path to the primary YAML configuration file.
        fallback_config_path: Path to a fallback YAML file with defaults.
        config_dict: Overrides with the highest precedence.

    Returns:
        Dict[str, Any]: The final merged configuration.

    Raises:
        FileNotFoundError: If the primary file is missing and no fallback was loaded.
        ValueError: If a file is malformed YAML, does not hold a mapping, or
            config_dict is not a dict.
    """
    final_config: Dict[str, Any] = {}

    if fallback_config_path:
        fallback_file = Path(fallback_config_path)
        if fallback_file.is_file():
            final_config = _read_yaml_mapping(fallback_file)
            logger.debug("Fallback configuration loaded from %s.", fallback_file.resolve())
        else:
            logger.warning("Fallback configuration file not found: %s. Skipping.", fallback_file.resolve())

    if primary_config_path:
        primary_file = Path(primary_config_path)
        if primary_file.is_file():
            final_config = _deep_merge_dicts(final_config, _read_yaml_mapping(primary_file))
            logger.info("Configuration loaded from %s.", primary_file.resolve())
        elif not final_config:
            raise FileNotFoundError(
                f"Primary config not found: {primary_file.resolve()} and no fallback was loaded."
            )
        else:
            logger.warning("Primary config file %s not found. Using fallback.", primary_file.resolve())

    if config_dict is not None:
        if not isinstance(config_dict, dict):
            raise ValueError("Provided 'config_dict' must be a dictionary.")
        final_config = _deep_merge_dicts(final_config, config_dict)

    return final_config


def load_and_merge_configs(
    primary_config_path: Optional[Union[str, Path]],
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Load the packaged defaults, the user config and CLI overrides.

    Args:
        primary_config_path: User YAML configuration path (may be None).
        overrides: Final precedence layer (CLI options).

    Returns:
        Dict[str, Any]: Final merged configuration dictionary.
    """
    return load_config(
        primary_config_path=primary_config_path,
        fallback_config_path=default_config_path(),
        config_dict=overrides or {},
    )


def default_config_path() -> Path:
    """Return the path of the packaged default configuration file."""
    return Path(__file__).resolve().parents[2] / "configs" / "uploader_config.yaml"


def get_config_value_by_key_path(config: Mapping[str, Any], key_path: str, default: Any = None) -> Any:
    """Retrieve a nested configuration value via a dot-separated key path.

    Example:
        >>> get_config_value_by_key_path({"storage": {"timeout_seconds": 30}}, "storage.timeout_seconds")
        30
    """
    current_level: Any = config
    for key in key_path.split("."):
        if isinstance(current_level, Mapping) and key in current_level:
            current_level = current_level[key]
        else:
            return default
    return current_level


def _normalize_extensions(exts: Any) -> FrozenSet[str]:
    if not exts:
        return KNOWN_IMAGE_EXTENSIONS
    if isinstance(exts, str):
        exts = [exts]
    norm = set()
    for e in exts:
        e = str(e).strip().lower()
        if not e:
            continue
        norm.add(e if e.startswith(".") else f".{e}")
    return frozenset(norm)


def _positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a positive integer, got {value!r}") from exc
    if number <= 0:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return number


def _strict_bool(value: Any, name: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be true or false, got {value!r}")
    return value


def build_uploader_config(
    cfg: Mapping[str, Any],
    env: Optional[Mapping[str, str]] = None,
) -> UploaderConfig:
    """Freeze a merged configuration mapping and the environment into an UploaderConfig.

    ``JSON_FILES_PER_IMAGE`` from the environment wins over
    ``validation.json_files_per_image`` from YAML. The API token is read only
    from the environment.

    Args:
        cfg: Merged configuration mapping.
        env: Environment mapping; defaults to ``os.environ``.

    Returns:
        UploaderConfig: Validated, immutable settings.

    Raises:
        ValueError: If a value is missing or invalid.
    """
    env = os.environ if env is None else env

    upload_folder = Path(get_config_value_by_key_path(cfg, "input.upload_folder", DEFAULT_UPLOAD_FOLDER))

    layout = str(get_config_value_by_key_path(cfg, "input.layout", LAYOUT_AUTO)).lower()
    if layout not in SUPPORTED_LAYOUTS:
        raise ValueError(f"input.layout must be one of {sorted(SUPPORTED_LAYOUTS)}, got '{layout}'")

    upload_mode = str(get_config_value_by_key_path(cfg, "upload.mode", UPLOAD_MODE_DIRECTORY)).lower()
    if upload_mode not in SUPPORTED_UPLOAD_MODES:
        raise ValueError(f"upload.mode must be one of {sorted(SUPPORTED_UPLOAD_MODES)}, got '{upload_mode}'")

    env_count = env.get(ENV_JSON_FILES_PER_IMAGE)
    if env_count not in (None, ""):
        json_files_per_image = _positive_int(env_count, ENV_JSON_FILES_PER_IMAGE)
    else:
        json_files_per_image = _positive_int(
            get_config_value_by_key_path(cfg, "validation.json_files_per_image", DEFAULT_JSON_FILES_PER_IMAGE),
            "validation.json_files_per_image",
        )

    timeout = get_config_value_by_key_path(cfg, "storage.timeout_seconds")
    indent = get_config_value_by_key_path(cfg, "metadata.json_indent")

    results_path = get_config_value_by_key_path(cfg, "results.output_path")
    if results_path:
        results_path = Path(results_path)
    else:
        results_path = Path(DEFAULT_RESULTS_FILENAME)

    return UploaderConfig(
        upload_folder=upload_folder,
        layout=layout,
        images_subfolder=str(get_config_value_by_key_path(cfg, "input.images_subfolder", DEFAULT_IMAGES_SUBFOLDER)),
        metadata_subfolder=str(
            get_config_value_by_key_path(cfg, "input.metadata_subfolder", DEFAULT_METADATA_SUBFOLDER)
        ),
        image_extensions=_normalize_extensions(get_config_value_by_key_path(cfg, "input.image_extensions")),
        json_files_per_image=json_files_per_image,
        api_token=(env.get(ENV_API_KEY) or env.get(ENV_API_KEY_ALIAS) or "").strip(),
        api_endpoint=str(get_config_value_by_key_path(cfg, "storage.api_endpoint", DEFAULT_API_ENDPOINT)).rstrip("/"),
        timeout_seconds=float(timeout) if timeout is not None else None,
        upload_mode=upload_mode,
        results_path=results_path,
        json_indent=int(indent) if indent is not None else None,
        continue_on_error=_strict_bool(
            get_config_value_by_key_path(cfg, "metadata.continue_on_error", False), "metadata.continue_on_error"
        ),
    )
