#!/usr/bin/env python
"""NFT batch upload CLI.

Validates a folder of images and metadata documents and uploads them to
nft.storage, then rewrites each metadata document to point at its uploaded
image and writes the metadata URIs to a results file.

Commands
- check:  pre-upload check only (scan + pairing validation)
- upload: full run (check, upload images, rewrite metadata, upload metadata, record results)

Configuration
- DEFAULTS (configs/uploader_config.yaml) -> --config-path YAML -> CLI options
- .env / environment: NFT_STORAGE_API_KEY, JSON_FILES_PER_IMAGE, APP_LOG_DIR

Exit codes
- 0: success, or nothing to upload
- 1: pre-upload check failed (nothing was uploaded)
- 2: configuration, filesystem or upload failure

Examples
- nft-upload check --upload-folder ./uploads
- nft-upload upload --upload-folder ./uploads --json-per-image 2
- nft-upload upload --mode item --results-path ./out/results.json
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import typer

from . import __version__
from .core_engine.config_loader import (
    UploaderConfig,
    load_project_dotenv,
    build_uploader_config,
    get_config_value_by_key_path,
    load_and_merge_configs,
)
from .core_engine.constants import (
    DEFAULT_LOG_FOLDER,
    ENV_JSON_FILES_PER_IMAGE,
    EXIT_OK,
    EXIT_RUN_FAILED,
    EXIT_VALIDATION_FAILED,
)
from .core_engine.errors import UploaderError, ValidationFailure
from .core_engine.log_utils import setup_logging
from .core_engine.workflow import run_pre_upload_check, run_upload_workflow

logger = logging.getLogger(__name__)

app: typer.Typer = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="NFT batch uploader - validate image/metadata pairs and upload them to nft.storage",
)


def _override_path(cfg: Dict[str, Any], dotted_key: str, value: Optional[Any]) -> None:
    """Set a value in a nested mapping if provided.

    Args:
        cfg: Override mapping being built.
        dotted_key: Dot-delimited key path (e.g., "input.upload_folder").
        value: Value to apply; None leaves the mapping untouched.
    """
    if value is None:
        return
    node = cfg
    keys = dotted_key.split(".")
    for k in keys[:-1]:
        node = node.setdefault(k, {})
    node[keys[-1]] = str(value) if isinstance(value, Path) else value


def _prepare(
    config_path: Optional[Path],
    overrides: Dict[str, Any],
    json_per_image: Optional[int],
    verbose: bool,
) -> UploaderConfig:
    """Load .env and configuration, configure logging, and freeze the run settings.

    Raises:
        typer.Exit: With code 2 when the configuration is invalid.
    """
    load_project_dotenv()
    try:
        cfg = load_and_merge_configs(config_path, overrides=overrides)
        env = dict(os.environ)
        if json_per_image is not None:
            env[ENV_JSON_FILES_PER_IMAGE] = str(json_per_image)
        config = build_uploader_config(cfg, env)
    except (OSError, ValueError) as e:
        typer.secho(f"FATAL: Invalid configuration: {e}", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=EXIT_RUN_FAILED)

    setup_logging(
        log_folder=str(get_config_value_by_key_path(cfg, "logging.log_folder", DEFAULT_LOG_FOLDER)),
        log_level=logging.DEBUG if verbose else logging.INFO,
        config=cfg,
    )
    logger.info("nft-upload v%s | upload folder: %s", __version__, config.upload_folder.resolve())
    return config


@app.command("check")
def check(
    upload_folder: Optional[Path] = typer.Option(None, "--upload-folder", help="Override input.upload_folder."),
    config_path: Optional[Path] = typer.Option(None, "--config-path", help="Path to a YAML config."),
    layout: Optional[str] = typer.Option(None, "--layout", help="Override input.layout: flat|split|auto"),
    json_per_image: Optional[int] = typer.Option(
        None, "--json-per-image", min=1, help="Required metadata files per image (overrides JSON_FILES_PER_IMAGE)."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Run the pre-upload check only: every image must have its metadata files."""
    overrides: Dict[str, Any] = {}
    _override_path(overrides, "input.upload_folder", upload_folder)
    _override_path(overrides, "input.layout", layout)
    config = _prepare(config_path, overrides, json_per_image, verbose)

    try:
        outcome = run_pre_upload_check(config)
    except UploaderError as e:
        typer.secho(f"Error in pre-upload check: {e.message}", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=EXIT_RUN_FAILED)

    if outcome is None:
        typer.secho("No files to upload", fg=typer.colors.YELLOW)
        raise typer.Exit(code=EXIT_OK)
    if not outcome.ok:
        typer.secho("Pre-upload check failed", fg=typer.colors.RED, bold=True)
        typer.secho(outcome.summary, fg=typer.colors.RED)
        raise typer.Exit(code=EXIT_VALIDATION_FAILED)
    typer.secho(f"Pre-upload check succeeded: {outcome.summary}", fg=typer.colors.GREEN)


@app.command("upload")
def upload(
    upload_folder: Optional[Path] = typer.Option(None, "--upload-folder", help="Override input.upload_folder."),
    config_path: Optional[Path] = typer.Option(None, "--config-path", help="Path to a YAML config."),
    layout: Optional[str] = typer.Option(None, "--layout", help="Override input.layout: flat|split|auto"),
    mode: Optional[str] = typer.Option(None, "--mode", help="Override upload.mode: directory|item"),
    json_per_image: Optional[int] = typer.Option(
        None, "--json-per-image", min=1, help="Required metadata files per image (overrides JSON_FILES_PER_IMAGE)."
    ),
    results_path: Optional[Path] = typer.Option(None, "--results-path", help="Override results.output_path."),
    dry_run: bool = typer.Option(False, "--dry-run", help="Stop after the pre-upload check."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Check, upload images, rewrite metadata, upload metadata and record the results."""
    overrides: Dict[str, Any] = {}
    _override_path(overrides, "input.upload_folder", upload_folder)
    _override_path(overrides, "input.layout", layout)
    _override_path(overrides, "upload.mode", mode)
    _override_path(overrides, "results.output_path", results_path)
    config = _prepare(config_path, overrides, json_per_image, verbose)

    try:
        result = run_upload_workflow(config, dry_run=dry_run)
    except ValidationFailure as e:
        typer.secho("Pre-upload check failed", fg=typer.colors.RED, bold=True)
        typer.secho(e.message, fg=typer.colors.RED)
        raise typer.Exit(code=EXIT_VALIDATION_FAILED)
    except UploaderError as e:
        typer.secho(f"Upload failed: {e.message}", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=EXIT_RUN_FAILED)
    except (OSError, ValueError) as e:
        typer.secho(f"Upload failed: {e}", fg=typer.colors.RED, bold=True)
        raise typer.Exit(code=EXIT_RUN_FAILED)

    status = result.get("status")
    if status == "no_files":
        typer.secho("No files to upload", fg=typer.colors.YELLOW)
    elif status == "validated":
        typer.secho(
            f"Pre-upload check succeeded for {result.get('groups')} group(s); dry run, nothing uploaded.",
            fg=typer.colors.GREEN,
        )
    else:
        if result.get("rewrite_failures"):
            typer.secho(
                f"Warning: {len(result['rewrite_failures'])} metadata file(s) were uploaded without an image URI.",
                fg=typer.colors.YELLOW,
            )
        typer.secho(
            f"Upload succeeded: {len(result.get('results', []))} result(s) written to {result.get('results_path')}",
            fg=typer.colors.GREEN,
        )


def main() -> None:
    """Console-script entry point."""
    app()


if __name__ == "__main__":
    main()
