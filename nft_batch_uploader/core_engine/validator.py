"""Pairing validation: each group needs one image and N metadata documents.

Rules are evaluated per group in a fixed precedence order and the first
matching rule decides the outcome. A run passes only when every group passes;
a failed run must not upload anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .log_utils import log_cross, log_tick
from .scanner import FileGroup, FileGroups

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupResult:
    """Outcome of validating one group."""

    key: str
    passed: bool
    message: str


@dataclass(frozen=True)
class ValidationOutcome:
    """Run-level validation outcome.

    Attributes:
        ok: True when no group failed.
        groups: The validated mapping when ``ok``; otherwise None.
        failure_count: Number of failed groups.
        file_count: Number of files seen by the scan.
        results: Per-group results in group order.
    """

    ok: bool
    groups: Optional[FileGroups]
    failure_count: int
    file_count: int
    results: List[GroupResult]

    @property
    def summary(self) -> str:
        if self.ok:
            return f"All {len(self.results)} group(s) passed ({self.file_count} files)"
        verb = "has" if self.failure_count == 1 else "have"
        return (
            f"Out of {self.file_count} files, {self.failure_count} {verb} issues "
            "that should be addressed before upload"
        )


def evaluate_group(key: str, group: FileGroup, required_json_count: int) -> GroupResult:
    """Apply the pairing rules to one group; the first matching rule wins."""
    images = group.image_files
    jsons = group.json_files
    if group.other is not None:
        return GroupResult(key, False, f"{group.other} is unexpected file type")
    if images and not jsons:
        return GroupResult(key, False, f"{images[0]} has no matching metadata")
    if jsons and not images:
        return GroupResult(key, False, f"{jsons[0]} has no matching image")
    if len(images) > 1:
        return GroupResult(key, False, f"'{key}' has more than one image file")
    if images and len(jsons) != required_json_count:
        return GroupResult(
            key,
            False,
            f"'{key}' expected {required_json_count} metadata files but has {len(jsons)}",
        )
    if len(images) == 1 and len(jsons) == required_json_count:
        return GroupResult(key, True, f"'{key}' has image and {len(jsons)} metadata file(s)")
    return GroupResult(key, False, f"'{key}' has no image or metadata")


def validate_file_groups(
    groups: FileGroups,
    required_json_count: int,
    file_count: Optional[int] = None,
) -> ValidationOutcome:
    """Validate every group and log a tick or cross line for each.

    Args:
        groups: Merged FileGroups mapping.
        required_json_count: Metadata files each image must have.
        file_count: Total files scanned; counted from the groups when None.

    Returns:
        ValidationOutcome: ``ok`` iff no group failed.
    """
    if file_count is None:
        file_count = sum(
            len(g.image_files) + len(g.json_files) + (1 if g.other else 0) for g in groups.values()
        )

    results: List[GroupResult] = []
    for key, group in groups.items():
        result = evaluate_group(key, group, required_json_count)
        if result.passed:
            log_tick(logger, "%s", result.message)
        else:
            log_cross(logger, "%s", result.message)
        results.append(result)

    failure_count = sum(1 for r in results if not r.passed)
    ok = failure_count == 0
    outcome = ValidationOutcome(
        ok=ok,
        groups=groups if ok else None,
        failure_count=failure_count,
        file_count=file_count,
        results=results,
    )
    if ok:
        logger.info("Pre-upload check succeeded: %s", outcome.summary)
    else:
        logger.error("PRE-CHECK FAILED")
        logger.error(outcome.summary)
    return outcome
