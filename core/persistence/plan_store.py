"""Plan persistence: redaction plans as camelCase JSON files."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from models.schemas import RedactionPlan

logger = logging.getLogger(__name__)


def save_plan(plan: RedactionPlan, path: str | Path) -> Path:
    """Write *plan* to *path* (atomic write via tmp + rename).

    The record carries ``totalRedactions`` alongside the regions so it can
    be inspected without counting.
    """
    if not path or not str(path).strip():
        raise ValueError("Plan path cannot be empty")

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)

    data = plan.model_dump(mode="json", by_alias=True)

    fd, tmp_path = tempfile.mkstemp(
        dir=str(target.parent), suffix=".tmp", prefix=f"{target.stem}_"
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, str(target))
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise

    logger.info(f"Saved plan with {plan.total_redactions} region(s) to {target}")
    return target


def load_plan(path: str | Path) -> RedactionPlan:
    """Read a plan written by :func:`save_plan`.

    Raises:
        ValueError: If *path* is empty or the file is not a valid plan.
        FileNotFoundError: If *path* does not exist.
    """
    if not path or not str(path).strip():
        raise ValueError("Plan path cannot be empty")

    source = Path(path)
    if not source.is_file():
        raise FileNotFoundError(f"Plan file not found: {source}")

    try:
        with open(source, "r", encoding="utf-8") as f:
            data = json.load(f)
        plan = RedactionPlan.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise ValueError(f"Invalid plan file {source}: {e}") from e

    logger.info(f"Loaded plan with {plan.total_redactions} region(s) from {source}")
    return plan
