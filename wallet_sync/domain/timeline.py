"""Stage timeline events recorded by adapters and jobs."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def domain_build_stage_event(
    stage: str,
    status: str,
    reason: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, object]:
    """Build one structured stage event.

    Args:
        stage: Pipeline stage name, for example `authenticate` or `upload`.
        status: Stage status marker (`started`, `completed`, `failed`, `skipped`).
        reason: Human-readable failure or skip reason.
        details: Optional structured details.

    Returns:
        dict[str, object]: Timeline event payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    stage_event: dict[str, object] = {
        "stage": stage,
        "status": status,
        "at_utc": datetime.now(timezone.utc).isoformat(),
    }
    if reason is not None:
        stage_event["reason"] = reason
    if details is not None:
        stage_event["details"] = details
    return stage_event

