"""Render search results for the calling agent."""

from __future__ import annotations

from typing import Sequence

from .contracts import Detector


def format_detectors(detectors: Sequence[Detector], total: int) -> str:
    """Format detectors as ``AnomalyDetectors=[...]TotalAnomalyDetectors=n``."""
    entries = "".join(f"{{id={d.id},name={d.name}}}" for d in detectors)
    return f"AnomalyDetectors=[{entries}]TotalAnomalyDetectors={total}"
