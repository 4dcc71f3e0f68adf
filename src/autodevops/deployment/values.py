"""Helpers for generated Helm values files and render directories."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any

import yaml


def write_values_file(path: Path, values: dict[str, Any]) -> Path:
    """Write a Helm values override file.

    Values are serialized with PyYAML, so strings containing commas,
    equals signs or newlines reach the chart unchanged.

    Args:
        path: Destination file
        values: Nested values mapping

    Returns:
        The path written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(values, f, default_flow_style=False, sort_keys=False)
    return path


def reset_directory(path: Path) -> Path:
    """Remove a directory's previous contents and recreate it empty."""
    if path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)
    return path


def read_chart_name(chart_dir: Path) -> str:
    """Read the chart name from ``Chart.yaml``, falling back to the directory name."""
    chart_file = chart_dir / "Chart.yaml"
    if chart_file.exists():
        with open(chart_file, encoding="utf-8") as f:
            chart = yaml.safe_load(f) or {}
        if isinstance(chart, dict) and chart.get("name"):
            return str(chart["name"])
    return chart_dir.resolve().name
