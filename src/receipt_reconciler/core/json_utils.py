#!/usr/bin/env python3
"""
JSON Utilities Module

Central JSON reading and writing for receipts, catalogs and confirmed purchases.
Output is always pretty-printed UTF-8 so product names keep their accents.
"""

import json
from pathlib import Path
from typing import Any


def read_json(filepath: str | Path) -> Any:
    """Read and parse a JSON file."""
    with open(filepath, encoding="utf-8") as f:
        return json.load(f)


def read_json_records(filepath: str | Path, key: str) -> list[dict[str, Any]]:
    """
    Read a list of JSON objects from a file.

    Accepts either a bare list or an object wrapping the list under ``key``
    (e.g. ``{"items": [...]}`` for receipts, ``{"products": [...]}`` for catalogs).

    Args:
        filepath: Path to the JSON file
        key: Wrapper key to look for when the document is an object

    Returns:
        List of records

    Raises:
        ValueError: If the document holds no list of objects
    """
    data = read_json(filepath)

    if isinstance(data, dict):
        data = data.get(key)

    if not isinstance(data, list):
        raise ValueError(f"Expected a list of records (or '{key}' key) in {filepath}")

    records = [record for record in data if isinstance(record, dict)]
    if len(records) != len(data):
        raise ValueError(f"Non-object entries found in {filepath}")

    return records


def write_json(filepath: str | Path, data: Any) -> None:
    """Write data to a JSON file, creating parent directories as needed."""
    filepath = Path(filepath)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def format_json(data: Any) -> str:
    """Format data as a pretty-printed JSON string."""
    return json.dumps(data, indent=2, ensure_ascii=False)
