"""Parse CSV and JSON uploads for location import."""
import csv
import json
from io import StringIO
from typing import Any


def _normalize_row(row: dict[str, Any]) -> dict[str, Any]:
    """Strip keys and string values; drop empty keys and empty values."""
    out: dict[str, Any] = {}
    for k, v in row.items():
        key = k.strip() if k else ""
        if not key:
            continue
        val = v.strip() if isinstance(v, str) else v
        if val is None or val == "":
            continue
        out[key] = val
    return out


def parse_csv(content: bytes) -> list[dict[str, Any]]:
    """Parse CSV bytes (header row required) into a list of dicts. Blank rows are skipped."""
    text = content.decode("utf-8-sig", errors="replace")
    reader = csv.DictReader(StringIO(text))
    rows: list[dict[str, Any]] = []
    for row in reader:
        normalized = _normalize_row(dict(row))
        if normalized:
            rows.append(normalized)
    return rows


def parse_json(content: bytes) -> list[dict[str, Any]]:
    """Parse JSON bytes (expect an array of objects) into a list of dicts."""
    try:
        data = json.loads(content.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Invalid JSON: {e}") from e
    if not isinstance(data, list):
        raise ValueError("JSON must be an array of objects")
    rows: list[dict[str, Any]] = []
    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise ValueError(f"Row {i + 1} is not an object")
        normalized = _normalize_row(item)
        if normalized:
            rows.append(normalized)
    return rows


def parse_upload(content: bytes, filename: str | None) -> list[dict[str, Any]]:
    """Detect format from filename or content and parse. Raises ValueError if invalid."""
    if filename and filename.lower().endswith(".json"):
        return parse_json(content)
    if filename and filename.lower().endswith(".csv"):
        return parse_csv(content)
    if content.lstrip().startswith(b"["):
        return parse_json(content)
    return parse_csv(content)
