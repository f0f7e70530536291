"""Serialisation helpers for extraction records.

Produces the downloadable JSON artifact, its timestamped file name, and a
flat ``dotted.path -> value`` view used for CSV export and field listings.
"""

import json
import time

from pydantic import BaseModel

from .models import ExtractionRecord

DEFAULT_FILENAME_PREFIX = "extraction_"


def export_filename(
    prefix: str = DEFAULT_FILENAME_PREFIX, timestamp_ms: int | None = None
) -> str:
    """Build the download file name, e.g. ``extraction_1718000000000.json``.

    Args:
        prefix: Fixed file name prefix.
        timestamp_ms: Milliseconds since epoch. Defaults to now.

    Returns:
        File name with a ``.json`` extension.
    """
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    return f"{prefix}{timestamp_ms}.json"


def record_to_dict(record: ExtractionRecord) -> dict:
    """Dump a record to JSON-compatible data with camelCase keys."""
    return record.model_dump(mode="json", by_alias=True)


def record_to_json(record: ExtractionRecord, indent: int | None = 2) -> str:
    """Serialise a record to a JSON string."""
    return json.dumps(record_to_dict(record), indent=indent)


def flatten(data: dict, prefix: str = "") -> dict[str, object]:
    """Flatten nested dictionaries into dotted keys.

    Lists are joined with ``"; "`` so each value fits in one CSV cell.
    """
    flat: dict[str, object] = {}
    for key, value in data.items():
        path = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            flat.update(flatten(value, path))
        elif isinstance(value, list):
            flat[path] = "; ".join(str(v) for v in value)
        else:
            flat[path] = value
    return flat


def flatten_record(record: ExtractionRecord) -> dict[str, object]:
    """Flatten a record into ``handoverSheetOT.assessment.bp``-style keys."""
    return flatten(record_to_dict(record))


def field_paths(group: type[BaseModel], prefix: str = "") -> list[str]:
    """List the serialised dotted paths of every leaf field in a group."""
    data = group().model_dump(mode="json", by_alias=True)
    return list(flatten(data, prefix).keys())
