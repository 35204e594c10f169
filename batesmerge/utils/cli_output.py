"""CLI JSON output wrapper.

Every ``--json`` payload carries schema metadata (schema_id, schema_version,
producer, produced_at) so downstream tooling can tell formats apart.
"""

from __future__ import annotations

import json
from typing import Any

from batesmerge.utils.schema import build_schema_stamp


def json_response(
    schema_id: str,
    schema_version: int,
    **data: Any,
) -> str:
    """Create schema-wrapped JSON response for CLI output.

    Example:
        >>> json_response("series_plan", 1, root="/cases/acme", targets=[])
        {
          "schema_id": "series_plan",
          "schema_version": 1,
          "producer": "batesmerge-0.1.0",
          "produced_at": "2026-10-18T10:30:00+00:00",
          "root": "/cases/acme",
          "targets": []
        }
    """
    stamp = build_schema_stamp(schema_id=schema_id, schema_version=schema_version)
    return json.dumps(stamp.apply(data), indent=2, default=str)
