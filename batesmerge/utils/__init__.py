"""Utility modules for common operations."""

from batesmerge.utils.cli_output import json_response
from batesmerge.utils.schema import SchemaStamp, build_schema_stamp

__all__ = [
    "SchemaStamp",
    "build_schema_stamp",
    "json_response",
]
