"""Packaged JSON schemas for tier configurations and maze snapshots."""

import json
from functools import lru_cache
from importlib import resources
from typing import Any

from jsonschema import Draft202012Validator

TIER_CONFIG_SCHEMA = "tier_config.schema.json"
MAZE_SNAPSHOT_SCHEMA = "maze_snapshot.schema.json"
MAX_REPORTED_ERRORS = 10


@lru_cache(maxsize=None)
def _validator(name: str) -> Draft202012Validator:
    text = (resources.files(__package__) / "schemas" / name).read_text(encoding="utf-8")
    schema = json.loads(text)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validate_or_raise(payload: Any, schema_name: str) -> None:
    """Raise ``ValueError`` naming the offending JSON paths if ``payload`` does not match."""
    errors = sorted(_validator(schema_name).iter_errors(payload), key=lambda e: e.json_path)
    if errors:
        shown = "; ".join(f"{e.json_path}: {e.message}" for e in errors[:MAX_REPORTED_ERRORS])
        more = len(errors) - MAX_REPORTED_ERRORS
        suffix = f" (+{more} more)" if more > 0 else ""
        raise ValueError(f"{schema_name} rejected the document: {shown}{suffix}")
