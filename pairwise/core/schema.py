"""Helpers for loading and validating JSON Schemas."""
from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from typing import Any, Dict

from jsonschema import Draft202012Validator

SCHEMA_VERSION = "0.1"
_SCHEMA_NAME = "submission.schema.json"


@lru_cache(maxsize=1)
def _load_payload_schema() -> Dict[str, Any]:
    data = resources.files("pairwise.schemas").joinpath(_SCHEMA_NAME).read_text(encoding="utf-8")
    return json.loads(data)


@lru_cache(maxsize=1)
def _payload_validator() -> Draft202012Validator:
    return Draft202012Validator(_load_payload_schema())


def validate_payload(record: Dict[str, Any]) -> None:
    """Validate a submission payload dictionary against the JSON Schema."""

    _payload_validator().validate(record)
