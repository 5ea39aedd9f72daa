"""JSON/JSONL serialization utilities for submission payloads."""
from __future__ import annotations

import json
import os
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .schema import validate_payload

_DEFAULT_VALIDATE = os.getenv("PAIRWISE_VALIDATE_PAYLOADS", "1").lower() not in {"0", "false", "no"}


def _should_validate(flag: Optional[bool]) -> bool:
    return _DEFAULT_VALIDATE if flag is None else flag


def _encode(obj):  # type: ignore[override]
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def dumps_payload(payload: Mapping[str, Any], *, validate: Optional[bool] = None) -> str:
    """Serialize one payload to a JSON string, validating it first by default."""

    record = dict(payload)
    if _should_validate(validate):
        validate_payload(record)
    return json.dumps(record, default=_encode, ensure_ascii=False)


def write_payload(payload: Mapping[str, Any], path: Path, *, validate: Optional[bool] = None) -> None:
    """Write one payload as JSON; the target is only replaced once the encoded text is complete."""

    data = (dumps_payload(payload, validate=validate) + "\n").encode("utf-8")
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    try:
        tmp.write_bytes(data)
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def read_payload(path: Path) -> Dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


def append_jsonl(payloads: Iterable[Mapping[str, Any]], path: Path, *, validate: Optional[bool] = None) -> None:
    """Append payloads to an existing JSONL file (creating it if missing)."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        for payload in payloads:
            f.write(dumps_payload(payload, validate=validate) + "\n")


def read_jsonl(path: Path) -> List[dict]:
    """Return raw payload dicts for analysis."""

    objs: List[dict] = []
    with path.open("r", encoding="utf-8") as f:
        for line in f:
            if not line.strip():
                continue
            objs.append(json.loads(line))
    return objs
