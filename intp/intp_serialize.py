from __future__ import annotations

import json
from typing import Any, Optional

import yaml

from intp.intp_datatypes import ProgramFormatError


# --------------------------
# Helpers
# --------------------------

def _norm_text(data: bytes | bytearray | str, *, encoding: Optional[str] = None) -> str:
    if isinstance(data, (bytes, bytearray)):
        return data.decode(encoding or 'utf-8', errors='replace')
    if isinstance(data, str):
        return data
    return str(data)


def detect_format(data_hint: Optional[str] = None, filename: Optional[str] = None) -> str:
    """
    Returns 'json' or 'yaml'.
    Uses the file extension first; falls back to sniffing the data.
    """
    name = (filename or "").lower()
    if name.endswith('.json'):
        return 'json'
    if name.endswith(('.yaml', '.yml')):
        return 'yaml'
    if data_hint is not None:
        s = data_hint.lstrip()
        if s.startswith('{') or s.startswith('['):
            return 'json'
    # YAML is a superset of JSON, so it is the safe default
    return 'yaml'


# --------------------------
# Public API
# --------------------------

def deserialize(data: bytes | bytearray | str,
                *,
                fmt: Optional[str] = None,
                filename: Optional[str] = None) -> Any:
    """
    Convert a program document (bytes/string) into plain Python structures.
    Supported fmt: 'json', 'yaml'. If fmt is None, the format is detected.
    """
    text = _norm_text(data)
    f = (fmt or detect_format(text, filename)).lower()
    if f == 'json':
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ProgramFormatError(f"invalid JSON program: {e.msg}", filename, e.lineno) from e
    if f == 'yaml':
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            mark = getattr(e, 'problem_mark', None)
            line = mark.line + 1 if mark is not None else None
            problem = getattr(e, 'problem', None) or str(e)
            raise ProgramFormatError(f"invalid YAML program: {problem}", filename, line) from e
    raise ValueError(f"Unsupported program format: {fmt!r}")


def serialize(value: Any,
              *,
              fmt: str,
              pretty: bool = True) -> str:
    """
    Convert a program document (as produced by `IntpTransformer.dump`) into text.
    - fmt: 'json' | 'yaml'
    """
    f = (fmt or '').lower()
    if f == 'json':
        return json.dumps(value, ensure_ascii=False, indent=2 if pretty else None)
    if f == 'yaml':
        return yaml.safe_dump(value, sort_keys=False)
    raise ValueError(f"Unsupported serialization format: {fmt!r}")


__all__ = [
    "deserialize",
    "serialize",
    "detect_format",
]
