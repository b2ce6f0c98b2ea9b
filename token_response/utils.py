"""Encoding, time and scope helpers for token response processing"""

import base64
import time
from typing import Iterable, List, Optional


def is_empty(value: Optional[str]) -> bool:
    """Check whether a string field is missing or empty"""
    return not value


def now_seconds() -> int:
    """Current time in whole epoch seconds"""
    return int(time.time())


def base64url_decode(data: str) -> str:
    """Decode base64url (padding optional) to a UTF-8 string

    Raises:
        ValueError: If the input is not valid base64 or not UTF-8
    """
    padded = data + "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(padded.encode()).decode("utf-8")


def base64url_encode(data: str) -> str:
    """Encode a UTF-8 string to unpadded base64url"""
    return base64.urlsafe_b64encode(data.encode("utf-8")).decode("utf-8").rstrip("=")


def scopes_from_string(scope_string: Optional[str]) -> List[str]:
    """Split a space-delimited scope string, keeping order and dropping duplicates"""
    if not scope_string:
        return []
    return dedupe_scopes(scope_string.split(" "))


def dedupe_scopes(scopes: Iterable[str]) -> List[str]:
    """Trim scopes and drop empty and case-insensitive duplicate entries"""
    seen = set()
    result: List[str] = []
    for scope in scopes:
        scope = scope.strip()
        if not scope or scope.lower() in seen:
            continue
        seen.add(scope.lower())
        result.append(scope)
    return result


def print_scopes(scopes: Iterable[str]) -> str:
    """Join scopes into the space-delimited form stored on access tokens"""
    return " ".join(scopes)
