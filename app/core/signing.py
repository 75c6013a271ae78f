"""
Canonical HMAC-SHA256 verification for Ton.Place launch requests.

When Ton.Place opens the mini app it appends the launch parameters to the app
URL and signs them with the app secret:

- app_id, user_id, ts, first_name, last_name (and any future parameters)
- hash (HMAC-SHA256 over the canonical parameter string)

The signature is computed over:
- Every parameter except ``hash``, one value per name
- Names sorted in ascending byte order
- ``name=value`` pairs joined with a single newline

The HMAC key is SHA256(app_secret), never the raw secret.
"""

import hashlib
import hmac
import re
import time
from datetime import datetime
from typing import Iterable, Mapping, Optional, Sequence, Tuple, Union

SIGNATURE_FIELD = "hash"
TIMESTAMP_FIELD = "ts"

# Freshness window for the ``ts`` launch parameter
DEFAULT_MAX_AGE_SECONDS = 300
MAX_FUTURE_SKEW_SECONDS = 60

_INT64_MIN = -(2 ** 63)
_INT64_MAX = 2 ** 63 - 1
_TIMESTAMP_RE = re.compile(r"[+-]?[0-9]+")

RawQuery = Union[
    Mapping[str, Sequence[str]],
    Iterable[Tuple[str, str]],
]
Instant = Union[int, float, datetime]


def iter_query_pairs(query: RawQuery) -> list[Tuple[str, str]]:
    """
    Flatten a raw query into ``(name, value)`` pairs in source order.

    Accepts a Starlette ``QueryParams`` (or any multi-dict exposing
    ``multi_items()``), a mapping of name -> list of values (``parse_qs``
    output, plain string values are taken as one value) or an iterable of
    pairs (``parse_qsl`` output).
    """
    if hasattr(query, "multi_items"):
        return list(query.multi_items())
    if isinstance(query, Mapping):
        pairs = []
        for name, values in query.items():
            if isinstance(values, str):
                pairs.append((name, values))
            else:
                pairs.extend((name, value) for value in values)
        return pairs
    return list(query)


def first_query_value(query: RawQuery, name: str) -> str:
    """Return the first value for ``name`` in a raw query, or ``""``."""
    for key, value in iter_query_pairs(query):
        if key == name:
            return value
    return ""


def build_parameter_set(query: RawQuery) -> dict[str, str]:
    """
    Build the parameter set that gets signed from a raw query.

    The first value observed for a name wins and the signature field is
    dropped.
    """
    params: dict[str, str] = {}
    for name, value in iter_query_pairs(query):
        if name == SIGNATURE_FIELD or name in params:
            continue
        params[name] = value
    return params


def canonicalize(params: Mapping[str, str]) -> str:
    """
    Build the canonical string for a parameter set.

    Canonical format:
        <name1>=<value1>
        <name2>=<value2>
        ...

    Names are sorted by code point (equal to UTF-8 byte order), the signature
    field is skipped, and values are emitted verbatim. An empty set yields an
    empty string.
    """
    names = sorted(name for name in params if name != SIGNATURE_FIELD)
    return "\n".join(f"{name}={params[name]}" for name in names)


def derive_signing_key(secret: str) -> bytes:
    """Return the 32-byte HMAC key: SHA256 of the app secret."""
    return hashlib.sha256(secret.encode("utf-8")).digest()


def compute_signature(params: Mapping[str, str], secret: str) -> str:
    """
    Compute the expected ``hash`` for a parameter set.

    Args:
        params: Launch parameters (the signature field is ignored if present)
        secret: Ton.Place app secret

    Returns:
        Lowercase hex-encoded HMAC-SHA256 signature (64 characters)
    """
    return hmac.new(
        derive_signing_key(secret),
        canonicalize(params).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def sign_parameters(params: Mapping[str, str], secret: str) -> dict[str, str]:
    """Return a copy of ``params`` with the signature field filled in."""
    signed = {name: value for name, value in params.items() if name != SIGNATURE_FIELD}
    signed[SIGNATURE_FIELD] = compute_signature(signed, secret)
    return signed


def verify_signature(
    params: Mapping[str, str],
    supplied_signature: Optional[str],
    secret: str,
) -> bool:
    """
    Verify a supplied launch signature.

    Args:
        params: Parameter set built from the request (signature field excluded)
        supplied_signature: Value of the ``hash`` parameter, untrusted
        secret: Ton.Place app secret

    Returns:
        True only if the supplied signature equals the expected one

    Security Notes:
        - Comparison uses hmac.compare_digest (constant time)
        - Missing, empty or non-text signatures are rejected, never raised
        - A valid signature does not imply freshness; check ``ts`` separately
    """
    if not isinstance(supplied_signature, str) or not supplied_signature:
        return False

    try:
        expected = compute_signature(params, secret)
        return hmac.compare_digest(
            expected.encode("utf-8"),
            supplied_signature.encode("utf-8"),
        )
    except (TypeError, UnicodeEncodeError):
        return False


def parse_timestamp(timestamp_text: Optional[str]) -> Optional[int]:
    """Parse a base-10 int64 unix timestamp; None when it is not one."""
    if not isinstance(timestamp_text, str):
        return None
    if not _TIMESTAMP_RE.fullmatch(timestamp_text):
        return None
    value = int(timestamp_text)
    if value < _INT64_MIN or value > _INT64_MAX:
        return None
    return value


def _to_unix_seconds(now: Optional[Instant]) -> int:
    if now is None:
        return int(time.time())
    if isinstance(now, datetime):
        return int(now.timestamp())
    return int(now)


def is_timestamp_fresh(
    timestamp_text: Optional[str],
    now: Optional[Instant] = None,
    max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
) -> bool:
    """
    Check that a launch timestamp lies inside the replay window.

    The timestamp may be at most ``max_age_seconds`` old and at most
    ``MAX_FUTURE_SKEW_SECONDS`` in the future. Unparseable values are stale.
    """
    timestamp = parse_timestamp(timestamp_text)
    if timestamp is None:
        return False

    age = _to_unix_seconds(now) - timestamp
    if age < -MAX_FUTURE_SKEW_SECONDS:
        return False
    if age > max_age_seconds:
        return False
    return True
