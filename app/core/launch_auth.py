"""
Launch request authentication.

Combines the signature check and the timestamp freshness check into a single
accept/reject decision for the index page.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from app.core.signing import (
    DEFAULT_MAX_AGE_SECONDS,
    SIGNATURE_FIELD,
    TIMESTAMP_FIELD,
    Instant,
    RawQuery,
    build_parameter_set,
    first_query_value,
    is_timestamp_fresh,
    iter_query_pairs,
    verify_signature,
)

REASON_MISSING_PARAMETERS = "missing_parameters"
REASON_STALE_TIMESTAMP = "stale_timestamp"
REASON_INVALID_SIGNATURE = "invalid_signature"

USER_ID_FIELD = "user_id"


@dataclass(frozen=True)
class LaunchVerification:
    """Outcome of authenticating a launch request."""

    params: dict[str, str] = field(default_factory=dict)
    signature_valid: bool = False
    timestamp_fresh: bool = False
    reason: Optional[str] = None

    @property
    def authenticated(self) -> bool:
        return self.reason is None and self.signature_valid and self.timestamp_fresh


def authenticate_launch(
    query: RawQuery,
    secret: str,
    now: Optional[Instant] = None,
    max_age_seconds: int = DEFAULT_MAX_AGE_SECONDS,
) -> LaunchVerification:
    """
    Authenticate the query string Ton.Place opened the app with.

    Both checks always run so the result carries both booleans; ``reason``
    names the first failing check in the order required fields, timestamp,
    signature. The reason is for server-side logs only.
    """
    pairs = iter_query_pairs(query)
    params = build_parameter_set(pairs)
    supplied_signature = first_query_value(pairs, SIGNATURE_FIELD)

    timestamp_fresh = is_timestamp_fresh(
        params.get(TIMESTAMP_FIELD), now=now, max_age_seconds=max_age_seconds
    )
    signature_valid = verify_signature(params, supplied_signature, secret)

    reason = None
    if not supplied_signature or not params.get(USER_ID_FIELD):
        reason = REASON_MISSING_PARAMETERS
    elif not timestamp_fresh:
        reason = REASON_STALE_TIMESTAMP
    elif not signature_valid:
        reason = REASON_INVALID_SIGNATURE

    return LaunchVerification(
        params=params,
        signature_valid=signature_valid,
        timestamp_fresh=timestamp_fresh,
        reason=reason,
    )
