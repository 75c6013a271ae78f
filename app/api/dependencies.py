"""
Shared API dependencies.
"""
from typing import Annotated

from fastapi import Depends, Request

from app.core.config import Settings, get_settings
from app.core.launch_auth import LaunchVerification, authenticate_launch
from app.core.logging_config import log_debug, log_security_event
from app.middleware.request_logging import request_id_ctx
from app.tonplace.client import TonPlaceClient, get_tonplace_client

TonPlaceClientDep = Annotated[TonPlaceClient, Depends(get_tonplace_client)]
SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_request_id() -> str:
    """
    Dependency to get the current request ID from context.

    Returns:
        The current request ID, or 'unknown' if not in a request context.
    """
    return request_id_ctx.get()


def get_launch_verification(
    request: Request,
    settings: SettingsDep,
    request_id: Annotated[str, Depends(get_request_id)],
) -> LaunchVerification:
    """
    Authenticate the Ton.Place launch query of the current request.

    Does not raise: the page renders its own error state. Failures are logged
    on the security logger with the failing check, which is never sent back
    to the client. Only identifiers and parameter names are logged, never
    user names.
    """
    verification = authenticate_launch(
        request.query_params,
        settings.app_secret,
        max_age_seconds=settings.signature_max_age_seconds,
    )
    if not verification.authenticated:
        log_security_event(
            "Launch authentication failed",
            request_id=request_id,
            reason=verification.reason,
            signature_valid=verification.signature_valid,
            timestamp_fresh=verification.timestamp_fresh,
            app_id=verification.params.get("app_id"),
            user_id=verification.params.get("user_id"),
            ts=verification.params.get("ts"),
            param_names=sorted(verification.params),
        )
    else:
        log_debug("Launch authenticated", request_id=request_id, user_id=verification.params.get("user_id"))
    return verification
