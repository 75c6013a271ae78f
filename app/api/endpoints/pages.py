"""
Mini app page.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from app.api.dependencies import (
    SettingsDep,
    TonPlaceClientDep,
    get_launch_verification,
    get_request_id,
)
from app.core.launch_auth import REASON_MISSING_PARAMETERS, LaunchVerification
from app.core.logging_config import log_error
from app.core.templating import templates
from app.schemas.launch import LaunchParams
from app.tonplace.exceptions import TonPlaceError

router = APIRouter()

MISSING_PARAMETERS_MESSAGE = "Missing required parameters. This app must be opened from Ton.Place."
# Stale timestamps and bad signatures share one message
AUTHENTICATION_FAILED_MESSAGE = "Authorization failed. Please reopen this app from Ton.Place."


@router.get("/favicon.ico", include_in_schema=False)
async def favicon():
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(
    request: Request,
    verification: Annotated[LaunchVerification, Depends(get_launch_verification)],
    client: TonPlaceClientDep,
    settings: SettingsDep,
    request_id: Annotated[str, Depends(get_request_id)],
):
    """
    Render the mini app page.

    The launch query is authenticated first; only an authenticated user gets
    their purchase history. A failed history fetch still renders the page.
    """
    user = LaunchParams.from_parameter_set(verification.params)
    context = {
        "app_name": settings.app_name,
        "sdk_url": settings.tonplace_sdk_url,
        "user": user,
        "transactions": [],
        "error": None,
        "is_authorized": False,
    }

    if not verification.authenticated:
        if verification.reason == REASON_MISSING_PARAMETERS:
            context["error"] = MISSING_PARAMETERS_MESSAGE
            status_code = status.HTTP_200_OK
        else:
            context["error"] = AUTHENTICATION_FAILED_MESSAGE
            status_code = status.HTTP_401_UNAUTHORIZED
        return templates.TemplateResponse(request, "index.html", context, status_code=status_code)

    context["is_authorized"] = True
    try:
        context["transactions"] = await client.fetch_purchases(user.numeric_user_id)
    except TonPlaceError as e:
        log_error(e, request_id=request_id, user_id=user.user_id)

    return templates.TemplateResponse(request, "index.html", context)
