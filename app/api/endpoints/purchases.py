"""
Purchase endpoints called by the page script.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import TonPlaceClientDep, get_request_id
from app.core.exceptions import InvalidRequestError
from app.core.logging_config import log_info
from app.schemas.purchase import (
    CreatePurchaseRequest,
    CreatePurchaseResponse,
    PurchaseListResponse,
)

router = APIRouter()


@router.post(
    "/create-purchase",
    response_model=CreatePurchaseResponse,
    responses={
        422: {"description": "Invalid amount or title"},
        502: {"description": "Ton.Place API request failed"},
    },
)
async def create_purchase(
    purchase: CreatePurchaseRequest,
    client: TonPlaceClientDep,
    request_id: Annotated[str, Depends(get_request_id)],
):
    """Create a purchase; the page opens it with TonPlace.purchase()."""
    purchase_id = await client.create_purchase(
        user_id=purchase.user_id,
        amount=purchase.amount,
        title=purchase.title,
    )
    log_info(
        "Purchase created",
        request_id=request_id,
        purchase_id=purchase_id,
        user_id=purchase.user_id,
    )
    return CreatePurchaseResponse(purchase_id=purchase_id)


@router.get(
    "/transactions",
    response_model=PurchaseListResponse,
    responses={
        400: {"description": "Invalid user_id"},
        502: {"description": "Ton.Place API request failed"},
    },
)
async def list_transactions(
    client: TonPlaceClientDep,
    user_id: Annotated[Optional[str], Query()] = None,
):
    """Return the user's purchases, used to refresh the list after paying."""
    try:
        parsed_user_id = int(user_id or "")
    except ValueError:
        raise InvalidRequestError("Invalid user_id") from None

    transactions = await client.fetch_purchases(parsed_user_id)
    return PurchaseListResponse(transactions=transactions)
