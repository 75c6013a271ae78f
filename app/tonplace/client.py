"""
Client for the Ton.Place public API.

Every request carries the app credentials as headers. Requests are single
round trips with a fixed timeout and are never retried.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from app.core.config import settings
from app.core.http_client import get_http_client
from app.core.logging_config import LogCategory
from app.schemas.purchase import (
    CreatePurchaseResponse,
    Purchase,
    PurchaseListResponse,
)
from app.tonplace.exceptions import (
    TonPlaceHTTPError,
    TonPlaceNetworkError,
    TonPlaceResponseError,
)

logger = logging.getLogger(LogCategory.TONPLACE)

PURCHASES_PATH = "/apps/purchases"
CREATE_PURCHASE_PATH = "/apps/purchase/create"


class TonPlaceClient:
    """
    Client for Ton.Place public API communication.

    Handles:
    - Listing a user's purchases
    - Creating purchases (payment requests)
    - Authentication with App-Id / Secret headers
    """

    def __init__(
        self,
        app_id: Optional[str] = None,
        app_secret: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.app_id = app_id if app_id is not None else settings.app_id
        self._app_secret = app_secret if app_secret is not None else settings.app_secret
        self.base_url = (base_url or settings.tonplace_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds

    def _get_auth_headers(self) -> Dict[str, str]:
        return {
            "App-Id": self.app_id,
            "Secret": self._app_secret,
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Make an authenticated request to Ton.Place.

        Returns:
            Dict[str, Any]: Response JSON

        Raises:
            TonPlaceNetworkError: If the request could not be completed
            TonPlaceHTTPError: If Ton.Place answered with a non-200 status
            TonPlaceResponseError: If the response body is not a JSON object
        """
        client = await get_http_client()
        try:
            response = await client.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=body,
                headers=self._get_auth_headers(),
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.error(f"Ton.Place request failed: {method} {path}: {e}")
            raise TonPlaceNetworkError(f"request failed: {e}") from e

        if response.status_code != 200:
            logger.warning(f"Ton.Place returned HTTP {response.status_code} for {method} {path}")
            raise TonPlaceHTTPError(response.status_code, response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise TonPlaceResponseError(f"failed to parse response: {e}") from e
        if not isinstance(data, dict):
            raise TonPlaceResponseError("failed to parse response: expected a JSON object")
        return data

    async def fetch_purchases(self, user_id: int, count: Optional[int] = None) -> List[Purchase]:
        """
        List the purchases a user made in this app.

        Args:
            user_id: Ton.Place user identifier
            count: Page size (defaults to PURCHASES_PAGE_SIZE, max 100)

        Returns:
            List[Purchase]: Purchases, newest first as returned by Ton.Place
        """
        data = await self._request(
            "GET",
            PURCHASES_PATH,
            params={
                "count": count if count is not None else settings.purchases_page_size,
                "userId": user_id,
            },
        )
        try:
            return PurchaseListResponse.model_validate(data).transactions
        except ValidationError as e:
            raise TonPlaceResponseError(f"failed to parse response: {e}") from e

    async def create_purchase(
        self,
        user_id: int,
        amount: int,
        title: str,
        currency: Optional[str] = None,
    ) -> int:
        """
        Create a purchase that the page then opens with TonPlace.purchase().

        Args:
            user_id: Ton.Place user identifier
            amount: Amount in cents
            title: Title shown in the payment dialog (max 150 characters)
            currency: Currency code (defaults to PURCHASE_CURRENCY)

        Returns:
            int: The new purchase_id
        """
        body = {
            "amount": amount,
            "currency": currency or settings.purchase_currency,
            "title": title,
            "user_id": user_id,
        }
        data = await self._request("POST", CREATE_PURCHASE_PATH, body=body)
        try:
            purchase_id = CreatePurchaseResponse.model_validate(data).purchase_id
        except ValidationError as e:
            raise TonPlaceResponseError(f"failed to parse response: {e}") from e

        logger.info(f"Purchase created (purchase_id={purchase_id}, user_id={user_id}, amount={amount})")
        return purchase_id


def get_tonplace_client() -> TonPlaceClient:
    """FastAPI dependency returning a client bound to the configured app."""
    return TonPlaceClient()
