# phenofarm/utils/stripe_client.py
import httpx
import logging
from typing import Optional
from urllib.parse import urljoin

from phenofarm.config import settings
from phenofarm.utils.money import percent_of

logger = logging.getLogger(__name__)


class StripeNotConfigured(RuntimeError):
    pass


def calculate_fees(amount_cents: int) -> dict:
    """Fee split of a charge, all values in cents."""
    stripe_fee = percent_of(amount_cents, settings.STRIPE_PLATFORM_FEE_PERCENT / 100) + settings.STRIPE_PLATFORM_FEE_FLAT
    application_fee = percent_of(amount_cents, settings.STRIPE_APPLICATION_FEE_PERCENT / 100)
    return {
        "total": amount_cents,
        "stripe_fee": stripe_fee,
        "application_fee": application_fee,
        "grower_gets": amount_cents - application_fee,
    }


class StripeClient:
    """Minimal Connect onboarding client over the Stripe REST API (form-encoded)."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_url = settings.STRIPE_API_URL
        self.secret_key = settings.STRIPE_SECRET_KEY
        self.refresh_url = urljoin(settings.FRONTEND_URL, "/grower/settings?stripe=refresh")
        self.return_url = urljoin(settings.FRONTEND_URL, "/grower/settings?stripe=success")
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        if not self.secret_key:
            raise StripeNotConfigured("STRIPE_SECRET_KEY is not set")
        return httpx.AsyncClient(base_url=self.api_url, auth=(self.secret_key, ""),
                                 transport=self._transport, timeout=10.0)

    async def _request(self, method: str, path: str, data: Optional[dict] = None) -> dict:
        async with self._client() as client:
            try:
                response = await client.request(method, path, data=data)
                response.raise_for_status()
                return response.json()
            except (httpx.RequestError, httpx.HTTPStatusError) as e:
                # Log detailed error information before re-raising
                resp_text = e.response.text if isinstance(e, httpx.HTTPStatusError) else str(e)
                logger.error("Stripe %s %s error: %s", method, path, resp_text)
                raise

    async def create_account(self, email: str, business_name: str, website: Optional[str] = None) -> dict:
        # Standard connected account with weekly Monday payouts
        payload = {
            "type": "standard",
            "email": email,
            "business_type": "company",
            "business_profile[name]": business_name,
            "business_profile[url]": website or "https://phenofarm.app",
            "capabilities[card_payments][requested]": "true",
            "capabilities[transfers][requested]": "true",
            "settings[payouts][schedule][interval]": "weekly",
            "settings[payouts][schedule][weekly_anchor]": "monday",
        }
        return await self._request("POST", "/v1/accounts", payload)

    async def create_account_link(self, account_id: str) -> dict:
        payload = {
            "account": account_id,
            "refresh_url": self.refresh_url,
            "return_url": self.return_url,
            "type": "account_onboarding",
        }
        return await self._request("POST", "/v1/account_links", payload)

    async def retrieve_account(self, account_id: str) -> dict:
        return await self._request("GET", f"/v1/accounts/{account_id}")


def get_stripe_client() -> StripeClient:
    return StripeClient()
