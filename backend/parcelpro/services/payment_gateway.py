"""
Payment Gateway client.

Creates payment intents on a Stripe-compatible REST API and hands the
client secret back to the caller, who confirms the charge client-side.
"""

import logging
from typing import Optional

import httpx

from backend.parcelpro.core.config import settings
from backend.parcelpro.core.exceptions import PaymentGatewayError

logger = logging.getLogger("parcelpro.payments")


def to_minor_units(amount: float) -> int:
    """Convert a price to the gateway's smallest currency unit (cents)."""
    return int(round(amount * 100))


class PaymentGateway:
    """Client for the payment intent endpoint of the gateway."""

    def __init__(
        self,
        secret_key: str,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    async def create_payment_intent(self, amount: int, currency: str) -> str:
        """
        Create a card payment intent.

        Args:
            amount: Amount in minor units (cents)
            currency: ISO currency code, e.g. "usd"

        Returns:
            The intent's client secret

        Raises:
            PaymentGatewayError on timeouts, transport errors, non-2xx
            responses or a response without a client secret
        """
        if not self.secret_key:
            raise PaymentGatewayError("Payment gateway is not configured")

        data = {
            "amount": str(amount),
            "currency": currency,
            "payment_method_types[]": "card",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/v1/payment_intents",
                    data=data,
                    auth=(self.secret_key, ""),
                )
        except httpx.TimeoutException:
            logger.error("Timeout creating payment intent (amount=%s %s)", amount, currency)
            raise PaymentGatewayError("Payment gateway timed out")
        except httpx.HTTPError as e:
            logger.error("Error talking to payment gateway: %s", e)
            raise PaymentGatewayError("Payment gateway unavailable")

        if response.status_code >= 400:
            logger.error("Payment gateway error: %s - %s", response.status_code, response.text)
            raise PaymentGatewayError(f"Payment gateway rejected the request ({response.status_code})")

        client_secret = response.json().get("client_secret")
        if not client_secret:
            raise PaymentGatewayError("Payment gateway returned no client secret")

        return client_secret


def get_payment_gateway() -> PaymentGateway:
    """FastAPI dependency building the gateway client from settings."""
    return PaymentGateway(
        secret_key=settings.payment_gateway_secret_key,
        base_url=settings.payment_gateway_url,
        timeout=settings.payment_gateway_timeout,
    )
