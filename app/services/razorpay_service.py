"""
Razorpay payment gateway client.

Orders are created through the Razorpay Orders API; payments are confirmed
by checking the checkout signature locally (HMAC-SHA256 over
"<order_id>|<payment_id>" keyed with the account secret).
"""
import hashlib
import hmac
import logging
import secrets
from decimal import Decimal
from typing import Optional, Dict, Any
import requests
from app.config import settings
from app.utils.exceptions import PaymentGatewayError

logger = logging.getLogger(__name__)


def to_paise(amount) -> int:
    """Currency units to the smallest unit the Orders API expects"""
    return int(Decimal(str(amount)) * 100)


class RazorpayClient:
    def __init__(
        self,
        key_id: Optional[str] = None,
        key_secret: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[int] = None,
        currency: Optional[str] = None
    ):
        self.key_id = key_id if key_id is not None else settings.RAZORPAY_KEY_ID
        self.key_secret = key_secret if key_secret is not None else settings.RAZORPAY_KEY_SECRET
        self.api_url = (api_url or settings.RAZORPAY_API_URL).rstrip("/")
        self.timeout = timeout or settings.RAZORPAY_TIMEOUT
        self.currency = currency or settings.PAYMENT_CURRENCY

    @property
    def is_configured(self) -> bool:
        return bool(self.key_id and self.key_secret)

    def create_order(self, amount: Decimal, receipt: str, notes: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Create a gateway order for ``amount`` (currency units).

        Returns the order payload with ``id``, ``amount`` (paise), ``currency``
        and ``receipt``. Without configured keys a mock order is returned so
        the flow can be exercised in development.
        """
        payload = {
            "amount": to_paise(amount),
            "currency": self.currency,
            "receipt": receipt[:40],
            "notes": notes or {},
        }

        if not self.is_configured:
            order_id = f"order_mock_{secrets.token_hex(7)}"
            logger.info(f"Razorpay not configured. Created mock order {order_id} for {amount} {self.currency}")
            return {"id": order_id, "entity": "order", "status": "created", "mock": True, **payload}

        try:
            response = requests.post(
                f"{self.api_url}/orders",
                json=payload,
                auth=(self.key_id, self.key_secret),
                timeout=self.timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Razorpay order creation failed for receipt {receipt}: {e}")
            raise PaymentGatewayError()

        order = response.json()
        logger.info(f"Created Razorpay order {order.get('id')} for receipt {receipt}")
        return order

    def verify_payment_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        if not self.key_secret:
            logger.warning("Razorpay secret not configured; cannot verify payment signature")
            return False
        expected = hmac.new(
            self.key_secret.encode("utf-8"),
            f"{order_id}|{payment_id}".encode("utf-8"),
            hashlib.sha256
        ).hexdigest()
        return hmac.compare_digest(expected, signature or "")


def get_gateway() -> RazorpayClient:
    """Dependency providing the payment gateway client"""
    return RazorpayClient()
