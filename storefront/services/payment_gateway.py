"""Client for the payment provider's REST API (iamport / PortOne v1).

Only the two calls needed to verify a payment server-side are wrapped:
``POST /users/getToken`` and ``GET /payments/{imp_uid}``. Nothing here mutates
local state; every failure surfaces as a ``GatewayError`` subclass.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests

from storefront.config import settings
from storefront.errors import GatewayAuthError, GatewayError, GatewayVerificationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentRecord:
    """Payment as reported by the provider."""

    imp_uid: Optional[str]
    merchant_uid: Optional[str]
    status: Optional[str]
    amount: Any
    pay_method: Optional[str] = None
    pg_provider: Optional[str] = None
    card_name: Optional[str] = None
    pg_tid: Optional[str] = None
    receipt_url: Optional[str] = None
    paid_at: Any = None
    currency: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "PaymentRecord":
        return cls(
            imp_uid=data.get("imp_uid"),
            merchant_uid=data.get("merchant_uid"),
            status=data.get("status"),
            amount=data.get("amount"),
            pay_method=data.get("pay_method"),
            pg_provider=data.get("pg_provider"),
            card_name=data.get("card_name"),
            pg_tid=data.get("pg_tid"),
            receipt_url=data.get("receipt_url"),
            paid_at=data.get("paid_at"),
            currency=data.get("currency"),
            raw=data,
        )


class IamportClient:
    def __init__(
        self,
        api_key: Optional[str],
        api_secret: Optional[str],
        host: str = "api.iamport.kr",
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.api_secret = api_secret
        self.base_url = f"https://{host}"
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"

        try:
            response = requests.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as exc:
            raise GatewayVerificationError(
                "Payment provider did not respond in time",
                status_code=502,
            ) from exc
        except requests.RequestException as exc:
            raise GatewayVerificationError(
                f"Could not reach payment provider: {exc}",
                status_code=502,
            ) from exc

        try:
            data = response.json() if response.content else {}
        except ValueError as exc:
            raise GatewayError(
                "Payment provider returned an unreadable response",
                provider_status=response.status_code,
                response=response.text,
            ) from exc

        return {"status_code": response.status_code, "data": data}

    def get_access_token(self) -> str:
        if not self.api_key or not self.api_secret:
            raise GatewayAuthError()

        result = self._request(
            "POST",
            "/users/getToken",
            json={"imp_key": self.api_key, "imp_secret": self.api_secret},
        )
        data = result["data"] or {}
        token = (data.get("response") or {}).get("access_token")

        if data.get("code") != 0 or not token:
            logger.error(
                f"Payment provider rejected credentials ({result['status_code']}): {data}"
            )
            raise GatewayAuthError(
                data.get("message") or "Could not obtain a payment provider access token",
                status_code=502,
                provider_status=result["status_code"],
                response=data,
            )

        return token

    def fetch_payment(self, transaction_id: str) -> PaymentRecord:
        access_token = self.get_access_token()

        result = self._request(
            "GET",
            f"/payments/{quote(transaction_id, safe='')}",
            headers={"Authorization": access_token},
        )
        data = result["data"] or {}

        if data.get("code") != 0 or not data.get("response"):
            logger.warning(
                f"Payment lookup failed for {transaction_id} ({result['status_code']}): {data}"
            )
            raise GatewayError(
                data.get("message") or "Failed to fetch payment information",
                provider_status=result["status_code"],
                response=data,
            )

        return PaymentRecord.from_response(data["response"])


def get_payment_gateway() -> IamportClient:
    return IamportClient(
        api_key=settings.iamport_api_key,
        api_secret=settings.iamport_api_secret,
        host=settings.iamport_api_host,
        timeout=settings.iamport_timeout,
    )
