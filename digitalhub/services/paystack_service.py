"""
Paystack Service - Thin async client for the Paystack REST API

Amounts sent to and received from Paystack are kobo.
"""

import hashlib
import hmac
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from digitalhub.core.config import Settings
from digitalhub.core.errors import GatewayError

logger = logging.getLogger(__name__)

PAYSTACK_BASE_URL = "https://api.paystack.co"


class PaystackError(GatewayError):
    """Raised for any failed call to Paystack"""


class PaystackClient:
    def __init__(
        self,
        secret_key: str,
        base_url: str = PAYSTACK_BASE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key or ""
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaystackClient":
        return cls(
            secret_key=settings.paystack_secret_key,
            base_url=settings.paystack_base_url,
            timeout=settings.paystack_timeout_seconds,
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Call Paystack and return the ``data`` member of its envelope.

        Raises:
            PaystackError if the key is missing, Paystack cannot be reached,
            answers with a non-2xx status, or reports ``status: false``
        """
        if not self.secret_key:
            raise PaystackError("Paystack secret key not configured")

        headers = {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.request(
                    method, path, params=params, json=payload, headers=headers
                )
                response.raise_for_status()
                body = response.json()
        except httpx.TimeoutException:
            raise PaystackError(f"Timeout calling Paystack {path}")
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response) or f"status {e.response.status_code}"
            logger.error(f"Paystack {method} {path} failed: {message}")
            raise PaystackError(f"Paystack request failed: {message}")
        except httpx.RequestError as e:
            raise PaystackError(f"Failed to connect to Paystack: {str(e)}")
        except json.JSONDecodeError:
            raise PaystackError("Invalid JSON response from Paystack")

        if not isinstance(body, dict) or not body.get("status"):
            message = body.get("message") if isinstance(body, dict) else None
            raise PaystackError(message or "Paystack request failed")

        return body.get("data")

    async def list_banks(self) -> List[Dict[str, str]]:
        data = await self._request(
            "GET", "/bank", params={"country": "nigeria", "perPage": 100}
        )
        return [
            {"name": bank.get("name"), "code": bank.get("code"), "slug": bank.get("slug")}
            for bank in data or []
            if bank.get("country") == "Nigeria" and bank.get("active") is True
        ]

    async def resolve_account(self, account_number: str, bank_code: str) -> Dict[str, str]:
        data = await self._request(
            "GET",
            "/bank/resolve",
            params={"account_number": account_number, "bank_code": bank_code},
        )
        return {
            "account_name": data.get("account_name"),
            "account_number": data.get("account_number", account_number),
        }

    async def create_transfer_recipient(
        self, name: str, account_number: str, bank_code: str
    ) -> str:
        data = await self._request(
            "POST",
            "/transferrecipient",
            payload={
                "type": "nuban",
                "name": name,
                "account_number": account_number,
                "bank_code": bank_code,
                "currency": "NGN",
            },
        )
        recipient_code = (data or {}).get("recipient_code")
        if not recipient_code:
            raise PaystackError("Paystack did not return a recipient code")
        return recipient_code

    async def initiate_transfer(
        self, amount_minor: int, recipient_code: str, reference: str, reason: str
    ) -> Dict[str, Any]:
        data = await self._request(
            "POST",
            "/transfer",
            payload={
                "source": "balance",
                "amount": amount_minor,
                "recipient": recipient_code,
                "reference": reference,
                "reason": reason,
            },
        )
        return data or {}

    async def verify_transaction(self, reference: str) -> Dict[str, Any]:
        data = await self._request("GET", f"/transaction/verify/{reference}")
        return data or {}

    def verify_signature(self, body: bytes, signature: Optional[str]) -> bool:
        """Check ``x-paystack-signature``: hex HMAC-SHA512 of the raw body."""
        if not signature or not self.secret_key:
            return False
        expected = hmac.new(
            self.secret_key.encode("utf-8"), body, hashlib.sha512
        ).hexdigest()
        return hmac.compare_digest(signature.strip().lower(), expected)


def _error_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        return body.get("message")
    return None


def transaction_metadata(data: Dict[str, Any]) -> Dict[str, Any]:
    """The ``metadata`` of a charge or transaction as a dict."""
    metadata = data.get("metadata") or {}
    # Paystack passes metadata through verbatim, some clients send it as a JSON string
    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except ValueError:
            return {}
    return metadata if isinstance(metadata, dict) else {}
