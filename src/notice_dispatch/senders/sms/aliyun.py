"""Aliyun (Alibaba Cloud) SMS provider using httpx."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict

from ...delivery import DeliveryRecord

if TYPE_CHECKING:
    import httpx

    from ...request import SendRequest

logger = logging.getLogger(__name__)

_THROTTLING_CODES = frozenset(
    {"Throttling", "Throttling.User", "isv.BUSINESS_LIMIT_CONTROL", "ServiceUnavailable"}
)


class AliyunSmsSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    access_key_id: str
    access_key_secret: str
    sign_name: str
    region_id: str = "cn-hangzhou"
    endpoint: str = "https://dysmsapi.aliyuncs.com/"


def _percent_encode(value: str) -> str:
    return quote(value, safe="~")


def sign_rpc_request(params: Mapping[str, str], secret: str, method: str = "GET") -> str:
    """Compute the HMAC-SHA1 signature of an Aliyun RPC-style request."""
    canonical = "&".join(
        f"{_percent_encode(k)}={_percent_encode(params[k])}" for k in sorted(params)
    )
    string_to_sign = f"{method}&{_percent_encode('/')}&{_percent_encode(canonical)}"
    digest = hmac.new(
        key=f"{secret}&".encode(),
        msg=string_to_sign.encode(),
        digestmod=hashlib.sha1,
    ).digest()
    return base64.b64encode(digest).decode()


class AliyunSmsProvider:
    """SendSms over the Dysmsapi RPC endpoint."""

    name = "aliyun"

    def __init__(self, settings: AliyunSmsSettings, client: httpx.AsyncClient) -> None:
        self.settings = settings
        self._client = client

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any], client: httpx.AsyncClient
    ) -> AliyunSmsProvider:
        return cls(AliyunSmsSettings.model_validate(dict(config)), client)

    def build_params(
        self,
        phone_numbers: str,
        template_code: str,
        params: Mapping[str, Any],
        *,
        nonce: str | None = None,
        timestamp: datetime | None = None,
    ) -> dict[str, str]:
        settings = self.settings
        now = timestamp or datetime.now(timezone.utc)
        query = {
            "AccessKeyId": settings.access_key_id,
            "Action": "SendSms",
            "Format": "JSON",
            "PhoneNumbers": phone_numbers,
            "RegionId": settings.region_id,
            "SignName": settings.sign_name,
            "SignatureMethod": "HMAC-SHA1",
            "SignatureNonce": nonce or uuid.uuid4().hex,
            "SignatureVersion": "1.0",
            "TemplateCode": template_code,
            "Timestamp": now.strftime("%Y-%m-%dT%H:%M:%SZ"),
            "Version": "2017-05-25",
        }
        if params:
            query["TemplateParam"] = json.dumps(
                {k: str(v) for k, v in params.items()}, ensure_ascii=False
            )
        query["Signature"] = sign_rpc_request(query, settings.access_key_secret)
        return query

    async def send(
        self,
        request: SendRequest,
        template_code: str,
        params: Mapping[str, Any],
    ) -> DeliveryRecord:
        import httpx

        numbers = ",".join((request.target, *request.cc))
        query = self.build_params(numbers, template_code, params)

        try:
            response = await self._client.get(self.settings.endpoint, params=query)
        except httpx.TransportError as e:
            logger.warning("Aliyun SMS transport error for %s: %s", request.target, e)
            return DeliveryRecord.failed("sms", request.target, error=str(e), retryable=True)

        if response.status_code >= 500:
            return DeliveryRecord.failed(
                "sms", request.target, error=f"HTTP {response.status_code}", retryable=True
            )

        try:
            body = response.json()
        except ValueError:
            return DeliveryRecord.failed(
                "sms", request.target, error=f"Invalid response: {response.text[:200]}"
            )

        code = body.get("Code")
        if code == "OK":
            logger.info("SMS sent via Aliyun to %s (BizId: %s)", request.target, body.get("BizId"))
            return DeliveryRecord.sent("sms", request.target, provider_id=body.get("BizId"))

        message = f"Aliyun {code}: {body.get('Message')}"
        logger.error("Aliyun SMS rejected for %s: %s", request.target, message)
        return DeliveryRecord.failed(
            "sms", request.target, error=message, retryable=code in _THROTTLING_CODES
        )
