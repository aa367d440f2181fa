"""Tencent Cloud SMS provider using httpx and TC3-HMAC-SHA256 signing."""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict

from ...delivery import DeliveryRecord

if TYPE_CHECKING:
    import httpx

    from ...request import SendRequest

logger = logging.getLogger(__name__)

_SERVICE = "sms"
_ACTION = "SendSms"
_VERSION = "2021-01-11"
_ALGORITHM = "TC3-HMAC-SHA256"
_CONTENT_TYPE = "application/json; charset=utf-8"


class TencentSmsSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    secret_id: str
    secret_key: str
    sdk_app_id: str
    sign_name: str
    region: str = "ap-guangzhou"
    host: str = "sms.tencentcloudapi.com"
    # Tencent templates take positional parameters.
    param_order: list[str] | None = None


def _hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def _sha256_hex(payload: str) -> str:
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def build_authorization(
    settings: TencentSmsSettings, payload: str, timestamp: int
) -> str:
    """Compute the ``Authorization`` header for a TC3-HMAC-SHA256 request."""
    date = datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")
    canonical_headers = f"content-type:{_CONTENT_TYPE}\nhost:{settings.host}\n"
    signed_headers = "content-type;host"
    canonical_request = "\n".join(
        ["POST", "/", "", canonical_headers, signed_headers, _sha256_hex(payload)]
    )
    credential_scope = f"{date}/{_SERVICE}/tc3_request"
    string_to_sign = "\n".join(
        [_ALGORITHM, str(timestamp), credential_scope, _sha256_hex(canonical_request)]
    )
    secret_date = _hmac_sha256(f"TC3{settings.secret_key}".encode(), date)
    secret_service = _hmac_sha256(secret_date, _SERVICE)
    secret_signing = _hmac_sha256(secret_service, "tc3_request")
    signature = hmac.new(
        secret_signing, string_to_sign.encode("utf-8"), hashlib.sha256
    ).hexdigest()
    return (
        f"{_ALGORITHM} Credential={settings.secret_id}/{credential_scope}, "
        f"SignedHeaders={signed_headers}, Signature={signature}"
    )


class TencentSmsProvider:
    """SendSms against the Tencent Cloud API 3.0 endpoint."""

    name = "tencent"

    def __init__(self, settings: TencentSmsSettings, client: httpx.AsyncClient) -> None:
        self.settings = settings
        self._client = client

    @classmethod
    def from_config(
        cls, config: Mapping[str, Any], client: httpx.AsyncClient
    ) -> TencentSmsProvider:
        return cls(TencentSmsSettings.model_validate(dict(config)), client)

    def _ordered_params(self, params: Mapping[str, Any]) -> list[str]:
        order: Sequence[str] = self.settings.param_order or list(params)
        return [str(params[name]) for name in order if name in params]

    def build_payload(
        self, phone_numbers: Sequence[str], template_code: str, params: Mapping[str, Any]
    ) -> str:
        body = {
            "PhoneNumberSet": list(phone_numbers),
            "SmsSdkAppId": self.settings.sdk_app_id,
            "SignName": self.settings.sign_name,
            "TemplateId": template_code,
            "TemplateParamSet": self._ordered_params(params),
        }
        return json.dumps(body, separators=(",", ":"), ensure_ascii=False)

    async def send(
        self,
        request: SendRequest,
        template_code: str,
        params: Mapping[str, Any],
    ) -> DeliveryRecord:
        import httpx

        settings = self.settings
        payload = self.build_payload((request.target, *request.cc), template_code, params)
        timestamp = int(time.time())
        headers = {
            "Authorization": build_authorization(settings, payload, timestamp),
            "Content-Type": _CONTENT_TYPE,
            "Host": settings.host,
            "X-TC-Action": _ACTION,
            "X-TC-Timestamp": str(timestamp),
            "X-TC-Version": _VERSION,
            "X-TC-Region": settings.region,
        }

        try:
            response = await self._client.post(
                f"https://{settings.host}/", content=payload.encode("utf-8"), headers=headers
            )
        except httpx.TransportError as e:
            logger.warning("Tencent SMS transport error for %s: %s", request.target, e)
            return DeliveryRecord.failed(_SERVICE, request.target, error=str(e), retryable=True)

        if response.status_code >= 500:
            return DeliveryRecord.failed(
                _SERVICE, request.target, error=f"HTTP {response.status_code}", retryable=True
            )

        try:
            body = response.json().get("Response", {})
        except ValueError:
            return DeliveryRecord.failed(
                _SERVICE, request.target, error=f"Invalid response: {response.text[:200]}"
            )

        error = body.get("Error")
        if error:
            code = error.get("Code", "")
            message = f"Tencent {code}: {error.get('Message')}"
            logger.error("Tencent SMS rejected for %s: %s", request.target, message)
            transient = code == "RequestLimitExceeded" or code.startswith("InternalError")
            return DeliveryRecord.failed(
                _SERVICE, request.target, error=message, retryable=transient
            )

        statuses = body.get("SendStatusSet") or []
        primary = next((s for s in statuses if s.get("PhoneNumber") == request.target), None)
        primary = primary or (statuses[0] if statuses else {})
        if primary.get("Code") == "Ok":
            logger.info(
                "SMS sent via Tencent to %s (SerialNo: %s)", request.target, primary.get("SerialNo")
            )
            return DeliveryRecord.sent(
                _SERVICE, request.target, provider_id=primary.get("SerialNo")
            )

        message = f"Tencent {primary.get('Code')}: {primary.get('Message')}"
        logger.error("Tencent SMS not delivered to %s: %s", request.target, message)
        return DeliveryRecord.failed(_SERVICE, request.target, error=message)
