"""SMS sender and provider implementations."""

from __future__ import annotations

from .aliyun import AliyunSmsProvider, AliyunSmsSettings
from .provider import ISmsProvider, SmsProviderRegistry, default_sms_providers
from .sender import SmsSender
from .tencent import TencentSmsProvider, TencentSmsSettings

__all__ = [
    "AliyunSmsProvider",
    "AliyunSmsSettings",
    "ISmsProvider",
    "SmsProviderRegistry",
    "SmsSender",
    "TencentSmsProvider",
    "TencentSmsSettings",
    "default_sms_providers",
]
