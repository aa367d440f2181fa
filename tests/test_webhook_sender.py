"""Tests for the webhook sender."""

import json

import pytest

from notice_dispatch.delivery import FailureKind, RenderedNotice
from notice_dispatch.exceptions import SenderNotConfiguredError
from notice_dispatch.request import SenderConfiguration, SendRequest
from notice_dispatch.senders.webhook import WebhookSender

httpx = pytest.importorskip("httpx")

REQUEST = SendRequest("r1", "https://hooks.example.com/notify", "x")


async def _sender(handler, **config):
    sender = WebhookSender(transport=httpx.MockTransport(handler))
    await sender.configure(SenderConfiguration("webhook", config=config))
    return sender


@pytest.mark.asyncio
async def test_webhook_posts_signed_payload():
    """Test the payload is posted with a verifiable signature."""
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, headers={"X-Request-ID": "hook-42"})

    sender = await _sender(handler, secret="s3cret")

    record = await sender.send(REQUEST, RenderedNotice("hi Ann", subject="Hello"))

    assert record.is_success
    assert record.provider_id == "hook-42"
    request = seen[0]
    payload = request.content.decode()
    assert json.loads(payload) == {
        "body_text": "hi Ann",
        "cc": [],
        "recipient": "https://hooks.example.com/notify",
        "request_id": "r1",
        "subject": "Hello",
    }
    assert request.headers["X-Request-ID"] == "r1"
    assert WebhookSender.verify_signature(
        payload, request.headers["X-Webhook-Signature"], "s3cret"
    )


@pytest.mark.asyncio
async def test_webhook_without_secret_is_unsigned():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(204)

    sender = await _sender(handler)

    record = await sender.send(REQUEST, RenderedNotice("hi"))

    assert record.provider_id == "r1"
    assert "X-Webhook-Signature" not in seen[0].headers


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "kind"),
    [
        (500, FailureKind.RETRYABLE),
        (503, FailureKind.RETRYABLE),
        (429, FailureKind.RETRYABLE),
        (400, FailureKind.FATAL),
        (404, FailureKind.FATAL),
    ],
)
async def test_webhook_status_classification(status, kind):
    """Test server errors and throttling are retryable, client errors fatal."""
    sender = await _sender(lambda request: httpx.Response(status))

    record = await sender.send(REQUEST, RenderedNotice("hi"))

    assert record.error == f"HTTP {status}"
    assert record.failure_kind is kind


@pytest.mark.asyncio
async def test_webhook_transport_error_is_retryable():
    def handler(request):
        raise httpx.ConnectError("connection refused")

    sender = await _sender(handler)

    record = await sender.send(REQUEST, RenderedNotice("hi"))

    assert record.is_retryable


def test_verify_signature_rejects_tampering():
    signature = WebhookSender.calculate_signature('{"a":1}', "key")

    assert signature.startswith("sha256=")
    assert not WebhookSender.verify_signature('{"a":2}', signature, "key")


@pytest.mark.asyncio
async def test_webhook_destroy_closes_client():
    sender = await _sender(lambda request: httpx.Response(200))

    await sender.destroy()

    assert sender._client is None
    assert not sender.is_configured


@pytest.mark.asyncio
async def test_webhook_rotated_secret_is_used():
    """Test reconfiguring a live sender signs with the new secret."""
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200)

    sender = await _sender(handler, secret="old")
    client = sender._client

    await sender.configure(SenderConfiguration("webhook", config={"secret": "new"}))
    await sender.send(REQUEST, RenderedNotice("hi"))

    assert sender._client is client
    payload = seen[0].content.decode()
    assert WebhookSender.verify_signature(
        payload, seen[0].headers["X-Webhook-Signature"], "new"
    )


@pytest.mark.asyncio
async def test_webhook_send_without_client_fails():
    with pytest.raises(SenderNotConfiguredError):
        await WebhookSender()._do_send(REQUEST, RenderedNotice("hi"))
