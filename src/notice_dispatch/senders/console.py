"""Console sender for development debugging and the no-channel default."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..delivery import DeliveryRecord
from .base import BaseSender

if TYPE_CHECKING:
    from ..delivery import RenderedNotice
    from ..request import SendRequest

logger = logging.getLogger(__name__)


class ConsoleSender(BaseSender):
    """
    Development adapter that writes notices to the log (and stdout).
    """

    channel = "console"

    def __init__(self, output_to_stdout: bool = False):
        super().__init__()
        self.output_to_stdout = output_to_stdout

    async def _do_send(self, request: SendRequest, content: RenderedNotice) -> DeliveryRecord:
        output = [
            "═" * 50,
            f"NOTICE {request.request_id}",
            f"To:      {request.target}",
        ]
        if request.cc:
            output.append(f"Cc:      {', '.join(request.cc)}")
        output.append(f"Subject: {content.subject or '(No Subject)'}")
        output.append(f"Body:    {content.body_text}")
        output.append("═" * 50)

        full_output = "\n".join(output)
        logger.info(full_output)

        if self.output_to_stdout:
            print(full_output)

        return DeliveryRecord.sent(
            self.channel_type, request.target, provider_id=f"console-{request.request_id}"
        )
