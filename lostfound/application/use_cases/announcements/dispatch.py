"""Windowed fan-out of push deliveries under a wall-clock budget."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

from lostfound.domain.entities import (
    DeliveryOutcome,
    FailedDelivery,
    PushMessage,
    Recipient,
)
from lostfound.utils import Clock

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_SIZE = 50
DEFAULT_BUDGET_SECONDS = 110.0
TIMEOUT_REASON = "Execution timeout - not attempted"


class PushSender(Protocol):
    async def send(self, token: str, message: PushMessage) -> DeliveryOutcome: ...


@dataclass
class DispatchResult:
    successful: list[str] = field(default_factory=list)
    failed: list[FailedDelivery] = field(default_factory=list)

    @property
    def retriable_count(self) -> int:
        return sum(1 for item in self.failed if item.retriable)


async def dispatch_push_batch(
    recipients: Sequence[Recipient],
    message: PushMessage,
    sender: PushSender,
    *,
    clock: Clock,
    started_at: float,
    budget_seconds: float = DEFAULT_BUDGET_SECONDS,
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> DispatchResult:
    """Push ``message`` to every recipient, ``window_size`` deliveries at a time.

    Windows run strictly one after another. Before each window the elapsed
    time since ``started_at`` is compared with ``budget_seconds``; once it is
    exceeded every recipient not yet attempted is reported as a retriable
    failure and no further deliveries start. The budget is not enforced
    inside a window.
    """

    if window_size <= 0:
        raise ValueError("window_size must be positive")

    result = DispatchResult()
    for start in range(0, len(recipients), window_size):
        if clock.monotonic() - started_at > budget_seconds:
            remaining = recipients[start:]
            logger.warning(
                "Push budget of %ss exhausted; %s recipients not attempted",
                budget_seconds,
                len(remaining),
            )
            result.failed.extend(
                FailedDelivery(user_id=recipient.user_id, retriable=True, reason=TIMEOUT_REASON)
                for recipient in remaining
            )
            break

        window = recipients[start : start + window_size]
        outcomes = await asyncio.gather(
            *(sender.send(recipient.notification_token or "", message) for recipient in window),
            return_exceptions=True,
        )
        for recipient, outcome in zip(window, outcomes):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error(
                    "Unexpected error pushing to user %s",
                    recipient.user_id,
                    exc_info=outcome,
                )
                outcome = DeliveryOutcome.retriable(str(outcome) or outcome.__class__.__name__)
            if outcome.succeeded:
                result.successful.append(recipient.user_id)
            else:
                result.failed.append(
                    FailedDelivery(
                        user_id=recipient.user_id,
                        retriable=outcome.is_retriable,
                        reason=outcome.reason or "Unknown error",
                    )
                )
    return result


__all__ = [
    "DEFAULT_BUDGET_SECONDS",
    "DEFAULT_WINDOW_SIZE",
    "DispatchResult",
    "PushSender",
    "TIMEOUT_REASON",
    "dispatch_push_batch",
]
