"""Tests for the windowed push scheduler."""

from __future__ import annotations

import asyncio

from lostfound.application.use_cases.announcements import (
    TIMEOUT_REASON,
    dispatch_push_batch,
)
from lostfound.domain.entities import DeliveryOutcome, PushMessage, Recipient

MESSAGE = PushMessage(title="Lab closed", body="Lab closed")


class ScriptedSender:
    """Sender returning a fixed outcome per token and tracking concurrency."""

    def __init__(self, outcomes=None, *, on_send=None):
        self.outcomes = outcomes or {}
        self.on_send = on_send
        self.tokens: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def send(self, token, message):
        self.tokens.append(token)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        await asyncio.sleep(0)
        if self.on_send is not None:
            self.on_send(token)
        self.in_flight -= 1
        outcome = self.outcomes.get(token, DeliveryOutcome.success())
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _recipients(count):
    return [Recipient(user_id=f"user-{i}", notification_token=f"token-{i}") for i in range(count)]


def _dispatch(recipients, sender, clock, **kwargs):
    return asyncio.run(
        dispatch_push_batch(
            recipients,
            MESSAGE,
            sender,
            clock=clock,
            started_at=clock.monotonic(),
            **kwargs,
        )
    )


def test_every_recipient_lands_in_exactly_one_list(fake_clock):
    recipients = _recipients(7)
    sender = ScriptedSender(
        {
            "token-1": DeliveryOutcome.permanent("404 not found"),
            "token-4": DeliveryOutcome.retriable("503 unavailable"),
        }
    )

    result = _dispatch(recipients, sender, fake_clock, window_size=3)

    failed_ids = [item.user_id for item in result.failed]
    assert sorted(result.successful + failed_ids) == sorted(r.user_id for r in recipients)
    assert set(result.successful).isdisjoint(failed_ids)
    assert {item.user_id: item.retriable for item in result.failed} == {
        "user-1": False,
        "user-4": True,
    }
    assert result.retriable_count == 1


def test_windows_bound_concurrency(fake_clock):
    sender = ScriptedSender()

    result = _dispatch(_recipients(120), sender, fake_clock, window_size=50)

    assert len(result.successful) == 120
    assert sender.max_in_flight == 50


def test_budget_exhaustion_truncates_contiguous_tail(fake_clock):
    recipients = _recipients(120)
    sender = ScriptedSender(on_send=lambda token: fake_clock.advance(3))

    result = _dispatch(recipients, sender, fake_clock, window_size=50, budget_seconds=110)

    assert sender.tokens == [f"token-{i}" for i in range(50)]
    assert result.successful == [f"user-{i}" for i in range(50)]
    assert [item.user_id for item in result.failed] == [f"user-{i}" for i in range(50, 120)]
    assert all(item.retriable for item in result.failed)
    assert all("Execution timeout" in item.reason for item in result.failed)
    assert result.failed[0].reason == TIMEOUT_REASON


def test_budget_is_checked_only_between_windows(fake_clock):
    sender = ScriptedSender(on_send=lambda token: fake_clock.advance(1000))

    result = _dispatch(_recipients(10), sender, fake_clock, window_size=10, budget_seconds=1)

    assert len(result.successful) == 10
    assert result.failed == []


def test_unexpected_sender_error_becomes_retriable_failure(fake_clock):
    sender = ScriptedSender({"token-0": RuntimeError("socket exploded")})

    result = _dispatch(_recipients(2), sender, fake_clock)

    assert result.successful == ["user-1"]
    assert result.failed[0].user_id == "user-0"
    assert result.failed[0].retriable is True
    assert result.failed[0].reason == "socket exploded"


def test_empty_recipient_list(fake_clock):
    result = _dispatch([], ScriptedSender(), fake_clock)

    assert result.successful == []
    assert result.failed == []
