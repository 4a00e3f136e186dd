"""Tests for the global announcement fan-out use case."""

from __future__ import annotations

import asyncio
import json
import threading
import time

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from lostfound.application.use_cases.announcements import (
    NO_TOKEN_REASON,
    send_global_announcement,
)
from lostfound.domain.entities import FailedDelivery
from lostfound.domain.exceptions import InvalidAnnouncementRequest, PushCredentialsError
from lostfound.infrastructure.models import (
    GlobalAnnouncementModel,
    NotificationImageModel,
    NotificationModel,
)
from lostfound.infrastructure.repositories import (
    AnnouncementRepository,
    NotificationImageRepository,
    NotificationRepository,
    UserRepository,
)


def _run(db_session, gateway, settings, clock, **kwargs):
    kwargs.setdefault("message", "Lab closed")

    async def run():
        async with gateway.client() as client:
            return await send_global_announcement(
                db_session, http_client=client, settings=settings, clock=clock, **kwargs
            )

    return asyncio.run(run())


def test_missing_message_writes_nothing(db_session, gateway, settings, fake_clock):
    with pytest.raises(InvalidAnnouncementRequest, match="Missing message"):
        _run(db_session, gateway, settings, fake_clock, message="", image_url="https://img/x.png")

    assert db_session.query(GlobalAnnouncementModel).count() == 0
    assert db_session.query(NotificationImageModel).count() == 0
    assert gateway.token_requests == []


def test_fan_out_persists_rows_and_failure_list(db_session, add_users, gateway, settings, fake_clock):
    add_users(("u1", "tok-1"), ("u2", "tok-2"), ("u3", None))
    gateway.responses["tok-2"] = [httpx.Response(404, text="UNREGISTERED")]

    result = _run(db_session, gateway, settings, fake_clock, description="Closed until Monday", sent_by="admin")

    stats = result.stats
    assert (stats.total_users, stats.users_with_tokens, stats.users_without_tokens) == (3, 2, 1)
    assert (stats.push_successful, stats.push_failed, stats.retriable_failed) == (1, 1, 0)
    assert stats.total_users == stats.users_with_tokens + stats.users_without_tokens
    assert stats.push_successful + stats.push_failed == stats.users_with_tokens
    assert sorted(gateway.pushed_tokens()) == ["tok-1", "tok-2"]

    rows = NotificationRepository(db_session).list_for_announcement(result.announcement_id)
    assert [row.sent_to for row in rows] == ["u1", "u2", "u3"]
    assert all(row.description == "Closed until Monday" and row.sent_by == "admin" for row in rows)

    stored = AnnouncementRepository(db_session).get(result.announcement_id)
    assert stored.failed_deliveries == result.failed_users
    assert result.failed_users == [
        FailedDelivery(user_id="u2", retriable=False, reason="404 UNREGISTERED"),
        FailedDelivery(user_id="u3", retriable=False, reason=NO_TOKEN_REASON),
    ]


def test_push_payload_references_announcement(db_session, add_users, gateway, settings, fake_clock):
    add_users(("u1", "tok-1"))

    result = _run(
        db_session,
        gateway,
        settings,
        fake_clock,
        description="Bring your ID",
        image_url="https://img/lab.png",
    )

    body = json.loads(gateway.push_requests[0].content)["message"]
    assert body["notification"] == {"title": "Lab closed", "body": "Bring your ID"}
    assert body["data"] == {
        "image_url": "https://img/lab.png",
        "global_notification_id": str(result.announcement_id),
    }
    assert body["android"]["notification"]["image"] == "https://img/lab.png"
    stored = AnnouncementRepository(db_session).get(result.announcement_id)
    assert stored.image_id is not None


def test_existing_notifications_skip_insert(db_session, add_users, gateway, settings, fake_clock, monkeypatch):
    add_users(("u1", "tok-1"), ("u2", "tok-2"))
    calls = []
    monkeypatch.setattr(NotificationRepository, "has_for_announcement", lambda self, _id: True)
    monkeypatch.setattr(
        NotificationRepository,
        "insert_for_users",
        lambda self, *args, **kwargs: calls.append((args, kwargs)) or 0,
    )

    result = _run(db_session, gateway, settings, fake_clock)

    assert calls == []
    assert db_session.query(NotificationModel).count() == 0
    assert result.stats.push_successful == 2


def test_no_users_short_circuits(db_session, gateway, settings, fake_clock):
    result = _run(db_session, gateway, settings, fake_clock)

    assert result.no_users is True
    assert db_session.get(GlobalAnnouncementModel, result.announcement_id) is not None
    assert gateway.token_requests == []
    assert gateway.push_requests == []


def test_users_without_tokens_skip_credential_exchange(db_session, add_users, gateway, settings, fake_clock):
    add_users(("u1", None), ("u2", None))
    settings.firebase_service_account = "{}"

    result = _run(db_session, gateway, settings, fake_clock)

    assert gateway.token_requests == []
    assert result.stats.push_failed == 0
    assert [item.user_id for item in result.failed_users] == ["u1", "u2"]
    assert all(item.retriable is False for item in result.failed_users)


def test_credential_failure_aborts_after_rows_written(db_session, add_users, gateway, settings, fake_clock):
    add_users(("u1", "tok-1"))
    gateway.token_response = httpx.Response(500, text="backend error")

    with pytest.raises(PushCredentialsError):
        _run(db_session, gateway, settings, fake_clock)

    announcement = db_session.query(GlobalAnnouncementModel).one()
    assert announcement.failed_user_ids == []
    assert db_session.query(NotificationModel).count() == 1
    assert gateway.push_requests == []


def test_image_insert_failure_continues_without_image(db_session, add_users, gateway, settings, fake_clock, monkeypatch):
    add_users(("u1", "tok-1"))

    def failing_create(self, image_url):
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(NotificationImageRepository, "create", failing_create)

    result = _run(db_session, gateway, settings, fake_clock, image_url="https://img/x.png")

    assert AnnouncementRepository(db_session).get(result.announcement_id).image_id is None
    assert result.stats.push_successful == 1


def test_failure_list_update_error_is_swallowed(db_session, add_users, gateway, settings, fake_clock, monkeypatch, caplog):
    add_users(("u1", None))

    def failing_record(self, announcement_id, failed):
        raise OperationalError("UPDATE", {}, Exception("locked"))

    monkeypatch.setattr(AnnouncementRepository, "record_failures", failing_record)

    with caplog.at_level("ERROR"):
        result = _run(db_session, gateway, settings, fake_clock)

    assert result.failed_users[0].reason == NO_TOKEN_REASON
    assert "Failed to update failed_user_ids" in caplog.text


def test_execution_time_uses_clock(db_session, add_users, gateway, settings, fake_clock):
    add_users(("u1", "tok-1"))
    gateway.responses["tok-1"] = [httpx.Response(503), httpx.Response(200, json={})]

    result = _run(db_session, gateway, settings, fake_clock)

    assert result.stats.push_successful == 1
    assert result.stats.execution_time_ms == 1000


def test_repository_calls_run_in_worker_threads(db_session, add_users, gateway, settings, fake_clock, monkeypatch):
    add_users(("u1", "tok-1"), ("u2", None))
    threads = {}

    def tracking(name, original):
        def wrapper(self, *args, **kwargs):
            threads[name] = threading.get_ident()
            return original(self, *args, **kwargs)

        return wrapper

    for owner, name in [
        (AnnouncementRepository, "create"),
        (UserRepository, "list_recipients"),
        (NotificationRepository, "has_for_announcement"),
        (NotificationRepository, "insert_for_users"),
        (AnnouncementRepository, "record_failures"),
    ]:
        monkeypatch.setattr(owner, name, tracking(name, getattr(owner, name)))

    result = _run(db_session, gateway, settings, fake_clock)

    loop_thread = threading.get_ident()
    assert set(threads) == {
        "create",
        "list_recipients",
        "has_for_announcement",
        "insert_for_users",
        "record_failures",
    }
    assert loop_thread not in threads.values()
    assert result.stats.push_successful == 1


def test_event_loop_keeps_running_during_notification_insert(db_session, add_users, gateway, settings, fake_clock, monkeypatch):
    add_users(*((f"u{i:04d}", None) for i in range(1200)))
    ticks = []
    progressed = []
    original_insert = NotificationRepository.insert_for_users

    def insert_while_loop_ticks(self, *args, **kwargs):
        seen = len(ticks)
        deadline = time.monotonic() + 2
        while len(ticks) == seen and time.monotonic() < deadline:
            time.sleep(0.01)
        progressed.append(len(ticks) > seen)
        return original_insert(self, *args, **kwargs)

    monkeypatch.setattr(NotificationRepository, "insert_for_users", insert_while_loop_ticks)

    async def run():
        done = asyncio.Event()

        async def heartbeat():
            while not done.is_set():
                ticks.append(time.monotonic())
                await asyncio.sleep(0.005)

        async def announce():
            try:
                async with gateway.client() as client:
                    return await send_global_announcement(
                        db_session,
                        message="Lab closed",
                        http_client=client,
                        settings=settings,
                        clock=fake_clock,
                    )
            finally:
                done.set()

        result, _ = await asyncio.gather(announce(), heartbeat())
        return result

    result = asyncio.run(run())

    assert progressed == [True]
    assert result.stats.users_without_tokens == 1200
    assert db_session.query(NotificationModel).count() == 1200
