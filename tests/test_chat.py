"""
Tests for chat turn orchestration (titling, failure asymmetry, serialization).
"""

from __future__ import annotations

import asyncio

import pytest

from chatline.core import ErrorCode, NotFoundError, PersistenceError, ProviderUnavailableError, ValidationError
from chatline.db.models import DEFAULT_SESSION_TITLE
from chatline.db.repositories import create_session, get_session, get_session_messages
from chatline.services import SessionLockManager, chat_service as chat_service_module, derive_title


def _title(db_session, session_id: int) -> str:
    db_session.expire_all()
    return get_session(db_session, session_id).title


@pytest.mark.asyncio
async def test_turn_persists_both_messages_and_returns_reply(
    chat_service, db_session, chat_session, stub_provider
) -> None:
    reply = await chat_service.send_message(db_session, chat_session.id, "Hello")

    assert reply.role == "assistant"
    assert reply.content == "Hi there!"
    assert reply.session_id == chat_session.id
    history = get_session_messages(db_session, chat_session.id)
    assert [(m.role, m.content) for m in history] == [("user", "Hello"), ("assistant", "Hi there!")]
    assert history[-1].id == reply.id


@pytest.mark.asyncio
async def test_only_first_turn_sets_title(chat_service, db_session, chat_session) -> None:
    await chat_service.send_message(db_session, chat_session.id, "Hello")
    assert _title(db_session, chat_session.id) == "Hello"

    await chat_service.send_message(db_session, chat_session.id, "How are you?")
    assert _title(db_session, chat_session.id) == "Hello"


@pytest.mark.asyncio
async def test_title_is_first_fifty_characters(chat_service, db_session, chat_session) -> None:
    message = "Tell me everything about the history of the Roman Empire please"

    await chat_service.send_message(db_session, chat_session.id, message)

    assert _title(db_session, chat_session.id) == message[:50]
    assert len(_title(db_session, chat_session.id)) == 50


def test_derive_title_skips_blank_prefix() -> None:
    assert derive_title("Hello") == "Hello"
    assert derive_title(" " * 60 + "late start") == "late start"


@pytest.mark.asyncio
async def test_provider_receives_history_without_new_message(
    chat_service, db_session, chat_session, stub_provider, provider_config
) -> None:
    stub_provider.replies = ["first reply", "second reply"]

    await chat_service.send_message(db_session, chat_session.id, "Hello")
    await chat_service.send_message(db_session, chat_session.id, "How are you?")

    first, second = stub_provider.requests
    assert [(m.role, m.content) for m in first.messages] == [
        ("system", provider_config.system_prompt),
        ("user", "Hello"),
    ]
    assert [(m.role, m.content) for m in second.messages] == [
        ("system", provider_config.system_prompt),
        ("user", "Hello"),
        ("assistant", "first reply"),
        ("user", "How are you?"),
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", ["", "   ", "\n\t ", None])
async def test_empty_message_mutates_nothing(
    chat_service, db_session, chat_session, stub_provider, raw
) -> None:
    with pytest.raises(ValidationError) as exc:
        await chat_service.send_message(db_session, chat_session.id, raw)

    assert exc.value.message == "Message cannot be empty"
    assert get_session_messages(db_session, chat_session.id) == []
    assert _title(db_session, chat_session.id) == DEFAULT_SESSION_TITLE
    assert stub_provider.requests == []


@pytest.mark.asyncio
async def test_provider_failure_keeps_user_message(
    chat_service, db_session, chat_session, stub_provider
) -> None:
    stub_provider.error = ProviderUnavailableError("Provider timed out")

    with pytest.raises(ProviderUnavailableError):
        await chat_service.send_message(db_session, chat_session.id, "Hello")

    history = get_session_messages(db_session, chat_session.id)
    assert [(m.role, m.content) for m in history] == [("user", "Hello")]
    assert _title(db_session, chat_session.id) == DEFAULT_SESSION_TITLE


@pytest.mark.asyncio
async def test_turn_after_failed_first_turn_is_not_first(
    chat_service, db_session, chat_session, stub_provider
) -> None:
    stub_provider.error = ProviderUnavailableError()
    with pytest.raises(ProviderUnavailableError):
        await chat_service.send_message(db_session, chat_session.id, "Hello")

    stub_provider.error = None
    await chat_service.send_message(db_session, chat_session.id, "Hello again")

    assert _title(db_session, chat_session.id) == DEFAULT_SESSION_TITLE
    assert [m.role for m in get_session_messages(db_session, chat_session.id)] == [
        "user",
        "user",
        "assistant",
    ]


@pytest.mark.asyncio
async def test_unknown_session_is_rejected_before_persisting(
    chat_service, db_session, stub_provider
) -> None:
    with pytest.raises(NotFoundError) as exc:
        await chat_service.send_message(db_session, 404404, "Hello")

    assert exc.value.code == ErrorCode.SESSION_NOT_FOUND
    assert get_session_messages(db_session, 404404) == []
    assert stub_provider.requests == []


@pytest.mark.asyncio
async def test_rename_failure_does_not_fail_turn(
    chat_service, db_session, chat_session, monkeypatch
) -> None:
    def broken_rename(db, session_id, title):
        raise PersistenceError("Failed to rename session")

    monkeypatch.setattr(chat_service_module, "rename_session", broken_rename)

    reply = await chat_service.send_message(db_session, chat_session.id, "Hello")

    assert reply.content == "Hi there!"
    assert _title(db_session, chat_session.id) == DEFAULT_SESSION_TITLE


@pytest.mark.asyncio
async def test_assistant_persist_failure_surfaces_persistence_error(
    chat_service, db_session, chat_session, monkeypatch
) -> None:
    real_create = chat_service_module.create_message

    def failing_for_assistant(db, session_id, role, content):
        if role == "assistant":
            raise PersistenceError("Failed to save message")
        return real_create(db, session_id, role, content)

    monkeypatch.setattr(chat_service_module, "create_message", failing_for_assistant)

    with pytest.raises(PersistenceError):
        await chat_service.send_message(db_session, chat_session.id, "Hello")

    assert [m.role for m in get_session_messages(db_session, chat_session.id)] == ["user"]
    assert _title(db_session, chat_session.id) == DEFAULT_SESSION_TITLE


@pytest.mark.asyncio
async def test_same_session_turns_are_serialized(
    chat_service, session_factory, chat_session, stub_provider
) -> None:
    stub_provider.delay = 0.05
    stub_provider.replies = ["reply one", "reply two"]
    db_a, db_b, db_check = session_factory(), session_factory(), session_factory()
    try:
        await asyncio.gather(
            chat_service.send_message(db_a, chat_session.id, "first"),
            chat_service.send_message(db_b, chat_session.id, "second"),
        )

        assert stub_provider.max_in_flight == 1
        history = get_session_messages(db_check, chat_session.id)
        assert [(m.role, m.content) for m in history] == [
            ("user", "first"),
            ("assistant", "reply one"),
            ("user", "second"),
            ("assistant", "reply two"),
        ]
        assert _title(db_check, chat_session.id) == "first"
        assert len(chat_service.locks) == 0
    finally:
        for db in (db_a, db_b, db_check):
            db.close()


@pytest.mark.asyncio
async def test_cross_session_turns_run_in_parallel_without_interference(
    chat_service, session_factory, db_session, user, stub_provider
) -> None:
    stub_provider.delay = 0.05
    session_a = create_session(db_session, user.id)
    session_b = create_session(db_session, user.id)
    db_a, db_b = session_factory(), session_factory()
    try:
        await asyncio.gather(
            chat_service.send_message(db_a, session_a.id, "About apples"),
            chat_service.send_message(db_b, session_b.id, "About bananas"),
        )

        assert stub_provider.max_in_flight == 2
        assert _title(db_session, session_a.id) == "About apples"
        assert _title(db_session, session_b.id) == "About bananas"
        assert [m.content for m in get_session_messages(db_session, session_a.id)][0] == "About apples"
        assert [m.content for m in get_session_messages(db_session, session_b.id)][0] == "About bananas"
        assert all(
            m.session_id == session_a.id for m in get_session_messages(db_session, session_a.id)
        )
    finally:
        db_a.close()
        db_b.close()


@pytest.mark.asyncio
async def test_lock_manager_holds_per_session() -> None:
    locks = SessionLockManager()

    async with locks.hold(1):
        assert locks.is_locked(1)
        assert not locks.is_locked(2)
        async with locks.hold(2):
            assert locks.is_locked(2)
        assert len(locks) == 1

    assert not locks.is_locked(1)
    assert len(locks) == 0


@pytest.mark.asyncio
async def test_lock_manager_releases_on_error() -> None:
    locks = SessionLockManager()

    with pytest.raises(RuntimeError):
        async with locks.hold(7):
            raise RuntimeError("turn blew up")

    assert len(locks) == 0
    async with locks.hold(7):
        assert locks.is_locked(7)
