from __future__ import annotations

import sqlite3

import pytest

from petotel.hotels import CheckoutContext
from petotel.storage import CheckoutSessionStore, new_checkout_id


def _context(**overrides) -> CheckoutContext:
    values = {
        "prebook_id": "PB-1",
        "transaction_id": "TX-1",
        "hotel_id": "lp1",
        "checkin": "2026-11-10",
        "checkout": "2026-11-12",
        "first_name": "Ada",
        "last_name": "Lovelace",
        "email": "ada@example.com",
    }
    values.update(overrides)
    return CheckoutContext(**values)


@pytest.mark.asyncio
async def test_store_round_trips_context(tmp_path) -> None:
    db_path = tmp_path / "sessions" / "checkout.sqlite3"
    store = CheckoutSessionStore(db_path)
    await store.initialize()

    checkout_id = await store.create(_context(pet_type="cat"))
    loaded = await store.read(checkout_id)

    assert loaded == _context(pet_type="cat")
    assert await store.read("unknown") is None
    await store.close()

    with sqlite3.connect(db_path) as conn:
        version = conn.execute("SELECT value FROM meta WHERE key = 'schema_version'").fetchone()
    assert version == ("1",)


@pytest.mark.asyncio
async def test_checkout_attempts_do_not_share_rows(tmp_path) -> None:
    store = CheckoutSessionStore(tmp_path / "checkout.sqlite3")
    await store.initialize()

    first = await store.create(_context(prebook_id="PB-1"))
    second = await store.create(_context(prebook_id="PB-2"))

    assert first != second
    assert (await store.read(first)).prebook_id == "PB-1"
    assert (await store.read(second)).prebook_id == "PB-2"

    assert await store.delete(first) is True
    assert await store.delete(first) is False
    assert await store.read(first) is None
    assert await store.read(second) is not None
    await store.close()


@pytest.mark.asyncio
async def test_explicit_id_overwrites_previous_context(tmp_path) -> None:
    store = CheckoutSessionStore(tmp_path / "checkout.sqlite3")
    await store.initialize()
    checkout_id = new_checkout_id()

    await store.create(_context(email="old@example.com"), checkout_id=checkout_id)
    await store.create(_context(email="new@example.com"), checkout_id=checkout_id)

    assert (await store.read(checkout_id)).email == "new@example.com"
    await store.close()


@pytest.mark.asyncio
async def test_expired_contexts_read_as_absent_and_are_purged(tmp_path, monkeypatch) -> None:
    store = CheckoutSessionStore(tmp_path / "checkout.sqlite3", ttl_s=60)
    await store.initialize()

    clock = {"now": 1_000_000.0}
    monkeypatch.setattr("petotel.storage.session_store.time.time", lambda: clock["now"])

    checkout_id = await store.create(_context())
    clock["now"] += 30
    assert await store.read(checkout_id) is not None

    clock["now"] += 31
    assert await store.read(checkout_id) is None
    assert await store.purge_expired() == 1
    await store.close()


@pytest.mark.asyncio
async def test_unreadable_context_is_discarded(tmp_path) -> None:
    db_path = tmp_path / "checkout.sqlite3"
    store = CheckoutSessionStore(db_path)
    await store.initialize()
    checkout_id = await store.create(_context())
    await store.close()

    with sqlite3.connect(db_path) as conn:
        conn.execute("UPDATE checkout_sessions SET context = ? WHERE checkout_id = ?", ("{}", checkout_id))

    store = CheckoutSessionStore(db_path)
    await store.initialize()
    assert await store.read(checkout_id) is None
    assert await store.delete(checkout_id) is False
    await store.close()


@pytest.mark.asyncio
async def test_operations_require_initialize(tmp_path) -> None:
    store = CheckoutSessionStore(tmp_path / "checkout.sqlite3")

    with pytest.raises(RuntimeError):
        await store.read("anything")


@pytest.mark.asyncio
async def test_create_sweeps_abandoned_contexts(tmp_path, monkeypatch) -> None:
    db_path = tmp_path / "checkout.sqlite3"
    store = CheckoutSessionStore(db_path, ttl_s=60)
    await store.initialize()

    clock = {"now": 1_000_000.0}
    monkeypatch.setattr("petotel.storage.session_store.time.time", lambda: clock["now"])

    abandoned = await store.create(_context(prebook_id="PB-old"))
    clock["now"] += 120
    current = await store.create(_context(prebook_id="PB-new"))
    await store.close()

    with sqlite3.connect(db_path) as conn:
        rows = conn.execute("SELECT checkout_id FROM checkout_sessions").fetchall()
    assert rows == [(current,)]
    assert abandoned != current
