"""Event bus, SQLAlchemy engine source and source selection."""

from __future__ import annotations

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from nplusone_control.errors import EventSourceError
from nplusone_control.sources import (
    BusEventSource,
    EventBus,
    QueryEventSource,
    SqlAlchemyEventSource,
    query_text,
    source_for,
)

from .conftest import CHANNEL


class TestEventBus:
    def test_publish_reaches_channel_subscribers_only(self, bus):
        received, other = [], []
        bus.subscribe(CHANNEL, received.append)
        bus.subscribe("sql.other", other.append)

        bus.publish(CHANNEL, "SELECT 1")

        assert received == ["SELECT 1"]
        assert other == []

    def test_unsubscribe_is_idempotent(self, bus):
        received = []
        unsubscribe = bus.subscribe(CHANNEL, received.append)
        unsubscribe()
        unsubscribe()

        bus.publish(CHANNEL, "SELECT 1")

        assert received == []
        assert bus.subscriber_count(CHANNEL) == 0

    def test_callback_may_unsubscribe_during_publish(self, bus):
        received = []
        handles = {}

        def once(payload):
            received.append(payload)
            handles["self"]()

        handles["self"] = bus.subscribe(CHANNEL, once)
        bus.publish(CHANNEL, "SELECT 1")
        bus.publish(CHANNEL, "SELECT 2")

        assert received == ["SELECT 1"]


class TestQueryText:
    def test_string_payload(self):
        assert query_text("SELECT 1") == "SELECT 1"

    def test_mapping_payload(self):
        assert query_text({"sql": "SELECT 1", "name": "User Load"}) == "SELECT 1"

    @pytest.mark.parametrize("payload", [None, 42, {"name": "CACHE"}, {"sql": None}])
    def test_payload_without_text(self, payload):
        assert query_text(payload) is None


class TestBusEventSource:
    def test_forwards_query_text_and_skips_other_payloads(self, bus):
        received = []
        unsubscribe = bus.source(CHANNEL).subscribe(received.append)

        bus.publish(CHANNEL, {"sql": "SELECT 1"})
        bus.publish(CHANNEL, {"cached": True})
        bus.publish(CHANNEL, "SELECT 2")
        unsubscribe()
        bus.publish(CHANNEL, "SELECT 3")

        assert received == ["SELECT 1", "SELECT 2"]

    def test_satisfies_protocol(self, bus):
        assert isinstance(bus.source(CHANNEL), QueryEventSource)


class TestSqlAlchemyEventSource:
    def test_captures_statements_until_unsubscribed(self, engine):
        received = []
        unsubscribe = SqlAlchemyEventSource(engine).subscribe(received.append)
        with engine.connect() as conn:
            conn.execute(text('SELECT count(*) FROM "users"'))
            unsubscribe()
            conn.execute(text('SELECT count(*) FROM "orders"'))

        assert received == ['SELECT count(*) FROM "users"']

    def test_after_cursor_execute(self, engine):
        received = []
        unsubscribe = SqlAlchemyEventSource(engine, "after_cursor_execute").subscribe(received.append)
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        finally:
            unsubscribe()

        assert received == ["SELECT 1"]

    def test_unknown_event_rejected(self, engine):
        with pytest.raises(EventSourceError, match="sql.active_record"):
            SqlAlchemyEventSource(engine, "sql.active_record")

    def test_unsubscribe_twice_is_safe(self, engine):
        unsubscribe = SqlAlchemyEventSource(engine).subscribe(lambda _: None)
        unsubscribe()
        unsubscribe()


class TestSourceFor:
    def test_engine(self, engine):
        source = source_for(engine, "before_cursor_execute")
        assert isinstance(source, SqlAlchemyEventSource)
        assert source.target is engine

    def test_session_uses_its_bind(self, engine):
        with Session(engine) as sess:
            source = source_for(sess, "after_cursor_execute")
        assert isinstance(source, SqlAlchemyEventSource)
        assert source.target is engine
        assert source.event_name == "after_cursor_execute"

    def test_bus_uses_event_as_channel(self, bus):
        source = source_for(bus, CHANNEL)
        assert isinstance(source, BusEventSource)
        assert source.name == CHANNEL

    def test_existing_source_passes_through(self, bus):
        source = bus.source(CHANNEL)
        assert source_for(source, "ignored") is source

    def test_unsupported_target(self):
        with pytest.raises(EventSourceError, match="Cannot capture queries from dict"):
            source_for({}, CHANNEL)

    def test_engine_with_bus_channel_name_is_rejected(self, engine):
        with pytest.raises(EventSourceError):
            source_for(engine, CHANNEL)


def test_unbound_session_is_rejected():
    with Session() as sess:
        with pytest.raises(EventSourceError, match="not bound"):
            source_for(sess, "before_cursor_execute")
