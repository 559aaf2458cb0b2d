"""Tests for engine/session helpers and the injectable clocks."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from gst_kernel.db.engine import get_engine, get_session_factory, session_scope
from gst_kernel.domain.clock import DeterministicClock, SystemClock
from gst_kernel.models import ProductModel


class TestSessionScope:

    def test_commits_on_success(self, session):
        with session_scope() as scoped:
            scoped.add(ProductModel(name="Scoped", current_stock=1))

        names = session.scalars(select(ProductModel.name)).all()
        assert names == ["Scoped"]

    def test_rolls_back_on_error(self, session):
        with pytest.raises(RuntimeError):
            with session_scope() as scoped:
                scoped.add(ProductModel(name="Discarded", current_stock=1))
                scoped.flush()
                raise RuntimeError("abort")

        assert session.scalars(select(ProductModel)).all() == []

    def test_factory_bound_to_engine(self, db_engine):
        assert get_engine() is db_engine
        assert get_session_factory().kw["bind"] is db_engine

    def test_name_key_normalized_on_insert(self, session):
        product = ProductModel(name="  Mixed Case ", current_stock=0)
        session.add(product)
        session.flush()

        assert product.name_key == "mixed case"

    def test_name_key_follows_rename(self, session):
        product = ProductModel(name="Widget", current_stock=0)
        session.add(product)
        session.flush()

        product.name = " Gadget"
        session.flush()

        assert product.name_key == "gadget"


class TestClocks:

    def test_deterministic_clock(self):
        clock = DeterministicClock(datetime(2025, 3, 31, 23, 59, 59, tzinfo=timezone.utc))
        assert clock.today().isoformat() == "2025-03-31"

        clock.advance(1)
        assert clock.today().isoformat() == "2025-04-01"

    def test_system_clock_is_aware(self):
        now = SystemClock().now()
        assert now.tzinfo is not None
        assert abs(datetime.now(timezone.utc) - now) < timedelta(minutes=1)
