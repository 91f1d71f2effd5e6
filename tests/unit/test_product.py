"""Tests for the Product aggregate."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from product_catalog.core.clock import SimClock
from product_catalog.core.errors import ValidationFailed
from product_catalog.domain.product import Product


class TestCreate:
    def test_sets_fields_and_fresh_identity(self):
        before = datetime.now(timezone.utc)
        product = Product.create("Test Product", "Test Description", Decimal("99.99"))

        assert product.id
        assert len(product.id) == 36
        assert product.name == "Test Product"
        assert product.description == "Test Description"
        assert product.price == Decimal("99.99")
        assert product.updated_at is None
        assert product.created_at.tzinfo is not None
        assert abs((product.created_at - before).total_seconds()) < 1.0

    def test_identity_unique(self, make_product):
        ids = {make_product().id for _ in range(50)}
        assert len(ids) == 50

    def test_uses_clock(self, make_product, sim_clock):
        product = make_product(clock=sim_clock)
        assert product.created_at == sim_clock.now()

    @pytest.mark.parametrize(
        "name,description,price,field",
        [
            ("", "desc", Decimal("1"), "name"),
            ("   ", "desc", Decimal("1"), "name"),
            ("x" * 201, "desc", Decimal("1"), "name"),
            ("name", "", Decimal("1"), "description"),
            ("name", "d" * 1001, Decimal("1"), "description"),
            ("name", "desc", Decimal("0"), "price"),
            ("name", "desc", Decimal("-5"), "price"),
            ("name", "desc", Decimal("1000000.01"), "price"),
            ("name", "desc", Decimal("1.234"), "price"),
        ],
    )
    def test_rejects_invalid_fields(self, name, description, price, field):
        with pytest.raises(ValidationFailed) as exc_info:
            Product.create(name, description, price)
        assert field in {e.field for e in exc_info.value.field_errors}

    def test_accepts_boundaries(self):
        product = Product.create("n" * 200, "d" * 1000, Decimal("1000000"))
        assert product.price == Decimal("1000000")

    def test_reports_every_bad_field(self):
        with pytest.raises(ValidationFailed) as exc_info:
            Product.create("", "", Decimal("0"))
        fields = {e.field for e in exc_info.value.field_errors}
        assert fields == {"name", "description", "price"}


class TestUpdate:
    def test_changes_fields_and_stamps_updated_at(self, make_product, sim_clock):
        product = make_product(clock=sim_clock)
        original_id = product.id
        original_created = product.created_at

        sim_clock.advance(60)
        product.update("Updated Name", "Updated Description", Decimal("75.00"), sim_clock)

        assert product.name == "Updated Name"
        assert product.description == "Updated Description"
        assert product.price == Decimal("75.00")
        assert product.updated_at == sim_clock.now()
        assert product.id == original_id
        assert product.created_at == original_created

    def test_updated_at_never_moves_backwards(self, make_product):
        start = datetime(2024, 6, 1, tzinfo=timezone.utc)
        product = make_product(clock=SimClock(start=start + timedelta(hours=1)))

        # A clock behind created_at still yields updated_at >= created_at.
        product.update("A", "B", Decimal("1"), SimClock(start=start))
        assert product.updated_at == product.created_at

    def test_successive_updates_advance(self, make_product, sim_clock):
        product = make_product(clock=sim_clock)
        sim_clock.advance(1)
        product.update("A", "B", Decimal("1"), sim_clock)
        first = product.updated_at
        sim_clock.advance(1)
        product.update("C", "D", Decimal("2"), sim_clock)
        assert product.updated_at > first

    def test_rejected_update_leaves_product_untouched(self, make_product, sim_clock):
        product = make_product(clock=sim_clock)
        snapshot = product.model_dump()

        with pytest.raises(ValidationFailed):
            product.update("Valid name", "", Decimal("10"), sim_clock)

        assert product.model_dump() == snapshot


class TestImmutableFields:
    def test_id_is_frozen(self, sample_product):
        with pytest.raises(ValidationError):
            sample_product.id = "other"

    def test_created_at_is_frozen(self, sample_product):
        with pytest.raises(ValidationError):
            sample_product.created_at = datetime.now(timezone.utc)
