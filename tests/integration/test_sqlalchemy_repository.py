"""SQLAlchemy repository tests against a file-backed SQLite database."""

from decimal import Decimal

import pytest
import pytest_asyncio

from product_catalog.application.intents import CreateProductCommand, ListProductsQuery
from product_catalog.bootstrap import build_application
from product_catalog.core.config import Settings
from product_catalog.core.errors import NotFound
from product_catalog.domain.repositories import IProductRepository
from product_catalog.messaging.publishers import NoOpPublisher
from product_catalog.storage.postgres import (
    SqlAlchemyProductRepository,
    create_all,
    create_engine,
    create_session_factory,
)


@pytest_asyncio.fixture
async def sql_repository(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'catalog.db'}")
    await create_all(engine)
    try:
        yield SqlAlchemyProductRepository(create_session_factory(engine))
    finally:
        await engine.dispose()


class TestSqlAlchemyProductRepository:
    @pytest.mark.asyncio
    async def test_satisfies_protocol(self, sql_repository):
        assert isinstance(sql_repository, IProductRepository)

    @pytest.mark.asyncio
    async def test_add_and_get(self, sql_repository, sample_product):
        await sql_repository.add(sample_product)

        stored = await sql_repository.get_by_id(sample_product.id)
        assert stored is not None
        assert stored.id == sample_product.id
        assert stored.name == sample_product.name
        assert stored.price == sample_product.price
        assert stored.created_at == sample_product.created_at
        assert stored.created_at.tzinfo is not None
        assert stored.updated_at is None

    @pytest.mark.asyncio
    async def test_get_missing(self, sql_repository):
        assert await sql_repository.get_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_update(self, sql_repository, sample_product, sim_clock):
        await sql_repository.add(sample_product)
        sim_clock.advance(30)
        sample_product.update("Renamed", "New text", Decimal("12.50"), sim_clock)
        await sql_repository.update(sample_product)

        stored = await sql_repository.get_by_id(sample_product.id)
        assert stored.name == "Renamed"
        assert stored.description == "New text"
        assert stored.price == Decimal("12.50")
        assert stored.updated_at == sim_clock.now()

    @pytest.mark.asyncio
    async def test_update_missing_raises(self, sql_repository, sample_product):
        with pytest.raises(NotFound):
            await sql_repository.update(sample_product)

    @pytest.mark.asyncio
    async def test_delete(self, sql_repository, sample_product):
        await sql_repository.add(sample_product)
        assert await sql_repository.delete(sample_product.id) is True
        assert await sql_repository.delete(sample_product.id) is False
        assert await sql_repository.count() == 0

    @pytest.mark.asyncio
    async def test_list_and_count(self, sql_repository, make_product, sim_clock):
        ids = []
        for i in range(7):
            product = make_product(name=f"Item {i}", clock=sim_clock)
            ids.append((await sql_repository.add(product)).id)
            sim_clock.advance(1)

        assert await sql_repository.count() == 7
        assert [p.id for p in await sql_repository.list(0, 3)] == ids[:3]
        assert [p.id for p in await sql_repository.list(6, 3)] == ids[6:]


class TestSqlBackedApplication:
    @pytest.mark.asyncio
    async def test_settings_select_sql_storage(self, tmp_path, sim_clock):
        settings = Settings(
            database={"url": f"sqlite+aiosqlite:///{tmp_path / 'app.db'}"},
        )
        application = build_application(
            settings, publisher=NoOpPublisher(), clock=sim_clock,
        )
        assert isinstance(application.repository, SqlAlchemyProductRepository)

        await application.start()
        try:
            for i in range(12):
                await application.dispatcher.dispatch(
                    CreateProductCommand(f"Item {i}", "desc", Decimal("2.00"))
                )
                sim_clock.advance(1)
            page = (
                await application.dispatcher.dispatch(ListProductsQuery(2, 5))
            ).value
        finally:
            await application.stop()

        assert page.total_count == 12
        assert [p.name for p in page.items] == [f"Item {i}" for i in range(5, 10)]
        assert page.has_next_page and page.has_previous_page
