"""Tests for the read-side handlers: stock, catalog, sales and returns history."""

from datetime import datetime, timedelta, timezone

import pytest

from perfume_pos.application.browse_catalog import BrowseCatalogHandler
from perfume_pos.application.create_return import CreateReturnHandler
from perfume_pos.application.create_sale import CreateSaleHandler
from perfume_pos.application.dto import (
    ExchangeItemSpec,
    ReturnItemSpec,
    ReturnRequest,
    SaleItemSpec,
)
from perfume_pos.application.returns_history import ListReturnsHandler, ShowReturnHandler
from perfume_pos.application.sales_history import (
    ListReturnableSalesHandler,
    ListSalesHandler,
    ShowSaleHandler,
)
from perfume_pos.application.show_stock import ShowStockHandler
from perfume_pos.domain.exceptions import EntityNotFoundError, SaleNotFoundError, ValidationError
from perfume_pos.domain.model.catalog import Category, Gender, Perfume
from perfume_pos.domain.repository.filters import DateRange, StockLevel, VariantFilter
from tests.fakes import (
    FakeCatalogRepository,
    FakeReturnRepository,
    FakeSaleRepository,
    make_variant,
)


@pytest.fixture
def catalog_repo():
    categories = [
        Category(id=1, name="Orientaux", slug="orientaux"),
        Category(id=2, name="Floraux", slug="floraux"),
    ]
    perfumes = [
        Perfume(id=1, name="Oud Royal", slug="oud-royal", category_id=1, gender=Gender.MEN),
        Perfume(id=2, name="Ambre Nuit", slug="ambre-nuit", category_id=1, gender=Gender.UNISEX),
        Perfume(id=3, name="Rose Taifi", slug="rose-taifi", category_id=2, gender=Gender.WOMEN),
    ]
    variants = [
        make_variant(1, name="Oud Royal", price="100.00", stock=10, perfume_id=1),
        make_variant(2, name="Ambre Nuit", price="80.00", stock=3, perfume_id=2),
        make_variant(3, name="Rose Taifi", price="130.00", stock=0, perfume_id=3),
        make_variant(4, name="Rose Taifi", price="60.00", stock=8, perfume_id=3,
                     size_ml=30, active=False),
    ]
    return FakeCatalogRepository(variants, perfumes, categories)


@pytest.fixture
def sale_repo():
    return FakeSaleRepository()


@pytest.fixture
def return_repo():
    return FakeReturnRepository()


@pytest.fixture
def two_sales(sale_repo, catalog_repo):
    create = CreateSaleHandler(sale_repo, catalog_repo)
    create.handle([SaleItemSpec(variant_id=1, quantity=2)], "cash", "Yasmine")
    create.handle([SaleItemSpec(variant_id=2, quantity=1)], "card", "Karim")


class TestShowStock:

    def test_stats_cover_whole_catalog(self, catalog_repo):
        report = ShowStockHandler(catalog_repo).handle(VariantFilter(stock_level=StockLevel.OUT))

        assert [line.id for line in report.lines] == [3]
        assert report.stats.total_variants == 4
        assert report.stats.low_stock == 1
        assert report.stats.out_of_stock == 1
        # 10*100 + 3*80 + 0*130 + 8*60
        assert report.stats.total_value == "1720.00"

    def test_low_stock_filter(self, catalog_repo):
        report = ShowStockHandler(catalog_repo).handle(VariantFilter(stock_level=StockLevel.LOW))
        assert [line.id for line in report.lines] == [2]

    def test_restock_request(self, catalog_repo):
        request = ShowStockHandler(catalog_repo).restock_request({2: 10, 3: 5})
        assert request.total_units == 15
        assert request.lines[1].current_stock == 0
        assert catalog_repo.get_variant(3).stock_qty == 0

    def test_restock_request_requires_lines(self, catalog_repo):
        with pytest.raises(ValidationError):
            ShowStockHandler(catalog_repo).restock_request({})


class TestBrowseCatalog:

    def test_sellable_hides_inactive_and_empty(self, catalog_repo):
        ids = [v.id for v in BrowseCatalogHandler(catalog_repo).sellable()]
        assert ids == [1, 2]

    def test_sellable_by_category(self, catalog_repo):
        ids = [v.id for v in BrowseCatalogHandler(catalog_repo).sellable(category_id=2)]
        assert ids == []

    def test_search_by_sku(self, catalog_repo):
        found = BrowseCatalogHandler(catalog_repo).variants(VariantFilter(search="sku-002"))
        assert [v.label for v in found] == ["Ambre Nuit 50ml"]

    def test_perfumes_by_category(self, catalog_repo):
        names = [p.name for p in BrowseCatalogHandler(catalog_repo).perfumes(category_id=1)]
        assert names == ["Oud Royal", "Ambre Nuit"]


class TestSalesHistory:

    def test_stats(self, two_sales, sale_repo, return_repo):
        history = ListSalesHandler(sale_repo, return_repo).handle()
        assert history.stats.sale_count == 2
        assert history.stats.revenue == "280.00"
        assert history.stats.items_sold == 3
        assert history.stats.average_sale == "140.00"

    def test_empty_history(self, sale_repo, return_repo):
        stats = ListSalesHandler(sale_repo, return_repo).handle().stats
        assert stats.sale_count == 0
        assert stats.average_sale == "0.00"

    def test_period_filter(self, two_sales, sale_repo, return_repo):
        tomorrow = datetime.now(timezone.utc) + timedelta(days=1)
        history = ListSalesHandler(sale_repo, return_repo).handle(DateRange(start=tomorrow))
        assert history.sales == []

    def test_show_sale_with_return(self, two_sales, sale_repo, return_repo, catalog_repo):
        CreateReturnHandler(return_repo, sale_repo, catalog_repo).handle(
            ReturnRequest(
                sale_id=1,
                items=[ReturnItemSpec(sale_item_id=1, quantity=1)],
                operation_type="refund",
                reason="other",
                payment_method="cash",
            )
        )
        detail = ShowSaleHandler(sale_repo, return_repo).handle(1)
        assert detail.sale.has_return
        assert len(detail.returns) == 1

    def test_show_unknown_sale(self, sale_repo, return_repo):
        with pytest.raises(SaleNotFoundError):
            ShowSaleHandler(sale_repo, return_repo).handle(12)


class TestReturnableSales:

    @pytest.fixture
    def returned_first(self, two_sales, sale_repo, return_repo, catalog_repo):
        CreateReturnHandler(return_repo, sale_repo, catalog_repo).handle(
            ReturnRequest(
                sale_id=1,
                items=[ReturnItemSpec(sale_item_id=1, quantity=1)],
                operation_type="exchange",
                reason="wrong_item",
                payment_method="cash",
                exchange_items=[ExchangeItemSpec(variant_id=2, quantity=1)],
            )
        )

    def test_newest_first(self, two_sales, sale_repo, return_repo):
        ids = [s.id for s in ListReturnableSalesHandler(sale_repo, return_repo).handle()]
        assert ids == [2, 1]

    def test_returned_sales_hidden(self, returned_first, sale_repo, return_repo):
        ids = [s.id for s in ListReturnableSalesHandler(sale_repo, return_repo).handle()]
        assert ids == [2]

    def test_returned_sales_flagged_on_request(self, returned_first, sale_repo, return_repo):
        sales = ListReturnableSalesHandler(sale_repo, return_repo).handle(include_returned=True)
        assert [(s.id, s.has_return) for s in sales] == [(2, False), (1, True)]

    def test_search_by_cashier(self, two_sales, sale_repo, return_repo):
        sales = ListReturnableSalesHandler(sale_repo, return_repo).handle(search="karim")
        assert [s.id for s in sales] == [2]


class TestReturnsHistory:

    def test_stats(self, two_sales, sale_repo, return_repo, catalog_repo):
        create = CreateReturnHandler(return_repo, sale_repo, catalog_repo)
        create.handle(ReturnRequest(
            sale_id=1, items=[ReturnItemSpec(sale_item_id=1, quantity=1)],
            operation_type="refund", reason="defective", payment_method="cash",
        ))
        create.handle(ReturnRequest(
            sale_id=2, items=[ReturnItemSpec(sale_item_id=1, quantity=1)],
            operation_type="exchange", reason="wrong_item", payment_method="card",
            exchange_items=[ExchangeItemSpec(variant_id=1, quantity=1)],
        ))

        history = ListReturnsHandler(return_repo).handle()
        assert history.stats.return_count == 2
        assert history.stats.total_refunded == "100.00"
        assert history.stats.exchange_count == 1
        # +100 refund, 80 - 100 = -20 on the exchange
        assert history.stats.net_difference == "80.00"

    def test_show_unknown_return(self, return_repo):
        with pytest.raises(EntityNotFoundError, match="Return #4 not found"):
            ShowReturnHandler(return_repo).handle(4)
