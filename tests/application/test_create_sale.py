"""Tests for the CreateSaleHandler use case."""

import pytest

from perfume_pos.application.create_sale import CreateSaleHandler
from perfume_pos.application.dto import SaleItemSpec
from perfume_pos.domain.exceptions import (
    EmptyCartError,
    EntityNotFoundError,
    InsufficientStockError,
    PersistenceError,
    ValidationError,
)
from perfume_pos.domain.model.value_objects import Money
from tests.fakes import FakeCatalogRepository, FakeSaleRepository, make_variant


@pytest.fixture
def catalog_repo():
    return FakeCatalogRepository([
        make_variant(1, name="Oud Royal", price="100.00", stock=10),
        make_variant(2, name="Ambre Nuit", price="80.00", stock=1, size_ml=30),
    ])


@pytest.fixture
def sale_repo():
    return FakeSaleRepository()


@pytest.fixture
def handler(sale_repo, catalog_repo):
    return CreateSaleHandler(sale_repo, catalog_repo)


class TestCreateSale:

    def test_records_sale_and_decrements_stock(self, handler, sale_repo, catalog_repo):
        dto = handler.handle([SaleItemSpec(variant_id=1, quantity=2)], "cash")

        assert dto.id == 1
        assert dto.total_amount == "200.00"
        assert dto.items[0].subtotal == "200.00"
        assert dto.items[0].variant_label == "Oud Royal 50ml"
        assert dto.payment_label == "Espèces"
        assert catalog_repo.get_variant(1).stock_qty == 8
        assert sale_repo.get_by_id(1) is not None

    def test_line_ids_are_sequential(self, handler):
        dto = handler.handle(
            [SaleItemSpec(variant_id=1, quantity=1), SaleItemSpec(variant_id=2, quantity=1)],
            "card",
        )
        assert [item.id for item in dto.items] == [1, 2]
        assert dto.total_amount == "180.00"

    def test_sale_ids_increase(self, handler):
        first = handler.handle([SaleItemSpec(variant_id=1, quantity=1)], "cash")
        second = handler.handle([SaleItemSpec(variant_id=1, quantity=1)], "cash")
        assert second.id == first.id + 1

    def test_default_cashier(self, handler):
        dto = handler.handle([SaleItemSpec(variant_id=1, quantity=1)], "cash")
        assert dto.cashier_name == "Caissier Principal"

    def test_explicit_cashier(self, handler):
        dto = handler.handle([SaleItemSpec(variant_id=1, quantity=1)], "cash", "Yasmine")
        assert dto.cashier_name == "Yasmine"

    def test_price_is_snapshot_at_sale_time(self, handler, sale_repo, catalog_repo):
        handler.handle([SaleItemSpec(variant_id=1, quantity=1)], "cash")
        catalog_repo.get_variant(1).price = Money.of("150.00")

        assert sale_repo.get_by_id(1).items[0].unit_price == Money.of("100.00")
        assert sale_repo.get_by_id(1).total_amount == Money.of("100.00")


class TestCreateSaleRejections:

    def test_empty_cart(self, handler, sale_repo):
        with pytest.raises(EmptyCartError):
            handler.handle([], "cash")
        assert sale_repo.list_all() == []

    def test_insufficient_stock_mutates_nothing(self, handler, sale_repo, catalog_repo):
        with pytest.raises(InsufficientStockError, match="Ambre Nuit 30ml"):
            handler.handle(
                [SaleItemSpec(variant_id=1, quantity=3), SaleItemSpec(variant_id=2, quantity=2)],
                "cash",
            )
        assert catalog_repo.get_variant(1).stock_qty == 10
        assert catalog_repo.get_variant(2).stock_qty == 1
        assert catalog_repo.writes == []
        assert sale_repo.list_all() == []

    def test_same_variant_on_two_lines_is_checked_together(self, handler, catalog_repo):
        with pytest.raises(InsufficientStockError):
            handler.handle(
                [SaleItemSpec(variant_id=2, quantity=1), SaleItemSpec(variant_id=2, quantity=1)],
                "cash",
            )
        assert catalog_repo.get_variant(2).stock_qty == 1

    def test_unknown_variant(self, handler, sale_repo):
        with pytest.raises(EntityNotFoundError, match="Variant #99"):
            handler.handle([SaleItemSpec(variant_id=99, quantity=1)], "cash")
        assert sale_repo.list_all() == []

    def test_invalid_payment_method(self, handler, catalog_repo):
        with pytest.raises(ValidationError, match="payment method"):
            handler.handle([SaleItemSpec(variant_id=1, quantity=1)], "cheque")
        assert catalog_repo.get_variant(1).stock_qty == 10

    def test_non_positive_quantity(self, handler):
        with pytest.raises(ValidationError):
            handler.handle([SaleItemSpec(variant_id=1, quantity=0)], "cash")


class TestCreateSaleMidCommitFailure:

    def test_second_stock_write_failure_is_logged(self, handler, sale_repo, catalog_repo, caplog):
        catalog_repo.fail_after = 1

        with pytest.raises(PersistenceError):
            handler.handle(
                [SaleItemSpec(variant_id=1, quantity=1), SaleItemSpec(variant_id=2, quantity=1)],
                "cash",
            )

        assert catalog_repo.writes == [1]
        assert catalog_repo.get_variant(1).stock_qty == 9
        assert sale_repo.list_all() == []
        assert "part-way through sale #1" in caplog.text
        assert "reconcile stock manually" in caplog.text
