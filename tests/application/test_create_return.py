"""Tests for the CreateReturnHandler use case (refunds and exchanges)."""

import pytest

from perfume_pos.application.create_return import CreateReturnHandler
from perfume_pos.application.create_sale import CreateSaleHandler
from perfume_pos.application.dto import (
    ExchangeItemSpec,
    ReturnItemSpec,
    ReturnRequest,
    SaleItemSpec,
)
from perfume_pos.domain.exceptions import (
    AlreadyReturnedError,
    EmptyExchangeError,
    EmptyReturnError,
    EntityNotFoundError,
    InsufficientStockError,
    OverReturnError,
    PersistenceError,
    SaleNotFoundError,
    ValidationError,
)
from perfume_pos.domain.model.value_objects import Money
from tests.fakes import (
    FakeCatalogRepository,
    FakeReturnRepository,
    FakeSaleRepository,
    make_variant,
)


@pytest.fixture
def catalog_repo():
    return FakeCatalogRepository([
        make_variant(1, name="Oud Royal", price="100.00", stock=10),
        make_variant(2, name="Ambre Nuit", price="80.00", stock=5, size_ml=30),
        make_variant(3, name="Rose Taifi", price="130.00", stock=0),
    ])


@pytest.fixture
def sale_repo():
    return FakeSaleRepository()


@pytest.fixture
def return_repo():
    return FakeReturnRepository()


@pytest.fixture
def sale(sale_repo, catalog_repo):
    """Sale #1: two units of Oud Royal on line 1, one Ambre Nuit on line 2."""
    return CreateSaleHandler(sale_repo, catalog_repo).handle(
        [SaleItemSpec(variant_id=1, quantity=2), SaleItemSpec(variant_id=2, quantity=1)],
        "cash",
    )


@pytest.fixture
def handler(return_repo, sale_repo, catalog_repo):
    return CreateReturnHandler(return_repo, sale_repo, catalog_repo)


def refund(sale_id=1, items=None, **kwargs):
    return ReturnRequest(
        sale_id=sale_id,
        items=items if items is not None else [ReturnItemSpec(sale_item_id=1, quantity=1)],
        operation_type="refund",
        reason=kwargs.pop("reason", "customer_request"),
        payment_method="cash",
        **kwargs,
    )


def exchange(sale_id=1, items=None, exchange_items=None, **kwargs):
    return ReturnRequest(
        sale_id=sale_id,
        items=items if items is not None else [ReturnItemSpec(sale_item_id=1, quantity=1)],
        operation_type="exchange",
        reason=kwargs.pop("reason", "wrong_item"),
        payment_method="cash",
        exchange_items=(
            exchange_items if exchange_items is not None
            else [ExchangeItemSpec(variant_id=2, quantity=1)]
        ),
        **kwargs,
    )


class TestRefund:

    def test_refund_restocks_and_records(self, handler, sale, catalog_repo, return_repo):
        dto = handler.handle(refund())

        assert dto.return_total == "100.00"
        assert dto.exchange_total == "0.00"
        assert dto.difference == "100.00"
        assert dto.settlement == "refund_due"
        assert dto.operation_label == "Remboursement"
        assert catalog_repo.get_variant(1).stock_qty == 9  # 10 - 2 sold + 1 back
        assert len(return_repo.find_for_sale(1)) == 1

    def test_defective_goods_are_restocked_too(self, handler, sale, catalog_repo):
        handler.handle(refund(reason="defective"))
        assert catalog_repo.get_variant(1).stock_qty == 9

    def test_full_line_can_be_returned(self, handler, sale):
        dto = handler.handle(refund(items=[ReturnItemSpec(sale_item_id=1, quantity=2)]))
        assert dto.return_total == "200.00"

    def test_uses_price_paid_not_current_price(self, handler, sale, catalog_repo):
        catalog_repo.get_variant(1).price = Money.of("150.00")
        dto = handler.handle(refund())
        assert dto.return_items[0].unit_price == "100.00"
        assert dto.return_total == "100.00"

    def test_exchange_items_ignored_on_refund(self, handler, sale, catalog_repo):
        request = refund(exchange_items=[ExchangeItemSpec(variant_id=2, quantity=1)])
        dto = handler.handle(request)
        assert dto.exchange_items == []
        assert catalog_repo.get_variant(2).stock_qty == 4  # unchanged since the sale

    def test_notes_and_default_cashier(self, handler, sale):
        dto = handler.handle(refund(notes="Flacon fissuré"))
        assert dto.notes == "Flacon fissuré"
        assert dto.cashier_name == "Caissier Principal"


class TestExchange:

    def test_cheaper_replacement(self, handler, sale, catalog_repo):
        dto = handler.handle(exchange())

        assert dto.return_total == "100.00"
        assert dto.exchange_total == "80.00"
        assert dto.difference == "20.00"
        assert dto.settlement == "refund_due"
        assert catalog_repo.get_variant(1).stock_qty == 9
        assert catalog_repo.get_variant(2).stock_qty == 3  # 5 - 1 sold - 1 exchanged

    def test_dearer_replacement_customer_owes(self, handler, sale, catalog_repo):
        catalog_repo.get_variant(3).apply_stock_delta(2)
        dto = handler.handle(exchange(exchange_items=[ExchangeItemSpec(variant_id=3, quantity=1)]))
        assert dto.difference == "-30.00"
        assert dto.settlement == "customer_owes"

    def test_exchange_uses_current_price(self, handler, sale, catalog_repo):
        catalog_repo.get_variant(2).price = Money.of("90.00")
        dto = handler.handle(exchange())
        assert dto.exchange_total == "90.00"
        assert dto.difference == "10.00"

    def test_exchanging_for_the_same_variant(self, handler, sale, catalog_repo):
        dto = handler.handle(exchange(exchange_items=[ExchangeItemSpec(variant_id=1, quantity=1)]))
        assert dto.difference == "0.00"
        assert dto.settlement == "settled"
        assert catalog_repo.get_variant(1).stock_qty == 8

    def test_without_replacement_items(self, handler, sale, return_repo):
        with pytest.raises(EmptyExchangeError):
            handler.handle(exchange(exchange_items=[]))
        assert return_repo.list_all() == []

    def test_out_of_stock_replacement(self, handler, sale, catalog_repo, return_repo):
        with pytest.raises(InsufficientStockError, match="Rose Taifi"):
            handler.handle(exchange(exchange_items=[ExchangeItemSpec(variant_id=3, quantity=1)]))
        assert catalog_repo.get_variant(1).stock_qty == 8
        assert return_repo.list_all() == []

    def test_unknown_replacement_variant(self, handler, sale):
        with pytest.raises(EntityNotFoundError, match="Variant #42"):
            handler.handle(exchange(exchange_items=[ExchangeItemSpec(variant_id=42, quantity=1)]))


class TestReturnRejections:

    def test_unknown_sale(self, handler):
        with pytest.raises(SaleNotFoundError, match="Sale #7 not found"):
            handler.handle(refund(sale_id=7))

    def test_second_return_rejected_without_side_effects(
        self, handler, sale, catalog_repo, return_repo
    ):
        handler.handle(refund())
        stock_before = catalog_repo.get_variant(1).stock_qty

        with pytest.raises(AlreadyReturnedError, match="Sale #1 already has a return"):
            handler.handle(refund(items=[ReturnItemSpec(sale_item_id=2, quantity=1)]))

        assert catalog_repo.get_variant(1).stock_qty == stock_before
        assert len(return_repo.list_all()) == 1

    def test_no_items(self, handler, sale):
        with pytest.raises(EmptyReturnError):
            handler.handle(refund(items=[]))

    def test_more_than_sold(self, handler, sale, return_repo):
        with pytest.raises(OverReturnError, match="only 2 sold"):
            handler.handle(refund(items=[ReturnItemSpec(sale_item_id=1, quantity=3)]))
        assert return_repo.list_all() == []

    def test_split_lines_cannot_exceed_sold_together(self, handler, sale):
        items = [
            ReturnItemSpec(sale_item_id=1, quantity=1),
            ReturnItemSpec(sale_item_id=1, quantity=2),
        ]
        with pytest.raises(OverReturnError, match="Cannot return 3"):
            handler.handle(refund(items=items))

    def test_zero_quantity(self, handler, sale):
        with pytest.raises(OverReturnError, match="must be positive"):
            handler.handle(refund(items=[ReturnItemSpec(sale_item_id=1, quantity=0)]))

    def test_item_from_another_sale(self, handler, sale):
        with pytest.raises(EntityNotFoundError, match="not part of sale #1"):
            handler.handle(refund(items=[ReturnItemSpec(sale_item_id=99, quantity=1)]))

    def test_sale_checked_before_items(self, handler):
        with pytest.raises(SaleNotFoundError):
            handler.handle(refund(sale_id=5, items=[]))

    def test_invalid_reason(self, handler, sale):
        with pytest.raises(ValidationError, match="return reason"):
            handler.handle(refund(reason="changed_mind"))


class TestMidCommitFailure:

    def test_stock_write_failure_surfaces(self, handler, sale, catalog_repo, return_repo, caplog):
        catalog_repo.fail_writes = True

        with pytest.raises(PersistenceError):
            handler.handle(refund())

        assert len(return_repo.list_all()) == 1
        assert "reconcile stock manually" in caplog.text


class TestPreview:

    def test_preview_commits_nothing(self, handler, sale, catalog_repo, return_repo):
        preview = handler.preview(exchange())

        assert preview.return_total == "100.00"
        assert preview.exchange_total == "80.00"
        assert preview.difference == "20.00"
        assert preview.settlement == "refund_due"
        assert return_repo.list_all() == []
        assert catalog_repo.get_variant(1).stock_qty == 8
        assert catalog_repo.get_variant(2).stock_qty == 4

    def test_preview_validates(self, handler, sale):
        with pytest.raises(OverReturnError):
            handler.preview(refund(items=[ReturnItemSpec(sale_item_id=2, quantity=2)]))
