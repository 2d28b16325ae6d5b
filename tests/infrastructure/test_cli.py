"""End-to-end tests of the click CLI against a temporary data directory."""

import json

import pytest
from click.testing import CliRunner

from perfume_pos.infrastructure.cli.main import cli

CATALOG = {
    "categories": [{"id": 1, "name": "Orientaux", "slug": "orientaux"}],
    "perfumes": [{"id": 1, "name": "Oud Royal", "slug": "oud-royal", "category": 1}],
    "variants": [
        {
            "id": 1, "perfume": 1, "perfume_name": "Oud Royal", "size_ml": 50,
            "sku": "OUD-50", "price_mad": "100.00", "stock_qty": 10,
        },
        {
            "id": 2, "perfume": 1, "perfume_name": "Oud Royal", "size_ml": 30,
            "sku": "OUD-30", "price_mad": "80.00", "stock_qty": 1,
        },
    ],
}


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()
    env = {"POS_DATA_DIR": str(tmp_path / "data"), "POS_CASHIER_NAME": "Yasmine"}

    catalog_file = tmp_path / "catalog-seed.json"
    catalog_file.write_text(json.dumps(CATALOG), encoding="utf-8")
    result = runner.invoke(cli, ["catalog", "load", str(catalog_file)], env=env)
    assert result.exit_code == 0, result.output
    assert "Catalog loaded: 2 variant(s)." in result.output

    def invoke(*args):
        return runner.invoke(cli, list(args), env=env)

    return invoke


class TestCatalogCommands:

    def test_categories(self, run):
        result = run("catalog", "categories")
        assert "Orientaux" in result.output

    def test_sellable_variants(self, run):
        run("sale", "create", "--items", "2:1")
        result = run("catalog", "variants", "--sellable")
        assert "Oud Royal 50ml" in result.output
        assert "Oud Royal 30ml" not in result.output


class TestSaleCommands:

    def test_create_and_show(self, run):
        result = run("sale", "create", "--items", "1:2", "--payment", "card")
        assert result.exit_code == 0, result.output
        assert "Sale recorded." in result.output
        assert "200.00" in result.output
        assert "Cashier: Yasmine" in result.output

        shown = run("sale", "show", "--id", "1")
        assert "Sale #1" in shown.output
        assert "Carte" in shown.output

    def test_insufficient_stock(self, run):
        result = run("sale", "create", "--items", "2:5")
        assert result.exit_code != 0
        assert "Insufficient stock for Oud Royal 30ml" in result.output

        stock = run("stock", "show", "--search", "OUD-30")
        assert "OUD-30" in stock.output

    def test_bad_items_format(self, run):
        result = run("sale", "create", "--items", "1-2")
        assert result.exit_code != 0
        assert "Expected 'VariantID:Qty'" in result.output

    def test_list(self, run):
        run("sale", "create", "--items", "1:1")
        result = run("sale", "list")
        assert "1 sale(s), 1 item(s), revenue 100.00 MAD" in result.output


class TestReturnCommands:

    def test_exchange_flow(self, run):
        run("sale", "create", "--items", "1:1")

        preview = run(
            "return", "preview", "--sale", "1", "--items", "1:1",
            "--operation", "exchange", "--exchange", "2:1",
        )
        assert "nothing recorded" in preview.output
        assert "20.00" in preview.output

        result = run(
            "return", "create", "--sale", "1", "--items", "1:1",
            "--operation", "exchange", "--reason", "wrong_item", "--exchange", "2:1",
        )
        assert result.exit_code == 0, result.output
        assert "Return recorded." in result.output
        assert "Échange" in result.output

        again = run("return", "create", "--sale", "1", "--items", "1:1")
        assert again.exit_code != 0
        assert "already has a return" in again.output

        stock = run("stock", "show", "--level", "out")
        assert "Oud Royal 30ml" in stock.output

    def test_eligible_hides_returned(self, run):
        run("sale", "create", "--items", "1:1")
        run("sale", "create", "--items", "1:1")
        run("return", "create", "--sale", "1", "--items", "1:1")

        result = run("return", "eligible")
        assert "#2" in result.output
        assert "#1 " not in result.output

    def test_list(self, run):
        run("sale", "create", "--items", "1:1")
        run("return", "create", "--sale", "1", "--items", "1:1", "--reason", "defective")
        result = run("return", "list")
        assert "Produit défectueux" in result.output
        assert "refunded 100.00 MAD" in result.output


class TestStockCommands:

    def test_receive_and_list(self, run):
        result = run("stock", "receive", "--supplier", "Atlas", "--items", "2:4:50")
        assert result.exit_code == 0, result.output
        assert "total 200.00 MAD" in result.output

        purchases = run("stock", "purchases")
        assert "Atlas" in purchases.output

        stock = run("stock", "show", "--search", "OUD-30")
        assert "     5" in stock.output

    def test_restock_request(self, run):
        result = run("stock", "request", "--items", "2:6,2:4")
        assert "Total to order: 10 unit(s)" in result.output


class TestConfiguration:

    def test_bad_setting_reported(self, tmp_path):
        result = CliRunner().invoke(
            cli, ["sale", "list"], env={"POS_DATA_DIR": str(tmp_path), "POS_MAX_CARTS": "x"}
        )
        assert result.exit_code != 0
        assert "POS_MAX_CARTS" in result.output
