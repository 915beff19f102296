from datetime import date
from decimal import Decimal

import pytest

from kardex.constants import (DocumentType, MovementType, OPENING_BALANCE_LABEL,
                              DRAFT_LABEL, FINALIZED_LABEL)
from tests.helpers import utc


@pytest.fixture
def ledger(app, product, supplier, customer, line):
    """Opening stock is final; the purchase and the sale are still drafts."""
    manager = app.document_manager
    return {
        "initial": manager.create_document(DocumentType.INITIAL_STOCK, "INIT-1", [line(product, 10, 100)],
                                           utc(2024, 4, 1)),
        "purchase": manager.create_document(DocumentType.PURCHASE_INVOICE, "PUR-1", [line(product, 10, 200)],
                                            utc(2024, 4, 5), supplier_id=supplier.id),
        "sale": manager.create_document(DocumentType.SALE_INVOICE, "SAL-1", [line(product, 4, 500)],
                                        utc(2024, 4, 10), customer_id=customer.id, description="فروش نقدی"),
    }


class TestCardex:
    def test_drafts_are_previewed_by_default(self, app, product, ledger):
        entries = app.reports_manager.get_cardex(product.id)
        assert [e.movement_type for e in entries] == [MovementType.INITIAL_STOCK, MovementType.PURCHASE,
                                                     MovementType.SALE]
        sale = entries[-1]
        assert sale.out_quantity == 4
        assert sale.out_unit_price == Decimal("500")
        assert sale.out_total_price == Decimal("600")
        assert (sale.balance_quantity, sale.balance_unit_price, sale.balance_total_price) == (16, 150, 2400)
        assert sale.description == "فروش نقدی"

    def test_finalized_only(self, app, product, ledger):
        entries = app.reports_manager.get_cardex(product.id, include_drafts=False)
        assert [e.document_number for e in entries] == ["INIT-1"]

        app.document_manager.finalize_document(ledger["purchase"].id)
        entries = app.reports_manager.get_cardex(product.id, include_drafts=False)
        assert [e.document_number for e in entries] == ["INIT-1", "PUR-1"]
        assert entries[-1].balance_total_price == Decimal("3000")

    def test_deleted_documents_drop_out(self, app, product, ledger):
        app.document_manager.delete_document(ledger["purchase"].id)
        sale = app.reports_manager.get_cardex(product.id)[-1]
        assert sale.out_total_price == Decimal("400")
        assert sale.balance_total_price == Decimal("600")

    def test_date_to_covers_the_whole_day(self, app, product, ledger):
        entries = app.reports_manager.get_cardex(product.id, date_to=date(2024, 4, 5))
        assert [e.document_number for e in entries] == ["INIT-1", "PUR-1"]

    def test_opening_row_carries_the_earlier_balance(self, app, product, ledger):
        entries = app.reports_manager.get_cardex(product.id, date_from=date(2024, 4, 6))
        opening, sale = entries
        assert opening.is_opening_balance
        assert opening.description == OPENING_BALANCE_LABEL
        assert (opening.balance_quantity, opening.balance_unit_price, opening.balance_total_price) == (20, 150, 3000)
        assert opening.in_quantity == 0 and opening.out_quantity == 0
        # the average cost still comes from the full history
        assert sale.out_total_price == Decimal("600")

    def test_opening_row_without_history(self, app, product, ledger):
        opening, *rest = app.reports_manager.get_cardex(product.id, date_from=date(2024, 1, 1))
        assert opening.is_opening_balance
        assert opening.balance_quantity == 0
        assert len(rest) == 3

    def test_product_without_documents(self, app, other_product, ledger):
        assert app.reports_manager.get_cardex(other_product.id) == []


class TestCardexDisplayRows:
    def test_first_row(self, app, product, ledger):
        row = app.reports_manager.get_cardex_display_rows(product.id)[0]
        assert row == {
            "date": "۱۴۰۳/۰۱/۱۳",
            "document_type": "موجودی اولیه",
            "document_number": "INIT-1",
            "status": FINALIZED_LABEL,
            "description": "",
            "in_quantity": "۱۰٫۰۰",
            "in_unit_price": "۱۰۰",
            "in_total_price": "۱٬۰۰۰",
            "out_quantity": "-",
            "out_unit_price": "-",
            "out_total_price": "-",
            "balance_quantity": "۱۰٫۰۰",
            "balance_unit_price": "۱۰۰",
            "balance_total_price": "۱٬۰۰۰",
        }

    def test_draft_sale_row(self, app, product, ledger):
        row = app.reports_manager.get_cardex_display_rows(product.id)[-1]
        assert row["document_type"] == "فروش"
        assert row["status"] == DRAFT_LABEL
        assert row["in_quantity"] == "-"
        assert row["out_quantity"] == "۴٫۰۰"
        assert row["out_unit_price"] == "۵۰۰"
        assert row["out_total_price"] == "۶۰۰"
        assert row["balance_total_price"] == "۲٬۴۰۰"

    def test_opening_row(self, app, product, ledger):
        row = app.reports_manager.get_cardex_display_rows(product.id, date_from=date(2024, 4, 6))[0]
        assert row["date"] == "۱۴۰۳/۰۱/۱۸"
        assert row["document_type"] == OPENING_BALANCE_LABEL
        assert row["status"] == ""
        assert row["balance_quantity"] == "۲۰٫۰۰"


class TestSummaryAndValuation:
    def test_movement_summary(self, app, product, ledger):
        summary = app.reports_manager.get_product_movement_summary(product.id)
        assert (summary.initial_stock.quantity, summary.initial_stock.total_price) == (10, 1000)
        assert (summary.incoming.quantity, summary.incoming.total_price) == (10, 2000)
        assert (summary.outgoing.quantity, summary.outgoing.total_price) == (4, 600)
        assert (summary.balance.quantity, summary.balance.total_price) == (16, 2400)
        assert summary.balance.total_price == app.reports_manager.get_cardex(product.id)[-1].balance_total_price

    def test_summary_of_finalized_documents(self, app, product, ledger):
        summary = app.reports_manager.get_product_movement_summary(product.id, include_drafts=False)
        assert summary.incoming.quantity == 0
        assert summary.balance.total_price == Decimal("1000")

    def test_inventory_valuation(self, app, product, other_product, ledger):
        app.product_manager.update_product(other_product.id, {"minimum_stock": 5})
        rows = {row["product_id"]: row for row in app.reports_manager.get_inventory_valuation()}

        assert rows[product.id]["quantity"] == 16
        assert rows[product.id]["unit_price"] == 150
        assert rows[product.id]["total_value"] == 2400
        assert rows[product.id]["below_minimum"] is False
        assert rows[product.id]["code"] == "P-100"

        assert rows[other_product.id]["quantity"] == 0
        assert rows[other_product.id]["below_minimum"] is True

    def test_inventory_valuation_skips_inactive_products(self, app, product, other_product, ledger):
        app.product_manager.set_product_activity(other_product.id, False)
        ids = [row["product_id"] for row in app.reports_manager.get_inventory_valuation()]
        assert ids == [product.id]
        assert len(app.reports_manager.get_inventory_valuation(active_only=False)) == 2

    def test_inventory_valuation_at_a_date(self, app, product, ledger):
        (row,) = app.reports_manager.get_inventory_valuation(date_to=date(2024, 4, 1))
        assert (row["quantity"], row["total_value"]) == (10, 1000)


class TestDashboard:
    def test_drafts_do_not_count(self, app, product, ledger):
        stats = app.reports_manager.get_dashboard_stats(today=date(2024, 4, 10))
        assert stats == {
            "total_products": 1,
            "today_purchases": 0,
            "today_sales": 0,
            "total_inventory_value": Decimal("1000"),
            "low_stock_products": 0,
        }

    def test_finalized_documents_count(self, app, product, other_product, ledger):
        app.product_manager.update_product(other_product.id, {"minimum_stock": 1})
        app.document_manager.finalize_document(ledger["purchase"].id)
        app.document_manager.finalize_document(ledger["sale"].id)

        on_purchase_day = app.reports_manager.get_dashboard_stats(today=date(2024, 4, 5))
        assert on_purchase_day["today_purchases"] == 1
        assert on_purchase_day["today_sales"] == 0

        on_sale_day = app.reports_manager.get_dashboard_stats(today=date(2024, 4, 10))
        assert on_sale_day["today_sales"] == Decimal("2000")
        assert on_sale_day["total_products"] == 2
        assert on_sale_day["total_inventory_value"] == Decimal("2400")
        assert on_sale_day["low_stock_products"] == 1
