# kardex/business_logic/reports_manager.py

from typing import List, Dict, Any, Optional, TYPE_CHECKING
from datetime import date, datetime, timezone
from decimal import Decimal

from kardex import config
from kardex.constants import DocumentType, OPENING_BALANCE_LABEL, DRAFT_LABEL, FINALIZED_LABEL
from kardex.utils.date_converter import Instantish, to_instant, to_local_date, to_shamsi_str
from kardex.utils.persian import format_amount_or_dash
from .entities.cardex_entity import CardexEntry, ProductMovementSummary
from .valuation import compute_cardex, compute_product_movement_summary

if TYPE_CHECKING:
    from .document_manager import DocumentManager
    from .product_manager import ProductManager

import logging
logger = logging.getLogger(__name__)


class ReportsManager:
    """
    Inventory reports built on the valuation engine: the Rial cardex of a
    product, its movement summary, the valuation of the whole stock and the
    dashboard figures. Documents are the only source of these numbers.
    """

    def __init__(self,
                 document_manager: 'DocumentManager',
                 product_manager: 'ProductManager'):
        self.document_manager = document_manager
        self.product_manager = product_manager

    @staticmethod
    def _include_drafts(include_drafts: Optional[bool]) -> bool:
        return config.INCLUDE_DRAFTS_IN_CARDEX if include_drafts is None else include_drafts

    def get_cardex(self,
                   product_id: int,
                   date_from: Optional[Instantish] = None,
                   date_to: Optional[Instantish] = None,
                   include_drafts: Optional[bool] = None) -> List[CardexEntry]:
        """
        کاردکس ریالی کالا.

        The whole history is valued so the average cost is right, then rows
        before ``date_from`` collapse into one opening-balance row.
        """
        drafts = self._include_drafts(include_drafts)
        logger.info(f"Generating cardex for product {product_id} from {date_from} to {date_to}, drafts: {drafts}.")
        documents = self.document_manager.find_documents_for_product(product_id, date_to=date_to, include_drafts=drafts)
        entries = compute_cardex(product_id, documents, include_drafts=drafts)
        if date_from is None:
            return entries

        start = to_instant(date_from)
        earlier = [e for e in entries if e.date < start]
        opening = CardexEntry(date=start, document_type=None, document_number="",
                              description=OPENING_BALANCE_LABEL)
        if earlier:
            opening.balance_quantity = earlier[-1].balance_quantity
            opening.balance_unit_price = earlier[-1].balance_unit_price
            opening.balance_total_price = earlier[-1].balance_total_price
        return [opening] + [e for e in entries if e.date >= start]

    def get_cardex_display_rows(self,
                                product_id: int,
                                date_from: Optional[Instantish] = None,
                                date_to: Optional[Instantish] = None,
                                include_drafts: Optional[bool] = None) -> List[Dict[str, str]]:
        """Cardex rows as Persian text: Jalaali dates, labels and "-" for empty amounts."""
        rows = []
        for entry in self.get_cardex(product_id, date_from, date_to, include_drafts):
            if entry.is_opening_balance:
                type_label, status = OPENING_BALANCE_LABEL, ""
            else:
                type_label = entry.movement_type.label if entry.movement_type else entry.document_type.label
                status = FINALIZED_LABEL if entry.is_finalized else DRAFT_LABEL
            rows.append({
                "date": to_shamsi_str(entry.date),
                "document_type": type_label,
                "document_number": entry.document_number,
                "status": status,
                "description": entry.description or "",
                "in_quantity": format_amount_or_dash(entry.in_quantity, 2),
                "in_unit_price": format_amount_or_dash(entry.in_unit_price),
                "in_total_price": format_amount_or_dash(entry.in_total_price),
                "out_quantity": format_amount_or_dash(entry.out_quantity, 2),
                "out_unit_price": format_amount_or_dash(entry.out_unit_price),
                "out_total_price": format_amount_or_dash(entry.out_total_price),
                "balance_quantity": format_amount_or_dash(entry.balance_quantity, 2),
                "balance_unit_price": format_amount_or_dash(entry.balance_unit_price),
                "balance_total_price": format_amount_or_dash(entry.balance_total_price),
            })
        return rows

    def get_product_movement_summary(self,
                                     product_id: int,
                                     date_to: Optional[Instantish] = None,
                                     include_drafts: Optional[bool] = None) -> ProductMovementSummary:
        drafts = self._include_drafts(include_drafts)
        documents = self.document_manager.find_documents_for_product(product_id, date_to=date_to, include_drafts=drafts)
        return compute_product_movement_summary(product_id, documents, include_drafts=drafts)

    def get_inventory_valuation(self,
                                date_to: Optional[Instantish] = None,
                                include_drafts: Optional[bool] = None,
                                active_only: bool = True) -> List[Dict[str, Any]]:
        """
        ارزش موجودی همه کالاها.

        Returns one dict per product with its balance quantity, average unit
        price, total value and whether it sits below its minimum stock.
        """
        drafts = self._include_drafts(include_drafts)
        documents = self.document_manager.find_documents(
            date_to=date_to, is_finalized=None if drafts else True)

        report_data: List[Dict[str, Any]] = []
        for product in self.product_manager.get_all_products(active_only=active_only):
            summary = compute_product_movement_summary(product.id, documents, include_drafts=drafts)
            balance = summary.balance
            report_data.append({
                "product_id": product.id,
                "code": product.code,
                "name": product.name,
                "unit": product.unit,
                "quantity": balance.quantity,
                "unit_price": balance.unit_price,
                "total_value": balance.total_price,
                "below_minimum": product.minimum_stock > 0 and balance.quantity < product.minimum_stock,
            })
        logger.info(f"Inventory valuation generated for {len(report_data)} products.")
        return report_data

    def get_dashboard_stats(self, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Figures for the home page. Only finalized documents count here, unlike
        the cardex which can preview drafts.
        """
        today = today or to_local_date(datetime.now(timezone.utc))
        finalized_today = self.document_manager.find_documents(date_from=today, date_to=today, is_finalized=True)
        valuation = self.get_inventory_valuation(include_drafts=False)

        stats = {
            "total_products": len(valuation),
            "today_purchases": sum(1 for d in finalized_today if d.document_type == DocumentType.PURCHASE_INVOICE),
            "today_sales": sum((d.total_amount for d in finalized_today
                                if d.document_type == DocumentType.SALE_INVOICE), Decimal("0.0")),
            "total_inventory_value": sum((row["total_value"] for row in valuation), Decimal("0.0")),
            "low_stock_products": sum(1 for row in valuation if row["below_minimum"]),
        }
        logger.debug(f"Dashboard stats for {today}: {stats}")
        return stats
