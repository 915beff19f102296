# kardex/business_logic/valuation.py
"""
کاردکس ریالی به روش میانگین موزون متحرک.

Pure functions over documents that were already fetched with their items.
Every receipt blends into one running average cost and every issue is costed
at that average at the moment it happens. Nothing here touches the database.
"""

from typing import Iterable, List, Optional, Tuple
from decimal import Decimal
import logging

from kardex import config
from kardex.constants import (
    DocumentType, MovementType, AdjustmentDirection,
    DOCUMENT_MOVEMENT_TYPES, ADJUSTMENT_MOVEMENT_TYPES,
)
from kardex.exceptions import ValidationError
from .entities.document_entity import DocumentEntity
from .entities.document_item_entity import DocumentItemEntity
from .entities.cardex_entity import CardexEntry, ProductMovementSummary

logger = logging.getLogger(__name__)

ZERO = Decimal("0.0")


def movement_type_for(document_type: DocumentType,
                      direction: Optional[AdjustmentDirection] = None) -> MovementType:
    """Movement type a line of this document type produces. Adjustments default to IN."""
    if document_type == DocumentType.STOCK_ADJUSTMENT:
        return ADJUSTMENT_MOVEMENT_TYPES[direction or AdjustmentDirection.IN]
    try:
        return DOCUMENT_MOVEMENT_TYPES[document_type]
    except KeyError:
        raise ValidationError(f"نوع سند نامعتبر است: {document_type}", field="document_type") from None


def average_cost(quantity: Decimal, value: Decimal) -> Decimal:
    return value / quantity if quantity > 0 else ZERO


def _is_valued(document: DocumentEntity, include_drafts: bool) -> bool:
    if not document.is_active:
        return False
    return include_drafts or document.is_finalized


def _collect_lines(product_id: int, documents: Iterable[DocumentEntity],
                   include_drafts: bool) -> List[Tuple[DocumentEntity, DocumentItemEntity]]:
    lines = [
        (document, item)
        for document in documents if _is_valued(document, include_drafts)
        for item in document.items if item.product_id == product_id
    ]
    # sorted() is stable, so same-instant lines keep retrieval and line order
    return sorted(lines, key=lambda pair: pair[0].document_date)


def _floor(value: Decimal) -> Decimal:
    """Rounding residue just below zero reads as zero; real deficits are kept."""
    if value < 0 and -value <= config.ROUNDING_TOLERANCE:
        return ZERO
    return value


def compute_cardex(product_id: int,
                   documents: Iterable[DocumentEntity],
                   include_drafts: bool = True) -> List[CardexEntry]:
    """
    Builds the chronological cardex of one product.

    Args:
        product_id: the product whose lines are valued.
        documents: documents with their ``items`` loaded, in retrieval order.
        include_drafts: value non-finalized documents too, so a user can
            preview the costing of documents still being edited.

    Returns:
        One CardexEntry per (document, matching line), oldest first. Every
        numeric field is a Decimal; absent sides are zero.
    """
    entries: List[CardexEntry] = []
    balance_quantity = ZERO
    balance_value = ZERO

    for document, item in _collect_lines(product_id, documents, include_drafts):
        movement_type = movement_type_for(document.document_type, item.direction)
        quantity = abs(item.quantity)
        entry = CardexEntry(
            date=document.document_date,
            document_type=document.document_type,
            document_number=document.document_number,
            document_id=document.id,
            movement_type=movement_type,
            is_finalized=document.is_finalized,
            description=item.description or document.description,
        )

        if movement_type.is_outgoing:
            cost = average_cost(balance_quantity, balance_value)
            if quantity == balance_quantity:
                out_total = balance_value  # the last unit takes the remaining value exactly
            else:
                out_total = quantity * cost
            new_value = _floor(balance_value - out_total)
            if new_value == ZERO:
                out_total = balance_value
            entry.out_quantity = quantity
            entry.out_unit_price = item.unit_price  # stated price, display only
            entry.out_total_price = out_total
            balance_quantity -= quantity
            balance_value = new_value
            if balance_quantity < 0:
                logger.warning(
                    f"Product {product_id} oversold by document {document.document_number} "
                    f"({document.document_type.value}): balance quantity {balance_quantity}.")
        else:
            entry.in_quantity = quantity
            entry.in_unit_price = item.unit_price
            entry.in_total_price = abs(item.total_price)
            balance_quantity += quantity
            balance_value += entry.in_total_price

        if balance_quantity == ZERO and abs(balance_value) <= config.ROUNDING_TOLERANCE:
            balance_value = ZERO

        entry.balance_quantity = balance_quantity
        entry.balance_total_price = balance_value
        entry.balance_unit_price = average_cost(balance_quantity, balance_value)
        entries.append(entry)

    logger.debug(f"Cardex for product {product_id}: {len(entries)} entries, "
                 f"balance {balance_quantity} / {balance_value}.")
    return entries


def summarize_cardex(product_id: int, entries: Iterable[CardexEntry]) -> ProductMovementSummary:
    """Collapses cardex rows into initial stock, incoming and outgoing buckets."""
    summary = ProductMovementSummary(product_id=product_id)
    for entry in entries:
        if entry.is_opening_balance:
            continue
        if entry.movement_type == MovementType.INITIAL_STOCK:
            summary.initial_stock.add(entry.in_quantity, entry.in_total_price)
        elif entry.movement_type is not None and entry.movement_type.is_outgoing:
            summary.outgoing.add(entry.out_quantity, entry.out_total_price)
        else:
            summary.incoming.add(entry.in_quantity, entry.in_total_price)
    return summary


def compute_product_movement_summary(product_id: int,
                                     documents: Iterable[DocumentEntity],
                                     include_drafts: bool = True) -> ProductMovementSummary:
    """
    Four-bucket view of the same valuation. Outgoing value is the average cost
    charged by the cardex, so ``summary.balance`` equals the last cardex balance.
    """
    return summarize_cardex(product_id, compute_cardex(product_id, documents, include_drafts))
