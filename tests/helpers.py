from datetime import datetime, timezone
from decimal import Decimal

from kardex.business_logic.entities import DocumentEntity, DocumentItemEntity


def utc(year, month, day, hour=9, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_document(document_type, number, when, lines, is_finalized=True, is_active=True, doc_id=None):
    """In-memory document; ``lines`` are (product_id, quantity, unit_price[, direction]) tuples."""
    items = []
    for n, row in enumerate(lines, start=1):
        product_id, quantity, unit_price = row[:3]
        direction = row[3] if len(row) > 3 else None
        items.append(DocumentItemEntity(
            product_id=product_id,
            quantity=Decimal(str(quantity)),
            unit_price=Decimal(str(unit_price)),
            direction=direction,
            line_number=n,
        ))
    return DocumentEntity(
        document_type=document_type,
        document_number=number,
        document_date=when,
        is_finalized=is_finalized,
        is_active=is_active,
        items=items,
        id=doc_id,
    )
