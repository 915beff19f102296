# kardex/business_logic/entities/base_entity.py
from dataclasses import dataclass, field
from typing import Optional

# Marks a dataclass field that lives on the entity but has no column of its own.
NOT_PERSISTED = {"persist": False}


@dataclass
class BaseEntity:
    id: Optional[int] = field(default=None, kw_only=True)  # kw_only=True makes it a keyword-only argument
