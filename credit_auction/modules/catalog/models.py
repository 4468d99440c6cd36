"""Domain models for credit prices and packs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class CreditPackRecord:
    id: str
    name: str
    credits: int
    price_inr: int
    description: Optional[str]
    flag_text: Optional[str]
    is_active: bool
    sort_order: int
