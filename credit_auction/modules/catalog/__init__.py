"""Credit catalog exports"""

from .exceptions import CatalogError, CreditPackNotFound, UnknownCreditAction
from .models import CreditPackRecord
from .service import CatalogService

__all__ = [
    "CatalogError",
    "CatalogService",
    "CreditPackNotFound",
    "CreditPackRecord",
    "UnknownCreditAction",
]
