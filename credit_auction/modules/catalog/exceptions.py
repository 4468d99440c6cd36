"""Credit catalog specific exceptions."""

from credit_auction.modules.common.exceptions import DomainError


class CatalogError(DomainError):
    """Base class for credit catalog errors."""

    code = "catalog_error"


class UnknownCreditAction(CatalogError):
    """No price is configured for this action."""

    code = "unknown_credit_action"


class CreditPackNotFound(CatalogError):
    """The credit pack does not exist or is inactive."""

    code = "credit_pack_not_found"
