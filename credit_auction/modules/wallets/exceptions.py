"""Wallet ledger specific exceptions."""

from credit_auction.modules.common.exceptions import DomainError


class WalletError(DomainError):
    """Base class for wallet ledger errors."""

    code = "wallet_error"


class InvalidAmount(WalletError):
    """Credit amounts must be positive integers."""

    code = "invalid_amount"


class WalletNotFound(WalletError):
    """The broker has no credit wallet."""

    code = "wallet_not_found"


class InsufficientFunds(WalletError):
    """Wallet balance is below the amount required."""

    code = "insufficient_funds"

    def __init__(self, broker_id: str, balance: int, required: int) -> None:
        self.broker_id = broker_id
        self.balance = balance
        self.required = required
        super().__init__(
            f"Insufficient credits: balance {balance}, required {required}, short by {self.shortfall}"
        )

    @property
    def shortfall(self) -> int:
        return max(self.required - self.balance, 0)


class AlreadyRefunded(WalletError):
    """The referenced debit has already been refunded."""

    code = "already_refunded"

    def __init__(self, original_ref: str) -> None:
        self.original_ref = original_ref
        super().__init__(f"Already refunded: {original_ref}")



class IdempotencyConflict(WalletError):
    """An idempotency key was reused by a different broker."""

    code = "idempotency_conflict"

    def __init__(self, key: str, broker_id: str) -> None:
        self.key = key
        self.broker_id = broker_id
        super().__init__(f"Idempotency key {key} belongs to another broker")
