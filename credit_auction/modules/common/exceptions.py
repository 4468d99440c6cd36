"""Errors shared by every domain module."""


class DomainError(Exception):
    """Base class for errors raised by domain services.

    ``code`` is a stable machine-readable identifier that the HTTP layer
    forwards to clients alongside the message.
    """

    code = "domain_error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.code


class AuctionBusy(DomainError):
    """A wallet or enquiry lock could not be acquired in time; retry later."""

    code = "auction_busy"

    def __init__(self, resource: str, timeout: float) -> None:
        self.resource = resource
        self.timeout = timeout
        super().__init__(f"Resource busy, retry later: {resource}")


class DuplicateKeyError(DomainError):
    """A record with the same idempotency key already exists."""

    code = "duplicate_key"

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Duplicate key: {key}")
