"""Enquiry registry specific exceptions."""

from credit_auction.modules.common.exceptions import DomainError


class EnquiryError(DomainError):
    """Base class for enquiry registry errors."""

    code = "enquiry_error"


class EnquiryNotFound(EnquiryError):
    """The requested enquiry does not exist."""

    code = "enquiry_not_found"


class EnquiryAlreadyExists(EnquiryError):
    """An enquiry with this id is already registered."""

    code = "enquiry_exists"
