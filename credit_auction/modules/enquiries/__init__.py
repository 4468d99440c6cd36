"""Enquiry registry exports"""

from .exceptions import EnquiryAlreadyExists, EnquiryError, EnquiryNotFound
from .models import CANCELLED, CLOSED, OPEN, EnquiryRecord
from .service import EnquiryService

__all__ = [
    "CANCELLED",
    "CLOSED",
    "OPEN",
    "EnquiryAlreadyExists",
    "EnquiryError",
    "EnquiryNotFound",
    "EnquiryRecord",
    "EnquiryService",
]
