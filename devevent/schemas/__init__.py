"""
Pydantic schemas package
"""

from .common import *
from .event import *
from .booking import *

__all__ = [
    "StandardResponse",
    "ErrorResponse",
    "EventRecord",
    "EventCreate",
    "EventUpdate",
    "EventDetail",
    "BookingRecord",
    "BookingCreate",
    "BookingUpdate",
]
