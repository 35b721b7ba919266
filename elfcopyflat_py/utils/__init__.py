"""
Utility functions.
"""

from .flags import parse_flags, parse_address
from .logging_utils import configure_logging

__all__ = ['parse_flags', 'parse_address', 'configure_logging']
