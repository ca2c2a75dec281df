"""
Configuration modules for island generation.
"""

from .config import Settings, settings
from .log_setup import configure_logging

__all__ = ['Settings', 'settings', 'configure_logging']
