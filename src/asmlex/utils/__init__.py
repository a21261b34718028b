"""Utility modules for asmlex.

Provides:
- logger: get_logger for namespaced logging
"""

from asmlex.utils.logger import get_logger

__all__ = ["get_logger"]
