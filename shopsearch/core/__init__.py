"""
Core module: Configuration, Logging, Exceptions, Dependencies
"""

from shopsearch.core.config import settings

__all__ = ["settings"]
