# src/pedsage/configuration/storage/__init__.py
"""Storage configurations for pedsage."""

from pedsage.configuration.storage.local import LocalStorage

__all__ = ["LocalStorage"]
