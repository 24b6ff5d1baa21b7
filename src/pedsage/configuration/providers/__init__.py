# src/pedsage/configuration/providers/__init__.py
"""Provider configurations for pedsage."""

from pedsage.configuration.providers.litellm import LiteLLMProvider

__all__ = ["LiteLLMProvider"]
