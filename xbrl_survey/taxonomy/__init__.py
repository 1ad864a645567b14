"""Parsers for the taxonomy file set and the loader that joins them."""

from .loader import Loader, translate_literal

__all__ = ["Loader", "translate_literal"]
