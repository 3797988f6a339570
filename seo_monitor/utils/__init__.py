"""Utility modules."""

from .helpers import format_number, gather_or_cancel, is_number, normalize_url, round_half_up

__all__ = ["format_number", "gather_or_cancel", "is_number", "normalize_url", "round_half_up"]
