"""
Pipeline stages for status notifications: aggregation, placeholder
substitution and role-aware processing. Dispatch lives in services.
"""

from .aggregation import StatusDataAggregator
from .placeholders import find_tokens, placeholder_values, substitute, unrecognized_tokens
from .processing import StatusProcessor, absolute_link

__all__ = [
    "StatusDataAggregator",
    "StatusProcessor",
    "absolute_link",
    "find_tokens",
    "placeholder_values",
    "substitute",
    "unrecognized_tokens",
]
