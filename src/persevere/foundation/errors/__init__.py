"""Error handling for persevere.

- RetriableError: the envelope raised when a retry scope gives up
- SiteToken: identity of one retriable block activation
- wrap_failure/original_error: build and unpack envelopes
"""

from .errors import RetriableError, SiteToken, Wrapper, original_error, wrap_failure
from .types import JsonDict, JsonValue

__all__ = [
    "RetriableError", "SiteToken", "Wrapper", "wrap_failure", "original_error",
    "JsonDict", "JsonValue",
]
