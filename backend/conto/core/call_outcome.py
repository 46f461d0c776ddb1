"""Call Outcome — tagged variant for the result of one bank API call.

Invariants:
    - Classification depends only on the HTTP status and whether the call returned
    - status < 300 → Success; 500 or 504 → AmbiguousFailure; other → ProviderFailure
    - TransportFailure means no status was received at all

Design Decisions:
    - Frozen dataclasses + Union alias over a class hierarchy: callers branch with
      isinstance and every variant is listed in CallOutcome
"""

from dataclasses import dataclass
from typing import Union

# Statuses after which the provider-side state change cannot be inferred
AMBIGUOUS_STATUSES = frozenset({500, 504})


@dataclass(frozen=True)
class Success:
    status_code: int
    body: str


@dataclass(frozen=True)
class ProviderFailure:
    status_code: int
    body: str


@dataclass(frozen=True)
class AmbiguousFailure:
    status_code: int
    body: str


@dataclass(frozen=True)
class TransportFailure:
    cause: Exception

    @property
    def reason(self) -> str:
        return str(self.cause) or type(self.cause).__name__


CallOutcome = Union[Success, ProviderFailure, AmbiguousFailure, TransportFailure]


def classify_response(status_code: int, body: str) -> CallOutcome:
    """Classify a received HTTP response."""
    if status_code < 300:
        return Success(status_code, body)
    if status_code in AMBIGUOUS_STATUSES:
        return AmbiguousFailure(status_code, body)
    return ProviderFailure(status_code, body)
