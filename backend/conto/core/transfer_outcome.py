"""Transfer Outcome — the closed set of terminal states of a money transfer.

Invariants:
    - Every reply of the transfer executor is built from exactly one TransferResult
    - PENDING and EXECUTED reply status OK; FAILED and UNKNOWN reply status ERROR
    - UNKNOWN means reconciliation could not complete; FAILED means it ran and
      found no match (or the provider rejected the transfer outright)

Design Decisions:
    - str Enum: the label is the transferId field of the reply, no custom encoder
"""

from dataclasses import dataclass
from enum import Enum


class TransferOutcome(str, Enum):
    PENDING = "PENDING"
    EXECUTED = "EXECUTED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"


_REPLY_STATUS = {
    TransferOutcome.PENDING: "OK",
    TransferOutcome.EXECUTED: "OK",
    TransferOutcome.FAILED: "ERROR",
    TransferOutcome.UNKNOWN: "ERROR",
}


# ─── Reply messages ─────────────────────────────────────────────

MSG_PENDING = "Transfer accepted, execution pending"
MSG_EXECUTED = "Transfer executed successfully"
MSG_CANNOT_EXTRACT_ACCOUNT_ID = "Could not extract account ID for validation enquiry"
MSG_ENQUIRY_FAILED = (
    "Transfer status unknown - validation enquiry failed. Please retry later."
)
MSG_ENQUIRY_UNAVAILABLE = (
    "Transfer status unknown - validation enquiry unavailable. Please retry later."
)
MSG_ENQUIRY_PARSING_FAILED = (
    "Transfer status unknown - error parsing validation enquiry"
)
MSG_NO_MATCHING_TRANSACTION = (
    "Transfer failed - no matching transaction found. Please retry."
)


@dataclass(frozen=True)
class TransferResult:
    """Terminal state of one transfer request plus its human-readable message."""
    outcome: TransferOutcome
    message: str

    @property
    def status(self) -> str:
        return _REPLY_STATUS[self.outcome]

    def to_reply(self) -> dict:
        return {
            "status": self.status,
            "message": self.message,
            "transferId": self.outcome.value,
        }


def pending() -> TransferResult:
    return TransferResult(TransferOutcome.PENDING, MSG_PENDING)


def executed() -> TransferResult:
    return TransferResult(TransferOutcome.EXECUTED, MSG_EXECUTED)


def failed(message: str) -> TransferResult:
    return TransferResult(TransferOutcome.FAILED, message)


def unknown(message: str) -> TransferResult:
    return TransferResult(TransferOutcome.UNKNOWN, message)
