"""Account Schemas — REST contracts for balance, transactions and money transfers.

Invariants:
    - MoneyTransferRequest: creditor name 1-70 chars, IBAN-shaped account code,
      optional BIC, description 1-140 chars, amount >= 0.01 with at most
      15 digits and 2 decimal places, ISO-4217 currency
    - MoneyTransferRequest is immutable once validated (frozen)
    - Reply payloads use camelCase keys

Design Decisions:
    - Same model validates the HTTP body and the bus payload inside the executor
"""

from decimal import Decimal

from pydantic import ConfigDict, Field, field_validator

from conto.schemas.provider import JsonDecimal, ProviderModel, TransactionRecord

IBAN_PATTERN = r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{11,30}$"
BIC_PATTERN = r"^[A-Z]{6}[A-Z0-9]{2}([A-Z0-9]{3})?$"
CURRENCY_PATTERN = r"^[A-Z]{3}$"
ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
# 15 significant digits survive a JSON number round trip unchanged
MAX_AMOUNT_DIGITS = 15


class FrozenModel(ProviderModel):
    model_config = ConfigDict(frozen=True)


# ─── Money transfer request ─────────────────────────────────────

class CreditorAccount(FrozenModel):
    account_code: str = Field(pattern=IBAN_PATTERN)
    bic_code: str | None = Field(None, pattern=BIC_PATTERN)


class Creditor(FrozenModel):
    name: str = Field(min_length=1, max_length=70)
    account: CreditorAccount

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("creditor name cannot be blank")
        return v


class NaturalPersonBeneficiary(FrozenModel):
    fiscal_code1: str | None = None


class TaxRelief(FrozenModel):
    tax_relief_id: str | None = None
    is_condo_upgrade: bool | None = None
    creditor_fiscal_code: str | None = None
    beneficiary_type: str | None = None
    natural_person_beneficiary: NaturalPersonBeneficiary | None = None


class MoneyTransferRequest(FrozenModel):
    """Inbound money transfer order."""
    creditor: Creditor
    description: str = Field(min_length=1, max_length=140)
    amount: JsonDecimal = Field(
        ge=Decimal("0.01"), max_digits=MAX_AMOUNT_DIGITS, decimal_places=2,
    )
    currency: str = Field(pattern=CURRENCY_PATTERN)
    fee_type: str | None = None
    fee_account_id: str | None = None
    tax_relief: TaxRelief | None = None

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("description cannot be blank")
        return v


# ─── Replies ────────────────────────────────────────────────────

class BalanceResponse(FrozenModel):
    balance: JsonDecimal
    available_balance: JsonDecimal
    currency: str


class TransactionListResponse(FrozenModel):
    items: list[TransactionRecord] = Field(default_factory=list, alias="list")


class MoneyTransferResponse(FrozenModel):
    status: str
    message: str
    transfer_id: str | None = None
