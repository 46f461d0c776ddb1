"""Bank Provider Schemas — pydantic models for the bank API wire format.

Invariants:
    - Field names are snake_case in Python, camelCase on the wire (alias_generator)
    - Success envelope: {status, payload:{...}}; error envelope:
      {status, errors:[{code, description, params}], payload}
    - TransactionRecord is identified by transaction_id; all other fields are
      as observed and never mutated (frozen)

Design Decisions:
    - Unknown fields ignored: the provider adds fields without notice
    - Decimal amounts serialize as JSON numbers (JsonDecimal), Decimal in Python mode
    - The outbound transfer amount (WireAmount) is emitted only when the JSON
      number is numerically equal to the Decimal; otherwise serialization fails
"""

from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

JsonDecimal = Annotated[
    Decimal, PlainSerializer(float, return_type=float, when_used="json"),
]


def exact_json_number(value: Decimal) -> float:
    """Float whose shortest repr is numerically equal to value, or ValueError."""
    number = float(value)
    if Decimal(repr(number)) != value:
        raise ValueError(f"Amount {value} has no exact JSON number form")
    return number


WireAmount = Annotated[
    Decimal,
    PlainSerializer(exact_json_number, return_type=float, when_used="json"),
]


class ProviderModel(BaseModel):
    """Base for bank API models — camelCase aliases, extra fields ignored."""
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore",
    )


# ─── Error envelope ─────────────────────────────────────────────

class ProviderErrorItem(ProviderModel):
    code: str | None = None
    description: str | None = None
    params: str | None = None


class ErrorEnvelope(ProviderModel):
    status: str | None = None
    errors: list[ProviderErrorItem] | None = None
    payload: Any = None


# ─── Balance ────────────────────────────────────────────────────

class BalancePayload(ProviderModel):
    date: str | None = None
    balance: JsonDecimal
    available_balance: JsonDecimal
    currency: str


class BalanceEnvelope(ProviderModel):
    status: str | None = None
    payload: BalancePayload


# ─── Transactions ───────────────────────────────────────────────

class TransactionType(ProviderModel):
    model_config = ConfigDict(frozen=True)

    enumeration: str | None = None
    value: str | None = None


class TransactionRecord(ProviderModel):
    """One booked transaction as listed by the bank."""
    model_config = ConfigDict(frozen=True)

    transaction_id: str | None = None
    operation_id: str | None = None
    accounting_date: str | None = None
    value_date: str | None = None
    type: TransactionType | None = None
    amount: JsonDecimal | None = None
    currency: str | None = None
    description: str | None = None


class TransactionListPayload(ProviderModel):
    items: list[TransactionRecord] | None = Field(None, alias="list")


class TransactionListEnvelope(ProviderModel):
    status: str | None = None
    payload: TransactionListPayload | None = None

    @property
    def transactions(self) -> list[TransactionRecord]:
        if self.payload is None or self.payload.items is None:
            return []
        return self.payload.items


# ─── Money transfer (outbound body) ─────────────────────────────

class CreditorAccountWire(ProviderModel):
    account_code: str
    bic_code: str | None = None


class CreditorAddressWire(ProviderModel):
    address: str | None = None
    city: str | None = None
    country_code: str | None = None


class CreditorWire(ProviderModel):
    name: str
    account: CreditorAccountWire
    address: CreditorAddressWire = Field(default_factory=CreditorAddressWire)


class NaturalPersonBeneficiaryWire(ProviderModel):
    fiscal_code1: str | None = None
    fiscal_code2: str | None = None
    fiscal_code3: str | None = None
    fiscal_code4: str | None = None
    fiscal_code5: str | None = None


class LegalPersonBeneficiaryWire(ProviderModel):
    fiscal_code: str | None = None
    legal_representative_fiscal_code: str | None = None


class TaxReliefWire(ProviderModel):
    tax_relief_id: str | None = None
    is_condo_upgrade: bool = False
    creditor_fiscal_code: str | None = None
    beneficiary_type: str | None = None
    natural_person_beneficiary: NaturalPersonBeneficiaryWire = Field(
        default_factory=NaturalPersonBeneficiaryWire,
    )
    legal_person_beneficiary: LegalPersonBeneficiaryWire = Field(
        default_factory=LegalPersonBeneficiaryWire,
    )


class MoneyTransferWire(ProviderModel):
    """Body of POST /accounts/{accountId}/payments/money-transfers."""
    creditor: CreditorWire
    execution_date: str
    uri: str
    description: str
    amount: WireAmount
    currency: str
    is_urgent: bool = False
    is_instant: bool = False
    fee_type: str | None = None
    fee_account_id: str | None = None
    tax_relief: TaxReliefWire = Field(default_factory=TaxReliefWire)
