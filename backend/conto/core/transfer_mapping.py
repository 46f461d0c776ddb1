"""Transfer Mapping — MoneyTransferRequest → bank API money-transfer body.

Invariants:
    - executionDate is the date passed in (callers pass today), ISO formatted
    - uri is always REMITTANCE_INFORMATION; isUrgent and isInstant always false
    - taxRelief is always present: the bank API rejects a null block
    - isCondoUpgrade defaults to false when the request leaves it unset
"""

from datetime import date

from conto.schemas.accounts import MoneyTransferRequest
from conto.schemas.provider import (
    CreditorAccountWire,
    CreditorWire,
    MoneyTransferWire,
    NaturalPersonBeneficiaryWire,
    TaxReliefWire,
)

REMITTANCE_INFORMATION = "REMITTANCE_INFORMATION"


def to_provider_transfer(
    request: MoneyTransferRequest, execution_date: date,
) -> MoneyTransferWire:
    """Build the outbound transfer body from a validated request."""
    creditor = CreditorWire(
        name=request.creditor.name,
        account=CreditorAccountWire(
            account_code=request.creditor.account.account_code,
            bic_code=request.creditor.account.bic_code,
        ),
    )
    return MoneyTransferWire(
        creditor=creditor,
        execution_date=execution_date.isoformat(),
        uri=REMITTANCE_INFORMATION,
        description=request.description,
        amount=request.amount,
        currency=request.currency,
        is_urgent=False,
        is_instant=False,
        fee_type=request.fee_type,
        fee_account_id=request.fee_account_id,
        tax_relief=_tax_relief(request),
    )


def _tax_relief(request: MoneyTransferRequest) -> TaxReliefWire:
    relief = request.tax_relief
    if relief is None:
        return TaxReliefWire()
    natural = NaturalPersonBeneficiaryWire()
    if relief.natural_person_beneficiary is not None:
        natural = NaturalPersonBeneficiaryWire(
            fiscal_code1=relief.natural_person_beneficiary.fiscal_code1,
        )
    return TaxReliefWire(
        tax_relief_id=relief.tax_relief_id,
        is_condo_upgrade=bool(relief.is_condo_upgrade),
        creditor_fiscal_code=relief.creditor_fiscal_code,
        beneficiary_type=relief.beneficiary_type,
        natural_person_beneficiary=natural,
    )
