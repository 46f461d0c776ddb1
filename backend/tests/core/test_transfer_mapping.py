"""Tests for to_provider_transfer — request → bank transfer body."""

import json
from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from conto.core.transfer_mapping import REMITTANCE_INFORMATION, to_provider_transfer
from conto.schemas.accounts import MoneyTransferRequest
from conto.schemas.provider import exact_json_number

EXECUTION_DATE = date(2026, 10, 19)


def _request(**overrides) -> MoneyTransferRequest:
    body = {
        "creditor": {
            "name": "Mario Rossi",
            "account": {
                "accountCode": "IT23A0336844430152923804660",
                "bicCode": "SELBIT2BXXX",
            },
        },
        "description": "Rent October",
        "amount": 100.50,
        "currency": "EUR",
        "feeType": "SHA",
    }
    body.update(overrides)
    return MoneyTransferRequest.model_validate(body)


def _wire_json(request: MoneyTransferRequest) -> dict:
    wire = to_provider_transfer(request, EXECUTION_DATE)
    return json.loads(wire.model_dump_json(by_alias=True))


def test_fixed_fields():
    body = _wire_json(_request())
    assert body["executionDate"] == "2026-10-19"
    assert body["uri"] == REMITTANCE_INFORMATION
    assert body["isUrgent"] is False
    assert body["isInstant"] is False


def test_request_fields_copied():
    body = _wire_json(_request())
    assert body["creditor"]["name"] == "Mario Rossi"
    assert body["creditor"]["account"] == {
        "accountCode": "IT23A0336844430152923804660",
        "bicCode": "SELBIT2BXXX",
    }
    assert body["description"] == "Rent October"
    assert body["amount"] == 100.5
    assert body["currency"] == "EUR"
    assert body["feeType"] == "SHA"


def test_tax_relief_present_when_request_has_none():
    body = _wire_json(_request())
    relief = body["taxRelief"]
    assert relief["isCondoUpgrade"] is False
    assert "naturalPersonBeneficiary" in relief
    assert "legalPersonBeneficiary" in relief


def test_tax_relief_copied_from_request():
    body = _wire_json(_request(taxRelief={
        "taxReliefId": "L449",
        "isCondoUpgrade": True,
        "creditorFiscalCode": "56258745832",
        "beneficiaryType": "NATURAL_PERSON",
        "naturalPersonBeneficiary": {"fiscalCode1": "MRLFNC81L04A859L"},
    }))
    relief = body["taxRelief"]
    assert relief["taxReliefId"] == "L449"
    assert relief["isCondoUpgrade"] is True
    assert relief["beneficiaryType"] == "NATURAL_PERSON"
    assert relief["naturalPersonBeneficiary"]["fiscalCode1"] == "MRLFNC81L04A859L"


def test_unset_condo_upgrade_defaults_to_false():
    body = _wire_json(_request(taxRelief={"taxReliefId": "L449"}))
    assert body["taxRelief"]["isCondoUpgrade"] is False


# ─── Amount precision ───────────────────────────────────────────

def _request_json(amount: str) -> MoneyTransferRequest:
    return MoneyTransferRequest.model_validate_json(
        '{"creditor": {"name": "Mario Rossi", "account": '
        '{"accountCode": "IT23A0336844430152923804660"}}, '
        '"description": "Rent October", "amount": ' + amount + ', '
        '"currency": "EUR"}'
    )


def test_largest_amount_reaches_the_wire_exactly():
    request = _request_json("9999999999999.99")
    assert request.amount == Decimal("9999999999999.99")

    text = to_provider_transfer(request, EXECUTION_DATE).model_dump_json(by_alias=True)

    assert '"amount":9999999999999.99' in text
    amount = json.loads(text, parse_float=Decimal)["amount"]
    assert amount == Decimal("9999999999999.99")


def test_smallest_amount_reaches_the_wire_exactly():
    text = to_provider_transfer(
        _request_json("0.01"), EXECUTION_DATE,
    ).model_dump_json(by_alias=True)

    assert '"amount":0.01' in text


@pytest.mark.parametrize("amount", ["12345678901234567.89", "100.505"])
def test_amount_that_cannot_travel_exactly_is_rejected(amount):
    with pytest.raises(ValidationError):
        _request_json(amount)


def test_exact_json_number_refuses_lossy_conversion():
    assert exact_json_number(Decimal("100.50")) == 100.5
    with pytest.raises(ValueError):
        exact_json_number(Decimal("12345678901234567.89"))
