from datetime import date, datetime
from decimal import Decimal

import pytest

from vabridge.exceptions import ValidationError
from vabridge.schemas import (
    DeadLetterSchema,
    NotificationSchema,
    PaymentFactSchema,
    VaRequestSchema,
)


class TestAmount:
    def test_integral_amount_is_dumped_as_int(self):
        dumped = VaRequestSchema().dump({"amount": Decimal("500000.00")})

        assert dumped["amount"] == 500000
        assert isinstance(dumped["amount"], int)

    def test_fractional_amount_is_dumped_as_float(self):
        dumped = VaRequestSchema().dump({"amount": Decimal("1250.50")})

        assert dumped["amount"] == 1250.5
        assert isinstance(dumped["amount"], float)

    def test_large_integral_amount_is_exact(self):
        dumped = VaRequestSchema().dump({"amount": Decimal("12345678901234567890")})

        assert dumped["amount"] == 12345678901234567890

    def test_fractional_amount_beyond_float_precision_is_refused(self):
        with pytest.raises(ValidationError) as exc:
            VaRequestSchema().dump({"amount": Decimal("12345678901234567.89")})

        message = exc.value.messages["amount"][0]
        assert "cannot be sent as a JSON number exactly" in message

    def test_missing_amount_is_omitted(self):
        assert "amount" not in VaRequestSchema().dump({"name": "Siti"})


def test_va_request_uses_consumer_field_names():
    dumped = VaRequestSchema().dump(
        {
            "account_type": "CLOSED",
            "request_type": "CREATE",
            "account_number": "1234567890",
            "amount": Decimal("500000"),
            "description": "SPP",
            "email": None,
            "phone": "0812",
            "expire_date": date(2024, 1, 31),
            "invoice_number": "B100",
            "name": "Siti",
            "bank_id": "bank-1",
        }
    )

    assert dumped == {
        "accountType": "CLOSED",
        "requestType": "CREATE",
        "accountNumber": "1234567890",
        "amount": 500000,
        "description": "SPP",
        "email": None,
        "phone": "0812",
        "expireDate": "2024-01-31",
        "invoiceNumber": "B100",
        "name": "Siti",
        "bankId": "bank-1",
    }


def test_notification_envelope_carries_template_as_konfigurasi():
    dumped = NotificationSchema().dump(
        {"email": "siti@example.com", "template": "tagihan", "data": {"nama": "Siti"}}
    )

    assert dumped == {
        "email": "siti@example.com",
        "konfigurasi": "tagihan",
        "data": {"nama": "Siti"},
    }


def test_payment_fact_formats_transaction_time():
    dumped = PaymentFactSchema().dump(
        {"transaction_time": datetime(2024, 1, 20, 9, 30, 5), "bill_status": "AKTIF"}
    )

    assert dumped["waktuPembayaran"] == "2024-01-20 09:30:05"
    assert dumped["statusTagihan"] == "AKTIF"


def test_dead_letter_fields():
    dumped = DeadLetterSchema().dump(
        {
            "virtual_account_id": "va-1",
            "invoice_number": "B100",
            "bank_id": "bank-1",
            "request_type": "DELETE",
            "reason": "missing virtual account number",
            "attempts": 3,
        }
    )

    assert dumped["virtualAccountId"] == "va-1"
    assert dumped["invoiceNumber"] == "B100"
    assert dumped["requestType"] == "DELETE"
    assert dumped["attempts"] == 3
