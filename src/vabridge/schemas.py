"""Field contracts of the messages published to the bus.

Attribute names are snake_case; `data_key` carries the name expected by the
consumers on the other side of each topic.
"""

from decimal import Decimal

from marshmallow import Schema, fields

from vabridge.exceptions import ValidationError

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class Amount(fields.Decimal):
    """A Decimal dumped as a plain JSON number, integral when possible.

    Integral amounts are exact at any size. A fractional amount that a JSON
    float cannot carry exactly is refused instead of being rounded.
    """

    def _serialize(self, value, attr, obj, **kwargs):
        number = super()._serialize(value, attr, obj, **kwargs)
        if number is None:
            return None

        if number == number.to_integral_value():
            return int(number)

        as_float = float(number)
        if Decimal(repr(as_float)) != number:
            raise ValidationError(
                {attr: [f"Amount {number} cannot be sent as a JSON number exactly"]}
            )
        return as_float


class VaRequestSchema(Schema):
    account_type = fields.String(data_key="accountType")
    request_type = fields.String(data_key="requestType")
    account_number = fields.String(data_key="accountNumber")
    amount = Amount()
    description = fields.String()
    email = fields.String(allow_none=True)
    phone = fields.String(allow_none=True)
    expire_date = fields.Date(data_key="expireDate")
    invoice_number = fields.String(data_key="invoiceNumber")
    name = fields.String()
    bank_id = fields.String(data_key="bankId")


class NotificationSchema(Schema):
    """Envelope of every notification request.

    `mobile` is only emitted when present in the input.
    """

    email = fields.String(allow_none=True)
    mobile = fields.String()
    template = fields.String(data_key="konfigurasi")
    data = fields.Dict(keys=fields.String())


class BillReminderSchema(Schema):
    amount = Amount(data_key="jumlah")
    description = fields.String(data_key="keterangan")
    name = fields.String(data_key="nama")
    email = fields.String(allow_none=True)
    mobile = fields.String(data_key="noHp", allow_none=True)
    bill_number = fields.String(data_key="nomorTagihan")
    accounts = fields.String(data_key="rekening")
    accounts_html = fields.String(data_key="rekeningFull")
    bill_date = fields.Date(data_key="tanggalTagihan")
    contact_info = fields.String(data_key="contactinfo")
    contact_info_full = fields.String(data_key="contactinfoFull")


class PaymentNoticeSchema(Schema):
    contact_info = fields.String(data_key="contactinfo")
    contact_info_full = fields.String(data_key="contactinfoFull")
    description = fields.String(data_key="keterangan")
    bill_number = fields.String(data_key="nomorTagihan")
    name = fields.String(data_key="nama")
    mobile = fields.String(data_key="noHp", allow_none=True)
    bill_date = fields.Date(data_key="tanggalTagihan")
    payment_amount = Amount(data_key="nilaiPembayaran")
    bill_amount = Amount(data_key="nilaiTagihan")
    bank_name = fields.String(data_key="rekening")
    transaction_time = fields.DateTime(format=DATETIME_FORMAT, data_key="waktu")
    reference = fields.String(data_key="referensi")


class PaymentFactSchema(Schema):
    bank = fields.String()
    bill_type = fields.String(data_key="jenisTagihan")
    bill_number = fields.String(data_key="nomorTagihan")
    payer_number = fields.String(data_key="nomorDebitur")
    payer_name = fields.String(data_key="namaDebitur")
    bill_description = fields.String(data_key="keteranganTagihan")
    bill_status = fields.String(data_key="statusTagihan")
    bill_amount = Amount(data_key="nilaiTagihan")
    payment_amount = Amount(data_key="nilaiPembayaran")
    cumulative_amount = Amount(data_key="nilaiAkumulasiPembayaran")
    reference = fields.String(data_key="referensiPembayaran")
    transaction_time = fields.DateTime(
        format=DATETIME_FORMAT, data_key="waktuPembayaran"
    )
    bill_date = fields.Date(data_key="tanggalTagihan")
    due_date = fields.Date(data_key="tanggalJatuhTempo")


class DeadLetterSchema(Schema):
    virtual_account_id = fields.String(data_key="virtualAccountId")
    invoice_number = fields.String(data_key="invoiceNumber")
    bank_id = fields.String(data_key="bankId")
    request_type = fields.String(data_key="requestType")
    reason = fields.String()
    attempts = fields.Integer()
