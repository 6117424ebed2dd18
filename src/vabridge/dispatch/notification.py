"""Billing reminders and payment notifications.

A reminder is sent once per bill: the SENT flag saved after a successful
publish is what keeps a bill from being reminded again. Publishing itself is
not deduplicated, so a crash between publish and save sends the reminder
twice.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable

from vabridge.config import Settings
from vabridge.entities import Bill, Payment, VirtualAccount
from vabridge.port.store import BaseStore
from vabridge.publisher import MessagePublisher
from vabridge.schemas import (
    BillReminderSchema,
    NotificationSchema,
    PaymentFactSchema,
    PaymentNoticeSchema,
)

logger = logging.getLogger(__name__)


def render_accounts(vas: Iterable[VirtualAccount]) -> tuple[str, str]:
    """Render VAs as a "/"-joined plain list and as an HTML list"""
    entries = [f"{va.bank.name} {va.number}" for va in vas]

    plain = "/".join(entries)
    html = "<ul>" + "".join(f"<li>{entry}</li>" for entry in entries) + "</ul>"
    return plain, html


class NotificationDispatcher:
    def __init__(
        self,
        store: BaseStore,
        publisher: MessagePublisher,
        settings: Settings,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.store = store
        self.publisher = publisher
        self.settings = settings
        self.clock = clock

    def process_reminders(self) -> int:
        """Send reminders for unsent bills whose VAs should be usable by now.

        A bill waits `delay_minutes` after its last update, to give its VAs time
        to be activated, and is skipped as long as it has no ACTIVE VA.

        Returns:
            int: The number of reminders sent
        """
        options = self.settings.notification
        delay = timedelta(minutes=options.delay_minutes)
        now = self.clock()

        sent = 0
        for bill in self.store.find_unsent_bills(options.batch_size):
            if now < bill.updated_at + delay:
                continue

            active_vas = self.store.find_active_vas_for_bill(bill)
            if not active_vas:
                continue

            if self.send_bill_reminder(bill, active_vas):
                sent += 1

        if sent:
            logger.info(f"Sent {sent} billing reminder(s)")
        return sent

    def send_bill_reminder(self, bill: Bill, active_vas: list[VirtualAccount]) -> bool:
        options = self.settings.notification
        try:
            accounts, accounts_html = render_accounts(active_vas)
            data = BillReminderSchema().dump(
                {
                    "amount": bill.amount,
                    "description": bill.bill_type.name,
                    "name": bill.payer.name,
                    "email": bill.payer.email,
                    "mobile": bill.payer.mobile,
                    "bill_number": bill.number,
                    "accounts": accounts,
                    "accounts_html": accounts_html,
                    "bill_date": bill.bill_date,
                    "contact_info": options.contact_info,
                    "contact_info_full": options.contact_info_full,
                }
            )
            self.publisher.publish(
                self.settings.topics.notification_request,
                self._envelope(
                    bill.payer.email, bill.payer.mobile, options.reminder_template, data
                ),
            )

            bill.mark_notification_sent()
            self.store.save_bill(bill)
        except Exception as exc:
            logger.warning(
                f"Billing reminder for bill {bill.number} failed: {exc}", exc_info=True
            )
            return False

        return True

    def notify_payment(self, payment: Payment) -> None:
        """Announce a recorded payment.

        Emits the payment fact, then notices to the payer and, when enabled,
        to finance and IT. Each message is sent independently of the others'
        success.
        """
        self.send_payment_fact(payment)

        payer = payment.bill.payer
        options = self.settings.notification

        self.send_payment_notice(payer.email, payer.mobile, payment)

        if options.send_finance_email:
            self.send_payment_notice(options.finance_email, None, payment)

        if options.send_it_email:
            self.send_payment_notice(options.it_email, None, payment)

    def send_payment_fact(self, payment: Payment) -> bool:
        bill = payment.bill
        try:
            fact = PaymentFactSchema().dump(
                {
                    "bank": payment.bank.id,
                    "bill_type": bill.bill_type.code,
                    "bill_number": bill.number,
                    "payer_number": bill.payer.number,
                    "payer_name": bill.payer.name,
                    "bill_description": bill.description,
                    "bill_status": bill.status.value,
                    "bill_amount": bill.amount,
                    "payment_amount": payment.amount,
                    "cumulative_amount": bill.amount_paid,
                    "reference": payment.reference,
                    "transaction_time": payment.transaction_time,
                    "bill_date": bill.bill_date,
                    "due_date": bill.due_date,
                }
            )
            self.publisher.publish(self.settings.topics.bill_payment, fact)
        except Exception as exc:
            logger.warning(
                f"Payment fact {payment.reference} for bill {bill.number} failed: {exc}",
                exc_info=True,
            )
            return False

        return True

    def send_payment_notice(
        self, email: str | None, mobile: str | None, payment: Payment
    ) -> bool:
        bill = payment.bill
        options = self.settings.notification
        try:
            data = PaymentNoticeSchema().dump(
                {
                    "contact_info": options.contact_info,
                    "contact_info_full": options.contact_info_full,
                    "description": bill.bill_type.name,
                    "bill_number": bill.number,
                    "name": bill.payer.name,
                    "mobile": bill.payer.mobile,
                    "bill_date": bill.bill_date,
                    "payment_amount": payment.amount,
                    "bill_amount": bill.amount,
                    "bank_name": payment.bank.name,
                    "transaction_time": payment.transaction_time,
                    "reference": payment.reference,
                }
            )
            self.publisher.publish(
                self.settings.topics.notification_request,
                self._envelope(email, mobile, options.payment_template, data),
            )
        except Exception as exc:
            logger.warning(
                f"Payment notice {payment.reference} to {email} failed: {exc}",
                exc_info=True,
            )
            return False

        return True

    @staticmethod
    def _envelope(
        email: str | None, mobile: str | None, template: str, data: dict
    ) -> dict:
        envelope = {"email": email, "template": template, "data": data}
        if mobile is not None:
            envelope["mobile"] = mobile

        return NotificationSchema().dump(envelope)
