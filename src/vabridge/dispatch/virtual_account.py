"""Dispatching of pending virtual account requests to the bank.

Each request queue (CREATE, UPDATE, DELETE) is handled one row per tick:
the row is turned into a VA request, published, and moved IN_FLIGHT. What
happens after IN_FLIGHT is decided by the consumer of the bank's responses.

Publishing and saving the new status are not atomic. If the process dies in
between, the same request is published again on the next tick, so consumers
of the VA request topic must be idempotent on (invoiceNumber, requestType).
"""

from __future__ import annotations

import logging
from collections import Counter
from threading import Lock

from vabridge.config import Settings
from vabridge.entities import REQUEST_STATUSES, VaStatus, VirtualAccount
from vabridge.exceptions import InvalidStateError
from vabridge.numbering import account_seed, generate, strip_prefix
from vabridge.port.store import BaseStore
from vabridge.publisher import MessagePublisher
from vabridge.schemas import DeadLetterSchema, VaRequestSchema

logger = logging.getLogger(__name__)

MISSING_NUMBER = "missing virtual account number"


class VirtualAccountDispatcher:
    def __init__(
        self, store: BaseStore, publisher: MessagePublisher, settings: Settings
    ) -> None:
        self.store = store
        self.publisher = publisher
        self.settings = settings

        self._schema = VaRequestSchema()

        # Consecutive guard failures, and rows set aside after too many, keyed by
        #   (VA id, queue). Both are per-process and are released as soon as the
        #   row gets a VA number or leaves the queue.
        self._guard_failures: Counter[tuple[str, VaStatus]] = Counter()
        self._quarantined: set[tuple[str, VaStatus]] = set()
        self._lock = Lock()

    def process_create(self) -> bool:
        return self.process(VaStatus.CREATE)

    def process_update(self) -> bool:
        return self.process(VaStatus.UPDATE)

    def process_delete(self) -> bool:
        return self.process(VaStatus.DELETE)

    def process(self, status: VaStatus) -> bool:
        """Send the request for one pending VA of the `status` queue.

        Returns:
            bool: True if a request was published and the VA is now IN_FLIGHT
        """
        if status not in REQUEST_STATUSES:
            raise InvalidStateError(f"{status.name} is not a request queue")

        self._release()

        va = self.store.find_pending_va(
            status, exclude=self._quarantined_ids(status)
        )
        if va is None:
            return False

        try:
            # VA update and delete need the number the bank already knows
            if status != VaStatus.CREATE and not va.has_number:
                self._reject(va, status)
                return False

            request = self.build_request(va, status)
            self.publisher.publish(
                self.settings.topics.va_request, self._schema.dump(request)
            )

            va.mark_in_flight()
            self.store.save_va(va)
        except Exception as exc:
            logger.warning(
                f"VA request {status.name} for bill {va.bill.number} failed: {exc}",
                exc_info=True,
            )
            return False

        with self._lock:
            self._guard_failures.pop((va.id, status), None)
        logger.info(
            f"VA request {status.name} for bill {va.bill.number} "
            f"sent to bank {va.bank.code}"
        )
        return True

    def build_request(self, va: VirtualAccount, status: VaStatus) -> dict:
        """Assemble the VA request sent to the bank for `va`"""
        bill = va.bill
        payer = bill.payer

        if status == VaStatus.CREATE:
            account_number = generate(
                account_seed(payer.number, bill.bill_type.code), va.bank.va_digits
            )
        else:
            account_number = strip_prefix(va.number, va.bank.prefix_digits)

        return {
            "account_type": bill.bill_type.payment_type,
            "request_type": status.value,
            "account_number": account_number,
            "amount": bill.outstanding_amount,
            "description": bill.description,
            "email": payer.email,
            "phone": payer.mobile,
            "expire_date": bill.due_date,
            "invoice_number": bill.number,
            "name": payer.name,
            "bank_id": va.bank.id,
        }

    @property
    def quarantined(self) -> frozenset[tuple[str, VaStatus]]:
        with self._lock:
            return frozenset(self._quarantined)

    def _quarantined_ids(self, status: VaStatus) -> frozenset[str]:
        with self._lock:
            return frozenset(
                va_id for va_id, queue in self._quarantined if queue == status
            )

    def _release(self) -> None:
        """Drop guard state of rows that got a VA number or left their queue"""
        with self._lock:
            tracked = set(self._quarantined) | set(self._guard_failures)

        current = {va_id: self.store.get_va(va_id) for va_id, _ in tracked}
        released = [
            (va_id, queue)
            for va_id, queue in tracked
            if current[va_id] is None
            or current[va_id].status != queue
            or current[va_id].has_number
        ]
        if not released:
            return

        with self._lock:
            for key in released:
                if key in self._quarantined:
                    self._quarantined.discard(key)
                    logger.info(f"VA {key[0]} is back in the {key[1].name} queue")
                self._guard_failures.pop(key, None)

    def _reject(self, va: VirtualAccount, status: VaStatus) -> None:
        """Record a guard failure; after too many, report the VA and set it aside"""
        with self._lock:
            self._guard_failures[(va.id, status)] += 1
            attempts = self._guard_failures[(va.id, status)]

        logger.warning(
            f"VA request {status.name} for bill {va.bill.number} has no VA number "
            f"(attempt {attempts})"
        )

        if attempts < self.settings.guard.max_attempts:
            return

        dead_letter = DeadLetterSchema().dump(
            {
                "virtual_account_id": va.id,
                "invoice_number": va.bill.number,
                "bank_id": va.bank.id,
                "request_type": status.value,
                "reason": MISSING_NUMBER,
                "attempts": attempts,
            }
        )
        # The alert is best effort; the VA is set aside regardless
        self.publisher.forward(self.settings.topics.va_dead_letter, dead_letter)

        with self._lock:
            self._quarantined.add((va.id, status))
            self._guard_failures.pop((va.id, status), None)
        logger.error(
            f"VA {va.id} for bill {va.bill.number} set aside after {attempts} "
            f"{status.name} attempts without a VA number"
        )
