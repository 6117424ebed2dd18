from datetime import datetime

import pytest

from vabridge.adapters.store import build_store
from vabridge.adapters.store.memory import MemoryStore
from vabridge.entities import Bill, NotificationStatus, VaStatus
from vabridge.exceptions import ConfigurationError


class TestPendingVas:
    def test_oldest_pending_va_of_the_status_is_returned(self, store, make_va):
        first = make_va(VaStatus.CREATE)
        make_va(VaStatus.CREATE)
        make_va(VaStatus.UPDATE, number="9912345678")

        assert store.find_pending_va(VaStatus.CREATE).id == first.id

    def test_no_pending_va(self, store, make_va):
        make_va(VaStatus.ACTIVE, number="9912345678")

        assert store.find_pending_va(VaStatus.CREATE) is None

    def test_excluded_vas_are_skipped(self, store, make_va):
        first = make_va(VaStatus.DELETE)
        second = make_va(VaStatus.DELETE)

        assert store.find_pending_va(VaStatus.DELETE, exclude={first.id}).id == second.id


class TestCopies:
    def test_changes_are_not_visible_until_saved(self, store, make_va):
        va = make_va(VaStatus.CREATE)

        found = store.find_pending_va(VaStatus.CREATE)
        found.status = VaStatus.IN_FLIGHT

        assert store.get_va(va.id).status == VaStatus.CREATE

        store.save_va(found)
        assert store.get_va(va.id).status == VaStatus.IN_FLIGHT

    def test_vas_point_to_the_latest_saved_bill(self, store, make_va, bill):
        va = make_va(VaStatus.CREATE)

        bill.description = "Updated"
        store.save_bill(bill)

        assert store.get_va(va.id).bill.description == "Updated"


class TestBills:
    def test_active_vas_for_bill(self, store, make_va, bill):
        active = make_va(VaStatus.ACTIVE, number="9912345678")
        make_va(VaStatus.IN_FLIGHT)
        make_va(VaStatus.CREATE)

        assert [va.id for va in store.find_active_vas_for_bill(bill)] == [active.id]
        assert len(store.find_vas_for_bill(bill)) == 3

    def test_unsent_bills_oldest_update_first(self, store, bill, payer, bill_type):
        older = Bill(
            number="B099",
            payer=payer,
            bill_type=bill_type,
            amount=bill.amount,
            bill_date=bill.bill_date,
            due_date=bill.due_date,
            updated_at=datetime(2024, 1, 10, 8, 0, 0),
        )
        store.save_bill(older)

        sent = Bill(
            number="B098",
            payer=payer,
            bill_type=bill_type,
            amount=bill.amount,
            bill_date=bill.bill_date,
            due_date=bill.due_date,
            notification_status=NotificationStatus.SENT,
        )
        store.save_bill(sent)

        assert [b.number for b in store.find_unsent_bills(10)] == ["B099", "B100"]
        assert [b.number for b in store.find_unsent_bills(1)] == ["B099"]

    def test_get_missing_records(self, store):
        assert store.get_bill("missing") is None
        assert store.get_va("missing") is None

    def test_data_reset(self, store, make_va, bill):
        make_va()
        store._data_reset()

        assert store.get_bill(bill.id) is None
        assert store.find_pending_va(VaStatus.CREATE) is None


def test_store_is_built_from_configuration():
    store = build_store({"provider": "memory"})

    assert isinstance(store, MemoryStore)


def test_unknown_store_provider_is_rejected():
    with pytest.raises(ConfigurationError):
        build_store({"provider": "postgresql"})
