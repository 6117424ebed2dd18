"""Module to setup fixtures and other required artifacts for tests

    isort:skip_file
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from vabridge.adapters.broker.inline import InlineBroker
from vabridge.adapters.store.memory import MemoryStore
from vabridge.config import Settings
from vabridge.dispatch import NotificationDispatcher, VirtualAccountDispatcher
from vabridge.entities import Bank, Bill, BillType, Payer, VaStatus, VirtualAccount
from vabridge.publisher import MessagePublisher

NOW = datetime(2024, 1, 15, 12, 0, 0)


def pytest_addoption(parser):
    """Additional options for running tests with pytest"""
    parser.addoption(
        "--redis", action="store_true", default=False, help="Run Redis based tests"
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "redis: test needs a running Redis server")


def pytest_collection_modifyitems(config, items):
    """Configure special markers on tests, so as to control execution"""
    if config.getoption("--redis"):
        return

    skip_redis = pytest.mark.skip(reason="need --redis option to run")
    for item in items:
        if "redis" in item.keywords:
            item.add_marker(skip_redis)


@pytest.fixture
def config():
    """Raw configuration used to build test settings. Override per test module."""
    return {
        "notification": {
            "delay_minutes": 60,
            "contact_info": "keuangan@kampus.ac.id",
            "contact_info_full": "<b>Keuangan</b> keuangan@kampus.ac.id",
            "finance_email": "finance@kampus.ac.id",
            "it_email": "it@kampus.ac.id",
        },
        "guard": {"max_attempts": 3},
    }


@pytest.fixture
def settings(config):
    return Settings.from_config(config)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def broker():
    return InlineBroker("default", {"provider": "inline"})


@pytest.fixture
def publisher(broker, settings):
    return MessagePublisher(broker, settings.topics)


@pytest.fixture
def va_dispatcher(store, publisher, settings):
    return VirtualAccountDispatcher(store, publisher, settings)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def notification_dispatcher(store, publisher, settings, clock):
    return NotificationDispatcher(store, publisher, settings, clock=clock)


@pytest.fixture
def bank():
    return Bank(
        code="BANK1",
        name="Bank Satu",
        account_number="1234567890",
        account_name="Yayasan Kampus",
        va_digits=10,
        prefix_digits=2,
    )


@pytest.fixture
def payer():
    return Payer(
        number="2024001",
        name="Siti Aminah",
        email="siti@example.com",
        mobile="081234567890",
    )


@pytest.fixture
def bill_type():
    return BillType(code="SPP", name="SPP Semester Genap", payment_type="CLOSED")


@pytest.fixture
def bill(store, payer, bill_type):
    bill = Bill(
        number="B100",
        payer=payer,
        bill_type=bill_type,
        amount=Decimal("500000"),
        amount_paid=Decimal("0"),
        bill_date=date(2024, 1, 1),
        due_date=date(2024, 1, 31),
        description="SPP Januari 2024",
        updated_at=datetime(2024, 1, 15, 10, 0, 0),
    )
    store.save_bill(bill)
    return bill


@pytest.fixture
def make_va(store, bank, bill):
    """Factory saving a VA for the `bill` fixture"""

    def _make_va(status=VaStatus.CREATE, number=None, **kwargs):
        va = VirtualAccount(
            bank=kwargs.pop("bank", bank),
            bill=kwargs.pop("bill", bill),
            number=number,
            status=status,
            **kwargs,
        )
        store.save_va(va)
        return va

    return _make_va
