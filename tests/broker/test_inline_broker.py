import json

import pytest

from vabridge.adapters.broker.inline import InlineBroker
from vabridge.exceptions import ValidationError
from vabridge.port.broker import BaseBroker


class TestInlineBroker:
    def test_that_base_broker_class_cannot_be_instantiated(self):
        with pytest.raises(TypeError):
            BaseBroker("dummy", {})

    def test_published_messages_are_kept_in_order_per_stream(self, broker):
        broker.publish("va-request", json.dumps({"invoiceNumber": "B100"}))
        broker.publish("va-request", json.dumps({"invoiceNumber": "B101"}))
        broker.publish("notification-request", json.dumps({"email": "a@b.c"}))

        assert broker.messages("va-request") == [
            {"invoiceNumber": "B100"},
            {"invoiceNumber": "B101"},
        ]
        assert broker.messages("notification-request") == [{"email": "a@b.c"}]

    def test_publish_returns_an_identifier(self, broker):
        first = broker.publish("va-request", "{}")
        second = broker.publish("va-request", "{}")

        assert first and second
        assert first != second

    def test_empty_message_is_rejected(self, broker):
        with pytest.raises(ValidationError):
            broker.publish("va-request", "")

        assert broker.messages("va-request") == []

    def test_unknown_stream_has_no_messages(self, broker):
        assert broker.messages("nowhere") == []

    def test_data_reset(self, broker):
        broker.publish("va-request", "{}")
        broker._data_reset()

        assert broker.messages("va-request") == []

    def test_health_stats(self, broker):
        broker.publish("va-request", "{}")
        broker.publish("bill-payment", "{}")

        stats = broker.health_stats()

        assert stats["status"] == "healthy"
        assert stats["connected"] is True
        assert stats["details"] == {"streams": 2, "messages": 2}


class FlakyBroker(InlineBroker):
    """Loses its connection on the first publish"""

    def __init__(self, name, conn_info, reconnects=True):
        super().__init__(name, conn_info)
        self.failures = 1
        self.reconnects = reconnects

    def _publish(self, stream, message):
        if self.failures:
            self.failures -= 1
            raise ConnectionError("connection lost")
        return super()._publish(stream, message)

    def _is_connection_error(self, error):
        return isinstance(error, ConnectionError)

    def _ensure_connection(self):
        return self.reconnects


class TestConnectionRecovery:
    def test_publish_is_retried_once_after_reconnecting(self):
        broker = FlakyBroker("flaky", {})

        broker.publish("va-request", '{"a": 1}')

        assert broker.messages("va-request") == [{"a": 1}]

    def test_error_is_raised_when_reconnection_fails(self):
        broker = FlakyBroker("flaky", {}, reconnects=False)

        with pytest.raises(ConnectionError):
            broker.publish("va-request", '{"a": 1}')

        assert broker.messages("va-request") == []

    def test_other_errors_are_not_retried(self, mocker):
        broker = InlineBroker("default", {})
        mocker.patch.object(broker, "_publish", side_effect=ValueError("boom"))
        spy = mocker.spy(broker, "_ensure_connection")

        with pytest.raises(ValueError):
            broker.publish("va-request", "{}")

        assert spy.call_count == 0
