"""Tests for alert evaluation."""

from datetime import UTC, date, datetime, timedelta

from stockledger.core.entities.inventory import AlertStatus, RecordAlerts
from stockledger.core.services.alert_evaluator import (
    days_until_expiry,
    evaluate_alerts,
    is_expiring,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


class TestExpiryWindow:
    def test_days_round_up(self):
        # 2024-06-03 00:00 is 1.5 days away
        assert days_until_expiry(date(2024, 6, 3), NOW) == 2

    def test_expired_is_not_expiring(self):
        assert is_expiring(date(2024, 5, 30), NOW, 7) is False

    def test_expiry_today_is_not_expiring(self):
        # Midnight of today already passed
        assert is_expiring(date(2024, 6, 1), NOW, 7) is False

    def test_within_window(self):
        assert is_expiring(date(2024, 6, 2), NOW, 7) is True
        assert is_expiring(date(2024, 6, 8), NOW, 7) is True

    def test_outside_window(self):
        assert is_expiring(date(2024, 6, 9), NOW, 7) is False

    def test_no_expiry_date(self):
        assert is_expiring(None, NOW, 7) is False


class TestEvaluateAlerts:
    def test_low_stock_triggers_at_reorder_point(self, make_record):
        record = make_record(current_stock=10, reorder_point=10)
        alerts = evaluate_alerts(record, NOW)
        assert alerts.low_stock.is_active is True
        assert alerts.low_stock.triggered_at == NOW
        assert alerts.out_of_stock.is_active is False

    def test_above_reorder_point_no_alert(self, make_record):
        alerts = evaluate_alerts(make_record(current_stock=11, reorder_point=10), NOW)
        assert alerts.low_stock.is_active is False
        assert alerts.out_of_stock.is_active is False

    def test_zero_stock_raises_both(self, make_record):
        alerts = evaluate_alerts(make_record(current_stock=0, reorder_point=10), NOW)
        assert alerts.low_stock.is_active is True
        assert alerts.out_of_stock.is_active is True

    def test_resolution_stamps_resolved_at(self, make_record):
        record = make_record(current_stock=50)
        triggered = NOW - timedelta(days=1)
        record.alerts = RecordAlerts(
            low_stock=AlertStatus(is_active=True, triggered_at=triggered)
        )
        alerts = evaluate_alerts(record, NOW)
        assert alerts.low_stock.is_active is False
        assert alerts.low_stock.triggered_at == triggered
        assert alerts.low_stock.resolved_at == NOW

    def test_idempotent_timestamps(self, make_record):
        record = make_record(current_stock=3)
        record.alerts = evaluate_alerts(record, NOW)
        later = NOW + timedelta(hours=2)
        again = evaluate_alerts(record, later)
        assert again.low_stock.triggered_at == NOW
        assert again == record.alerts

    def test_expiry_alert(self, make_record):
        record = make_record(current_stock=50, expiry_date=date(2024, 6, 5))
        alerts = evaluate_alerts(record, NOW)
        assert alerts.expiry.is_active is True

    def test_custom_warning_window(self, make_record):
        record = make_record(current_stock=50, expiry_date=date(2024, 6, 20))
        assert evaluate_alerts(record, NOW, warning_days=7).expiry.is_active is False
        assert evaluate_alerts(record, NOW, warning_days=30).expiry.is_active is True

    def test_does_not_mutate_record(self, make_record):
        record = make_record(current_stock=0)
        before = record.alerts.model_copy(deep=True)
        evaluate_alerts(record, NOW)
        assert record.alerts == before
