"""
Unit tests for the MessageTarget model.
"""

import pytest
from datetime import date, datetime
from pydantic import ValidationError

from src.core.models.message_target import MessageTarget


class TestMessageTarget:
    """Test eligibility rules and counters."""
    
    @pytest.fixture
    def target(self):
        return MessageTarget(
            id=1,
            name="Ofertas Tech",
            whatsapp_id="120363000000000001@g.us",
            category="electronics",
            max_messages_per_day=3,
        )
    
    def test_defaults(self, target):
        assert target.allowed_hours_start == 8
        assert target.allowed_hours_end == 22
        assert target.sending_enabled is True
    
    def test_inverted_window_rejected(self):
        with pytest.raises(ValidationError):
            MessageTarget(name="G", whatsapp_id="g", allowed_hours_start=20, allowed_hours_end=20)
    
    def test_daily_limit_bounds(self):
        with pytest.raises(ValidationError):
            MessageTarget(name="G", whatsapp_id="g", max_messages_per_day=0)
        with pytest.raises(ValidationError):
            MessageTarget(name="G", whatsapp_id="g", max_messages_per_day=21)
    
    def test_eligible_inside_window(self, target):
        assert target.check_eligibility(datetime(2026, 3, 10, 14, 0)) == (True, "eligible")
    
    def test_window_end_is_exclusive(self, target):
        assert target.check_eligibility(datetime(2026, 3, 10, 22, 0)) == (False, "outside_allowed_hours")
        assert target.check_eligibility(datetime(2026, 3, 10, 23, 30)) == (False, "outside_allowed_hours")
        assert target.check_eligibility(datetime(2026, 3, 10, 8, 0))[0] is True
    
    def test_inactive_and_disabled(self, target):
        now = datetime(2026, 3, 10, 14, 0)
        target.sending_enabled = False
        assert target.check_eligibility(now) == (False, "sending_disabled")
        target.is_active = False
        assert target.check_eligibility(now) == (False, "inactive")
    
    def test_daily_limit_reached(self, target):
        target.sent_today = 3
        target.counters_date = date(2026, 3, 10)
        
        assert target.check_eligibility(datetime(2026, 3, 10, 14, 0)) == (False, "daily_limit_reached")
    
    def test_stale_counter_reads_as_zero(self, target):
        """Test that yesterday's counter does not block today."""
        target.sent_today = 3
        target.counters_date = date(2026, 3, 9)
        
        assert target.effective_sent_today(date(2026, 3, 10)) == 0
        assert target.check_eligibility(datetime(2026, 3, 10, 14, 0))[0] is True
    
    def test_record_send_restarts_rolled_over_day(self, target):
        target.sent_today = 3
        target.total_sent = 40
        target.counters_date = date(2026, 3, 9)
        now = datetime(2026, 3, 10, 9, 15)
        
        target.record_send(now)
        
        assert target.sent_today == 1
        assert target.counters_date == date(2026, 3, 10)
        assert target.total_sent == 41
        assert target.last_sent_at == now
    
    def test_reset_daily_counters(self, target):
        target.sent_today = 2
        target.reset_daily_counters(date(2026, 3, 11))
        assert target.sent_today == 0
        assert target.counters_date == date(2026, 3, 11)
