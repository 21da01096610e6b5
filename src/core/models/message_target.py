"""
Pydantic model for WhatsApp groups that receive product messages.
"""

from datetime import date, datetime
from typing import Optional, Tuple

from pydantic import BaseModel, Field, model_validator

from src.core.models.enums import TargetCategory


class MessageTarget(BaseModel):
    """
    Model representing a delivery target ("group").
    
    The allowed-hours window is half-open: a target is eligible from
    ``allowed_hours_start`` up to but excluding ``allowed_hours_end``.
    ``sent_today`` counts sends on ``counters_date`` only.
    
    Attributes:
        id: Database primary key
        name: Display name
        whatsapp_id: Unique gateway identifier (group JID)
        description: Optional free text
        category: Category affinity
        members_count: Number of group members
        is_active: Whether the target is active at all
        sending_enabled: Operator switch for deliveries
        max_messages_per_day: Daily send ceiling
        allowed_hours_start: First hour of the sending window (0-23)
        allowed_hours_end: Hour the sending window closes (1-24)
        message_template_id: Assigned template, if any
        total_sent: Lifetime sends
        sent_today: Sends on counters_date
        counters_date: Calendar date sent_today refers to
        last_sent_at: Last successful send
    """
    
    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=100)
    whatsapp_id: str = Field(..., min_length=1, max_length=100)
    description: str = Field("", max_length=500)
    category: TargetCategory = Field(TargetCategory.GENERAL)
    members_count: int = Field(0, ge=0)
    is_active: bool = Field(True)
    sending_enabled: bool = Field(True)
    max_messages_per_day: int = Field(5, ge=1, le=20)
    allowed_hours_start: int = Field(8, ge=0, le=23)
    allowed_hours_end: int = Field(22, ge=1, le=24)
    message_template_id: Optional[int] = None
    total_sent: int = Field(0, ge=0)
    sent_today: int = Field(0, ge=0)
    counters_date: Optional[date] = None
    last_sent_at: Optional[datetime] = None
    total_clicks: int = Field(0, ge=0)
    total_conversions: int = Field(0, ge=0)
    avg_engagement_rate: float = Field(0, ge=0, le=1)
    last_activity_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    @model_validator(mode="after")
    def validate_allowed_hours(self) -> "MessageTarget":
        """
        Validates the sending window.
        
        Raises:
            ValueError: If the window closes at or before it opens
        """
        if self.allowed_hours_end <= self.allowed_hours_start:
            raise ValueError("allowed_hours_end must be greater than allowed_hours_start")
        return self
    
    def effective_sent_today(self, today: date) -> int:
        """Sends counted for ``today``; a stale counter reads as zero."""
        if self.counters_date != today:
            return 0
        return self.sent_today
    
    def is_within_allowed_hours(self, now: datetime) -> bool:
        return self.allowed_hours_start <= now.hour < self.allowed_hours_end
    
    def check_eligibility(self, now: datetime) -> Tuple[bool, str]:
        """
        Decide whether this target may receive a message right now.
        
        Args:
            now: Current time in the sending timezone
            
        Returns:
            Tuple of (eligible, reason); reason is 'eligible' when allowed
        """
        if not self.is_active:
            return False, "inactive"
        if not self.sending_enabled:
            return False, "sending_disabled"
        if not self.is_within_allowed_hours(now):
            return False, "outside_allowed_hours"
        if self.effective_sent_today(now.date()) >= self.max_messages_per_day:
            return False, "daily_limit_reached"
        return True, "eligible"
    
    def record_send(self, now: datetime) -> None:
        """Apply a successful send to the counters, restarting the day if it rolled over."""
        today = now.date()
        self.sent_today = self.effective_sent_today(today) + 1
        self.counters_date = today
        self.total_sent += 1
        self.last_sent_at = now
    
    def reset_daily_counters(self, today: date) -> None:
        self.sent_today = 0
        self.counters_date = today
    
    
    class Config:
        validate_assignment = True
        json_encoders = {
            datetime: lambda v: v.isoformat(),
            date: lambda v: v.isoformat(),
        }
