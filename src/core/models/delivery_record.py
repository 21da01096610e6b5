"""
Pydantic model for the append-only delivery log.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from src.core.exceptions.robot_errors import InvalidStatusTransitionError
from src.core.models.enums import ALLOWED_STATUS_TRANSITIONS, DeliveryStatus
from src.shared.config.app_settings import local_now

_TIMESTAMP_FIELDS = {
    DeliveryStatus.SENT: "sent_at",
    DeliveryStatus.FAILED: "failed_at",
    DeliveryStatus.DELIVERED: "delivered_at",
    DeliveryStatus.READ: "read_at",
}


class DeliveryRecord(BaseModel):
    """
    Model representing one delivery attempt of a product to a target.
    
    Product, target and template ids are weak references and may point
    at rows that no longer exist.
    
    Attributes:
        id: Database primary key
        product_id: Delivered product
        target_id: Receiving target
        template_id: Template the content was rendered from
        content: Rendered message text
        image_url: Image sent with the message, if any
        status: Delivery lifecycle state
        message_id: Gateway message id on success
        api_success: Whether the gateway accepted the message
        api_response: Raw gateway response body
        error_message: Last error when the send failed
        http_status: Last gateway HTTP status
        attempts: Transport attempts made
        processing_time_ms: Time spent in the transport
        execution_id: Robot run that produced the record
    """
    
    id: Optional[int] = None
    product_id: Optional[int] = None
    target_id: Optional[int] = None
    template_id: Optional[int] = None
    content: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    status: DeliveryStatus = Field(DeliveryStatus.PENDING)
    message_id: Optional[str] = None
    api_success: bool = Field(False)
    api_response: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = None
    http_status: Optional[int] = None
    attempts: int = Field(0, ge=0)
    processing_time_ms: int = Field(0, ge=0)
    execution_id: Optional[str] = None
    scheduled_at: datetime = Field(default_factory=lambda: local_now())
    sent_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    read_at: Optional[datetime] = None
    clicks: int = Field(0, ge=0)
    reactions: int = Field(0, ge=0)
    replies: int = Field(0, ge=0)
    conversions: int = Field(0, ge=0)
    
    def transition_to(self, status: DeliveryStatus, at: Optional[datetime] = None) -> None:
        """
        Move the record to a new status and stamp the transition time.
        
        Args:
            status: Target status
            at: Transition time, defaults to now
            
        Raises:
            InvalidStatusTransitionError: If the lifecycle forbids the move
        """
        if status not in ALLOWED_STATUS_TRANSITIONS[self.status]:
            raise InvalidStatusTransitionError(self.status.value, status.value)
        self.status = status
        setattr(self, _TIMESTAMP_FIELDS[status], at or local_now())
    
    
    class Config:
        json_encoders = {
            datetime: lambda v: v.isoformat()
        }
