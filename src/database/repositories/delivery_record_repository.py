"""
Append-only delivery log writes.
"""

from psycopg2.extras import Json

from src.core.models.delivery_record import DeliveryRecord
from src.shared.logging.log_setup import get_logger

from .base_repository import BaseRepository

logger = get_logger(__name__)


class DeliveryRecordRepository(BaseRepository):
    """Repository for delivery records."""
    
    table = "affiliate_board_deliveryrecord"
    
    def insert(self, record: DeliveryRecord) -> int:
        """
        Append a delivery record.
        
        Args:
            record: Record to store
            
        Returns:
            New record id
        """
        query = f"""
            INSERT INTO {self.table}
            (product_id, target_id, template_id, content, image_url, status, message_id,
             api_success, api_response, error_message, http_status, attempts,
             processing_time_ms, execution_id, scheduled_at, sent_at, failed_at,
             delivered_at, read_at, clicks, reactions, replies, conversions, created_at)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s,
                    %s, %s, %s, %s, %s, %s, NOW())
            RETURNING id;
        """
        params = (
            record.product_id,
            record.target_id,
            record.template_id,
            record.content,
            record.image_url,
            record.status.value,
            record.message_id,
            record.api_success,
            Json(record.api_response) if record.api_response is not None else None,
            record.error_message,
            record.http_status,
            record.attempts,
            record.processing_time_ms,
            record.execution_id,
            record.scheduled_at,
            record.sent_at,
            record.failed_at,
            record.delivered_at,
            record.read_at,
            record.clicks,
            record.reactions,
            record.replies,
            record.conversions,
        )
        record_id = self._execute_with_return(query, params)
        logger.debug("delivery_recorded", record_id=record_id, status=record.status.value)
        return record_id
