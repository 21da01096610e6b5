"""
Message target queries and atomic counter updates.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from src.core.models.message_target import MessageTarget
from src.shared.logging.log_setup import get_logger

from .base_repository import BaseRepository

logger = get_logger(__name__)

TARGET_COLUMNS = (
    "id, name, whatsapp_id, description, category, members_count, is_active, "
    "sending_enabled, max_messages_per_day, allowed_hours_start, allowed_hours_end, "
    "message_template_id, total_sent, sent_today, counters_date, last_sent_at, "
    "total_clicks, total_conversions, avg_engagement_rate, last_activity_at, "
    "created_at, updated_at"
)


def row_to_target(row: Dict[str, Any]) -> MessageTarget:
    return MessageTarget(**row)


class MessageTargetRepository(BaseRepository):
    """Repository for message target operations."""
    
    table = "affiliate_board_messagetarget"
    
    def find_by_id(self, target_id: int) -> Optional[MessageTarget]:
        rows = self._fetch_dicts(
            f"SELECT {TARGET_COLUMNS} FROM {self.table} WHERE id = %s;", (target_id,)
        )
        return row_to_target(rows[0]) if rows else None
    
    def find_sendable(self) -> List[MessageTarget]:
        """
        Targets that are active and have sending enabled.
        
        Hour window and daily limit are checked by the caller against its clock.
        
        Returns:
            Candidate targets ordered by id
        """
        query = f"""
            SELECT {TARGET_COLUMNS} FROM {self.table}
            WHERE is_active = TRUE AND sending_enabled = TRUE
            ORDER BY id;
        """
        return [row_to_target(row) for row in self._fetch_dicts(query)]
    
    def record_message_sent(self, target_id: int, sent_at: datetime) -> None:
        """
        Count a successful send, restarting the daily counter on a new date.
        
        Args:
            target_id: Target that received the message
            sent_at: Send time in the sending timezone
        """
        today = sent_at.date()
        query = f"""
            UPDATE {self.table}
            SET total_sent = total_sent + 1,
                sent_today = CASE WHEN counters_date = %s THEN sent_today + 1 ELSE 1 END,
                counters_date = %s,
                last_sent_at = %s,
                last_activity_at = %s,
                updated_at = NOW()
            WHERE id = %s;
        """
        self._execute_query(query, (today, today, sent_at, sent_at, target_id))
        logger.debug("target_send_recorded", target_id=target_id)
    
    def reset_daily_counters(self, today: date) -> int:
        """
        Zero every stale daily counter.
        
        Args:
            today: Current date in the sending timezone
            
        Returns:
            Number of targets reset
        """
        rows = self._execute_query(
            f"""
            UPDATE {self.table}
            SET sent_today = 0, counters_date = %s, updated_at = NOW()
            WHERE counters_date IS DISTINCT FROM %s
            RETURNING id;
            """,
            (today, today),
        )
        count = len(rows or [])
        logger.info("daily_counters_reset", targets=count, date=today.isoformat())
        return count
