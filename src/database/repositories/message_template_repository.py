"""
Message template lookups and usage statistics.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from src.core.models.message_template import MessageTemplate
from src.shared.logging.log_setup import get_logger

from .base_repository import BaseRepository

logger = get_logger(__name__)

TEMPLATE_COLUMNS = (
    "id, name, description, category, content, variables, is_default, is_active, "
    "times_used, last_used_at, avg_engagement_rate, created_at, updated_at"
)


def row_to_template(row: Dict[str, Any]) -> MessageTemplate:
    data = dict(row)
    data["variables"] = data.get("variables") or []
    return MessageTemplate(**data)


class MessageTemplateRepository(BaseRepository):
    """Repository for message template operations."""
    
    table = "affiliate_board_messagetemplate"
    
    def find_active_by_id(self, template_id: int) -> Optional[MessageTemplate]:
        rows = self._fetch_dicts(
            f"SELECT {TEMPLATE_COLUMNS} FROM {self.table} WHERE id = %s AND is_active = TRUE;",
            (template_id,),
        )
        return row_to_template(rows[0]) if rows else None
    
    def find_default(self, category: str) -> Optional[MessageTemplate]:
        """
        Active default template of a category.
        
        Args:
            category: Template category
            
        Returns:
            The most recently updated default, None if the category has none
        """
        rows = self._fetch_dicts(
            f"""
            SELECT {TEMPLATE_COLUMNS} FROM {self.table}
            WHERE category = %s AND is_default = TRUE AND is_active = TRUE
            ORDER BY updated_at DESC, id DESC
            LIMIT 1;
            """,
            (category,),
        )
        return row_to_template(rows[0]) if rows else None
    
    def record_usage(self, template_id: int, used_at: datetime) -> None:
        self._execute_query(
            f"""
            UPDATE {self.table}
            SET times_used = times_used + 1, last_used_at = %s, updated_at = NOW()
            WHERE id = %s;
            """,
            (used_at, template_id),
        )
        logger.debug("template_usage_recorded", template_id=template_id)
