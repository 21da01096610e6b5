"""
Pydantic models describing robot run outcomes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class RunCounts(BaseModel):
    """Counters accumulated over one run."""
    
    scraped: int = 0
    rejected: int = 0
    created: int = 0
    updated: int = 0
    selected_products: int = 0
    eligible_targets: int = 0
    sent: int = 0
    succeeded: int = 0
    errors: int = 0


class RunResult(BaseModel):
    """
    Outcome of a robot run.
    
    Attributes:
        execution_id: Run identifier
        success: True when the run finished without an unhandled error or stop
        stopped: True when a stop request ended the run early
        started_at: Run start
        finished_at: Run end
        duration_seconds: Wall time of the run
        counts: Accumulated counters, preserved on failure
        errors: Human-readable per-item and run-level errors
        options: Options the run was started with
    """
    
    execution_id: str
    success: bool = False
    stopped: bool = False
    started_at: datetime
    finished_at: Optional[datetime] = None
    duration_seconds: float = 0.0
    counts: RunCounts = Field(default_factory=RunCounts)
    errors: List[str] = Field(default_factory=list)
    options: Dict[str, Any] = Field(default_factory=dict)
    
    
    class Config:
        json_encoders = {
            datetime: lambda v: v.isoformat()
        }
