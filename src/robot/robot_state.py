"""
In-memory state of the delivery robot: running guard, phase and run history.
"""

import threading
from collections import deque
from datetime import date
from typing import Any, Deque, Dict, List, Optional

from src.core.exceptions.robot_errors import RobotAlreadyRunningError
from src.core.models.enums import RobotPhase
from src.core.models.run_result import RunResult


class RobotState:
    """
    State owned by one robot instance.
    
    Only one run may be active; the guard is process-local.
    """
    
    def __init__(self, history_size: int = 50):
        """
        Initialize robot state.
        
        Args:
            history_size: Finished runs kept, oldest evicted first
        """
        self._lock = threading.Lock()
        self.phase = RobotPhase.IDLE
        self.is_running = False
        self.current_execution: Optional[RunResult] = None
        self.history: Deque[RunResult] = deque(maxlen=history_size)
        self.last_finalize_date: Optional[date] = None
        self.stop_event = threading.Event()
        self.idle_event = threading.Event()
        self.idle_event.set()
    
    def begin(self, result: RunResult) -> None:
        """
        Mark a run as active.
        
        Args:
            result: Result object of the new run
            
        Raises:
            RobotAlreadyRunningError: If another run is active; its state is untouched
        """
        with self._lock:
            if self.is_running:
                raise RobotAlreadyRunningError(self.current_execution.execution_id)
            self.is_running = True
            self.current_execution = result
            self.phase = RobotPhase.IDLE
            self.stop_event.clear()
            self.idle_event.clear()
    
    def set_phase(self, phase: RobotPhase) -> None:
        with self._lock:
            self.phase = phase
    
    def finish(self, result: RunResult) -> None:
        """Record a finished run and return to idle."""
        with self._lock:
            self.history.append(result)
            self.is_running = False
            self.current_execution = None
            self.phase = RobotPhase.IDLE
            self.idle_event.set()
    
    @property
    def last_run(self) -> Optional[RunResult]:
        with self._lock:
            return self.history[-1] if self.history else None
    
    def recent_runs(self, limit: int = 10) -> List[RunResult]:
        """Finished runs, newest first."""
        with self._lock:
            runs = list(self.history)
        return list(reversed(runs))[:max(limit, 0)]
    
    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready view of the state."""
        with self._lock:
            current = self.current_execution
            last = self.history[-1] if self.history else None
            return {
                "is_running": self.is_running,
                "phase": self.phase.value,
                "current_execution": current.model_dump(mode="json") if current else None,
                "last_run": last.model_dump(mode="json") if last else None,
                "total_runs": len(self.history),
                "last_finalize_date": self.last_finalize_date.isoformat() if self.last_finalize_date else None,
            }
