"""
Exceptions raised by the delivery orchestrator.
"""

from .base import AffiliateRobotError


class RobotError(AffiliateRobotError):
    """Base exception for orchestrator errors."""
    
    pass


class RobotAlreadyRunningError(RobotError):
    """Raised when a run is requested while another one is active."""
    
    def __init__(self, execution_id: str):
        """
        Initialize already running error.
        
        Args:
            execution_id: Identifier of the active run
        """
        self.execution_id = execution_id
        super().__init__(f"Robot is already running (execution {execution_id})")


class InvalidStatusTransitionError(RobotError):
    """Raised when a delivery record is moved to a status it cannot reach."""
    
    def __init__(self, current: str, requested: str):
        """
        Initialize invalid transition error.
        
        Args:
            current: Current delivery status
            requested: Requested delivery status
        """
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move delivery from '{current}' to '{requested}'")
