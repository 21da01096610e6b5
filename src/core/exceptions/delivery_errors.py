"""
Exceptions for message rendering and delivery.
"""

from typing import List, Optional

from .base import AffiliateRobotError


class DeliveryError(AffiliateRobotError):
    """Base exception for delivery-related errors."""
    
    pass


class WhatsAppRequestError(DeliveryError):
    """Raised when a call to the WhatsApp gateway fails."""
    
    def __init__(self, endpoint: str, message: str, status_code: Optional[int] = None):
        """
        Initialize WhatsApp request error.
        
        Args:
            endpoint: Gateway endpoint that was called
            message: Error message
            status_code: HTTP status code if available
        """
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(f"WhatsApp request to {endpoint} failed: {message}")


class TemplateError(DeliveryError):
    """Base exception for message template errors."""
    
    pass


class MissingTemplateVariableError(TemplateError):
    """Raised when a required template variable has no value."""
    
    def __init__(self, template_name: str, missing: List[str]):
        """
        Initialize missing variable error.
        
        Args:
            template_name: Name of the template being rendered
            missing: Required variable names without a value
        """
        self.template_name = template_name
        self.missing = missing
        super().__init__(
            f"Template '{template_name}' is missing required variables: {', '.join(missing)}"
        )


class TemplateNotFoundError(TemplateError):
    """Raised when no template applies to a product/target pair."""
    
    def __init__(self, category: str, target_id: Optional[int] = None):
        """
        Initialize template not found error.
        
        Args:
            category: Category that was searched
            target_id: Target the template was resolved for
        """
        self.category = category
        self.target_id = target_id
        super().__init__(
            f"No active template for target {target_id} (category '{category}', no global default)"
        )
