"""
Pydantic model for category-scoped message templates.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from src.core.models.enums import TargetCategory, VariableType
from src.core.utils.message_renderer import render_content


class TemplateVariable(BaseModel):
    """
    Declared template variable.
    
    Attributes:
        name: Placeholder name used as {{ name }}
        description: What the variable holds
        type: Formatting type
        required: Rendering fails when a required variable has no value
    """
    
    name: str = Field(..., min_length=1, max_length=50, pattern=r"^\w+$")
    description: str = Field("", max_length=200)
    type: VariableType = Field(VariableType.TEXT)
    required: bool = Field(False)


class MessageTemplate(BaseModel):
    """
    Model representing a message template.
    
    Attributes:
        id: Database primary key
        name: Display name
        description: Optional free text
        category: Category the template serves
        content: Message text with {{ variable }} placeholders
        variables: Declared variables
        is_default: Default template of its category
        is_active: Inactive templates are never resolved
        times_used: Successful sends rendered from this template
        last_used_at: Last successful send
        avg_engagement_rate: Engagement across sends
    """
    
    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=50)
    description: str = Field("", max_length=200)
    category: TargetCategory = Field(TargetCategory.GENERAL)
    content: str = Field(..., min_length=1, max_length=2000)
    variables: List[TemplateVariable] = Field(default_factory=list)
    is_default: bool = Field(False)
    is_active: bool = Field(True)
    times_used: int = Field(0, ge=0)
    last_used_at: Optional[datetime] = None
    avg_engagement_rate: float = Field(0, ge=0, le=1)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    
    @field_validator("variables")
    @classmethod
    def validate_unique_names(cls, v: List[TemplateVariable]) -> List[TemplateVariable]:
        """
        Validates that variable names are unique.
        
        Raises:
            ValueError: If a name is declared twice
        """
        names = [var.name for var in v]
        if len(names) != len(set(names)):
            raise ValueError("Template variable names must be unique")
        return v
    
    def render(self, values: Dict[str, Any]) -> str:
        """
        Render the template with the given values.
        
        Args:
            values: Variable values by name
            
        Returns:
            Rendered, stripped message text
            
        Raises:
            MissingTemplateVariableError: If a required variable has no value
        """
        return render_content(self.name, self.content, self.variables, values)
    
    
    class Config:
        json_encoders = {
            datetime: lambda v: v.isoformat()
        }
