"""
Picks the template used for a product/target pair.
"""

from src.core.exceptions.delivery_errors import TemplateNotFoundError
from src.core.models.enums import ProductCategory, TargetCategory
from src.core.models.message_target import MessageTarget
from src.core.models.message_template import MessageTemplate
from src.core.models.product import Product


def resolve_template(target: MessageTarget, product: Product, templates) -> MessageTemplate:
    """
    Resolve the template for a delivery; first match wins.
    
    Order: the target's assigned active template, the active default of the
    target's category (the product's category for general targets), the
    active default of the general category.
    
    Args:
        target: Receiving target
        product: Product being delivered
        templates: Repository offering find_active_by_id and find_default
        
    Returns:
        Template to render
        
    Raises:
        TemplateNotFoundError: If nothing applies
    """
    if target.message_template_id is not None:
        template = templates.find_active_by_id(target.message_template_id)
        if template is not None:
            return template
    
    if target.category == TargetCategory.GENERAL:
        category = product.category.value
    else:
        category = target.category.value
    
    if category not in (ProductCategory.OTHER.value, TargetCategory.GENERAL.value):
        template = templates.find_default(category)
        if template is not None:
            return template
    
    template = templates.find_default(TargetCategory.GENERAL.value)
    if template is not None:
        return template
    
    raise TemplateNotFoundError(category, target.id)
