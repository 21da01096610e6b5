"""
Template placeholder substitution and value formatting for delivery messages.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, Optional

from src.core.exceptions.delivery_errors import MissingTemplateVariableError
from src.core.models.enums import VariableType

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*(\w+)\s*\}\}")


def format_currency(value: Any) -> str:
    """Brazilian real format, e.g. 1234.5 -> 'R$ 1.234,50'."""
    amount = Decimal(str(value)).quantize(Decimal("0.01"))
    # swap separators through a placeholder: 1,234.50 -> 1.234,50
    formatted = f"{amount:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {formatted}"


def format_number(value: Any) -> str:
    number = Decimal(str(value))
    if number == number.to_integral_value():
        return str(int(number))
    return f"{number.quantize(Decimal('0.01'))}".replace(".", ",")


def format_value(value: Any, variable_type: VariableType) -> str:
    """
    Format a value for display according to its declared type.
    
    Args:
        value: Raw value
        variable_type: Declared variable type
        
    Returns:
        Display string; non-numeric values for numeric types are passed through
    """
    try:
        if variable_type == VariableType.CURRENCY:
            return format_currency(value)
        if variable_type == VariableType.PERCENTAGE:
            return f"{format_number(value)}%"
        if variable_type == VariableType.NUMBER:
            return format_number(value)
    except (InvalidOperation, ValueError):
        return str(value)
    return str(value)


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def render_content(
    template_name: str,
    content: str,
    variables: Iterable,
    values: Dict[str, Any],
) -> str:
    """
    Substitute {{ name }} placeholders in template content.
    
    Declared variables are formatted by type. Missing optional variables
    render empty. Undeclared placeholders are filled when a value exists
    and left as written otherwise.
    
    Args:
        template_name: Template name, used in error messages
        content: Template text
        variables: Declared TemplateVariable objects
        values: Values by variable name
        
    Returns:
        Rendered and stripped text
        
    Raises:
        MissingTemplateVariableError: If required variables have no value
    """
    declared = {var.name: var for var in variables}
    
    missing = [
        name for name, var in declared.items()
        if var.required and _is_missing(values.get(name))
    ]
    if missing:
        raise MissingTemplateVariableError(template_name, missing)
    
    def substitute(match: re.Match) -> str:
        name = match.group(1)
        value = values.get(name)
        var = declared.get(name)
        if var is None:
            return match.group(0) if value is None else str(value)
        if _is_missing(value):
            return ""
        return format_value(value, var.type)
    
    return PLACEHOLDER_PATTERN.sub(substitute, content).strip()


def product_variables(product) -> Dict[str, Optional[Any]]:
    """
    Variable values a product offers to templates.
    
    Args:
        product: Product model
        
    Returns:
        Values by variable name; absent data maps to None
    """
    has_discount = product.discount > 0
    return {
        "title": product.title,
        "description": product.description or None,
        "price": product.price,
        "original_price": product.original_price if has_discount else None,
        "discount": product.discount if has_discount else None,
        "discount_percentage": product.discount_percentage if has_discount else None,
        "commission": product.estimated_commission,
        "commission_rate": product.commission_rate * 100,
        "rating": product.rating if product.rating else None,
        "reviews_count": product.reviews_count,
        "sales_count": product.sales_count,
        "link": product.affiliate_link,
        "affiliate_link": product.affiliate_link,
        "image_url": product.image_url,
        "platform": product.platform.value,
        "category": product.category.value,
        "seller": product.seller.name,
    }
