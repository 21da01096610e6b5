"""
Model instances to JSON-ready dicts.
"""

from django.db import models


def serialize(instance: models.Model) -> dict:
    """Every concrete column, foreign keys as ``<name>_id``."""
    return {field.attname: getattr(instance, field.attname) for field in instance._meta.concrete_fields}
