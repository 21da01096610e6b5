"""
Exceptions raised by the PostgreSQL repositories.
"""

from typing import Optional

from .base import AffiliateRobotError

# unique constraints guarding a record's natural key
NATURAL_KEY_CONSTRAINTS = frozenset({"unique_product_platform_listing"})


class DatabaseError(AffiliateRobotError):
    """Base exception for persistence errors."""

    pass


class DatabaseConnectionError(DatabaseError):
    """Raised when PostgreSQL cannot be reached or no connection is open."""

    def __init__(self, host: str, port: int, database: str, message: str):
        self.host = host
        self.port = port
        self.database = database
        super().__init__(f"Cannot reach database '{database}' on {host}:{port} ({message})")


class DatabaseOperationError(DatabaseError):
    """Raised when a statement fails for a reason other than a constraint."""

    def __init__(self, operation: str, table: Optional[str] = None, message: str = ""):
        """
        Initialize operation error.

        Args:
            operation: Kind of statement, e.g. SELECT or EXECUTE
            table: Repository table the statement ran against
            message: Driver error text
        """
        self.operation = operation
        self.table = table
        target = f" on {table}" if table else ""
        detail = f": {message}" if message else ""
        super().__init__(f"{operation}{target} failed{detail}")


class ConstraintViolationError(DatabaseError):
    """Raised when a write breaks a unique or check constraint."""

    def __init__(self, constraint: str, table: str, message: str = ""):
        """
        Initialize constraint violation error.

        Args:
            constraint: Constraint name reported by PostgreSQL
            table: Table written to
            message: Driver error text
        """
        self.constraint = constraint
        self.table = table
        detail = f": {message}" if message else ""
        super().__init__(f"{table} rejected the write, constraint {constraint}{detail}")

    @property
    def is_natural_key_conflict(self) -> bool:
        """True when the row clashes with an existing (platform, platform_id)."""
        return self.constraint in NATURAL_KEY_CONSTRAINTS
