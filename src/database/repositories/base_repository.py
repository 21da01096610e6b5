"""
Shared query helpers for the raw-SQL repositories.
"""

from abc import ABC
from typing import Any, Dict, List, Optional

import psycopg2

from src.core.exceptions.database_errors import (
    ConstraintViolationError,
    DatabaseConnectionError,
    DatabaseOperationError,
)
from src.shared.logging.log_setup import get_logger

logger = get_logger(__name__)


class BaseRepository(ABC):
    """Base class holding the connection and query execution helpers."""
    
    table: str = ""
    
    def __init__(self, connection):
        """
        Initialize repository with database connection.
        
        Args:
            connection: psycopg2 connection object
        """
        self.conn = connection
    
    def _cursor(self):
        if not self.conn:
            raise DatabaseConnectionError("localhost", 5432, "unknown", "No connection available")
        return self.conn.cursor()
    
    def _execute_query(self, query: str, params: tuple = ()) -> Optional[List[tuple]]:
        """
        Execute a query and return results.
        
        Args:
            query: SQL query string
            params: Query parameters
            
        Returns:
            Query results for SELECT and RETURNING queries, None otherwise
            
        Raises:
            ConstraintViolationError: If a unique or check constraint is violated
            DatabaseOperationError: If query execution fails
        """
        cursor = self._cursor()
        try:
            cursor.execute(query, params)
            
            if cursor.description is not None:
                return cursor.fetchall()
            
            return None
            
        except psycopg2.IntegrityError as e:
            constraint = getattr(getattr(e, "diag", None), "constraint_name", None) or "unknown"
            error = ConstraintViolationError(constraint, self.table, str(e))
            logger.warning(
                "constraint_violated",
                table=self.table,
                constraint=constraint,
                natural_key=error.is_natural_key_conflict,
            )
            raise error
        except psycopg2.Error as e:
            logger.error("query_execution_failed", query=query[:100], error=str(e))
            raise DatabaseOperationError("EXECUTE", self.table, str(e))
        finally:
            cursor.close()
    
    def _execute_with_return(self, query: str, params: tuple = ()) -> Any:
        """
        Execute a query and return single value (for RETURNING clauses).
        
        Args:
            query: SQL query string with RETURNING clause
            params: Query parameters
            
        Returns:
            First column of first row
            
        Raises:
            DatabaseOperationError: If query execution fails
        """
        rows = self._execute_query(query, params)
        return rows[0][0] if rows else None
    
    def _fetch_dicts(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """
        Execute a SELECT and return rows keyed by column name.
        
        Args:
            query: SQL query string
            params: Query parameters
            
        Returns:
            One dict per row
        """
        cursor = self._cursor()
        try:
            cursor.execute(query, params)
            columns = [column[0] for column in cursor.description]
            return [dict(zip(columns, row)) for row in cursor.fetchall()]
        except psycopg2.Error as e:
            logger.error("query_execution_failed", query=query[:100], error=str(e))
            raise DatabaseOperationError("SELECT", self.table, str(e))
        finally:
            cursor.close()
    
    def commit(self) -> None:
        """Commit current transaction."""
        if self.conn:
            self.conn.commit()
    
    def rollback(self) -> None:
        """Rollback current transaction."""
        if self.conn:
            self.conn.rollback()
