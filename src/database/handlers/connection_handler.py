"""
PostgreSQL connection lifecycle management.
"""

import psycopg2
from psycopg2.extensions import connection as Connection
from typing import Optional

from src.core.exceptions.database_errors import DatabaseConnectionError
from src.shared.config.app_settings import DatabaseConfig
from src.shared.logging.log_setup import get_logger

logger = get_logger(__name__)


class ConnectionHandler:
    """
    Handles PostgreSQL connection lifecycle.
    
    Connections run in autocommit mode: every upsert and counter update is
    its own atomic statement and no transaction spans several writes.
    """
    
    def __init__(self, config: Optional[DatabaseConfig] = None, autocommit: bool = True):
        """
        Initialize connection handler with configuration.
        
        Args:
            config: Database settings, read from the environment by default
            autocommit: Commit each statement on its own
        """
        self.config = config or DatabaseConfig()
        self.autocommit = autocommit
        self.conn: Optional[Connection] = None
    
    def connect(self) -> Connection:
        """
        Establish database connection.
        
        Returns:
            PostgreSQL connection object
            
        Raises:
            DatabaseConnectionError: If connection fails
        """
        try:
            self.conn = psycopg2.connect(
                dbname=self.config.POSTGRES_DB,
                user=self.config.POSTGRES_USER,
                password=self.config.POSTGRES_PASSWORD,
                host=self.config.POSTGRES_HOST,
                port=self.config.DB_PORT
            )
            self.conn.autocommit = self.autocommit
            logger.info("database_connected", host=self.config.POSTGRES_HOST)
            return self.conn
            
        except psycopg2.OperationalError as e:
            logger.error("database_connection_failed", error=str(e))
            raise DatabaseConnectionError(
                host=self.config.POSTGRES_HOST,
                port=self.config.DB_PORT,
                database=self.config.POSTGRES_DB,
                message=str(e)
            )
    
    def disconnect(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info("database_disconnected")
    
    def __enter__(self):
        """Context manager entry."""
        return self.connect()
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.disconnect()
