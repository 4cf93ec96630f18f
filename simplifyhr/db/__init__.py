"""
Database module - PostgreSQL and MongoDB connections.
"""
from simplifyhr.db.postgres import get_db_session, execute_raw_sql, test_postgres_connection
from simplifyhr.db.mongodb import get_mongo_db, test_mongo_connection

__all__ = [
    "get_db_session",
    "execute_raw_sql",
    "test_postgres_connection",
    "get_mongo_db",
    "test_mongo_connection"
]
