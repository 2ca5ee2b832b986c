import sqlite3
import pandas as pd
from typing import Optional, List, ContextManager, Union

from housing_history.config import get_setting

class HousingDB:
    """
    Context manager for SQLite database interactions.
    Ensures connections are closed and transactions are committed,
    or rolled back when the block raises.

    With ``snapshot=True`` every statement in the block runs inside a
    single read transaction, so a name lookup and the report that
    follows it see the same data.
    """
    def __init__(self, db_path: Optional[str] = None, snapshot: bool = False):
        self.db_path = db_path or get_setting("database", "path")
        self.snapshot = snapshot
        self.conn: Optional[sqlite3.Connection] = None

    def __enter__(self) -> "HousingDB":
        self.conn = sqlite3.connect(self.db_path)
        # Enable foreign keys so ownership/rental rows cannot orphan
        self.conn.execute("PRAGMA foreign_keys = ON;")
        if self.snapshot:
            self.conn.execute("BEGIN")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.conn:
            if exc_type:
                self.conn.rollback()
            else:
                self.conn.commit()
            self.conn.close()
            self.conn = None

    def _require_conn(self) -> sqlite3.Connection:
        if not self.conn:
            raise RuntimeError("Database connection is not open.")
        return self.conn

    def execute_script(self, script: str) -> None:
        """Executes a raw SQL script (multiple statements)."""
        self._require_conn().executescript(script)

    def execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Executes a single SQL statement."""
        return self._require_conn().execute(sql, params)

    def execute_many(self, sql: str, params: List[tuple]) -> sqlite3.Cursor:
        """Executes a bulk SQL statement."""
        return self._require_conn().executemany(sql, params)

    def query(self, sql: str, params: Union[tuple, dict] = ()) -> pd.DataFrame:
        """Executes a query and returns the result as a Pandas DataFrame."""
        return pd.read_sql_query(sql, self._require_conn(), params=params)

def get_db(db_path: Optional[str] = None, snapshot: bool = False) -> ContextManager[HousingDB]:
    """Helper to get a database context manager."""
    return HousingDB(db_path, snapshot=snapshot)
