import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from join_system.logger import StoreUnavailable

SCHEMA = """
CREATE TABLE IF NOT EXISTS members (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    email TEXT NOT NULL,
    password TEXT,
    created TEXT NOT NULL
)
"""


class MemberDatabase:
    def __init__(self, path, timeout=5.0):
        self.path = Path(path)
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(config.database_path, timeout=config.database_timeout)

    def _connect(self, create=False):
        """Open the database; without create a missing file is an error"""
        mode = "rwc" if create else "rw"
        uri = f"{self.path.resolve().as_uri()}?mode={mode}"
        try:
            conn = sqlite3.connect(uri, uri=True, timeout=self.timeout)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot open member database {self.path}: {e}") from e
        conn.row_factory = sqlite3.Row
        return conn

    def initialize(self):
        """Create the members table if it does not exist"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect(create=True)
        try:
            with conn:
                conn.execute(SCHEMA)
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot initialize member database: {e}") from e
        finally:
            conn.close()

    def count_by_email(self, email):
        """Number of members registered with exactly this email"""
        conn = self._connect()
        try:
            row = conn.execute(
                'SELECT COUNT(*) AS cnt FROM members WHERE email = ?',
                (email,)
            ).fetchone()
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Duplicate email query failed: {e}") from e
        finally:
            conn.close()

        return row['cnt']

    def email_exists(self, email):
        return self.count_by_email(email) > 0

    def add_member(self, email, name=None, password=None):
        conn = self._connect()
        try:
            with conn:
                cursor = conn.execute(
                    'INSERT INTO members (name, email, password, created) VALUES (?, ?, ?, ?)',
                    (name, email, password, datetime.now(timezone.utc).isoformat())
                )
            return cursor.lastrowid
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot add member: {e}") from e
        finally:
            conn.close()

    def list_members(self):
        conn = self._connect()
        try:
            rows = conn.execute(
                'SELECT id, name, email, created FROM members ORDER BY id'
            ).fetchall()
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot list members: {e}") from e
        finally:
            conn.close()

        return [dict(row) for row in rows]
