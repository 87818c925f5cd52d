import os
import re
import secrets
import yaml
from datetime import datetime, timedelta, timezone
from pathlib import Path

SESSION_ID_PATTERN = re.compile(r'^sess_[0-9a-f]{32}$')


def new_session_id():
    return f"sess_{secrets.token_hex(16)}"


class Session:
    """Server-side state for one visitor"""

    def __init__(self, session_id, data=None, created_at=None, expires_at=None):
        self.session_id = session_id
        self.data = data if data is not None else {}
        self.created_at = created_at
        self.expires_at = expires_at

    def get(self, key, default=None):
        return self.data.get(key, default)

    def set(self, key, value):
        self.data[key] = value

    @property
    def token(self):
        return self.data.get('token')

    @token.setter
    def token(self, value):
        self.data['token'] = value

    @property
    def join(self):
        return self.data.get('join')

    @join.setter
    def join(self, value):
        self.data['join'] = value


class SessionManager:
    def __init__(self, session_dir, lifetime_hours=12, cookie_name="join_session", cookie_secure=True):
        self.session_dir = Path(session_dir)
        self.session_dir.mkdir(parents=True, exist_ok=True)
        self.session_duration = timedelta(hours=lifetime_hours)
        self.cookie_name = cookie_name
        self.cookie_secure = cookie_secure

    @classmethod
    def from_config(cls, config):
        return cls(
            config.session_dir,
            lifetime_hours=config.session_lifetime_hours,
            cookie_name=config.cookie_name,
            cookie_secure=config.cookie_secure,
        )

    def _session_file(self, session_id):
        return self.session_dir / f"{session_id}.yaml"

    def create_session(self):
        """Create a new, not yet persisted session"""
        now = datetime.now(timezone.utc)
        return Session(
            new_session_id(),
            created_at=now.isoformat(),
            expires_at=(now + self.session_duration).isoformat(),
        )

    def load(self, session_id):
        """Load a session, or start a fresh one.

        Unknown, malformed and expired ids are never adopted: the caller gets
        a new session with a server-generated id.
        """
        if not session_id or not SESSION_ID_PATTERN.match(session_id):
            return self.create_session()

        session_file = self._session_file(session_id)
        if not session_file.exists():
            return self.create_session()

        try:
            with open(session_file, "r", encoding="utf-8") as f:
                stored = yaml.safe_load(f)
            expired = datetime.now(timezone.utc) > datetime.fromisoformat(stored['expires_at'])
        except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError):
            # Corrupted session files, naive timestamps included, are discarded
            session_file.unlink(missing_ok=True)
            return self.create_session()

        if expired:
            self.destroy(session_id)
            return self.create_session()

        return Session(
            session_id,
            data=stored.get('data') or {},
            created_at=stored.get('created_at'),
            expires_at=stored['expires_at'],
        )

    def save(self, session):
        """Persist session data; files are readable by the owner only"""
        stored = {
            'session_id': session.session_id,
            'created_at': session.created_at,
            'expires_at': session.expires_at,
            'last_activity': datetime.now(timezone.utc).isoformat(),
            'data': session.data,
        }

        session_file = self._session_file(session.session_id)
        fd = os.open(session_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(stored, f, allow_unicode=True)

    def regenerate(self, session):
        """Issue a new session id, keep the data and drop the old file"""
        old_id = session.session_id
        session.session_id = new_session_id()
        self.save(session)
        self.destroy(old_id)
        return session.session_id

    def destroy(self, session_id):
        """Destroy a session"""
        if not session_id or not SESSION_ID_PATTERN.match(session_id):
            return

        self._session_file(session_id).unlink(missing_ok=True)

    def cleanup_expired_sessions(self):
        """Remove expired and unreadable session files, return how many"""
        count = 0
        now = datetime.now(timezone.utc)
        for session_file in self.session_dir.glob("sess_*.yaml"):
            try:
                with open(session_file, "r", encoding="utf-8") as f:
                    stored = yaml.safe_load(f)
                expired = now > datetime.fromisoformat(stored['expires_at'])
            except (OSError, yaml.YAMLError, KeyError, TypeError, ValueError):
                expired = True

            if expired:
                session_file.unlink(missing_ok=True)
                count += 1

        return count

    def get_session_from_cookie(self, cookie_string):
        """Extract session ID from cookie string"""
        if not cookie_string:
            return None

        cookies = {}
        for cookie in cookie_string.split(';'):
            parts = cookie.strip().split('=', 1)
            if len(parts) == 2:
                key, value = parts
                cookies[key.strip()] = value.strip()

        return cookies.get(self.cookie_name)

    def cookie_header(self, session):
        """Set-Cookie value carrying the current session id"""
        attributes = [f"{self.cookie_name}={session.session_id}", "Path=/", "HttpOnly", "SameSite=Lax"]
        if self.cookie_secure:
            attributes.append("Secure")
        return "; ".join(attributes)
