import secrets
import hmac

from join_system.logger import CsrfMismatch

TOKEN_BYTES = 32


class CSRFProtection:
    """Per-session CSRF token, generated once and compared in constant time"""

    def generate_token(self):
        """Generate a new random token, hex encoded"""
        return secrets.token_bytes(TOKEN_BYTES).hex()

    def ensure_token(self, session):
        """Get the session token, creating it on first use"""
        if not session.token:
            session.token = self.generate_token()
        return session.token

    def is_valid(self, session, token):
        if not session.token or not token:
            return False

        # compare_digest rejects non-ASCII str, so compare bytes
        return hmac.compare_digest(
            session.token.encode('utf-8'),
            token.encode('utf-8')
        )

    def validate_token(self, session, token):
        """Raise CsrfMismatch unless token equals the session token"""
        if not self.is_valid(session, token):
            raise CsrfMismatch("Invalid CSRF token")
