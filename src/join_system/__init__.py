"""Account creation page with CSRF protection and duplicate email checks."""

__version__ = "1.0.0"
