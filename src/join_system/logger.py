#!/usr/bin/env python3
"""
Centralized logging for the join page with structured context output
"""

import logging
import sys
import json
from datetime import datetime, timezone
from pathlib import Path


class JoinLogger:
    """Structured logger for the registration page and its admin tools"""

    def __init__(self, script_name, log_dir=None, level=logging.INFO):
        self.script_name = script_name
        self.log_dir = Path(log_dir) if log_dir else None
        self.level = level
        self.setup_logging()

    def setup_logging(self):
        """Configure file logging, or stderr when no log directory is set"""
        formatter = logging.Formatter(
            '[%(asctime)s] [%(levelname)s] [JOIN-%(name)s]: %(message)s',
            datefmt='%Y-%m-%dT%H:%M:%S%z'
        )

        self.logger = logging.getLogger(f"join.{self.script_name}")
        self.logger.setLevel(self.level)
        self.security_logger = logging.getLogger(f"join.security.{self.script_name}")
        self.security_logger.setLevel(logging.WARNING)

        # Loggers are process-wide; replace handlers left by earlier instances
        for existing in (self.logger, self.security_logger):
            for old_handler in list(existing.handlers):
                existing.removeHandler(old_handler)
                old_handler.close()

        if self.log_dir:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(self.log_dir / "join.log", encoding="utf-8")
        else:
            # CGI stderr ends up in the web server error log
            handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)
        self.logger.addHandler(handler)

        if self.log_dir:
            security_handler = logging.FileHandler(self.log_dir / "security.log", encoding="utf-8")
            security_handler.setFormatter(formatter)
            self.security_logger.addHandler(security_handler)
        else:
            # Security events already reach stderr through the main logger
            self.security_logger.addHandler(logging.NullHandler())

        self.logger.propagate = False
        self.security_logger.propagate = False

    def _create_context(self, client_ip=None, extra=None):
        """Create structured context for log entries"""
        context = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'script': self.script_name,
            'client_ip': client_ip or 'unknown'
        }
        if extra:
            context.update(extra)
        return context

    def _format(self, message, context):
        return f"{message} | Context: {json.dumps(context, separators=(',', ':'), ensure_ascii=False)}"

    def log_info(self, message, client_ip=None, extra=None):
        """Log informational messages"""
        context = self._create_context(client_ip, extra)
        self.logger.info(self._format(message, context))

    def log_warning(self, message, client_ip=None, extra=None):
        """Log warning messages"""
        context = self._create_context(client_ip, extra)
        self.logger.warning(self._format(message, context))

    def log_error(self, message, exception=None, client_ip=None, extra=None):
        """Log error messages with optional exception details"""
        context = self._create_context(client_ip, extra)

        if exception is not None:
            context['exception_type'] = type(exception).__name__
            context['exception_message'] = str(exception)
            self.logger.error(self._format(message, context), exc_info=exception)
        else:
            self.logger.error(self._format(message, context))

    def log_security_event(self, event_type, message, client_ip=None, extra=None):
        """Log security-related events to the main and the security log"""
        context = self._create_context(client_ip, extra)
        context['security_event'] = event_type

        log_message = f"SECURITY-{event_type.upper()}: {self._format(message, context)}"
        self.logger.warning(log_message)
        self.security_logger.warning(log_message)


# Custom exception classes for error categorization
class JoinError(Exception):
    """Base class for registration page errors"""
    pass


class CsrfMismatch(JoinError):
    """Submitted CSRF token missing or not equal to the session token"""
    pass


class StoreUnavailable(JoinError):
    """The member database could not answer the duplicate check"""
    pass


class MethodNotAllowed(JoinError):
    """Request method other than GET or POST"""

    def __init__(self, method):
        super().__init__(f"Method not allowed: {method}")
        self.method = method


class ConfigurationError(JoinError):
    """System configuration errors"""
    pass


class RequestTooLarge(JoinError):
    """Request body longer than the configured limit"""

    def __init__(self, length, limit):
        super().__init__(f"Request body of {length} bytes exceeds {limit}")
        self.length = length
        self.limit = limit
