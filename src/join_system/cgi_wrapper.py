#!/usr/bin/env python3
"""
Request processing for the join page with error handling and logging
"""

import os
import sys
import logging
from http import HTTPStatus
from urllib.parse import parse_qs

from join_system.config import load_config
from join_system.handler import RegistrationPageHandler
from join_system.logger import (
    JoinLogger, CsrfMismatch, StoreUnavailable, MethodNotAllowed, ConfigurationError, RequestTooLarge
)
from join_system.member_db import MemberDatabase
from join_system.render import CSRF_FAILURE_MESSAGE, render_server_error
from join_system.session import SessionManager

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class Response:
    def __init__(self, status, headers=None, body=b''):
        self.status = status
        self.headers = headers or []
        self.body = body

    @property
    def status_line(self):
        return f"{self.status} {HTTPStatus(self.status).phrase}"

    def header(self, name):
        for key, value in self.headers:
            if key.lower() == name.lower():
                return value
        return None

    @classmethod
    def html(cls, status, body):
        return cls(status, [
            ('Content-Type', HTML_CONTENT_TYPE),
            ('Cache-Control', 'no-store'),
        ], body.encode('utf-8'))

    @classmethod
    def text(cls, status, body):
        return cls(status, [('Content-Type', TEXT_CONTENT_TYPE)], body.encode('utf-8'))


def parse_form(environ, stdin, max_bytes=None):
    """Read an urlencoded POST body into a field -> first value mapping"""
    # Media types are case-insensitive; parameters such as charset are ignored
    content_type = environ.get('CONTENT_TYPE', '').split(';', 1)[0].strip().lower()
    if content_type != FORM_CONTENT_TYPE:
        return {}

    try:
        length = int(environ.get('CONTENT_LENGTH') or 0)
    except ValueError:
        length = 0
    if length <= 0:
        return {}
    if max_bytes is not None and length > max_bytes:
        raise RequestTooLarge(length, max_bytes)

    raw = stdin.read(length)
    if isinstance(raw, bytes):
        raw = raw.decode('utf-8', errors='replace')

    parsed = parse_qs(raw, keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items()}


def get_client_context(environ):
    """Extract client context information for logging"""
    return {
        'ip': environ.get('REMOTE_ADDR', 'unknown'),
        'user_agent': environ.get('HTTP_USER_AGENT', 'unknown'),
        'method': environ.get('REQUEST_METHOD', 'unknown'),
        'referer': environ.get('HTTP_REFERER', ''),
    }


def log_form_data(logger, form, client_ip):
    """Log which fields were submitted, never their values"""
    logger.log_info("Form data received", client_ip=client_ip, extra={'form_fields': sorted(form.keys())})


def process_request(environ, stdin, config=None):
    """Run one request through the handler and map errors to responses"""
    try:
        config = config or load_config()
    except ConfigurationError as e:
        JoinLogger("entry").log_error("Configuration error", exception=e)
        return Response.html(500, render_server_error())

    logger = JoinLogger("entry", config.log_dir, getattr(logging, config.log_level.upper()))
    context = get_client_context(environ)
    client_ip = context['ip']
    method = environ.get('REQUEST_METHOD', 'GET').upper()

    logger.log_info("Request started", client_ip=client_ip, extra=context)

    cookie = None
    try:
        sessions = SessionManager.from_config(config)
        members = MemberDatabase.from_config(config)
        handler = RegistrationPageHandler(sessions, members, logger, config.confirm_location)

        session = sessions.load(sessions.get_session_from_cookie(environ.get('HTTP_COOKIE')))
        form = parse_form(environ, stdin, config.max_body_bytes) if method == 'POST' else {}
        if form:
            log_form_data(logger, form, client_ip)

        try:
            result = handler.handle_request(method, form, session, client_ip=client_ip)
        finally:
            sessions.save(session)
            cookie = sessions.cookie_header(session)

        if result.is_redirect:
            response = Response(result.status, [('Location', result.location)])
        else:
            response = Response.html(result.status, result.body)
        logger.log_info("Request completed successfully", client_ip=client_ip, extra={'status': response.status})

    except CsrfMismatch as e:
        logger.log_security_event("csrf_failure", f"CSRF validation failed: {e}", client_ip=client_ip)
        response = Response.text(400, CSRF_FAILURE_MESSAGE)

    except RequestTooLarge as e:
        logger.log_warning(str(e), client_ip=client_ip)
        response = Response.text(413, "Request Entity Too Large")

    except MethodNotAllowed as e:
        logger.log_warning(str(e), client_ip=client_ip)
        response = Response.text(405, "Method Not Allowed")
        response.headers.append(('Allow', 'GET, POST'))

    except StoreUnavailable as e:
        logger.log_error("Member database unavailable", exception=e, client_ip=client_ip)
        response = Response.html(503, render_server_error())

    except ConfigurationError as e:
        logger.log_error(f"Configuration error: {e}", client_ip=client_ip)
        response = Response.html(500, render_server_error())

    except Exception as e:
        # Unexpected errors - log everything, show generic message
        logger.log_error("Unexpected error in entry", exception=e, client_ip=client_ip)
        response = Response.html(500, render_server_error())

    if cookie:
        response.headers.append(('Set-Cookie', cookie))
    return response


def write_cgi_response(response, stdout):
    """Write status, headers and body in CGI format"""
    lines = [f"Status: {response.status_line}"]
    lines.extend(f"{name}: {value}" for name, value in response.headers)
    stdout.write(("\r\n".join(lines) + "\r\n\r\n").encode('utf-8'))
    stdout.write(response.body)
    stdout.flush()


def run_cgi(environ=None, stdin=None, stdout=None, config=None):
    """CGI entry point"""
    environ = os.environ if environ is None else environ
    stdin = sys.stdin.buffer if stdin is None else stdin
    stdout = sys.stdout.buffer if stdout is None else stdout

    response = process_request(environ, stdin, config)
    write_cgi_response(response, stdout)
    return 0
