"""
Account creation page: render the form, validate, stage the input and redirect
"""

from join_system.csrf import CSRFProtection
from join_system.logger import MethodNotAllowed
from join_system.render import render_join_page
from join_system.validation import DUPLICATE, RegistrationInput, validate_input


class HandlerResult:
    """What the handler decided: a page to show or a redirect"""

    def __init__(self, status=200, body=None, location=None, errors=None):
        self.status = status
        self.body = body
        self.location = location
        self.errors = errors

    @property
    def is_redirect(self):
        return self.location is not None

    @classmethod
    def page(cls, body, errors=None):
        return cls(status=200, body=body, errors=errors)

    @classmethod
    def redirect(cls, location):
        return cls(status=302, location=location)


class RegistrationPageHandler:
    def __init__(self, sessions, members, logger, confirm_location="check.py", csrf=None):
        self.sessions = sessions
        self.members = members
        self.logger = logger
        self.confirm_location = confirm_location
        self.csrf = csrf or CSRFProtection()

    def generate_token(self, session):
        return self.csrf.ensure_token(session)

    def check_duplicate_email(self, email):
        """True when a member already uses this email.

        StoreUnavailable propagates; an unanswered query is never "no duplicate".
        """
        return self.members.email_exists(email)

    def handle_request(self, method, form_fields, session, client_ip=None):
        # Rotate before anything reads the token
        self.sessions.regenerate(session)

        if method == 'GET':
            return HandlerResult.page(render_join_page(self.generate_token(session)))

        if method != 'POST':
            raise MethodNotAllowed(method)

        registration = RegistrationInput.from_form(form_fields)

        # CsrfMismatch stops the request here
        self.csrf.validate_token(session, registration.token)

        errors = validate_input(registration)

        if 'email' not in errors and self.check_duplicate_email(registration.email):
            errors.add('email', DUPLICATE)

        if not errors:
            session.join = registration.to_join()
            self.logger.log_info("Registration input staged", client_ip=client_ip)
            return HandlerResult.redirect(self.confirm_location)

        self.logger.log_info(
            "Registration input rejected",
            client_ip=client_ip,
            extra={'errors': errors.as_dict()}
        )
        body = render_join_page(
            self.generate_token(session),
            values=registration.form_values(),
            errors=errors
        )
        return HandlerResult.page(body, errors=errors)
