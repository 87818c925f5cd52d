"""
Registration form input and field-level validation results
"""

BLANK = 'blank'
DUPLICATE = 'duplicate'

FIELDS = ('name', 'email', 'password', 'token')


def _first(value):
    # parse_qs gives lists; plain dicts give strings
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


class RegistrationInput:
    """Typed view of a submitted registration form"""

    def __init__(self, name=None, email=None, password=None, token=None):
        self.name = name
        self.email = email
        self.password = password
        self.token = token

    @classmethod
    def from_form(cls, fields):
        values = {}
        for field in FIELDS:
            value = _first(fields.get(field)) if fields else None
            values[field] = None if value is None else str(value)
        return cls(**values)

    def to_join(self):
        """Record stored in the session for the confirmation step"""
        return {
            'name': self.name,
            'email': self.email,
            'password': self.password,
        }

    def form_values(self):
        """Values echoed back into the form"""
        return {
            'name': self.name or '',
            'email': self.email or '',
            'password': self.password or '',
        }


class ValidationErrors:
    """Ordered field -> error kind mapping; empty means the input passed"""

    def __init__(self):
        self._errors = {}

    def add(self, field, kind):
        self._errors[field] = kind

    def get(self, field):
        return self._errors.get(field)

    def items(self):
        return list(self._errors.items())

    def as_dict(self):
        return dict(self._errors)

    def __contains__(self, field):
        return field in self._errors

    def __len__(self):
        return len(self._errors)

    def __bool__(self):
        return bool(self._errors)

    def __eq__(self, other):
        if isinstance(other, ValidationErrors):
            return self.items() == other.items()
        if isinstance(other, dict):
            return self._errors == other
        return NotImplemented

    def __repr__(self):
        return f"ValidationErrors({self._errors!r})"


def is_blank(value):
    return value is None or value == ''


def validate_input(registration):
    """Check required fields, returning the errors found"""
    errors = ValidationErrors()

    if is_blank(registration.email):
        errors.add('email', BLANK)

    if is_blank(registration.password):
        errors.add('password', BLANK)

    return errors
