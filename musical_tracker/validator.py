"""
Field-level request validation.

Handlers create one ``Validator`` per request, run their checks, and return
``400 {"errors": validator.errors}`` when ``validator.valid`` is false.
Only the first failure per field is kept.
"""

import re
from typing import Dict

EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


class Validator:
    def __init__(self):
        self._errors: Dict[str, str] = {}

    @property
    def valid(self) -> bool:
        return not self._errors

    @property
    def errors(self) -> Dict[str, str]:
        return self._errors

    def add_error(self, key: str, message: str) -> None:
        self._errors.setdefault(key, message)

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def is_email(value) -> bool:
    return isinstance(value, str) and EMAIL_RX.match(value) is not None
