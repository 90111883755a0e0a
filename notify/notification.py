"""
Notification Module

A Notification is an exception that also carries a classification code, so the
same value can be logged by the notifier and raised (or returned) by the caller:

    fail = notifier.failure("Loader")
    raise fail(3, "Could not open %s", path)

Everything the consumer loop receives is decoded into one of the payload variants
defined here (Coded, Failure, Text, Unrecognized) before it is written.
"""

# System modules
from dataclasses import dataclass
import os
import sys

# Notify modules
from notify.codes import GENERAL_ERROR_CODE
from notify.syswarn import syswarn


class Notification(Exception):
    """The standard error type used in notify: an exception with a notification code."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self._code: int = code
        self._message: str = message

    @property
    def code(self) -> int:
        return self._code

    @property
    def message(self) -> str:
        return self._message

    def __str__(self) -> str:
        return self._message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self._code}, message={self._message!r})"


class NotifierInactive(Notification):
    """Returned by Notifier.exit() when the notifier was not running."""

    def __init__(self, message: str) -> None:
        super().__init__(4, message)


class MissingSystemCode(RuntimeError):
    """A restricted notification code disappeared. The notifier cannot continue."""


def is_code(code: int, err: BaseException | None) -> bool:
    """
    Check whether err carries the notification code `code`.
    Exceptions that are not notify.Notification are given code 1.
    """
    if isinstance(err, Notification):
        return err.code == code
    return code == GENERAL_ERROR_CODE


def newf(code: int, fmt: str, *args: object, stacklevel: int = 1) -> Notification:
    """
    Format according to a %-style format specifier and build a Notification.

    The location of the caller (`stacklevel` frames up) is appended to the message,
    e.g. "Could not open x.cfg -> [loader.py: 42]".
    """
    text: str = fmt % args if args else fmt

    if code < 0:
        syswarn(f"An error should have a non-negative code. Changing {code} to 1")
        code = GENERAL_ERROR_CODE

    # Append some runtime information
    try:
        frame = sys._getframe(stacklevel)
    except ValueError:
        frame = None
    if frame is not None:
        text = f"{text} -> [{os.path.basename(frame.f_code.co_filename)}: {frame.f_lineno}]"

    return Notification(code, text)


# Payload variants, decoded once per note by the consumer loop

@dataclass(frozen=True)
class Coded:
    code: int
    message: str


@dataclass(frozen=True)
class Failure:
    message: str


@dataclass(frozen=True)
class Text:
    message: str


@dataclass(frozen=True)
class Unrecognized:
    value: object


Payload = Coded | Failure | Text | Unrecognized


def classify(value: object) -> Payload:
    """Decode a submitted value into its payload variant."""
    match value:
        case Notification(code=code, message=message):
            return Coded(code, message)
        case BaseException():
            return Failure(str(value))
        case str():
            return Text(value)
        case _:
            return Unrecognized(value)
