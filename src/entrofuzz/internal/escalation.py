# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

import os
import sys
import traceback
from enum import Enum
from inspect import getframeinfo
from pathlib import Path
from typing import NamedTuple, Optional

import attr

import entrofuzz
from entrofuzz.errors import DeadlineExceeded, EntrofuzzException, StopTest


def belongs_to(package):
    if not hasattr(package, "__file__"):  # pragma: no cover
        return lambda filepath: False

    root = Path(package.__file__).resolve().parent
    cache = {str: {}, bytes: {}}

    def accept(filepath):
        ftype = type(filepath)
        try:
            return cache[ftype][filepath]
        except KeyError:
            pass
        try:
            Path(filepath).resolve().relative_to(root)
            result = True
        except Exception:
            result = False
        cache[ftype][filepath] = result
        return result

    accept.__name__ = f"is_{package.__name__}_file"
    return accept


PREVENT_ESCALATION = os.getenv("ENTROFUZZ_DO_NOT_ESCALATE") == "true"

is_entrofuzz_file = belongs_to(entrofuzz)


def escalate_internal_error():
    """Re-raise the exception currently being handled if it came from a bug
    in entrofuzz itself rather than from the code under test."""
    if PREVENT_ESCALATION:
        return

    _, e, tb = sys.exc_info()

    if getattr(e, "entrofuzz_internal_never_escalate", False):
        return

    filepath = traceback.extract_tb(tb)[-1][0]
    if is_entrofuzz_file(filepath) and not isinstance(
        e, (EntrofuzzException, StopTest)
    ):
        raise


def get_trimmed_traceback(exception=None):
    """Return the current traceback, minus any frames added by entrofuzz."""
    if exception is None:
        _, exception, tb = sys.exc_info()
    else:
        tb = exception.__traceback__
    # Avoid trimming the traceback if the error was raised inside entrofuzz,
    # there would be nothing left to show.
    if tb is None or is_entrofuzz_file(traceback.extract_tb(tb)[-1][0]):
        return tb
    while tb is not None and is_entrofuzz_file(getframeinfo(tb.tb_frame)[0]):
        tb = tb.tb_next
    return tb


def format_exception(err, tb):
    return "".join(traceback.format_exception(type(err), err, tb))


class FailureKind(Enum):
    assertion = "assertion"
    timeout = "timeout"

    def __repr__(self):
        return f"FailureKind.{self.name}"


class FailureSignature(NamedTuple):
    """How entrofuzz tells failures apart: the kind of failure, the type of
    the exception and the innermost non-entrofuzz source position it was
    raised from.

    Two failures with equal signatures are the same bug for the purposes of
    shrinking and reporting.
    """

    kind: FailureKind
    exc_type: type
    filename: Optional[str]
    lineno: Optional[int]

    @classmethod
    def from_exception(cls, exception):
        if isinstance(exception, DeadlineExceeded):
            # The location at which a slow test happened to be interrupted
            # is meaningless, so every timeout is the same failure.
            return cls(FailureKind.timeout, type(exception), None, None)
        tb = get_trimmed_traceback(exception)
        if tb is None:
            return cls(FailureKind.assertion, type(exception), None, None)
        filename, lineno, *_ = traceback.extract_tb(tb)[-1]
        return cls(FailureKind.assertion, type(exception), filename, lineno)

    def __str__(self):
        where = "" if self.filename is None else f" at {self.filename}:{self.lineno}"
        return f"{self.kind.value} failure: {self.exc_type.__name__}{where}"


@attr.s(slots=True, frozen=True)
class TargetLocation:
    """The source position of a test target, attached to its failures so
    that reports can say which test they came from."""

    module = attr.ib()
    qualname = attr.ib()
    filename = attr.ib(default=None)
    lineno = attr.ib(default=None)

    @classmethod
    def from_function(cls, f):
        code = getattr(f, "__code__", None)
        return cls(
            module=getattr(f, "__module__", None),
            qualname=getattr(f, "__qualname__", getattr(f, "__name__", repr(f))),
            filename=None if code is None else code.co_filename,
            lineno=None if code is None else code.co_firstlineno,
        )

    def __str__(self):
        name = self.qualname if self.module is None else f"{self.module}.{self.qualname}"
        if self.filename is None:
            return name
        return f"{name} ({self.filename}:{self.lineno})"
