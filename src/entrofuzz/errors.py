# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.


class EntrofuzzException(Exception):
    """Generic parent class for exceptions thrown by entrofuzz."""


class InvalidArgument(EntrofuzzException, TypeError):
    """Used to indicate that the arguments to an entrofuzz function were in
    some manner incorrect."""


class InvalidState(EntrofuzzException):
    """The system is not in a state where you were allowed to do that."""


class UnsatisfiableBound(EntrofuzzException):
    """A bounded refinement value could not be produced within its retry
    budget, because the requested range admits no valid value.

    This is a configuration error rather than a test failure, so it aborts
    the whole run instead of being shrunk.
    """

    def __init__(self, type_name, start, end):
        super().__init__(
            f"Could not satisfy bounded value for {type_name} with "
            f"start={start!r}, end={end!r}: the range admits no valid value."
        )
        self.type_name = type_name
        self.start = start
        self.end = end


class Frozen(EntrofuzzException):
    """Raised when a mutation method has been called on a Driver after
    freeze() has been called."""


class Flaky(EntrofuzzException):
    """This function appears to fail non-deterministically: We have seen it
    fail when passed this input at least once, but a subsequent invocation
    on exactly the same bytes did not fail.

    Common causes for this problem are:
        1. The function depends on external state. e.g. it uses an external
           random number generator. Try to make a version that passes all the
           relevant state in from the generator.
        2. The function is timing sensitive and can fail or pass depending on
           how long it takes. Try breaking it up into smaller functions which
           don't do that and testing those instead.
    """


class DeadlineExceeded(EntrofuzzException):
    """Raised when an individual test case took longer than the deadline
    setting allows."""

    def __init__(self, runtime, deadline):
        super().__init__(
            "Test took %.2fms, which exceeds the deadline of %.2fms"
            % (runtime.total_seconds() * 1000, deadline.total_seconds() * 1000)
        )
        self.runtime = runtime
        self.deadline = deadline

    def __reduce__(self):
        return (type(self), (self.runtime, self.deadline))


class NoSuchExample(EntrofuzzException):
    """The condition we have been asked to satisfy appears to be always false.

    This does not guarantee that no example exists, only that we were
    unable to find one.
    """

    def __init__(self, condition_string, extra=""):
        super().__init__(f"No examples found of condition {condition_string}{extra}")


class Found(EntrofuzzException):
    """Signal that the example matches condition. Internal use only."""

    entrofuzz_internal_never_escalate = True


class DidNotReproduce(EntrofuzzException):
    """A @reproduce_failure blob was replayed and the test passed."""


class StopTest(BaseException):
    """Raised when a test should stop running and return control to
    the entrofuzz engine, which should then continue normally.
    """

    def __init__(self, testcounter):
        super().__init__(repr(testcounter))
        self.testcounter = testcounter
