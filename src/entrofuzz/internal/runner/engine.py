# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

import datetime
import time
from enum import Enum
from random import Random, getrandbits

import attr

from entrofuzz._settings import Phase, Verbosity, settings as Settings
from entrofuzz.errors import (
    DeadlineExceeded,
    Frozen,
    InvalidArgument,
    InvalidState,
    StopTest,
    UnsatisfiableBound,
)
from entrofuzz.internal.escalation import (
    FailureSignature,
    escalate_internal_error,
    format_exception,
    get_trimmed_traceback,
)
from entrofuzz.internal.runner.driver import Driver, DriverMode, Status
from entrofuzz.internal.runner.shrinker import Shrinker, sort_key
from entrofuzz.internal.runner.source import uniform
from entrofuzz.reporting import debug_report, verbose_report

# Tell pytest to omit the body of this module from tracebacks
__tracebackhide__ = True


# These mean the run itself is misconfigured, so they abort it instead of
# being recorded as a failing case.
FATAL_ERRORS = (InvalidArgument, InvalidState, UnsatisfiableBound, Frozen)


class RunState(Enum):
    idle = 0
    running = 1
    passed = 2
    failed = 3
    shrinking = 4
    reported = 5


class ExitReason(Enum):
    max_examples = 0
    max_shrinks = 1
    finished = 2
    flaky = 3


class RunIsComplete(Exception):
    pass


@attr.s(slots=True)
class FailingCase:
    """The bytes a failed run consumed, together with how it failed."""

    buffer = attr.ib(converter=bytes)
    signature = attr.ib()
    error = attr.ib(default=None, eq=False, repr=False)
    output = attr.ib(default="")

    @classmethod
    def from_driver(cls, driver):
        assert driver.frozen
        assert driver.status == Status.FAILED
        return cls(
            buffer=driver.buffer,
            signature=driver.failure,
            error=driver.error,
            output=driver.output,
        )


@attr.s(slots=True, frozen=True)
class TestFailure:
    """The final report for a failure: everything needed to understand it and
    to replay it byte-for-byte."""

    __test__ = False

    signature = attr.ib()
    buffer = attr.ib(converter=bytes)
    output = attr.ib(default="")
    error = attr.ib(default=None, eq=False, repr=False)
    location = attr.ib(default=None)
    seed = attr.ib(default=None)
    shrinks = attr.ib(default=0)

    @property
    def blob(self):
        """The buffer encoded for use with ``@reproduce_failure``."""
        from entrofuzz.core import encode_failure

        return encode_failure(self.buffer)

    def __str__(self):
        lines = [f"Test failure: {self.signature}"]
        if self.location is not None:
            lines.append(f"Target: {self.location}")
        lines.append(f"Input: {self.output}")
        lines.append(f"Bytes: {list(self.buffer)!r}")
        if self.seed is not None:
            lines.append(f"Seed: {self.seed!r}")
        lines.append(f"Shrinks: {self.shrinks}")
        if self.error is not None:
            lines.append(f"Error: {self.error!r}")
        return "\n".join(lines)


@attr.s(slots=True, frozen=True)
class TestResult:
    __test__ = False

    status = attr.ib()
    call_count = attr.ib()
    exit_reason = attr.ib()
    failure = attr.ib(default=None)

    @property
    def passed(self):
        return self.status == Status.PASSED


class TestRunner:
    """Runs ``test_function`` against many drivers, and shrinks the first
    failure it finds.

    ``test_function`` takes a single Driver. It fails by raising any
    exception; returning normally means the case passed.
    """

    __test__ = False

    def __init__(
        self, test_function, settings=None, random=None, location=None, seed=None
    ):
        self._test_function = test_function
        self.settings = settings or Settings()
        self.random = random or Random(getrandbits(128))
        self.location = location
        self.seed = seed
        self.driver_mode = self.settings.driver_mode
        self.state = RunState.idle
        self.call_count = 0
        self.valid_examples = 0
        self.shrinks = 0
        self.exit_reason = None
        self.failing_case = None
        self.start_time = time.perf_counter()
        self.__cache = {}

    def set_driver_mode(self, mode):
        if not isinstance(mode, DriverMode):
            raise InvalidArgument(f"Expected a DriverMode but got mode={mode!r}")
        self.driver_mode = mode

    def execute_once(self, driver, is_final=False):
        """Run the test function once against ``driver``, applying the
        deadline.

        Exceptions from the test propagate to the caller. Runs during the
        search get a little slack on the deadline so that a case right at
        the limit does not turn into a flaky failure on replay.
        """
        start = time.perf_counter()
        result = self._test_function(driver)
        if self.settings.deadline is not None:
            runtime = datetime.timedelta(seconds=time.perf_counter() - start)
            current_deadline = self.settings.deadline
            if not is_final:
                current_deadline = (current_deadline // 4) * 5
            if runtime >= current_deadline:
                raise DeadlineExceeded(runtime, self.settings.deadline)
        return result

    def _execute_once_for_runner(self, driver):
        """Wrapper around ``execute_once`` that turns test failures into
        calls to ``driver.mark_failed``.

        Anything other than StopTest escaping from here is fatal and stops
        the whole run.
        """
        try:
            self.execute_once(driver)
        except StopTest:
            raise
        except FATAL_ERRORS:
            raise
        except Exception as e:
            escalate_internal_error()
            if driver.frozen:
                # An error in a finally block suppressed our StopTest, so
                # resume normal operation with a new one.
                raise StopTest(driver.testcounter) from e
            verbose_report(lambda: format_exception(e, get_trimmed_traceback(e)))
            driver.mark_failed(FailureSignature.from_exception(e), e)

    def test_function(self, driver):
        self.call_count += 1
        try:
            self._execute_once_for_runner(driver)
        except StopTest as e:
            if e.testcounter != driver.testcounter:
                raise
        finally:
            driver.freeze()

        self.debug_driver(driver)

        if driver.mode is DriverMode.forced:
            self.__cache.setdefault(driver.buffer, driver)

        if driver.status == Status.PASSED:
            self.valid_examples += 1
            return

        existing = self.failing_case
        if existing is None:
            self.failing_case = FailingCase.from_driver(driver)
        elif driver.failure == existing.signature and sort_key(
            driver.buffer
        ) < sort_key(existing.buffer):
            self.shrinks += 1
            self.failing_case = FailingCase.from_driver(driver)
            if self.shrinks >= self.settings.max_shrinks:
                self.exit_with(ExitReason.max_shrinks)

    def cached_test_function(self, buffer):
        """Replay ``buffer`` in forced mode, reusing an earlier result for
        the same bytes where there is one."""
        buffer = bytes(buffer)
        try:
            return self.__cache[buffer]
        except KeyError:
            pass
        driver = Driver.for_buffer(
            buffer,
            mode=DriverMode.forced,
            max_length=max(self.settings.buffer_size, len(buffer)),
        )
        self.test_function(driver)
        self.__cache[buffer] = driver
        return driver

    def new_driver(self):
        mode = self.driver_mode or DriverMode.direct
        if mode is DriverMode.direct:
            return Driver.for_random(self.random, max_length=self.settings.buffer_size)
        # A forced driver may not top up its bytes as it goes, so it gets a
        # full buffer of randomness up front.
        return Driver.for_buffer(
            uniform(self.random, self.settings.buffer_size),
            mode=DriverMode.forced,
            max_length=self.settings.buffer_size,
        )

    def exit_with(self, reason):
        self.exit_reason = reason
        raise RunIsComplete()

    def generate_new_examples(self):
        if Phase.generate not in self.settings.phases:
            return

        # The all-zero case is the simplest input there is, so if it fails
        # there is nothing left for the shrinker to do.
        self.cached_test_function(b"")

        while (
            self.failing_case is None
            and self.valid_examples < self.settings.max_examples
        ):
            self.test_function(self.new_driver())

    def replay(self, buffer):
        mode = self.driver_mode or DriverMode.forced
        driver = Driver.for_buffer(
            buffer,
            mode=mode,
            random=self.random,
            max_length=max(self.settings.buffer_size, len(buffer)),
        )
        self.test_function(driver)

    def shrink_failures(self):
        """Replace the failing case with a minimal one failing with the same
        signature.

        Whether two failures are "the same" is decided by signature rather
        than by failing at all, so the shrinker cannot slip from one bug to
        a different, easier one.
        """
        if Phase.shrink not in self.settings.phases:
            return
        case = self.failing_case
        self.state = RunState.shrinking

        # The case may have come from a direct mode driver, so check that its
        # bytes alone reproduce it before shrinking from them.
        data = self.cached_test_function(case.buffer)
        if data.status != Status.FAILED or data.failure != case.signature:
            self.debug(f"Failure {case.signature} did not reproduce on replay")
            self.exit_with(ExitReason.flaky)

        self.debug(f"Shrinking {case.signature}")

        def predicate(d):
            return d.status == Status.FAILED and d.failure == case.signature

        self.shrink(data, predicate)

    def shrink(self, example, predicate):
        s = self.new_shrinker(example, predicate)
        s.shrink()
        return s.shrink_target

    def new_shrinker(self, example, predicate):
        return Shrinker(self, example, predicate)

    def run(self, buffer=None):
        """Run the test, on fresh random drivers or on ``buffer`` if given,
        then shrink any failure found and return a TestResult."""
        if self.state is not RunState.idle:
            raise InvalidState("A TestRunner can only be run once")
        with self.settings:
            try:
                self._run(buffer)
            except RunIsComplete:
                pass
            self.debug(
                "Run complete after %d examples (%d valid) and %d shrinks"
                % (self.call_count, self.valid_examples, self.shrinks)
            )
        return self.result()

    def _run(self, buffer):
        self.start_time = time.perf_counter()
        self.state = RunState.running
        if buffer is None:
            self.generate_new_examples()
        else:
            self.replay(buffer)

        if self.failing_case is None:
            self.state = RunState.passed
            self.exit_with(
                ExitReason.finished if buffer is not None else ExitReason.max_examples
            )

        self.state = RunState.failed
        self.shrink_failures()
        self.exit_with(ExitReason.finished)

    def result(self):
        case = self.failing_case
        if case is None:
            return TestResult(
                status=Status.PASSED,
                call_count=self.call_count,
                exit_reason=self.exit_reason,
            )
        self.state = RunState.reported
        return TestResult(
            status=Status.FAILED,
            call_count=self.call_count,
            exit_reason=self.exit_reason,
            failure=TestFailure(
                signature=case.signature,
                buffer=case.buffer,
                output=case.output,
                error=case.error,
                location=self.location,
                seed=self.seed,
                shrinks=self.shrinks,
            ),
        )

    def debug(self, message):
        with self.settings:
            debug_report(message)

    def debug_driver(self, driver):
        if self.settings.verbosity < Verbosity.debug:
            return
        buffer_parts = " || ".join(
            ", ".join(str(b) for b in driver.buffer[u:v]) for u, v in driver.blocks
        )
        status = repr(driver.status)
        if driver.status == Status.FAILED:
            status = f"{status} ({driver.failure})"
        self.debug(f"{driver.index} bytes [{buffer_parts}] -> {status}, {driver.output}")
