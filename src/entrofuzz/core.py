# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""This module provides the core primitives of entrofuzz, such as given."""

import base64
import io
import zlib
from random import getrandbits

from entrofuzz._settings import settings as Settings
from entrofuzz.engines import (
    BufferEngine,
    PropertyTest,
    RandomEngine,
    ReplayEngine,
)
from entrofuzz.errors import (
    DidNotReproduce,
    Flaky,
    Found,
    InvalidArgument,
    NoSuchExample,
)
from entrofuzz.generators._internal.core import tuples
from entrofuzz.internal.escalation import TargetLocation
from entrofuzz.internal.reflection import (
    function_digest,
    get_pretty_function_description,
    proxies,
    repr_call,
)
from entrofuzz.internal.runner.driver import Driver
from entrofuzz.internal.validation import check_generator
from entrofuzz.reporting import report, verbose_report
from entrofuzz.version import __version__


def seed(seed):
    """seed: Start the test execution from a specific seed.

    May be any integer. For a fixed seed value entrofuzz will try the same
    inputs, insofar as it can given external sources of non-determinism.

    Overrides the derandomize setting, which is designed to enable
    deterministic builds rather than reproducing observed failures.
    """

    def accept(test):
        test._entrofuzz_internal_use_seed = seed
        return test

    return accept


def reproduce_failure(version, blob):
    """Run the example that corresponds to this data blob in order to reproduce
    a failure.

    A test with this decorator *always* runs only one example and always fails.
    If the provided example does not cause a failure, then this will fail with
    a DidNotReproduce error.

    This decorator is not intended to be a permanent addition to your test
    suite. No compatibility guarantees are made between different versions
    of entrofuzz.
    """

    def accept(test):
        test._entrofuzz_internal_use_reproduce_failure = (version, blob)
        return test

    return accept


def encode_failure(buffer):
    buffer = bytes(buffer)
    compressed = zlib.compress(buffer)
    if len(compressed) < len(buffer):
        buffer = b"\1" + compressed
    else:
        buffer = b"\0" + buffer
    return base64.b64encode(buffer)


def decode_failure(blob):
    try:
        buffer = base64.b64decode(blob)
    except Exception:
        raise InvalidArgument(f"Invalid base64 encoded string: {blob!r}") from None
    prefix = buffer[:1]
    if prefix == b"\0":
        return buffer[1:]
    elif prefix == b"\1":
        try:
            return zlib.decompress(buffer[1:])
        except zlib.error as err:
            raise InvalidArgument(
                f"Invalid zlib compression for blob {blob!r}"
            ) from err
    else:
        raise InvalidArgument(
            f"Could not decode blob {blob!r}: Invalid start byte {prefix!r}"
        )


def get_seed_for_wrapped_test(test, wrapped_test):
    settings = wrapped_test._entrofuzz_internal_use_settings
    if wrapped_test._entrofuzz_internal_use_seed is not None:
        return wrapped_test._entrofuzz_internal_use_seed
    elif settings.derandomize:
        return int.from_bytes(function_digest(test), "big")
    else:
        return getrandbits(128)


def given_generator(given_arguments, given_kwargs):
    """A single generator for every argument of a test, producing an
    ``(args, kwargs)`` pair."""
    names = tuple(given_kwargs)
    n = len(given_arguments)

    def split(values):
        return values[:n], dict(zip(names, values[n:]))

    return tuples(*given_arguments, *given_kwargs.values()).map(split)


class StateForGivenExecution:
    def __init__(self, test, arguments, kwargs, generator, settings):
        self.test = test
        self.arguments = arguments
        self.kwargs = kwargs
        self.generator = generator
        self.settings = settings
        self.location = TargetLocation.from_function(test)

    def execute_once(self, driver, print_example=False):
        args, kwargs = driver.draw(self.generator)
        call = repr_call(self.test, args, kwargs)
        driver.note(call)
        if print_example:
            report(f"Falsifying example: {call}")
        return self.test(*self.arguments, *args, **self.kwargs, **kwargs)

    def run_engine(self, engine):
        """Run the test under ``engine``, then replay the minimal failure, if
        there is one, so that its exception propagates to the caller."""
        # Tell pytest to omit the body of this function from tracebacks
        __tracebackhide__ = True
        result = engine.run(self.execute_once)
        if result.passed:
            return result

        failure = result.failure
        verbose_report(str(failure))
        driver = Driver.for_buffer(failure.buffer)
        # The final replay gets the exact deadline rather than the lenient
        # one used while searching.
        runner = engine.new_runner(
            lambda d: self.execute_once(d, print_example=True)
        )
        try:
            runner.execute_once(driver, is_final=True)
        finally:
            if self.settings.print_blob:
                report(
                    "\nYou can reproduce this example by temporarily adding "
                    "@reproduce_failure(%r, %r) as a decorator on your test case"
                    % (__version__, encode_failure(failure.buffer))
                )
            driver.freeze()
        raise Flaky(
            f"Test failed with {failure.signature} while searching, but passed "
            "when replayed on the same bytes."
        )


def given(*given_arguments, **given_kwargs):
    """A decorator for turning a test function that accepts arguments into a
    randomized test.

    This is the main entry point to entrofuzz. Each argument is a generator,
    and the test is called with the values they produce, positional and
    keyword alike.
    """

    def run_test_as_given(test):
        if not (given_arguments or given_kwargs):
            raise InvalidArgument("given must be called with at least one argument")
        for i, arg in enumerate(given_arguments):
            check_generator(arg, f"given_arguments[{i}]")
        for name, arg in given_kwargs.items():
            check_generator(arg, name)
        generator = given_generator(given_arguments, given_kwargs)

        @proxies(test)
        def wrapped_test(*arguments, **kwargs):
            # Tell pytest to omit the body of this function from tracebacks
            __tracebackhide__ = True
            settings = wrapped_test._entrofuzz_internal_use_settings
            state = StateForGivenExecution(
                test, arguments, kwargs, generator, settings
            )
            reproduce = getattr(
                wrapped_test, "_entrofuzz_internal_use_reproduce_failure", None
            )
            with settings:
                if reproduce is not None:
                    expected_version, failure = reproduce
                    if expected_version != __version__:
                        raise InvalidArgument(
                            "Attempting to reproduce a failure from a different "
                            "version of entrofuzz. This failure is from %s, but "
                            "you are currently running %r. Please change your "
                            "entrofuzz version to a matching one."
                            % (expected_version, __version__)
                        )
                    engine = ReplayEngine(
                        decode_failure(failure), settings, state.location
                    )
                    state.run_engine(engine)
                    raise DidNotReproduce(
                        "Expected the test to raise an error, but it "
                        "completed successfully."
                    )
                engine = RandomEngine(
                    settings,
                    seed=get_seed_for_wrapped_test(test, wrapped_test),
                    location=state.location,
                )
                state.run_engine(engine)

        def fuzz_one_input(buffer):
            """Run the test as a fuzz target, driven with the ``buffer`` of
            bytes.

            Returns None if the test passed, and leaves raised exceptions
            alone.
            """
            if isinstance(buffer, io.IOBase):
                buffer = buffer.read()
            settings = Settings(
                wrapped_test._entrofuzz_internal_use_settings, deadline=None
            )
            state = StateForGivenExecution(test, (), {}, generator, settings)
            with settings:
                result = BufferEngine(buffer, settings, state.location).run(
                    state.execute_once
                )
            if not result.passed:
                raise result.failure.error

        wrapped_test.is_entrofuzz_test = True
        wrapped_test.fuzz_one_input = fuzz_one_input
        wrapped_test._entrofuzz_internal_use_seed = getattr(
            test, "_entrofuzz_internal_use_seed", None
        )
        wrapped_test._entrofuzz_internal_use_settings = (
            getattr(test, "_entrofuzz_internal_use_settings", None) or Settings.default
        )
        wrapped_test._entrofuzz_internal_use_reproduce_failure = getattr(
            test, "_entrofuzz_internal_use_reproduce_failure", None
        )
        if hasattr(test, "_entrofuzz_internal_settings_applied"):
            wrapped_test._entrofuzz_internal_settings_applied = True
        return wrapped_test

    return run_test_as_given


def find(generator, condition, *, settings=None, random=None):
    """Returns the minimal example from ``generator`` that matches the
    predicate function ``condition``."""
    if settings is None:
        settings = Settings(max_examples=2000)
    check_generator(generator, "generator")

    def check(value):
        if condition(value):
            raise Found()

    seed = None if random is None else random.getrandbits(64)
    with settings:
        result = RandomEngine(settings, seed=seed).run(PropertyTest(generator, check))
    if result.passed:
        raise NoSuchExample(get_pretty_function_description(condition))
    return generator.generate(Driver.for_buffer(result.failure.buffer))
