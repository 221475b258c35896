# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Engines run a test against some supply of bytes and report the outcome.

A test, for the purposes of this module, is any callable that takes a single
:class:`~entrofuzz.internal.runner.driver.Driver` and fails by raising. The
same test runs unmodified under every engine here: random exploration,
replay of one captured case, or one buffer at a time from an external
fuzzer.
"""

import abc
from random import Random, getrandbits

from entrofuzz._settings import Phase, settings as Settings
from entrofuzz.internal.reflection import function_digest
from entrofuzz.internal.runner.driver import DriverMode
from entrofuzz.internal.runner.engine import TestRunner
from entrofuzz.internal.validation import check_generator, check_type


class Engine(abc.ABC):
    """The boundary every backend implements."""

    def __init__(self, settings=None, location=None):
        self.settings = settings or Settings()
        self.location = location
        self.driver_mode = None

    def set_driver_mode(self, mode):
        check_type(DriverMode, mode, "mode")
        self.driver_mode = mode

    @abc.abstractmethod
    def run(self, test):
        """Run ``test`` and return a TestResult."""

    def new_runner(self, test, settings=None, random=None, seed=None):
        runner = TestRunner(
            test,
            settings=settings or self.settings,
            random=random,
            location=self.location,
            seed=seed,
        )
        if self.driver_mode is not None:
            runner.set_driver_mode(self.driver_mode)
        return runner


class RandomEngine(Engine):
    """Explores the test with pseudo-random bytes.

    With no explicit ``seed`` the engine picks a fresh one per run, unless
    the ``derandomize`` setting asks for one derived from the test itself.
    The seed used ends up on any failure report so the run can be repeated.
    """

    def __init__(self, settings=None, seed=None, location=None):
        super().__init__(settings, location)
        self.seed = seed

    def choose_seed(self, test):
        if self.seed is not None:
            return self.seed
        if self.settings.derandomize:
            target = getattr(test, "predicate", test)
            return int.from_bytes(function_digest(target), "big")
        return getrandbits(128)

    def run(self, test):
        seed = self.choose_seed(test)
        return self.new_runner(test, random=Random(seed), seed=seed).run()


class ReplayEngine(Engine):
    """Runs the test once on a captured buffer, shrinking it if it still
    fails."""

    def __init__(self, buffer, settings=None, location=None):
        super().__init__(settings, location)
        self.buffer = bytes(buffer)

    def run(self, test):
        return self.new_runner(test).run(self.buffer)


class BufferEngine(ReplayEngine):
    """Runs the test once on a buffer handed over by an external fuzzer.

    The buffer is used exactly as given: the driver defaults to forced mode
    so no fresh randomness is mixed in, and failures are left unshrunk so
    the fuzzer sees the input it actually produced.
    """

    def __init__(self, buffer, settings=None, location=None):
        super().__init__(buffer, settings, location)
        self.driver_mode = DriverMode.forced

    def run(self, test):
        settings = Settings(self.settings, phases=[Phase.generate])
        return self.new_runner(test, settings=settings).run(self.buffer)


class PropertyTest:
    """Adapts a generator and a predicate into a test the engines can run.

    Each call generates one value, notes it on the driver for reporting and
    passes it to ``predicate``. The case fails if the predicate raises.
    """

    __test__ = False

    def __init__(self, generator, predicate):
        check_generator(generator, "generator")
        self.generator = generator
        self.predicate = predicate

    def __call__(self, driver):
        value = self.generator.generate(driver)
        driver.note(value)
        self.predicate(value)

    def __repr__(self):
        return f"PropertyTest({self.generator!r}, {self.predicate!r})"
