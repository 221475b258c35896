# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

from entrofuzz import settings
from entrofuzz.internal.runner.driver import Driver
from entrofuzz.internal.runner.engine import TestRunner

__all__ = ["driver_for", "fast_settings", "run_buffer"]

fast_settings = settings(deadline=None, max_examples=100)


def driver_for(*values):
    """A forced-mode Driver over the given byte values."""
    return Driver.for_buffer(bytes(values))


def run_buffer(test, buffer, **kwargs):
    """Replay ``buffer`` through ``test``, shrinking it if it fails, and
    return the TestResult."""
    runner = TestRunner(test, settings=settings(fast_settings, **kwargs))
    return runner.run(bytes(buffer))
