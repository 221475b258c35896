# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""entrofuzz turns a stream of raw bytes into structured test inputs, runs a
test against them and, when the test fails, searches for a smaller input
that still fails before reporting it.

The same test runs unmodified under random exploration, replay of a
captured failing case, or an external coverage-guided fuzzer feeding it one
buffer at a time.
"""

from entrofuzz._settings import Phase, Verbosity, settings
from entrofuzz.core import find, given, reproduce_failure, seed
from entrofuzz.internal.runner.driver import Driver, DriverMode
from entrofuzz.version import __version__, __version_info__

__all__ = [
    "Driver",
    "DriverMode",
    "Phase",
    "Verbosity",
    "find",
    "given",
    "reproduce_failure",
    "seed",
    "settings",
    "__version__",
    "__version_info__",
]
