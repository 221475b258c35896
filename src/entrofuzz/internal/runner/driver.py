# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

import itertools
import time
from enum import Enum, IntEnum

from entrofuzz.errors import Frozen, InvalidArgument, StopTest
from entrofuzz.internal.runner.source import (
    ByteSource,
    ExhaustibleSource,
    InfiniteSource,
    uniform,
)

BUFFER_SIZE = 8 * 1024


class DriverMode(Enum):
    """How a Driver may supply bytes.

    ``forced``: every byte comes from the source and nowhere else, so the
    same source bytes always decode to the same values. Used for replay and
    shrinking, and under external fuzzers that hand us exact buffers.

    ``direct``: once a finite source runs out the driver may top it up with
    fresh randomness. Used for open-ended exploration.
    """

    forced = "forced"
    direct = "direct"

    def __repr__(self):
        return f"DriverMode.{self.name}"


class Status(IntEnum):
    PASSED = 0
    FAILED = 1

    def __repr__(self):
        return f"Status.{self.name}"


_test_counter = itertools.count()


class Driver:
    """The single choke point through which a test case consumes entropy.

    A Driver serves exactly one test run. Everything it hands out is
    recorded on ``buffer``, so a run can be replayed byte-for-byte by
    building a fresh forced-mode Driver over that buffer.
    """

    @classmethod
    def for_buffer(cls, buffer, mode=DriverMode.forced, random=None, max_length=None):
        buffer = bytes(buffer)
        if max_length is None:
            max_length = max(BUFFER_SIZE, len(buffer))
        return cls(
            ExhaustibleSource(buffer), mode=mode, random=random, max_length=max_length
        )

    @classmethod
    def for_random(cls, random, mode=DriverMode.direct, max_length=BUFFER_SIZE):
        return cls(InfiniteSource(random), mode=mode, random=random, max_length=max_length)

    def __init__(self, source, mode=DriverMode.forced, random=None, max_length=BUFFER_SIZE):
        if not isinstance(source, ByteSource):
            raise InvalidArgument(f"Expected a ByteSource but got source={source!r}")
        if not isinstance(mode, DriverMode):
            raise InvalidArgument(f"Expected a DriverMode but got mode={mode!r}")
        self.source = source
        self.__mode = mode
        self.random = random
        self.max_length = max_length
        self.buffer = bytearray()
        self.blocks = []
        self.output = ""
        self.status = Status.PASSED
        self.failure = None
        self.error = None
        self.frozen = False
        self.testcounter = next(_test_counter)
        self.start_time = time.perf_counter()
        self.finish_time = None

    def __repr__(self):
        return "Driver(%s, %d bytes%s)" % (
            self.status.name,
            self.index,
            ", frozen" if self.frozen else "",
        )

    def __assert_not_frozen(self, name):
        if self.frozen:
            raise Frozen(f"Cannot call {name} on frozen Driver")

    @property
    def mode(self):
        return self.__mode

    @mode.setter
    def mode(self, mode):
        self.__assert_not_frozen("mode")
        if self.index > 0:
            raise Frozen("Cannot change the mode of a Driver that has been drawn from")
        self.__mode = mode

    @property
    def index(self):
        return len(self.buffer)

    @property
    def exhausted(self):
        return self.source.exhausted or self.index >= self.max_length

    def note(self, value):
        self.__assert_not_frozen("note")
        if not isinstance(value, str):
            value = repr(value)
        self.output += value

    def draw(self, generator):
        """Generate a value from ``generator`` using this Driver's bytes, for
        tests that need to draw interactively."""
        self.__assert_not_frozen("draw")
        return generator.generate(self)

    def draw_bytes(self, n):
        self.__assert_not_frozen("draw_bytes")
        if n == 0:
            return b""
        return self.__read(n)

    def fill(self, buf):
        """Fill ``buf``, a writable buffer such as a bytearray, with the next
        ``len(buf)`` bytes."""
        buf[:] = self.draw_bytes(len(buf))

    def __read(self, n):
        initial = self.index
        # Bytes past max_length are zero and never recorded. Replaying the
        # recorded prefix zero-fills at the same point, so this stays
        # deterministic.
        k = min(n, max(0, self.max_length - initial))
        if self.__mode is DriverMode.direct and self.random is not None:
            available = min(k, self.source.remaining)
            result = self.source.read(available) + uniform(self.random, k - available)
        else:
            result = self.source.read(k)
        assert len(result) == k
        if k > 0:
            self.blocks.append((initial, initial + k))
            self.buffer.extend(result)
        if k < n:
            result += bytes(n - k)
        return result

    def freeze(self):
        if self.frozen:
            assert isinstance(self.buffer, bytes)
            return
        self.finish_time = time.perf_counter()
        self.frozen = True
        self.buffer = bytes(self.buffer)

    def mark_failed(self, signature, error=None):
        self.__assert_not_frozen("mark_failed")
        self.status = Status.FAILED
        self.failure = signature
        self.error = error
        self.freeze()
        raise StopTest(self.testcounter)
