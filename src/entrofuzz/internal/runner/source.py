# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Finite and infinite backing stores of raw bytes for a Driver.

Reads from a source always succeed with exactly the number of bytes asked
for. A finite source that has run out hands back zero bytes, so any
generator reading from it can always complete.
"""

import math


def uniform(random, n):
    """Returns a bytes object of length n drawn uniformly from random."""
    if n <= 0:
        return b""
    return random.getrandbits(n * 8).to_bytes(n, "little")


class ByteSource:
    """Abstract base for the bytes a Driver consumes."""

    exhausted = False

    @property
    def remaining(self):
        raise NotImplementedError()

    def read(self, n):
        raise NotImplementedError()


class ExhaustibleSource(ByteSource):
    """A fixed buffer, such as a captured failing case or one input handed
    to us by an external fuzzer."""

    def __init__(self, buffer):
        self.buffer = bytes(buffer)
        self.index = 0
        self.exhausted = False

    @property
    def remaining(self):
        return len(self.buffer) - self.index

    def read(self, n):
        result = self.buffer[self.index : self.index + n]
        self.index += len(result)
        if len(result) < n:
            self.exhausted = True
            result += bytes(n - len(result))
        return result

    def __repr__(self):
        return f"ExhaustibleSource({self.buffer!r}, index={self.index})"


class InfiniteSource(ByteSource):
    """Fresh bytes from a pseudo-random generator, with no natural end."""

    def __init__(self, random):
        self.random = random

    @property
    def remaining(self):
        return math.inf

    def read(self, n):
        return uniform(self.random, n)

    def __repr__(self):
        return f"InfiniteSource({self.random!r})"
