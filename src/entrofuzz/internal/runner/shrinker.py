# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

from entrofuzz.internal.runner.driver import Status
from entrofuzz.internal.runner.minimizer import minimize_byte


def sort_key(buffer):
    """Shortlex order on byte sequences: shorter is simpler, and among equal
    lengths the lexicographically smaller is simpler."""
    return (len(buffer), buffer)


class Shrinker:
    """A shrinker is a child object of a TestRunner which is designed to
    manage the associated state of a particular shrink problem.

    The problem is always the same: find a byte sequence for which
    ``predicate`` holds and which is as small as possible under
    ``sort_key``. The shrinker never looks at generated values, only at
    the bytes. Every candidate is replayed through a fresh forced-mode
    Driver by the runner, so whatever generators the test uses get
    minimized for free.

    A candidate is kept only when its replay satisfies the predicate *and*
    the bytes that replay actually consumed are strictly smaller than the
    current target. As there are finitely many sequences below any given
    one, this guarantees termination.
    """

    def __init__(self, runner, initial, predicate):
        """Create a shrinker for a particular runner, with a given starting
        point and predicate.

        Note that initial is a frozen Driver, and predicate takes frozen
        Drivers.
        """
        assert initial.frozen
        self.__runner = runner
        self.__predicate = predicate
        self.shrink_target = initial
        self.changes = 0
        self.discarded = 0

    @property
    def buffer(self):
        return self.shrink_target.buffer

    @property
    def blocks(self):
        return self.shrink_target.blocks

    def debug(self, msg):
        self.__runner.debug(msg)

    def incorporate_new_buffer(self, buffer):
        buffer = bytes(buffer)
        if sort_key(buffer) >= sort_key(self.buffer):
            return False
        data = self.__runner.cached_test_function(buffer)
        return self.incorporate_driver(data)

    def incorporate_driver(self, data):
        if self.__predicate(data):
            if sort_key(data.buffer) < sort_key(self.buffer):
                self.update_shrink_target(data)
                return True
        elif data.status == Status.FAILED:
            # Failing some other way means we reached a different bug, not a
            # smaller copy of this one.
            self.discarded += 1
            self.debug(f"Discarded candidate with different failure {data.failure}")
        return False

    def update_shrink_target(self, new_target):
        assert new_target.frozen
        self.changes += 1
        self.debug(
            "Shrunk to %d bytes: %r" % (len(new_target.buffer), list(new_target.buffer))
        )
        self.shrink_target = new_target

    def shrink(self):
        """Run the full set of shrinks and update shrink_target.

        Calling this on a target that is already minimal leaves it
        unchanged.
        """
        # The all-zero buffers are the smallest there are, so if one of them
        # works we are done.
        if (
            not any(self.buffer)
            or self.incorporate_new_buffer(b"")
            or self.incorporate_new_buffer(bytes(len(self.buffer)))
        ):
            return

        self.greedy_shrink()

    def greedy_shrink(self):
        """Run each pass in turn until a full round of them makes no
        change."""
        prev = None
        while prev is not self.shrink_target:
            prev = self.shrink_target
            self.truncate_tail()
            self.delete_blocks()
            self.zero_blocks()
            self.zero_bytes()
            self.minimize_bytes()

    def truncate_tail(self):
        """Try cutting off half the buffer, then a quarter, and so on,
        keeping every cut that still fails.

        Cut bytes are read back as zeros on replay, so this also serves to
        zero out a nonzero tail.
        """
        k = len(self.buffer) // 2
        while k > 0:
            buffer = self.buffer
            if k <= len(buffer) and self.incorporate_new_buffer(buffer[:-k]):
                continue
            k //= 2

    def delete_blocks(self):
        """Try removing the bytes of each individual draw, so that later
        draws shift down into its place."""
        i = len(self.blocks) - 1
        while i >= 0:
            if i < len(self.blocks):
                u, v = self.blocks[i]
                buffer = self.buffer
                self.incorporate_new_buffer(buffer[:u] + buffer[v:])
            i -= 1

    def zero_blocks(self):
        i = 0
        while i < len(self.blocks):
            u, v = self.blocks[i]
            buffer = self.buffer
            if any(buffer[u:v]):
                self.incorporate_new_buffer(buffer[:u] + bytes(v - u) + buffer[v:])
            i += 1

    def zero_bytes(self):
        i = 0
        while i < len(self.buffer):
            buffer = self.buffer
            if buffer[i]:
                self.incorporate_new_buffer(buffer[:i] + bytes(1) + buffer[i + 1 :])
            i += 1

    def minimize_bytes(self):
        """Lower each byte as far as it will go while holding the others
        fixed.

        This is the pass that ensures that e.g. if a test fails whenever a
        number is odd, the shrunk number is 1 rather than whatever odd
        value was first generated.
        """
        i = 0
        while i < len(self.buffer):
            c = self.buffer[i]
            if c:

                def try_byte(v, i=i):
                    buffer = self.buffer
                    if i >= len(buffer) or v > buffer[i]:
                        return False
                    if v == buffer[i]:
                        return True
                    return self.incorporate_new_buffer(
                        buffer[:i] + bytes([v]) + buffer[i + 1 :]
                    )

                minimize_byte(c, try_byte)
            i += 1
