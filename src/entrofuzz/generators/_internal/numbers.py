# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Type descriptors for the primitive types entrofuzz can generate.

Every integer type is an instance of the one ``IntegerType`` class, which
knows its width and signedness and from those derives its domain, its
decoding and its bounded folding. Nothing here is specialised per width.
"""

import operator
import struct

import attr

from entrofuzz.errors import InvalidArgument, UnsatisfiableBound
from entrofuzz.generators._internal.bounds import (
    Excluded,
    Included,
    Unbounded,
    as_bound,
    check_bound,
    fold,
    resolve_bounds,
)

# Captured cases must replay identically on every platform, so decoding
# never uses the native byte order.
BYTE_ORDER = "little"

# Number of wrapping increments a refinement tries before giving up.
MAX_REFINEMENT_ATTEMPTS = 4


@attr.s(slots=True, frozen=True, repr=False)
class IntegerType:
    name = attr.ib()
    bits = attr.ib()
    signed = attr.ib()

    def __repr__(self):
        return self.name

    @property
    def size(self):
        return self.bits // 8

    @property
    def min_value(self):
        if self.signed:
            return -(1 << (self.bits - 1))
        return 0

    @property
    def max_value(self):
        if self.signed:
            return (1 << (self.bits - 1)) - 1
        return (1 << self.bits) - 1

    def contains(self, value):
        return self.min_value <= value <= self.max_value

    def saturating_add(self, value, n=1):
        return min(value + n, self.max_value)

    def saturating_sub(self, value, n=1):
        return max(value - n, self.min_value)

    def wrapping_add(self, value, n=1):
        return (value + n - self.min_value) % (1 << self.bits) + self.min_value

    def decode(self, driver):
        return int.from_bytes(
            driver.draw_bytes(self.size), BYTE_ORDER, signed=self.signed
        )

    def check_bound(self, bound, name):
        return check_bound(self, bound, name)

    def bounded(self, value, start, end):
        """Map ``value`` into the range described by ``start`` and ``end``.

        >>> u8.bounded(250, Included(10), Included(20))
        10
        """
        lower, upper = resolve_bounds(self, start, end)
        return fold(int(value), lower, upper)


@attr.s(slots=True, frozen=True, repr=False)
class FloatType:
    name = attr.ib()
    bits = attr.ib()
    format = attr.ib()

    def __repr__(self):
        return self.name

    @property
    def size(self):
        return self.bits // 8

    def decode(self, driver):
        # A straight reinterpretation, so NaNs and infinities come out too.
        (result,) = struct.unpack(self.format, driver.draw_bytes(self.size))
        return result


class NonZero(int):
    """An integer that is known not to be zero.

    ``NonZero(0)`` raises InvalidArgument. Use :meth:`checked` to get
    ``None`` back instead.
    """

    __slots__ = ()

    def __new__(cls, value):
        value = operator.index(value)
        if value == 0:
            raise InvalidArgument("NonZero value must not be zero")
        return super().__new__(cls, value)

    @classmethod
    def checked(cls, value):
        if value == 0:
            return None
        return cls(value)

    def get(self):
        return int(self)

    def __repr__(self):
        return f"NonZero({int(self)})"


@attr.s(slots=True, frozen=True, repr=False)
class NonZeroType:
    """The non-zero refinement of an integer type.

    Bounds are given in terms of the underlying integer. Folding happens on
    the raw integer, and a result that is not a valid refinement is nudged
    upwards and folded again, a fixed number of times, before giving up with
    UnsatisfiableBound.
    """

    base = attr.ib()

    def __repr__(self):
        return f"non_zero_{self.base.name}"

    @property
    def name(self):
        return repr(self)

    @property
    def min_value(self):
        return self.base.min_value

    @property
    def max_value(self):
        return self.base.max_value

    def new(self, value):
        if not self.base.contains(value):
            return None
        return NonZero.checked(value)

    def decode(self, driver):
        return self.bounded(self.base.decode(driver), Included(1), Unbounded)

    def check_bound(self, bound, name):
        bound = check_bound(self.base, bound, name)
        if isinstance(bound, (Included, Excluded)) and bound.value == 0:
            raise InvalidArgument(f"{name}={bound!r} is not a valid {self!r}")
        return bound

    def bounded(self, value, start, end):
        start, end = as_bound(start), as_bound(end)
        raw = int(value)
        for _ in range(MAX_REFINEMENT_ATTEMPTS):
            result = self.new(self.base.bounded(raw, start, end))
            if result is not None:
                return result
            raw = self.base.wrapping_add(raw)
        raise UnsatisfiableBound(self.name, start, end)


u8 = IntegerType("u8", 8, False)
i8 = IntegerType("i8", 8, True)
u16 = IntegerType("u16", 16, False)
i16 = IntegerType("i16", 16, True)
u32 = IntegerType("u32", 32, False)
i32 = IntegerType("i32", 32, True)
u64 = IntegerType("u64", 64, False)
i64 = IntegerType("i64", 64, True)
u128 = IntegerType("u128", 128, False)
i128 = IntegerType("i128", 128, True)
usize = IntegerType("usize", 64, False)
isize = IntegerType("isize", 64, True)

INTEGER_TYPES = (u8, i8, u16, i16, u32, i32, u64, i64, u128, i128, usize, isize)

non_zero_u8 = NonZeroType(u8)
non_zero_i8 = NonZeroType(i8)
non_zero_u16 = NonZeroType(u16)
non_zero_i16 = NonZeroType(i16)
non_zero_u32 = NonZeroType(u32)
non_zero_i32 = NonZeroType(i32)
non_zero_u64 = NonZeroType(u64)
non_zero_i64 = NonZeroType(i64)
non_zero_u128 = NonZeroType(u128)
non_zero_i128 = NonZeroType(i128)
non_zero_usize = NonZeroType(usize)
non_zero_isize = NonZeroType(isize)

f32 = FloatType("f32", 32, "<f")
f64 = FloatType("f64", 64, "<d")
