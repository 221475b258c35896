# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

import math
import struct

import pytest

from entrofuzz.errors import InvalidArgument, UnsatisfiableBound
from entrofuzz.generators import (
    Excluded,
    Included,
    NonZero,
    f32,
    f64,
    floats,
    i8,
    i16,
    i128,
    integers,
    isize,
    non_zero,
    non_zero_i8,
    non_zero_u8,
    non_zero_u32,
    u8,
    u16,
    u32,
    u64,
    u128,
    usize,
)

from tests.common import driver_for


@pytest.mark.parametrize(
    "ty, lo, hi",
    [
        (u8, 0, 255),
        (i8, -128, 127),
        (u16, 0, 2**16 - 1),
        (i16, -(2**15), 2**15 - 1),
        (u128, 0, 2**128 - 1),
        (i128, -(2**127), 2**127 - 1),
        (usize, 0, 2**64 - 1),
        (isize, -(2**63), 2**63 - 1),
    ],
)
def test_integer_domains(ty, lo, hi):
    assert (ty.min_value, ty.max_value) == (lo, hi)


def test_decodes_little_endian():
    assert u32.decode(driver_for(3, 0, 0, 0)) == 3
    assert u16.decode(driver_for(1, 2)) == 0x0201


def test_decodes_twos_complement():
    assert i8.decode(driver_for(0xFF)) == -1
    assert i16.decode(driver_for(0x00, 0x80)) == -(2**15)


def test_decoding_consumes_exactly_the_width():
    driver = driver_for(*range(20))
    u64.decode(driver)
    assert driver.index == 8


def test_exhausted_input_decodes_to_zero():
    assert u64.decode(driver_for()) == 0


def test_wrapping_add_wraps_within_the_domain():
    assert u8.wrapping_add(255) == 0
    assert i8.wrapping_add(127) == -128
    assert i8.wrapping_add(-1) == 0


def test_saturating_arithmetic_stops_at_the_edges():
    assert u8.saturating_add(255) == 255
    assert u8.saturating_sub(0) == 0
    assert i8.saturating_sub(-128) == -128


def test_integer_generators_decode_their_type():
    assert integers(u16).generate(driver_for(0xFF, 0x01)) == 0x01FF


def test_bounded_integer_generator():
    assert integers(u8, 10, 20).generate(driver_for(250)) == 10


def test_integers_rejects_out_of_range_bounds():
    with pytest.raises(InvalidArgument):
        integers(u8, 0, 256)


def test_integers_rejects_non_integer_types():
    with pytest.raises(InvalidArgument):
        integers(f32)
    with pytest.raises(InvalidArgument):
        integers("u8")


def test_floats_reinterpret_bytes():
    assert f32.decode(driver_for(*struct.pack("<f", 1.5))) == 1.5
    assert f64.decode(driver_for(*struct.pack("<d", -2.25))) == -2.25


def test_floats_can_be_nan():
    assert math.isnan(f64.decode(driver_for(*([0xFF] * 8))))


def test_floats_do_not_support_bounds():
    with pytest.raises(InvalidArgument):
        floats(f32).with_bounds(0, 1)


def test_floats_rejects_integer_types():
    with pytest.raises(InvalidArgument):
        floats(u8)


def test_non_zero_rejects_zero():
    with pytest.raises(InvalidArgument):
        NonZero(0)


def test_non_zero_checked_returns_none_for_zero():
    assert NonZero.checked(0) is None
    assert NonZero.checked(-3) == -3


def test_non_zero_is_an_int():
    x = NonZero(5)
    assert isinstance(x, int)
    assert x == 5
    assert x.get() == 5
    assert repr(x) == "NonZero(5)"


def test_non_zero_decodes_zero_to_one():
    value = non_zero_u8.decode(driver_for(0))
    assert value == 1
    assert isinstance(value, NonZero)


@pytest.mark.parametrize("ty", [non_zero_u8, non_zero_i8])
def test_non_zero_never_decodes_to_zero(ty):
    for b in range(256):
        value = ty.decode(driver_for(b))
        assert value != 0
        assert 1 <= value <= ty.max_value


def test_non_zero_default_generator_covers_small_values():
    values = {non_zero(u8).generate(driver_for(b)) for b in range(256)}
    assert values == set(range(1, 255))


def test_non_zero_retries_past_zero():
    # 1 folds to 0, so the next raw value is tried and folds to -1.
    assert non_zero_i8.bounded(1, Included(-1), Included(1)) == -1
    assert non_zero_i8.bounded(0, Included(-1), Included(1)) == -1


def test_non_zero_raises_when_no_value_satisfies_the_bounds():
    with pytest.raises(UnsatisfiableBound) as e:
        non_zero_i8.bounded(5, Excluded(-1), Excluded(1))
    assert "non_zero_i8" in str(e.value)


def test_non_zero_bounded_generator_raises_when_unsatisfiable():
    g = non_zero(i8, Excluded(-1), Excluded(1))
    with pytest.raises(UnsatisfiableBound):
        g.generate(driver_for(5))


def test_non_zero_upper_bound_of_one_is_unsatisfiable():
    # [0, 1] folds every raw value to 0, as the upper bound is exclusive.
    g = non_zero(u8, max_value=1)
    with pytest.raises(UnsatisfiableBound):
        g.generate(driver_for(7))


@pytest.mark.parametrize("b", [0, 7, 8, 255])
def test_non_zero_upper_bound_of_two_only_reaches_one(b):
    assert non_zero(u8, max_value=2).generate(driver_for(b)) == 1


def test_non_zero_bounds_must_not_be_zero():
    with pytest.raises(InvalidArgument):
        non_zero(u8, 0, 10)


def test_non_zero_accepts_refinement_types():
    # The default range starts at 1, so raw values are shifted up by one.
    g = non_zero(non_zero_u32)
    assert g.generate(driver_for(5, 0, 0, 0)) == 6


def test_non_zero_types_repr_by_name():
    assert repr(non_zero_u8) == "non_zero_u8"
    assert repr(u8) == "u8"
