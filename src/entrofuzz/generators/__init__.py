# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

from entrofuzz.generators._internal.bounds import (
    Excluded,
    Included,
    Unbounded,
    fold,
    resolve_bounds,
)
from entrofuzz.generators._internal.core import (
    binary,
    booleans,
    builds,
    floats,
    integers,
    just,
    lists,
    non_zero,
    sampled_from,
    tuples,
)
from entrofuzz.generators._internal.generators import (
    BoundedGenerator,
    Generator,
    TypeGenerator,
    ValueGenerator,
)
from entrofuzz.generators._internal.numbers import (
    FloatType,
    IntegerType,
    NonZero,
    NonZeroType,
    f32,
    f64,
    i8,
    i16,
    i32,
    i64,
    i128,
    isize,
    non_zero_i8,
    non_zero_i16,
    non_zero_i32,
    non_zero_i64,
    non_zero_i128,
    non_zero_isize,
    non_zero_u8,
    non_zero_u16,
    non_zero_u32,
    non_zero_u64,
    non_zero_u128,
    non_zero_usize,
    u8,
    u16,
    u32,
    u64,
    u128,
    usize,
)

__all__ = [
    "BoundedGenerator",
    "Excluded",
    "FloatType",
    "Generator",
    "Included",
    "IntegerType",
    "NonZero",
    "NonZeroType",
    "TypeGenerator",
    "Unbounded",
    "ValueGenerator",
    "binary",
    "booleans",
    "builds",
    "f32",
    "f64",
    "floats",
    "fold",
    "i8",
    "i16",
    "i32",
    "i64",
    "i128",
    "integers",
    "isize",
    "just",
    "lists",
    "non_zero",
    "non_zero_i8",
    "non_zero_i16",
    "non_zero_i32",
    "non_zero_i64",
    "non_zero_i128",
    "non_zero_isize",
    "non_zero_u8",
    "non_zero_u16",
    "non_zero_u32",
    "non_zero_u64",
    "non_zero_u128",
    "non_zero_usize",
    "resolve_bounds",
    "sampled_from",
    "tuples",
    "u8",
    "u16",
    "u32",
    "u64",
    "u128",
    "usize",
]
