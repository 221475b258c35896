# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

from entrofuzz.errors import InvalidArgument
from entrofuzz.generators._internal.collections import (
    BinaryGenerator,
    ListGenerator,
    SampledFromGenerator,
    TupleGenerator,
)
from entrofuzz.generators._internal.generators import (
    Generator,
    TypeGenerator,
    ValueGenerator,
)
from entrofuzz.generators._internal.numbers import (
    FloatType,
    IntegerType,
    NonZeroType,
    f64,
    u8,
)
from entrofuzz.internal.reflection import proxies, repr_call
from entrofuzz.internal.validation import (
    check_generator,
    check_type,
    check_valid_size,
    check_valid_sizes,
)

DEFAULT_MAX_SIZE = 64


def defines_generator(generator_definition):
    """Mark ``generator_definition`` as a public generator function, so that
    the generators it returns repr as the call that built them."""

    @proxies(generator_definition)
    def accept(*args, **kwargs):
        result = generator_definition(*args, **kwargs)
        return result.force_repr(repr_call(generator_definition, args, kwargs))

    accept.is_entrofuzz_generator_function = True
    return accept


def _resolve_sizes(min_size, max_size):
    if min_size is None:
        min_size = 0
    check_valid_size(min_size, "min_size")
    if max_size is None:
        max_size = min_size + DEFAULT_MAX_SIZE
    check_valid_sizes(min_size, max_size)
    return min_size, max_size


def _bounded_if_needed(generator, min_value, max_value):
    if min_value is None and max_value is None:
        return generator
    return generator.with_bounds(min_value, max_value)


@defines_generator
def integers(ty, min_value=None, max_value=None):
    """Returns a generator of integers of the fixed width type ``ty``, one of
    ``u8``, ``i8`` up to ``u128``, ``i128``, ``usize`` and ``isize``.

    ``min_value`` and ``max_value`` may be plain integers, meaning
    inclusive bounds, or ``Included``, ``Excluded`` and ``Unbounded``. The
    bounded folding never produces the upper end of a non-empty range, so
    ``integers(u8, 0, 10)`` produces values in ``[0, 9]``.
    """
    check_type(IntegerType, ty, "ty")
    return _bounded_if_needed(TypeGenerator(ty), min_value, max_value)


@defines_generator
def non_zero(ty, min_value=None, max_value=None):
    """Returns a generator of :class:`NonZero` integers of type ``ty``.

    Without bounds values are drawn from ``[1, ty.max_value]``. Bounds fold
    the same way as for ``integers``, so the reachable values are
    ``[lower, upper)`` unless ``lower == upper``. A range whose reachable
    values hold no non-zero value raises UnsatisfiableBound when the first
    value is generated. In particular ``non_zero(u8, max_value=1)`` reaches
    only 0 and is unsatisfiable, whereas ``non_zero(u8, max_value=2)``
    always produces 1.
    """
    if isinstance(ty, IntegerType):
        ty = NonZeroType(ty)
    check_type(NonZeroType, ty, "ty")
    return _bounded_if_needed(TypeGenerator(ty), min_value, max_value)


@defines_generator
def floats(ty=f64):
    """Returns a generator of floats reinterpreted from the raw bytes of an
    IEEE-754 ``f32`` or ``f64``, so every value including NaN and the
    infinities can appear."""
    check_type(FloatType, ty, "ty")
    return TypeGenerator(ty)


def just(value):
    """Return a generator which only generates ``value``."""
    return ValueGenerator(value)


@defines_generator
def booleans():
    return TypeGenerator(u8).map(lambda b: bool(b & 1))


@defines_generator
def tuples(*args):
    """Return a generator which generates a tuple of the same length as args
    by generating the value at index i from args[i]."""
    for i, arg in enumerate(args):
        check_generator(arg, f"args[{i}]")
    return TupleGenerator(args)


@defines_generator
def lists(elements, min_size=0, max_size=None):
    """Returns a generator of lists whose elements come from ``elements``
    and whose length lies in ``[min_size, max_size]``.

    ``max_size`` defaults to ``min_size + 64``.
    """
    check_generator(elements, "elements")
    min_size, max_size = _resolve_sizes(min_size, max_size)
    return ListGenerator(elements, min_size, max_size)


@defines_generator
def binary(min_size=0, max_size=None):
    """Generates bytes with length in ``[min_size, max_size]``."""
    min_size, max_size = _resolve_sizes(min_size, max_size)
    return BinaryGenerator(min_size, max_size)


@defines_generator
def sampled_from(elements):
    """Returns a generator which produces any value present in ``elements``.

    Shrinking moves towards the start of the sequence.
    """
    values = tuple(elements)
    if not values:
        raise InvalidArgument("Cannot sample from an empty collection")
    return SampledFromGenerator(values)


@defines_generator
def builds(target, *args, **kwargs):
    """Generates values by calling ``target`` with positional arguments from
    ``args`` and keyword arguments from ``kwargs``, each generated from the
    corresponding generator."""
    if not callable(target):
        raise InvalidArgument(f"target={target!r} must be callable")
    for i, arg in enumerate(args):
        check_generator(arg, f"args[{i}]")
    for k, v in kwargs.items():
        check_generator(v, k)
    names = tuple(kwargs)
    n = len(args)

    def build(values):
        return target(*values[:n], **dict(zip(names, values[n:])))

    return TupleGenerator(args + tuple(kwargs.values())).map(build)


__all__ = [
    "Generator",
    "binary",
    "booleans",
    "builds",
    "floats",
    "integers",
    "just",
    "lists",
    "non_zero",
    "sampled_from",
    "tuples",
]
