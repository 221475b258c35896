# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Range constraints on generated primitives.

A range is a pair of bounds, each ``Included(v)``, ``Excluded(v)`` or
``Unbounded``. Folding a raw value into a range works the same way for
every integer type, so it is written once here against a small domain
interface (``min_value``, ``max_value``, ``saturating_add`` and
``saturating_sub``) that each type descriptor provides.
"""

import attr

from entrofuzz.errors import InvalidArgument


@attr.s(slots=True, frozen=True)
class Included:
    value = attr.ib()


@attr.s(slots=True, frozen=True)
class Excluded:
    value = attr.ib()


class _Unbounded:
    __slots__ = ()

    def __repr__(self):
        return "Unbounded"

    def __reduce__(self):
        return "Unbounded"


Unbounded = _Unbounded()

Bound = (Included, Excluded, _Unbounded)


def as_bound(value):
    """Plain values mean ``Included``, and ``None`` means ``Unbounded``."""
    if value is None:
        return Unbounded
    if isinstance(value, Bound):
        return value
    return Included(value)


def bound_value(bound):
    if isinstance(bound, _Unbounded):
        return None
    return bound.value


def resolve_bound(domain, bound, *, lower):
    if isinstance(bound, Included):
        return bound.value
    elif isinstance(bound, Excluded):
        if lower:
            return domain.saturating_add(bound.value)
        return domain.saturating_sub(bound.value)
    else:
        assert bound is Unbounded, bound
        return domain.min_value if lower else domain.max_value


def resolve_bounds(domain, start, end):
    """Turn a pair of bounds into a concrete ``(lower, upper)`` interval with
    ``lower <= upper``.

    Excluded bounds saturate at the edge of the domain rather than wrapping.
    If the resolved start lies above the resolved end the two are swapped,
    not rejected.
    """
    lower = resolve_bound(domain, as_bound(start), lower=True)
    upper = resolve_bound(domain, as_bound(end), lower=False)
    if lower > upper:
        lower, upper = upper, lower
    return lower, upper


def fold(value, lower, upper):
    """Fold an arbitrary integer into ``[lower, upper]``.

    The modulus is ``upper - lower`` rather than the number of values in the
    interval, so ``upper`` itself is only ever produced when
    ``lower == upper``. Saved failures depend on this exact mapping, so it
    must not change. Callers that need ``upper`` pass ``upper + 1`` instead.
    """
    assert lower <= upper
    width = upper - lower
    if width == 0:
        return lower
    # Python's modulo takes the sign of the divisor, so negative values
    # still land inside the interval.
    return value % width + lower


def check_bound(domain, bound, name):
    bound = as_bound(bound)
    value = bound_value(bound)
    if value is None:
        return bound
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(
            f"Expected an integer bound but got {name}={bound!r} for {domain!r}"
        )
    if not domain.min_value <= value <= domain.max_value:
        raise InvalidArgument(
            f"{name}={bound!r} is outside the range of {domain!r}, which is "
            f"[{domain.min_value}, {domain.max_value}]"
        )
    return bound
