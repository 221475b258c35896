# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

from random import Random

from entrofuzz.errors import InvalidArgument
from entrofuzz.internal.reflection import get_pretty_function_description
from entrofuzz.internal.runner.driver import Driver


class Generator:
    """A Generator is an object that knows how to turn the bytes a Driver
    hands out into values of some type.

    Generators never look at bytes directly beyond what the Driver gives
    them, so a run replayed from the same bytes produces the same values.
    Subclasses implement :meth:`generate`.
    """

    supports_bounds = False

    def generate(self, driver):
        raise NotImplementedError(f"{type(self).__name__}.generate")

    def example(self, random=None):
        """Provide an example of the sort of value that this generator
        produces.

        This method is here for interactive exploration of the API, not for
        any sort of real testing.
        """
        if random is None:
            random = Random()
        driver = Driver.for_random(random)
        return self.generate(driver)

    def map(self, pack):
        """Returns a new generator that produces values by generating a value
        from this generator and then calling pack() on the result."""
        return MappedGenerator(self, pack)

    def with_bounds(self, start=None, end=None):
        """Constrain the generated values to the range between ``start`` and
        ``end``.

        Each bound may be ``Included(v)``, ``Excluded(v)`` or
        ``Unbounded``. A plain value means ``Included`` and ``None`` means
        ``Unbounded``.
        """
        raise InvalidArgument(f"{self!r} does not support bounded generation")

    __repr_override = None

    def force_repr(self, representation):
        self.__repr_override = representation
        return self

    def __repr__(self):
        if self.__repr_override is not None:
            return self.__repr_override
        return self.default_repr()

    def default_repr(self):
        return f"{type(self).__name__}()"


class TypeGenerator(Generator):
    """Generates values of a type descriptor with its default decoding."""

    def __init__(self, ty):
        self.ty = ty

    @property
    def supports_bounds(self):
        return hasattr(self.ty, "bounded")

    def generate(self, driver):
        return self.ty.decode(driver)

    def with_bounds(self, start=None, end=None):
        if not self.supports_bounds:
            raise InvalidArgument(
                f"Bounded generation is not supported for {self.ty!r}"
            )
        return BoundedGenerator(self, self.ty, start, end)

    def default_repr(self):
        return f"TypeGenerator({self.ty!r})"


class ValueGenerator(Generator):
    """Always produces the same value and consumes no bytes."""

    def __init__(self, value):
        self.value = value

    def generate(self, driver):
        return self.value

    def default_repr(self):
        return f"just({self.value!r})"


class MappedGenerator(Generator):
    def __init__(self, base, pack):
        self.base = base
        self.pack = pack

    def generate(self, driver):
        return self.pack(self.base.generate(driver))

    def default_repr(self):
        return "%r.map(%s)" % (self.base, get_pretty_function_description(self.pack))


class BoundedGenerator(Generator):
    """Decorates a base generator with a range constraint.

    The base value is folded into the range by ``ty.bounded``, so every
    byte sequence still maps to some in-range value.
    """

    supports_bounds = True

    def __init__(self, base, ty, start=None, end=None):
        self.base = base
        self.ty = ty
        self.start = ty.check_bound(start, "start")
        self.end = ty.check_bound(end, "end")

    def generate(self, driver):
        return self.ty.bounded(self.base.generate(driver), self.start, self.end)

    def with_bounds(self, start=None, end=None):
        return BoundedGenerator(self.base, self.ty, start, end)

    def default_repr(self):
        return f"{self.base!r}.with_bounds({self.start!r}, {self.end!r})"
