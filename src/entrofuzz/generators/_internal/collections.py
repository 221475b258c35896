# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

from entrofuzz.generators._internal.bounds import Included
from entrofuzz.generators._internal.generators import Generator
from entrofuzz.generators._internal.numbers import usize


def draw_size(driver, min_size, max_size):
    """Draw a collection length in ``[min_size, max_size]``.

    Lengths go through the same bounded folding as every other integer. As
    that folding never reaches its upper bound unless the range is empty,
    the upper bound passed in is ``max_size + 1``.
    """
    if min_size == max_size:
        return min_size
    return usize.bounded(
        usize.decode(driver), Included(min_size), Included(max_size + 1)
    )


class TupleGenerator(Generator):
    """A generator responsible for fixed length tuples based on
    heterogeneous generators for each of their elements."""

    def __init__(self, generators):
        self.element_generators = tuple(generators)

    def generate(self, driver):
        return tuple(g.generate(driver) for g in self.element_generators)

    def default_repr(self):
        tuple_string = ", ".join(map(repr, self.element_generators))
        if len(self.element_generators) == 1:
            tuple_string += ","
        return f"TupleGenerator(({tuple_string}))"


class ListGenerator(Generator):
    """A generator for lists which takes a generator for its elements and
    the allowed lengths, and generates lists with the correct size and
    contents."""

    def __init__(self, elements, min_size, max_size):
        self.element_generator = elements
        self.min_size = min_size
        self.max_size = max_size

    def generate(self, driver):
        n = draw_size(driver, self.min_size, self.max_size)
        return [self.element_generator.generate(driver) for _ in range(n)]

    def default_repr(self):
        return "{}({!r}, min_size={:_}, max_size={:_})".format(
            self.__class__.__name__,
            self.element_generator,
            self.min_size,
            self.max_size,
        )


class BinaryGenerator(Generator):
    def __init__(self, min_size, max_size):
        self.min_size = min_size
        self.max_size = max_size

    def generate(self, driver):
        n = draw_size(driver, self.min_size, self.max_size)
        return bytes(driver.draw_bytes(n))

    def default_repr(self):
        return f"BinaryGenerator(min_size={self.min_size}, max_size={self.max_size})"


class SampledFromGenerator(Generator):
    """A generator which returns one of a fixed finite sequence of values."""

    def __init__(self, elements):
        self.elements = tuple(elements)
        assert self.elements

    def generate(self, driver):
        if len(self.elements) == 1:
            return self.elements[0]
        # The top of the folded range is never produced, which is exactly the
        # half-open index range we want.
        i = usize.bounded(
            usize.decode(driver), Included(0), Included(len(self.elements))
        )
        return self.elements[i]

    def default_repr(self):
        return "sampled_from([%s])" % ", ".join(map(repr, self.elements))
