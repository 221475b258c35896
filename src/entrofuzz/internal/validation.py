# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

from entrofuzz.errors import InvalidArgument


def check_type(typ, arg, name=""):
    if name:
        name += "="
    if not isinstance(arg, typ):
        if isinstance(typ, tuple):
            typ_string = "one of %s" % (", ".join(t.__name__ for t in typ))
        else:
            typ_string = typ.__name__
        raise InvalidArgument(
            "Expected %s but got %s%r (type=%s)"
            % (typ_string, name, arg, type(arg).__name__)
        )


def check_generator(arg, name=""):
    from entrofuzz.generators._internal.generators import Generator

    check_type(Generator, arg, name)


def check_valid_integer(value, name):
    """Checks that value is either unspecified, or a valid integer.

    Otherwise raises InvalidArgument.
    """
    if value is None:
        return
    if isinstance(value, bool):
        raise InvalidArgument(f"Expected an integer but got {name}={value!r}")
    check_type(int, value, name)


def check_valid_size(value, name):
    """Checks that value is either unspecified, or a valid non-negative size
    expressed as an integer.

    Otherwise raises InvalidArgument.
    """
    if value is None:
        return
    check_valid_integer(value, name)
    if value < 0:
        raise InvalidArgument(f"Invalid size {name}={value!r} < 0")


def check_valid_sizes(min_size, max_size):
    check_valid_size(min_size, "min_size")
    check_valid_size(max_size, "max_size")
    if max_size is not None and min_size > max_size:
        raise InvalidArgument(
            f"Cannot have max_size={max_size!r} < min_size={min_size!r}"
        )
