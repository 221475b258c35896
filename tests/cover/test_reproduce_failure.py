# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

import base64
import zlib

import pytest
from hypothesis import example, given as hgiven, strategies as st

from entrofuzz import __version__, given, reproduce_failure, settings
from entrofuzz.core import decode_failure, encode_failure
from entrofuzz.errors import DidNotReproduce, InvalidArgument
from entrofuzz.generators import binary, integers, u32

from tests.common.utils import capture_out


@example(bytes(100))  # shorter compressed than not
@hgiven(st.binary())
def test_encoding_loop(b):
    assert decode_failure(encode_failure(b)) == b


def test_long_runs_of_zeros_are_compressed():
    assert base64.b64decode(encode_failure(bytes(100)))[:1] == b"\1"
    assert base64.b64decode(encode_failure(b"\1"))[:1] == b"\0"


@example(base64.b64encode(b"\2\3\4"))
@example(b"\t")
@example(base64.b64encode(b"\1\0"))  # zlib error
@hgiven(st.binary())
def test_decoding_may_fail(t):
    try:
        decode_failure(t)
    except InvalidArgument:
        pass
    except Exception as e:
        raise AssertionError("Expected an InvalidArgument exception") from e


def test_invalid_base_64_gives_invalid_argument():
    with pytest.raises(InvalidArgument) as exc_info:
        decode_failure(b"/")
    assert "Invalid base64 encoded" in exc_info.value.args[0]


def test_bad_compression_gives_invalid_argument():
    with pytest.raises(InvalidArgument):
        decode_failure(base64.b64encode(b"\1" + zlib.compress(b"\xff")[:-3]))


def test_reproduces_the_failure():
    b = b"hello world"
    n = len(b)

    @reproduce_failure(__version__, encode_failure(b))
    @given(binary(min_size=n, max_size=n))
    def test_outer(x):
        assert x != b

    @given(binary(min_size=n, max_size=n))
    @reproduce_failure(__version__, encode_failure(b))
    def test_inner(x):
        assert x != b

    with capture_out():
        with pytest.raises(AssertionError):
            test_outer()
        with pytest.raises(AssertionError):
            test_inner()


def test_reproduce_failure_shrinks_the_case():
    @settings(deadline=None)
    @reproduce_failure(__version__, encode_failure(b"\x03\0\0\0"))
    @given(integers(u32))
    def test(x):
        assert x % 2 == 0

    with capture_out() as out:
        with pytest.raises(AssertionError):
            test()
    assert "Falsifying example: test(1)" in out.getvalue()


def test_errors_if_the_case_passes():
    @reproduce_failure(__version__, encode_failure(b"\x02\0\0\0"))
    @given(integers(u32))
    def test(x):
        assert x % 2 == 0

    with pytest.raises(DidNotReproduce):
        test()


def test_errors_with_a_different_version():
    @reproduce_failure("0.0.0", encode_failure(b"\x03\0\0\0"))
    @given(integers(u32))
    def test(x):
        assert x % 2 == 0

    with pytest.raises(InvalidArgument):
        test()


def test_prints_the_reproduction_decorator():
    @settings(print_blob=True, deadline=None)
    @given(integers(u32))
    def test(x):
        assert x % 2 == 0

    with capture_out() as out:
        with pytest.raises(AssertionError):
            test()
    blob = encode_failure(bytes([1, 0, 0, 0]))
    assert f"@reproduce_failure({__version__!r}, {blob!r})" in out.getvalue()
