# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

import pytest

from entrofuzz import settings
from entrofuzz.engines import (
    BufferEngine,
    Engine,
    PropertyTest,
    RandomEngine,
    ReplayEngine,
)
from entrofuzz.errors import InvalidArgument
from entrofuzz.generators import integers, u8, u32
from entrofuzz.internal.escalation import TargetLocation
from entrofuzz.internal.runner.driver import DriverMode

from tests.common import fast_settings


def assert_even(x):
    assert x % 2 == 0


def recording(values):
    return PropertyTest(integers(u32), values.append)


def test_engine_is_abstract():
    with pytest.raises(TypeError):
        Engine()


def test_random_engine_runs_max_examples():
    values = []
    result = RandomEngine(settings(fast_settings, max_examples=10), seed=0).run(
        recording(values)
    )
    assert result.passed
    assert result.call_count == 10
    assert len(values) == 10


def test_random_engine_is_deterministic_for_a_seed():
    first, second = [], []
    RandomEngine(fast_settings, seed=42).run(recording(first))
    RandomEngine(fast_settings, seed=42).run(recording(second))
    assert first == second


def test_different_seeds_explore_differently():
    first, second = [], []
    RandomEngine(fast_settings, seed=1).run(recording(first))
    RandomEngine(fast_settings, seed=2).run(recording(second))
    assert first != second


def test_derandomize_fixes_the_seed():
    first, second = [], []
    s = settings(fast_settings, derandomize=True)
    RandomEngine(s).run(PropertyTest(integers(u32), first.append))
    RandomEngine(s).run(PropertyTest(integers(u32), second.append))
    assert first == second


def test_failures_record_the_seed():
    result = RandomEngine(fast_settings, seed=42).run(
        PropertyTest(integers(u32), assert_even)
    )
    assert result.failure.seed == 42
    assert result.failure.buffer == bytes([1, 0, 0, 0])


def test_failures_record_the_location():
    location = TargetLocation.from_function(assert_even)
    result = RandomEngine(fast_settings, location=location).run(
        PropertyTest(integers(u32), assert_even)
    )
    assert result.failure.location == location


def test_property_tests_note_the_value():
    result = RandomEngine(fast_settings).run(PropertyTest(integers(u32), assert_even))
    assert result.failure.output == "1"


def test_property_tests_require_a_generator():
    with pytest.raises(InvalidArgument):
        PropertyTest(3, assert_even)


def test_replay_engine_shrinks_a_captured_case():
    result = ReplayEngine(b"\x03\0\0\0", fast_settings).run(
        PropertyTest(integers(u32), assert_even)
    )
    assert result.failure.buffer == bytes([1, 0, 0, 0])


def test_replay_engine_runs_once_on_a_passing_case():
    values = []
    result = ReplayEngine(b"\x02\0\0\0", fast_settings).run(recording(values))
    assert result.passed
    assert result.call_count == 1
    assert values == [2]


def test_buffer_engine_does_not_shrink():
    result = BufferEngine(b"\x03\0\0\0", fast_settings).run(
        PropertyTest(integers(u32), assert_even)
    )
    assert result.failure.buffer == b"\x03\0\0\0"


def test_buffer_engine_never_adds_randomness():
    values = []
    engine = BufferEngine(b"\x01", fast_settings)
    assert engine.driver_mode is DriverMode.forced
    engine.run(recording(values))
    assert values == [1]


def test_direct_mode_replay_tops_up_a_short_buffer():
    values = []
    engine = ReplayEngine(b"\x01", fast_settings)
    engine.set_driver_mode(DriverMode.direct)
    engine.run(recording(values))
    assert values[0] & 0xFF == 1


def test_random_engine_can_be_forced():
    values = []
    engine = RandomEngine(settings(fast_settings, max_examples=5), seed=0)
    engine.set_driver_mode(DriverMode.forced)
    assert engine.run(recording(values)).passed
    assert len(values) == 5


def test_set_driver_mode_validates():
    with pytest.raises(InvalidArgument):
        RandomEngine().set_driver_mode("forced")


def test_failure_blob_encodes_the_buffer():
    from entrofuzz.core import decode_failure

    result = ReplayEngine(b"\x03\0\0\0", fast_settings).run(
        PropertyTest(integers(u8), assert_even)
    )
    assert decode_failure(result.failure.blob) == result.failure.buffer
