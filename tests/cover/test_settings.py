# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

import datetime

import pytest

from entrofuzz import DriverMode, Phase, Verbosity, given, settings
from entrofuzz._settings import default_variable, local_settings
from entrofuzz.errors import InvalidArgument
from entrofuzz.generators import integers, u8

original_default = settings.get_profile("default").max_examples


def test_documented_defaults():
    s = settings.get_profile("default")
    assert s.max_examples == 100
    assert s.derandomize is False
    assert s.verbosity == Verbosity.normal
    assert s.phases == (Phase.generate, Phase.shrink)
    assert s.deadline == datetime.timedelta(milliseconds=200)
    assert s.buffer_size == 8 * 1024
    assert s.max_shrinks == 500
    assert s.driver_mode is None
    assert s.print_blob is False


def test_cannot_set_non_settings():
    s = settings()
    with pytest.raises(AttributeError):
        s.max_exmaples = 3


def test_settings_uses_defaults():
    s = settings()
    assert s.max_examples == settings.default.max_examples


def test_raises_attribute_error():
    with pytest.raises(AttributeError):
        settings().kittens


def test_can_repeatedly_push_the_same_thing():
    s = settings(max_examples=12)
    t = settings(max_examples=17)
    assert settings().max_examples == original_default
    with local_settings(s):
        assert settings().max_examples == 12
        with local_settings(t):
            assert settings().max_examples == 17
            with local_settings(s):
                assert settings().max_examples == 12
            assert settings().max_examples == 17
        assert settings().max_examples == 12
    assert settings().max_examples == original_default


def test_the_same_settings_can_be_entered_while_active():
    s = settings(max_examples=12)
    with s:
        with s:
            assert settings.default is s
        assert settings.default is s
    assert settings().max_examples == original_default


def test_can_set_verbosity():
    for v in Verbosity:
        assert settings(verbosity=v).verbosity == v


def test_can_not_set_verbosity_to_non_verbosity():
    with pytest.raises(InvalidArgument):
        settings(verbosity="kittens")


def test_will_reload_profile_when_default_is_absent():
    original = settings.default
    default_variable.value = None
    assert settings.default is original


def test_load_profile():
    settings.load_profile("default")
    assert settings.default.max_examples == original_default

    settings.register_profile("test", settings(max_examples=10), buffer_size=64)
    settings.load_profile("test")

    assert settings.default.max_examples == 10
    assert settings.default.buffer_size == 64

    settings.load_profile("default")

    assert settings.default.max_examples == original_default


def test_profile_names_must_be_strings():
    with pytest.raises(InvalidArgument):
        settings.register_profile(5)
    with pytest.raises(InvalidArgument):
        settings.get_profile(5)
    with pytest.raises(InvalidArgument):
        settings.load_profile(5)


def test_load_non_existent_profile():
    with pytest.raises(InvalidArgument):
        settings.get_profile("nonsense")


def test_cannot_set_settings():
    x = settings()
    with pytest.raises(AttributeError):
        x.max_examples = "foo"
    assert x.max_examples != "foo"


def test_cannot_assign_default():
    with pytest.raises(AttributeError):
        settings.default = settings(max_examples=3)
    assert settings().max_examples != 3


def test_setattr_on_settings_singleton_is_error():
    with pytest.raises(AttributeError):
        settings.max_examples = 10


def test_settings_applied_twice_is_error():
    with pytest.raises(InvalidArgument):

        @given(integers(u8))
        @settings()
        @settings()
        def test_nothing(x):
            pass


@settings()
@given(integers(u8))
def test_outer_ok(x):
    pass


@given(integers(u8))
@settings()
def test_inner_ok(x):
    pass


def test_settings_as_decorator_must_be_on_callable():
    with pytest.raises(InvalidArgument):
        settings()(1)


def test_deadline_given_none():
    assert settings(deadline=None).deadline is None


def test_deadline_given_valid_int():
    x = settings(deadline=1000).deadline
    assert isinstance(x, datetime.timedelta)
    assert x.seconds == 1
    assert x.microseconds == 0


def test_deadline_given_valid_timedelta():
    x = settings(deadline=datetime.timedelta(seconds=2, microseconds=50)).deadline
    assert x.seconds == 2
    assert x.microseconds == 50


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_examples": -1},
        {"max_examples": 2.5},
        {"max_examples": True},
        {"buffer_size": 0},
        {"max_shrinks": 0},
        {"deadline": -1},
        {"deadline": 0},
        {"deadline": True},
        {"deadline": datetime.timedelta(0)},
        {"deadline": 86400000000000000.2},
        {"phases": ["generate"]},
        {"driver_mode": "forced"},
        {"print_blob": "always"},
        {"derandomize": "yes"},
    ],
)
def test_invalid_settings_are_errors(kwargs):
    with pytest.raises(InvalidArgument):
        settings(**kwargs)


def test_phases_are_normalised_to_a_sorted_tuple():
    assert settings(phases=[Phase.shrink, Phase.generate]).phases == (
        Phase.generate,
        Phase.shrink,
    )


def test_driver_mode_accepts_modes():
    assert settings(driver_mode=DriverMode.forced).driver_mode is DriverMode.forced


def test_invalid_parent():
    class NotSettings:
        def __repr__(self):
            return "(not settings repr)"

    with pytest.raises(InvalidArgument) as excinfo:
        settings(NotSettings())

    assert "parent=(not settings repr)" in str(excinfo.value)


def test_settings_repr_lists_every_setting():
    assert "max_shrinks=500" in repr(settings.get_profile("default"))


def test_deadline_documents_that_hung_cases_are_not_interrupted():
    assert "not interrupted" in settings.deadline.__doc__
