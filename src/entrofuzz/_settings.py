# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""A module controlling settings for entrofuzz to use when running tests.

Either an explicit settings object can be used or the default object on
this module can be modified.
"""

import contextlib
import datetime
import inspect
import threading
from enum import IntEnum, unique
from typing import Any, Dict, Optional

import attr

from entrofuzz.errors import InvalidArgument, InvalidState
from entrofuzz.internal.reflection import get_pretty_function_description
from entrofuzz.internal.runner.driver import BUFFER_SIZE, DriverMode
from entrofuzz.internal.validation import check_type
from entrofuzz.utils.conventions import not_set
from entrofuzz.utils.dynamicvariables import DynamicVariable

__all__ = ["settings"]

all_settings: Dict[str, "Setting"] = {}


class settingsProperty:
    def __init__(self, name, show_default):
        self.name = name
        self.show_default = show_default

    def __get__(self, obj, type=None):
        if obj is None:
            return self
        else:
            try:
                return obj.__dict__[self.name]
            except KeyError:
                raise AttributeError(self.name) from None

    def __set__(self, obj, value):
        obj.__dict__[self.name] = value

    def __delete__(self, obj):
        raise AttributeError(f"Cannot delete attribute {self.name}")

    @property
    def __doc__(self):
        description = all_settings[self.name].description
        default = (
            repr(getattr(settings.default, self.name))
            if self.show_default
            else "(dynamically calculated)"
        )
        return f"{description}\n\ndefault value: ``{default}``"


default_variable = DynamicVariable(None)


class settingsMeta(type):
    @property
    def default(self):
        v = default_variable.value
        if v is not None:
            return v
        if hasattr(settings, "_current_profile"):
            settings.load_profile(settings._current_profile)
            assert default_variable.value is not None
        return default_variable.value

    def _assign_default_internal(self, value):
        default_variable.value = value

    def __setattr__(self, name, value):
        if name == "default":
            raise AttributeError(
                "Cannot assign to the property settings.default - "
                "consider using settings.load_profile instead."
            )
        elif not (isinstance(value, settingsProperty) or name.startswith("_")):
            raise AttributeError(
                f"Cannot assign entrofuzz.settings.{name}={value!r} - the "
                "settings class is immutable.  You can change the global "
                "default settings with settings.load_profile, or use "
                "@settings(...) to decorate your test instead."
            )
        return type.__setattr__(self, name, value)


class settings(metaclass=settingsMeta):
    """A settings object controls the parameters used when entrofuzz runs
    a test: how many cases to try, which phases to run, how the driver
    consumes entropy and how much is reported.

    Default values are picked up from the settings.default object and
    changes made there will be picked up in newly created settings.
    """

    _WHITELISTED_REAL_PROPERTIES = ["_construction_complete"]
    __definitions_are_locked = False
    _profiles: Dict[str, "settings"] = {}
    __module__ = "entrofuzz"

    def __getattr__(self, name):
        if name in all_settings:
            return all_settings[name].default
        else:
            raise AttributeError(f"settings has no attribute {name}")

    def __init__(self, parent: Optional["settings"] = None, **kwargs: Any) -> None:
        if parent is not None and not isinstance(parent, settings):
            raise InvalidArgument(
                f"Invalid argument: parent={parent!r} is not a settings instance"
            )
        self._construction_complete = False
        self.__storage = threading.local()
        defaults = parent or settings.default
        if defaults is not None:
            for setting in all_settings.values():
                if kwargs.get(setting.name, not_set) is not_set:
                    kwargs[setting.name] = getattr(defaults, setting.name)
                elif setting.validator:
                    kwargs[setting.name] = setting.validator(kwargs[setting.name])
        for name, value in kwargs.items():
            if name not in all_settings:
                raise InvalidArgument(
                    f"Invalid argument: {name!r} is not a valid setting"
                )
            setattr(self, name, value)
        self._construction_complete = True

    def __call__(self, test):
        """Make the settings object (self) an attribute of the test.

        The settings are later discovered by looking them up on the test itself.
        """
        if not callable(test) or inspect.isclass(test):
            raise InvalidArgument(
                "@settings(...) can only be used as a decorator on "
                f"functions, but decorated test={test!r} is not one."
            )
        if hasattr(test, "_entrofuzz_internal_settings_applied"):
            raise InvalidArgument(
                "%s has already been decorated with a settings object."
                "\n    Previous:  %r\n    This:  %r"
                % (
                    get_pretty_function_description(test),
                    test._entrofuzz_internal_use_settings,
                    self,
                )
            )

        test._entrofuzz_internal_use_settings = self
        test._entrofuzz_internal_settings_applied = True
        return test

    def defaults_stack(self):
        try:
            return self.__storage.defaults_stack
        except AttributeError:
            self.__storage.defaults_stack = []
            return self.__storage.defaults_stack

    def __enter__(self):
        default_context_manager = local_settings(self)
        self.defaults_stack().append(default_context_manager)
        default_context_manager.__enter__()
        return self

    def __exit__(self, *args, **kwargs):
        default_context_manager = self.defaults_stack().pop()
        return default_context_manager.__exit__(*args, **kwargs)

    @classmethod
    def _define_setting(
        cls,
        name,
        description,
        default,
        options=None,
        validator=None,
        show_default=True,
    ):
        """Add a new setting.

        - name is the name of the property that will be used to access the
          setting. This must be a valid python identifier.
        - description will appear in the property's docstring
        - default is the default value.
        - options, if given, is the tuple of permitted values; otherwise a
          validator must be supplied.
        """
        if settings.__definitions_are_locked:
            raise InvalidState(
                "settings have been locked and may no longer be defined."
            )
        if options is not None:
            options = tuple(options)
            assert default in options
        else:
            assert validator is not None

        all_settings[name] = Setting(
            name=name,
            description=description.strip(),
            default=default,
            options=options,
            validator=validator,
        )
        setattr(settings, name, settingsProperty(name, show_default))

    @classmethod
    def lock_further_definitions(cls):
        settings.__definitions_are_locked = True

    def __setattr__(self, name, value):
        if name in settings._WHITELISTED_REAL_PROPERTIES or name.startswith(
            "_settings__"
        ):
            return object.__setattr__(self, name, value)
        elif name in all_settings:
            if self._construction_complete:
                raise AttributeError(
                    "settings objects are immutable and may not be assigned to"
                    " after construction."
                )
            else:
                setting = all_settings[name]
                if setting.options is not None and value not in setting.options:
                    raise InvalidArgument(
                        f"Invalid {name}, {value!r}. Valid options: "
                        f"{setting.options!r}"
                    )
                return object.__setattr__(self, name, value)
        else:
            raise AttributeError(f"No such setting {name}")

    def __repr__(self):
        bits = (f"{name}={getattr(self, name)!r}" for name in all_settings)
        return "settings(%s)" % ", ".join(sorted(bits))

    @staticmethod
    def register_profile(
        name: str, parent: Optional["settings"] = None, **kwargs: Any
    ) -> None:
        """Registers a collection of values to be used as a settings profile.

        Settings profiles can be loaded by name - for example, you might
        create a 'fast' profile which runs fewer examples, keep the 'default'
        profile, and create a 'fuzz' profile that forces the driver into
        forced mode for use under an external fuzzer.
        """
        check_type(str, name, "name")
        settings._profiles[name] = settings(parent=parent, **kwargs)

    @staticmethod
    def get_profile(name: str) -> "settings":
        """Return the profile with the given name."""
        check_type(str, name, "name")
        try:
            return settings._profiles[name]
        except KeyError:
            raise InvalidArgument(f"Profile {name!r} is not registered") from None

    @staticmethod
    def load_profile(name: str) -> None:
        """Loads in the settings defined in the profile provided.

        If the profile does not exist, InvalidArgument will be raised.
        Any setting not defined in the profile will be the library
        defined default for that setting.
        """
        check_type(str, name, "name")
        settings._current_profile = name
        settings._assign_default_internal(settings.get_profile(name))


@contextlib.contextmanager
def local_settings(s):
    with default_variable.with_value(s):
        yield s


@attr.s()
class Setting:
    name = attr.ib()
    description = attr.ib()
    default = attr.ib()
    options = attr.ib()
    validator = attr.ib()


def _positive_int_validator(name):
    def validate(x):
        check_type(int, x, name=name)
        if isinstance(x, bool) or x < 1:
            raise InvalidArgument(f"{name}={x!r} should be at least one.")
        return x

    validate.__name__ = f"_validate_{name}"
    return validate


settings._define_setting(
    "max_examples",
    default=100,
    validator=_positive_int_validator("max_examples"),
    description="""
Once this many cases have been run without finding a failure, the random
engine stops.
""",
)


settings._define_setting(
    "derandomize",
    default=False,
    options=(True, False),
    description="""
If this is True then the random engine is seeded from the identity of the
test being run, so every run tries the same inputs.
""",
)


@unique
class Phase(IntEnum):
    generate = 0
    shrink = 1

    def __repr__(self):
        return f"Phase.{self.name}"


@unique
class Verbosity(IntEnum):
    quiet = 0
    normal = 1
    verbose = 2
    debug = 3

    def __repr__(self):
        return f"Verbosity.{self.name}"


settings._define_setting(
    "verbosity",
    options=tuple(Verbosity),
    default=Verbosity.normal,
    description="Control the verbosity level of entrofuzz messages",
)


def _validate_phases(phases):
    phases = tuple(phases)
    for a in phases:
        if not isinstance(a, Phase):
            raise InvalidArgument(f"{a!r} is not a valid phase")
    return tuple(p for p in list(Phase) if p in phases)


settings._define_setting(
    "phases",
    default=tuple(Phase),
    description="""
Control which phases should be run. Without ``Phase.shrink`` failures are
reported exactly as they were first found.
""",
    validator=_validate_phases,
)


class duration(datetime.timedelta):
    """A timedelta specifically measured in milliseconds."""

    def __repr__(self):
        ms = self.total_seconds() * 1000
        return "timedelta(milliseconds=%r)" % (int(ms) if ms == int(ms) else ms,)


def _validate_deadline(x):
    if x is None:
        return x
    invalid_deadline_error = InvalidArgument(
        f"deadline={x!r} (type {type(x).__name__}) must be a timedelta object, "
        "an integer or float number of milliseconds, or None to disable the "
        "per-test-case deadline."
    )
    if isinstance(x, (int, float)):
        if isinstance(x, bool):
            raise invalid_deadline_error
        try:
            x = duration(milliseconds=x)
        except OverflowError:
            raise InvalidArgument(
                f"deadline={x!r} is invalid, because it is too large to "
                "represent as a timedelta. Use deadline=None to disable "
                "deadlines."
            ) from None
    if isinstance(x, datetime.timedelta):
        if x <= datetime.timedelta(0):
            raise InvalidArgument(
                f"deadline={x!r} is invalid, because it is impossible to meet "
                "a deadline <= 0. Use deadline=None to disable deadlines."
            )
        return duration(seconds=x.total_seconds())
    raise invalid_deadline_error


settings._define_setting(
    "deadline",
    default=duration(milliseconds=200),
    validator=_validate_deadline,
    description="""
If set, a duration (as timedelta, or integer or float number of milliseconds)
that each individual test case is not allowed to exceed. Cases which take
longer than that are failures of kind ``timeout``, and are shrunk like any
other failure.

The runtime is measured after a case returns, so a case that never returns
is not interrupted and hangs the run.

Set this to None to disable this behaviour entirely.
""",
)


settings._define_setting(
    "buffer_size",
    default=BUFFER_SIZE,
    validator=_positive_int_validator("buffer_size"),
    description="""
The maximum number of bytes a single test case may consume. Past this the
driver hands out zero bytes, exactly as if its source were exhausted.
""",
)


settings._define_setting(
    "max_shrinks",
    default=500,
    validator=_positive_int_validator("max_shrinks"),
    description="""
Once this many successful shrinks have been performed, entrofuzz stops
minimizing and reports the smallest failure found so far.
""",
)


def _validate_driver_mode(mode):
    if mode is None or isinstance(mode, DriverMode):
        return mode
    raise InvalidArgument(
        f"driver_mode={mode!r} must be None or a member of DriverMode"
    )


settings._define_setting(
    "driver_mode",
    default=None,
    validator=_validate_driver_mode,
    description="""
Force every driver an engine builds into this ``DriverMode``. ``None`` leaves
each engine on its own default: direct for random exploration, forced for
replaying or fuzzing a fixed buffer.
""",
)


settings._define_setting(
    "print_blob",
    default=False,
    options=(True, False),
    description="""
If set to ``True``, entrofuzz will print code for failing examples that can
be used with :func:`@reproduce_failure <entrofuzz.reproduce_failure>` to
reproduce the failing example.
""",
)

settings.lock_further_definitions()


settings.register_profile("default", settings())
settings.load_profile("default")
assert settings.default is not None
