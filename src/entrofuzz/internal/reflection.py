# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

import hashlib
import inspect
import types
from functools import partial


def function_digest(function):
    """Returns a string that is stable across multiple invocations across
    multiple processes and is prone to changing significantly in response to
    minor changes to the function.

    No guarantee of uniqueness though it usually will be.
    """
    hasher = hashlib.sha384()
    try:
        src = inspect.getsource(function)
    except (OSError, TypeError):
        # If we can't actually get the source code, try for the name as a
        # fallback.
        try:
            hasher.update(function.__name__.encode())
        except AttributeError:
            pass
    else:
        hasher.update(src.encode())
    try:
        hasher.update(repr(inspect.signature(function)).encode())
    except (TypeError, ValueError):
        pass
    return hasher.digest()


def get_pretty_function_description(f):
    if isinstance(f, partial):
        args = [get_pretty_function_description(f.func)]
        args.extend(repr(a) for a in f.args)
        args.extend(f"{k}={v!r}" for k, v in f.keywords.items())
        return "functools.partial(%s)" % (", ".join(args),)
    if not hasattr(f, "__name__"):
        return repr(f)
    name = f.__name__
    if name == "<lambda>":
        return lambda_description(f)
    elif isinstance(f, (types.MethodType, types.BuiltinMethodType)):
        self = f.__self__
        if not (self is None or inspect.isclass(self) or inspect.ismodule(self)):
            return f"{self!r}.{name}"
    return name


def lambda_description(f):
    try:
        source = inspect.getsource(f).strip()
    except (OSError, TypeError):
        return "lambda: <unknown>"
    # Lambdas passed as arguments come back with the surrounding call, so
    # cut from the keyword and drop unbalanced closing brackets.
    start = source.find("lambda")
    if start < 0:
        return "lambda: <unknown>"
    source = source[start:]
    depth = 0
    for i, c in enumerate(source):
        if c in "([{":
            depth += 1
        elif c in ")]}":
            depth -= 1
            if depth < 0:
                return source[:i].rstrip().rstrip(",")
        elif c == "," and depth == 0:
            return source[:i].rstrip()
    return source


def nicerepr(v):
    if inspect.isfunction(v):
        return get_pretty_function_description(v)
    elif isinstance(v, type):
        return v.__name__
    else:
        return repr(v)


def repr_call(f, args, kwargs):
    bits = [nicerepr(x) for x in args]
    bits.extend(f"{k}={nicerepr(v)}" for k, v in kwargs.items())
    rep = getattr(f, "__name__", nicerepr(f))
    return "%s(%s)" % (rep, ", ".join(bits))


def proxies(target):
    """Like functools.wraps, but without setting ``__wrapped__``, so that
    pytest sees the proxy's signature and does not try to inject fixtures
    for our generated arguments."""

    def accept(proxy):
        proxy.__name__ = target.__name__
        proxy.__qualname__ = getattr(target, "__qualname__", target.__name__)
        proxy.__module__ = target.__module__
        proxy.__doc__ = target.__doc__
        return proxy

    return accept
