# This file is part of the StandIn project.
# Copyright (C) 2025 The StandIn Authors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Call specifications of mocked members.

Calls are checked against the declared signature of the real member and
normalized to a positional argument vector, so that ``f(1, b=2)`` and
``f(1, 2)`` select the same stub.
"""

import inspect
import typing

from standin.config import base_config

__all__ = ['callable_signature', 'declared_return_type', 'parameter_types',
    'bind_arguments', 'normalize_call']

_P = inspect.Parameter


def callable_signature(func):
    """
    Return the `inspect.Signature` of `func` or ``None`` if it has none
    (e.g. some builtins).
    """
    try:
        return inspect.signature(func)
    except (TypeError, ValueError):
        return None


def _type_hints(func):
    try:
        return typing.get_type_hints(func)
    except (NameError, TypeError, AttributeError, SyntaxError):
        # unresolvable forward references, fall back to the raw annotations
        return dict(getattr(func, '__annotations__', None) or {})


def declared_return_type(func):
    """
    Return the declared result type of `func`, ``None`` if there is no
    usable annotation.
    """
    if func is None:
        return None
    result = _type_hints(func).get('return')
    if isinstance(result, str):
        return None
    return result


def parameter_types(func, skip_first=False):
    """
    Return the declared parameter types of `func` as a tuple.
    Unannotated parameters are ``object``, ``*args`` and ``**kwargs``
    are not part of the result.
    """
    signature = callable_signature(func)
    if signature is None:
        return ()
    hints = _type_hints(func)
    params = list(signature.parameters.values())
    if skip_first:
        params = params[1:]
    types = []
    for param in params:
        if param.kind in (_P.VAR_POSITIONAL, _P.VAR_KEYWORD):
            continue
        types.append(hints.get(param.name, object))
    return tuple(types)


def bind_arguments(signature, args, kwargs, skip_first=True, apply_defaults=True,
                   name=None):
    """
    Bind a call to `signature` and return the positional argument vector.

    Keyword arguments are moved to their declared position. Extra
    ``**kwargs`` are appended as one dict. Raises `TypeError` if the
    call does not fit the signature, just like the real call would.

    :param skip_first: the signature includes ``self``/``cls``
    :param apply_defaults: include the declared default values

    >>> sig = inspect.signature(lambda a, b=2, *, c=3: None)
    >>> bind_arguments(sig, (1, ), {'c': 4}, skip_first=False)
    (1, 2, 4)
    """
    args = tuple(args)
    if signature is None:
        if kwargs:
            return args + (dict(kwargs), )
        return args

    try:
        if skip_first:
            bound = signature.bind(None, *args, **kwargs)
        else:
            bound = signature.bind(*args, **kwargs)
    except TypeError as ex:
        if name:
            raise TypeError('%s%s: %s' % (name, signature, ex))
        raise

    if apply_defaults:
        bound.apply_defaults()

    params = list(signature.parameters.values())
    if skip_first:
        params = params[1:]

    vector = []
    for param in params:
        if param.name not in bound.arguments:
            continue
        value = bound.arguments[param.name]
        if param.kind == _P.VAR_POSITIONAL:
            vector.extend(value)
        elif param.kind == _P.VAR_KEYWORD:
            if value:
                vector.append(dict(value))
        else:
            vector.append(value)
    return tuple(vector)


def normalize_call(signature, args, kwargs, skip_first=True, name=None):
    """
    `bind_arguments` with the ``mock.apply_defaults`` and
    ``mock.strict_signatures`` options. Without strict signatures a call
    that does not fit is recorded as it was made.
    """
    conf = base_config().mock
    try:
        return bind_arguments(signature, args, kwargs, skip_first=skip_first,
            apply_defaults=conf.apply_defaults, name=name)
    except TypeError:
        if conf.strict_signatures:
            raise
        return bind_arguments(None, args, kwargs)
