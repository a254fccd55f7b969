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
Redirection entry points.

Hooked code (see `standin.hook`) calls these functions before it runs its
original body. Each returns either the value to use instead, or `PROCEED`
when the original body has to run. A configured exception is raised from
here, so it propagates out of the hooked call unchanged.
"""

import contextlib
import contextvars
import inspect

from standin.behavior import PROCEED
from standin.overrides import GlobalOverrideTable
from standin.selector import Signature
from standin.spec import bind_arguments, callable_signature, parameter_types
from standin.util.collections import SynchronizedDict

import logging
log = logging.getLogger(__name__)

__all__ = ['overrides', 'resolve_constructor_call', 'resolve_static_call',
    'resolve_private_call', 'construct', 'copy_fields', 'static_signature',
    'static_member', 'private_member_name', 'constructor_arguments',
    'is_proceeding', 'proceeding']

overrides = GlobalOverrideTable()

# owner currently constructed by `construct`, its hooked __init__ proceeds
_proceeding = contextvars.ContextVar('standin_proceeding', default=None)

_signature_cache = SynchronizedDict()


def _apply(behavior, args):
    return behavior.outcome(args).unwrap()


def static_member(owner, member):
    """
    Return ``(kind, function)`` of a static member, where kind is
    ``'static'`` or ``'class'``. Returns ``(None, attr)`` for members that
    are neither and ``(None, None)`` for missing members.
    """
    try:
        attr = inspect.getattr_static(owner, member)
    except AttributeError:
        return None, None
    if isinstance(attr, staticmethod):
        return 'static', inspect.unwrap(attr.__func__)
    if isinstance(attr, classmethod):
        return 'class', inspect.unwrap(attr.__func__)
    return None, attr


def static_signature(owner, member):
    """
    Return the `Signature` of a static member, derived from the declared
    parameter types of its function.
    """
    kind, func = static_member(owner, member)
    if kind is None:
        return Signature(owner, member, ())
    key = (owner, member, func)
    signature = _signature_cache.get(key)
    if signature is None:
        signature = Signature(owner, member,
            parameter_types(func, skip_first=(kind == 'class')))
        _signature_cache[key] = signature
    return signature


def private_member_name(owner, member):
    """
    Return the attribute name of a private member of `owner`.
    Name-mangled members (``__name``) are mapped to the mangled name of the
    defining class.

    >>> class Foo(object):
    ...     def __calc(self): pass
    >>> private_member_name(Foo, '__calc')
    '_Foo__calc'
    """
    if member.startswith('__') and not member.endswith('__'):
        for klass in owner.__mro__:
            mangled = '_%s%s' % (klass.__name__.lstrip('_'), member)
            if mangled in vars(klass):
                return mangled
    return member


def resolve_constructor_call(owner, args, parameter_types=None):
    """
    Resolve a construction of `owner`.

    :param args: the constructor arguments, without ``self``
    :param parameter_types: the declared parameter types of the selected
                            constructor, derived from the argument types
                            if ``None``
    :returns: the instance to use, or `PROCEED`
    """
    if parameter_types is None:
        signature = Signature.of_arguments(owner, '__init__', args)
    else:
        signature = Signature(owner, '__init__', parameter_types)
    behavior = overrides.get(signature)
    if behavior is None:
        return PROCEED
    log.debug('redirected construction %s', signature)
    return _apply(behavior, args)


def resolve_static_call(owner, member, args):
    """
    Resolve a call of the static member `member` of `owner`.

    :returns: the value to use, or `PROCEED`
    """
    signature = static_signature(owner, member)
    behavior = overrides.get(signature)
    if behavior is None:
        return PROCEED
    log.debug('redirected static call %s', signature)
    return _apply(behavior, args)


def resolve_private_call(receiver, member, args):
    """
    Resolve a call of the private member `member` on `receiver`.
    Behaviors are scoped to the receiver, other instances proceed.

    :returns: the value to use, or `PROCEED`
    """
    behavior = overrides.get_private(receiver, member)
    if behavior is None:
        return PROCEED
    log.debug('redirected private call %s on %r', member, receiver)
    return _apply(behavior, args)


def constructor_arguments(owner, args, kwargs):
    """
    Normalize constructor arguments to a positional vector. Declared
    defaults are not applied, the argument types select the constructor.
    """
    init = inspect.unwrap(owner.__init__)
    if init is object.__init__:
        signature = None
    else:
        signature = callable_signature(init)
    return bind_arguments(signature, args, kwargs, skip_first=True,
        apply_defaults=False, name='%s.__init__' % owner.__qualname__)


def construct(owner, *args, **kwargs):
    """
    Construct `owner`, honoring configured constructor behaviors.

    This is the explicit construction seam: code that creates its
    collaborators with ``construct(Foo, ...)`` instead of ``Foo(...)``
    receives the configured instance itself.
    """
    vector = constructor_arguments(owner, args, kwargs)
    result = resolve_constructor_call(owner, vector)
    if result is not PROCEED:
        return result

    with proceeding(owner):
        return owner(*args, **kwargs)


def is_proceeding(owner):
    """
    ``True`` while `construct` runs the original constructor of `owner`.
    """
    return _proceeding.get() is owner


@contextlib.contextmanager
def proceeding(owner):
    token = _proceeding.set(owner)
    try:
        yield
    finally:
        _proceeding.reset(token)


def _slot_names(klass):
    slots = vars(klass).get('__slots__', ())
    if isinstance(slots, str):
        slots = (slots, )
    for slot in slots:
        if slot in ('__dict__', '__weakref__'):
            continue
        if slot.startswith('__') and not slot.endswith('__'):
            slot = '_%s%s' % (klass.__name__.lstrip('_'), slot)
        yield slot


def copy_fields(target, source):
    """
    Shallow-copy the instance fields (``__dict__`` and ``__slots__``) of
    `source` onto `target`. Custom ``__setattr__`` methods are bypassed.
    Returns `target`.
    """
    state = getattr(source, '__dict__', None)
    if state:
        for name, value in list(state.items()):
            object.__setattr__(target, name, value)

    for klass in type(source).__mro__:
        for name in _slot_names(klass):
            try:
                value = object.__getattribute__(source, name)
            except AttributeError:
                continue
            object.__setattr__(target, name, value)
    return target
