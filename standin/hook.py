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
Redirection hooks.

A hook replaces a class attribute with a wrapper that asks the
redirection entry points first and runs the original code on `PROCEED`.
Hooks can be installed on existing classes (and removed again), or
declared in the class body with `redirectable_static` and
`redirectable_private`.

Hooks see calls that go through the class attribute. Functions that were
looked up before the hook was installed (e.g. ``f = Clock.now``) keep
calling the original.
"""

import functools
import inspect
import threading

from standin.behavior import PROCEED
from standin.config import base_config
from standin.errors import MisuseError, UnsupportedShapeError
from standin.redirect import (
    copy_fields,
    constructor_arguments,
    is_proceeding,
    private_member_name,
    resolve_constructor_call,
    resolve_private_call,
    resolve_static_call,
    static_member,
)
from standin.spec import callable_signature, normalize_call

import logging
log = logging.getLogger(__name__)

__all__ = ['install_static_hook', 'install_private_hook', 'install_constructor_hook',
    'install_hooks', 'uninstall_hooks', 'has_hooks', 'hooked_members',
    'redirectable_static', 'redirectable_private']


class _Undefined(object):

    def __repr__(self):
        return "Undefined"

Undefined = _Undefined()


class HookRegistry(object):
    """
    Installed hooks and the original class attributes they replaced.
    """
    def __init__(self):
        self._lock = threading.RLock()
        self._patched = {} # {(id(owner), attr): (owner, attr, original)}

    def patch_attr(self, owner, attr, value):
        """
        Replace `attr` of `owner`. Returns ``False`` if it is already
        patched.
        """
        with self._lock:
            key = (id(owner), attr)
            if key in self._patched:
                return False
            original = owner.__dict__.get(attr, Undefined)
            self._patched[key] = owner, attr, original
            setattr(owner, attr, value)
            return True

    def is_patched(self, owner, attr=None):
        with self._lock:
            if attr is not None:
                return (id(owner), attr) in self._patched
            return any(o is owner for o, _, _ in self._patched.values())

    def patched(self, owner=None):
        with self._lock:
            return [(o, attr) for o, attr, _ in self._patched.values()
                if owner is None or o is owner]

    def restore(self, owner=None):
        """
        Restore the original attributes of `owner` (of all owners if
        ``None``). Returns the restored ``(owner, attr)`` pairs.
        """
        restored = []
        with self._lock:
            for key, (obj, attr, original) in list(self._patched.items()):
                if owner is not None and obj is not owner:
                    continue
                if original is Undefined:
                    delattr(obj, attr)
                else:
                    setattr(obj, attr, original)
                del self._patched[key]
                restored.append((obj, attr))
        return restored

_registry = HookRegistry()


def _qualname(owner, member):
    return '%s.%s' % (owner.__qualname__, member)


def install_static_hook(owner, member):
    """
    Hook the staticmethod or classmethod `member` of `owner`.
    Returns ``False`` if it is already hooked.
    """
    kind, _ = static_member(owner, member)
    if kind is None:
        raise MisuseError('%s is not a staticmethod or classmethod' % _qualname(owner, member))

    original = inspect.getattr_static(owner, member).__func__
    signature = callable_signature(original)
    name = _qualname(owner, member)

    if kind == 'static':
        @functools.wraps(original)
        def hooked(*args, **kwargs):
            vector = normalize_call(signature, args, kwargs, skip_first=False, name=name)
            result = resolve_static_call(owner, member, vector)
            if result is PROCEED:
                return original(*args, **kwargs)
            return result
        value = staticmethod(hooked)
    else:
        @functools.wraps(original)
        def hooked(cls, *args, **kwargs):
            vector = normalize_call(signature, args, kwargs, skip_first=True, name=name)
            result = resolve_static_call(owner, member, vector)
            if result is PROCEED:
                return original(cls, *args, **kwargs)
            return result
        value = classmethod(hooked)

    installed = _registry.patch_attr(owner, member, value)
    if installed:
        log.debug('installed static hook %s', name)
    return installed


def install_private_hook(owner, member):
    """
    Hook the private instance method `member` of `owner`.
    ``__name`` members are addressed by their unmangled name.
    Returns ``False`` if it is already hooked.
    """
    attr = private_member_name(owner, member)
    if not attr.startswith('_') or (attr.startswith('__') and attr.endswith('__')):
        raise MisuseError('%s is not a private member' % _qualname(owner, member))
    try:
        original = inspect.getattr_static(owner, attr)
    except AttributeError:
        raise MisuseError('%s has no member %s' % (owner.__qualname__, member))
    if not inspect.isfunction(original):
        raise MisuseError('%s is not a method' % _qualname(owner, member))

    signature = callable_signature(original)
    name = _qualname(owner, attr)

    @functools.wraps(original)
    def hooked(self, *args, **kwargs):
        vector = normalize_call(signature, args, kwargs, skip_first=True, name=name)
        result = resolve_private_call(self, attr, vector)
        if result is PROCEED:
            return original(self, *args, **kwargs)
        return result

    installed = _registry.patch_attr(owner, attr, hooked)
    if installed:
        log.debug('installed private hook %s', name)
    return installed


def install_constructor_hook(owner):
    """
    Hook ``__init__`` of `owner`.

    Python constructs the instance before ``__init__`` runs, so a hooked
    ``Foo(...)`` can not return the configured instance itself. The new
    instance is initialized normally, then the fields of the configured
    instance are copied onto it (see `copy_fields`). Use `construct` where
    the identity of the configured instance matters.

    Subclasses of `owner` are constructed normally.
    """
    original = owner.__init__
    name = _qualname(owner, '__init__')

    @functools.wraps(original)
    def hooked(self, *args, **kwargs):
        if type(self) is not owner or is_proceeding(owner):
            return original(self, *args, **kwargs)
        vector = constructor_arguments(owner, args, kwargs)
        result = resolve_constructor_call(owner, vector)
        if result is PROCEED:
            return original(self, *args, **kwargs)
        if not base_config().redirect.constructor_field_copy:
            raise UnsupportedShapeError('%s can not be replaced in place, use construct()'
                % name, owner)
        original(self, *args, **kwargs)
        copy_fields(self, result)
        log.warning('%s: copied fields of the configured instance', name)

    installed = _registry.patch_attr(owner, '__init__', hooked)
    if installed:
        log.debug('installed constructor hook %s', name)
    return installed


def install_hooks(owner, constructor=True, statics=True, privates=True):
    """
    Install all hooks for members defined in the body of `owner`.
    Returns the names of the newly hooked members.
    """
    if not isinstance(owner, type):
        raise MisuseError('can only hook classes, not %r' % (owner, ))

    hooked = []
    if constructor and install_constructor_hook(owner):
        hooked.append('__init__')

    for name, attr in list(vars(owner).items()):
        if statics and isinstance(attr, (staticmethod, classmethod)):
            if isinstance(attr, redirectable_static):
                continue
            if install_static_hook(owner, name):
                hooked.append(name)
        elif (privates and name.startswith('_') and not name.endswith('__')
              and inspect.isfunction(attr)):
            if install_private_hook(owner, name):
                hooked.append(name)

    log.info('installed hooks for %s: %s', owner.__qualname__, ', '.join(hooked) or '-')
    return hooked


def uninstall_hooks(owner=None):
    """
    Remove the hooks of `owner`, or all hooks if `owner` is ``None``.
    """
    restored = _registry.restore(owner)
    if restored:
        log.info('removed %d hook(s)', len(restored))
    return restored


def has_hooks(owner):
    """
    ``True`` if `owner` has installed hooks or declared redirectable members.
    """
    if _registry.is_patched(owner):
        return True
    for klass in owner.__mro__:
        for attr in vars(klass).values():
            if isinstance(attr, (redirectable_static, redirectable_private)):
                return True
    return False


def hooked_members(owner):
    return [attr for _, attr in _registry.patched(owner)]


class redirectable_static(staticmethod):
    """
    Declare a static method whose calls consult the global overrides.

    ::

        class Clock(object):
            @redirectable_static
            def now():
                return time.time()

    The owner is the class that defines the method.
    """
    def __init__(self, func):
        if isinstance(func, staticmethod):
            func = func.__func__
        self.owner = None
        self.member = func.__name__
        signature = callable_signature(func)
        descriptor = self

        @functools.wraps(func)
        def redirected(*args, **kwargs):
            vector = normalize_call(signature, args, kwargs, skip_first=False,
                name=descriptor.member)
            result = resolve_static_call(descriptor.owner, descriptor.member, vector)
            if result is PROCEED:
                return func(*args, **kwargs)
            return result

        staticmethod.__init__(self, redirected)

    def __set_name__(self, owner, name):
        self.owner = owner
        self.member = name


class redirectable_private(object):
    """
    Declare a private method whose calls consult the global overrides of
    the receiver.

    ::

        class Account(object):
            @redirectable_private
            def _balance(self):
                ...
    """
    def __init__(self, func):
        self.func = func
        self.member = func.__name__
        self._signature = callable_signature(func)
        functools.update_wrapper(self, func)

    def __set_name__(self, owner, name):
        # mangled name for __name members
        self.member = name

    def __get__(self, obj, cls=None):
        if obj is None:
            return self
        return functools.partial(self._call, obj)

    def _call(self, receiver, *args, **kwargs):
        vector = normalize_call(self._signature, args, kwargs, skip_first=True,
            name=self.member)
        result = resolve_private_call(receiver, self.member, vector)
        if result is PROCEED:
            return self.func(receiver, *args, **kwargs)
        return result
