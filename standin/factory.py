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
Mock creation.

A mock of a class is an instance of a generated subclass (the proxy class)
where every interceptable member forwards to the `Dispatcher`. The
instance is created without running any constructor of the class.

Interceptable are public methods and properties (including abstract and
async ones) and a few protocol methods (``__call__``, ``__len__``, ...).
Static methods, class methods, private members and members marked with
``typing.final`` keep their original code; use the redirection API for
them.
"""

import functools
import inspect
import weakref

from standin.config import base_config
from standin.dispatch import MockIdentity
from standin.errors import MisuseError, UnsupportedShapeError
from standin.hook import has_hooks
from standin.redirect import static_member
from standin.selector import Selector
from standin.spec import (
    bind_arguments,
    callable_signature,
    declared_return_type,
    normalize_call,
)
from standin.util.collections import SynchronizedDict

import logging
log = logging.getLogger(__name__)

__all__ = ['MockFactory', 'MemberSpec', 'DynamicMock', 'shape_members', 'identity_of',
    'is_mock']

IDENTITY_ATTR = '__standin_identity__'

_INTERCEPTED_DUNDERS = frozenset([
    '__call__', '__len__', '__iter__', '__contains__', '__getitem__',
    '__setitem__', '__delitem__', '__enter__', '__exit__',
])


class MemberSpec(object):
    """
    An interceptable member of a shape: its declared signature and result
    type.
    """
    METHOD = 'method'
    PROPERTY = 'property'

    __slots__ = ('name', 'kind', 'func', 'signature', 'return_type', 'is_async')

    def __init__(self, name, kind, func):
        self.name = name
        self.kind = kind
        self.func = func
        self.signature = callable_signature(func)
        self.return_type = declared_return_type(func)
        self.is_async = inspect.iscoroutinefunction(func)

    def normalize(self, args, kwargs):
        return normalize_call(self.signature, args, kwargs, skip_first=True,
            name=self.name)

    def __repr__(self):
        return '<MemberSpec %s %s%s>' % (self.kind, self.name, self.signature or '')


def _is_final(obj):
    return getattr(obj, '__final__', False) is True


def _is_private(name):
    return name.startswith('_') and name not in _INTERCEPTED_DUNDERS


def shape_members(shape):
    """
    Return ``{name: MemberSpec}`` of the interceptable members of `shape`.
    """
    names = set()
    for klass in shape.__mro__:
        if klass is object:
            continue
        names.update(vars(klass))

    members = {}
    for name in sorted(names):
        if _is_private(name):
            continue
        attr = inspect.getattr_static(shape, name)
        if isinstance(attr, property):
            if attr.fget is None or _is_final(attr.fget):
                continue
            members[name] = MemberSpec(name, MemberSpec.PROPERTY, attr.fget)
        elif inspect.isfunction(attr):
            if _is_final(attr):
                continue
            members[name] = MemberSpec(name, MemberSpec.METHOD, attr)
    return members


def identity_of(obj):
    """
    Return the `MockIdentity` of a mock (or `obj` itself if it is one).
    Raises `MisuseError` for everything else.
    """
    if isinstance(obj, MockIdentity):
        return obj
    try:
        identity = object.__getattribute__(obj, IDENTITY_ATTR)
    except AttributeError:
        identity = None
    if not isinstance(identity, MockIdentity):
        raise MisuseError('%r is not a mock' % (obj, ))
    return identity


def is_mock(obj):
    try:
        identity_of(obj)
    except MisuseError:
        return False
    return True


def _instantiate(cls):
    try:
        return object.__new__(cls)
    except TypeError:
        pass
    # subclasses of builtins (dict, tuple, ...)
    try:
        return cls.__new__(cls)
    except TypeError as ex:
        raise UnsupportedShapeError('can not create an instance of %s: %s'
            % (cls.__qualname__, ex), cls)


def _proxy_init(self, *args, **kwargs):
    pass


def _proxy_repr(self):
    return '<StandIn mock of %s>' % (type(self).__standin_shape__.__qualname__, )


def _proxy_eq(self, other):
    return self is other


def _proxy_ne(self, other):
    return self is not other


class DynamicMock(object):
    """
    Mock without a shape. Every public attribute is a member that accepts
    any arguments and defaults to ``None``.
    """
    def __init__(self, factory):
        object.__setattr__(self, '_factory', factory)

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        return functools.partial(self._factory.invoke_dynamic, self, name)

    def __repr__(self):
        return '<StandIn mock %s>' % (identity_of(self).name, )


class MockFactory(object):
    """
    Creates mocks and routes their calls to `dispatcher`.
    """
    def __init__(self, dispatcher):
        self.dispatcher = dispatcher
        self._proxy_classes = SynchronizedDict()

    def create(self, shape=None, name=None):
        """
        Return a new mock of `shape`, a dynamic mock if `shape` is ``None``.

        :param name: name of the mock in messages, derived from the shape
                     if ``None``
        """
        if shape is None:
            if not base_config().mock.allow_dynamic:
                raise MisuseError('mock() needs a class, dynamic mocks are disabled')
            return self._bind(DynamicMock(self), MockIdentity(None, name, None))

        if not isinstance(shape, type):
            raise UnsupportedShapeError('can only mock classes, not %r' % (shape, ), shape)

        members = shape_members(shape)
        proxy_class = self.proxy_class(shape, members)
        if proxy_class is None:
            if not has_hooks(shape):
                raise UnsupportedShapeError('%s can not be subclassed and has no redirection'
                    ' hooks' % shape.__qualname__, shape)
            log.warning('%s can not be subclassed, only its redirected members are'
                ' intercepted', shape.__qualname__)
            instance = _instantiate(shape)
            members = {}
        else:
            if not members and not has_hooks(shape):
                raise UnsupportedShapeError('%s has no members that can be intercepted'
                    % shape.__qualname__, shape)
            instance = _instantiate(proxy_class)

        return self._bind(instance, MockIdentity(shape, name, members))

    def _bind(self, instance, identity):
        try:
            object.__setattr__(instance, IDENTITY_ATTR, identity)
        except (AttributeError, TypeError):
            raise UnsupportedShapeError('instances of %s can not be used as mocks'
                % identity.shape.__qualname__, identity.shape)

        return_types = dict((name, spec.return_type)
            for name, spec in (identity.members or {}).items())
        self.dispatcher.register(identity, return_types)
        try:
            weakref.finalize(instance, self.dispatcher.forget, identity)
        except TypeError:
            # not weakly referenceable, state stays until the process ends
            log.debug('%r can not be tracked for cleanup', identity)
        log.debug('created %r', identity)
        return instance

    def proxy_class(self, shape, members):
        """
        Return the proxy class for `shape`, ``None`` if `shape` can not be
        subclassed.
        """
        if shape in self._proxy_classes:
            return self._proxy_classes[shape]
        proxy_class = self._build_proxy_class(shape, members)
        return self._proxy_classes.setdefault(shape, proxy_class)

    def _build_proxy_class(self, shape, members):
        if _is_final(shape):
            return None

        namespace = {
            '__module__': shape.__module__,
            '__qualname__': shape.__qualname__,
            '__doc__': shape.__doc__,
            '__standin_shape__': shape,
            '__init__': _proxy_init,
            '__repr__': _proxy_repr,
            '__eq__': _proxy_eq,
            '__ne__': _proxy_ne,
            '__hash__': object.__hash__,
        }
        for name, spec in members.items():
            namespace[name] = self._forwarder(spec)

        try:
            proxy_class = type(shape)(shape.__name__, (shape, ), namespace)
        except TypeError as ex:
            log.debug('can not subclass %s: %s', shape.__qualname__, ex)
            return None

        if getattr(proxy_class, '__abstractmethods__', None):
            # abstract static members are not overridden
            proxy_class.__abstractmethods__ = frozenset()
        return proxy_class

    def _forwarder(self, spec):
        factory = self
        if spec.is_async:
            def forwarder(mock, *args, **kwargs):
                # the call is recorded now, the result is delivered on await
                outcome = factory.resolve(mock, spec, args, kwargs)
                async def result():
                    return outcome.unwrap()
                return result()
        else:
            def forwarder(mock, *args, **kwargs):
                return factory.resolve(mock, spec, args, kwargs).unwrap()

        functools.update_wrapper(forwarder, spec.func)
        forwarder.__isabstractmethod__ = False
        if spec.kind == MemberSpec.PROPERTY:
            return property(forwarder)
        return forwarder

    def resolve(self, mock, spec, args, kwargs):
        identity = identity_of(mock)
        vector = spec.normalize(args, kwargs)
        return self.dispatcher.resolve(identity, Selector(spec.name, vector), vector,
            spec.return_type)

    def invoke_dynamic(self, mock, member, *args, **kwargs):
        identity = identity_of(mock)
        vector = bind_arguments(None, args, kwargs)
        return self.dispatcher.resolve(identity, Selector(member, vector), vector).unwrap()

    def selector_for(self, identity, member, args, kwargs):
        """
        Build the `Selector` that a call of `member` with `args` and
        `kwargs` on the mock `identity` would be recorded under.
        """
        if identity.members is None:
            return Selector(member, bind_arguments(None, args, kwargs))

        spec = identity.members.get(member)
        if spec is None:
            shape = identity.shape
            kind, attr = static_member(shape, member)
            if kind is not None:
                raise MisuseError('%s.%s is a %smethod, use when_static()'
                    % (shape.__qualname__, member, kind))
            if attr is not None and member.startswith('_'):
                raise MisuseError('%s.%s is private, use when_private()'
                    % (shape.__qualname__, member))
            raise MisuseError('%s has no member %s that can be intercepted'
                % (shape.__qualname__, member))
        return Selector(member, spec.normalize(args, kwargs))
