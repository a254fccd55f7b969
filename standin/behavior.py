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
Configured behaviors and resolution outcomes.
"""

from standin.errors import MisuseError

__all__ = ['PROCEED', 'Behavior', 'ReturnValue', 'ThrowValue', 'Implementation',
    'Outcome']


class _Proceed(object):
    """
    Marker returned by the redirection entry points when no behavior is
    configured and the original code has to run.

    There is exactly one instance. It is not equal to anything but
    itself, and copying or unpickling it returns the same object.
    """
    __slots__ = ()
    _instance = None

    def __new__(cls):
        if _Proceed._instance is None:
            _Proceed._instance = object.__new__(cls)
        return _Proceed._instance

    def __init_subclass__(cls, **kw):
        raise TypeError('PROCEED can not be subclassed')

    def __repr__(self):
        return 'PROCEED'

    def __reduce__(self):
        return 'PROCEED'

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

PROCEED = _Proceed()


class Behavior(object):
    """
    Base class for configured behaviors. Behaviors are immutable.
    """
    __slots__ = ()

    def __setattr__(self, name, value):
        raise AttributeError('%s is immutable' % self.__class__.__name__)

    def outcome(self, args):
        """
        Return the `Outcome` of a call with the positional `args`.
        """
        raise NotImplementedError()


class ReturnValue(Behavior):
    __slots__ = ('value', )

    def __init__(self, value):
        if value is PROCEED:
            raise MisuseError('PROCEED can not be configured as a return value')
        object.__setattr__(self, 'value', value)

    def outcome(self, args):
        return Outcome.returned(self.value)

    def __eq__(self, other):
        if type(other) is not ReturnValue:
            return NotImplemented
        return self.value is other.value or self.value == other.value

    __hash__ = None

    def __repr__(self):
        return 'ReturnValue(%r)' % (self.value, )


class ThrowValue(Behavior):
    """
    Raise the configured exception. The exception object itself is
    raised, it is neither copied nor wrapped.
    """
    __slots__ = ('exception', )

    def __init__(self, exception):
        if not (isinstance(exception, BaseException) or
                (isinstance(exception, type) and issubclass(exception, BaseException))):
            raise MisuseError('then_throw needs an exception, got %r' % (exception, ))
        object.__setattr__(self, 'exception', exception)

    def outcome(self, args):
        return Outcome.raised(self.exception)

    def __eq__(self, other):
        if type(other) is not ThrowValue:
            return NotImplemented
        return self.exception is other.exception

    __hash__ = None

    def __repr__(self):
        return 'ThrowValue(%r)' % (self.exception, )


class Implementation(Behavior):
    """
    Call `func` with the positional arguments of the intercepted call
    and use its result. Exceptions raised by `func` propagate unchanged.
    """
    __slots__ = ('func', )

    def __init__(self, func):
        if not callable(func):
            raise MisuseError('then_implement needs a callable, got %r' % (func, ))
        object.__setattr__(self, 'func', func)

    def outcome(self, args):
        return Outcome.returned(self.func(*args))

    def __eq__(self, other):
        if type(other) is not Implementation:
            return NotImplemented
        return self.func is other.func

    __hash__ = None

    def __repr__(self):
        return 'Implementation(%r)' % (self.func, )


class Outcome(object):
    """
    Result of a resolution: a value, an exception to raise, or the
    default value for an unstubbed call.
    """
    VALUE = 'value'
    RAISE = 'raise'
    DEFAULT = 'default'

    __slots__ = ('kind', 'value')

    def __init__(self, kind, value):
        self.kind = kind
        self.value = value

    @classmethod
    def returned(cls, value):
        return cls(cls.VALUE, value)

    @classmethod
    def raised(cls, exception):
        return cls(cls.RAISE, exception)

    @classmethod
    def default(cls, value):
        return cls(cls.DEFAULT, value)

    @property
    def is_default(self):
        return self.kind == self.DEFAULT

    def unwrap(self):
        """
        Return the value, or raise the configured exception.
        """
        if self.kind == self.RAISE:
            raise self.value
        return self.value

    def __repr__(self):
        return 'Outcome(%s, %r)' % (self.kind, self.value)
