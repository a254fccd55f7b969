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
Public API.

Mocks::

    service = mock(UserService)
    when(service, 'find_by_id', 1).then_return(user)
    assert service.find_by_id(1) is user
    verify(service).once().find_by_id(1)

Global behaviors for static members, constructors and private members::

    when_static(Clock, 'now').then_return(0)
    when_constructor(Connection, str).then_return(fake_connection)
    when_private(account, '_balance').then_return(100)
"""

import inspect

from standin.behavior import Implementation, ReturnValue, ThrowValue
from standin.dispatch import Dispatcher
from standin.errors import MisuseError
from standin.factory import MockFactory, identity_of
from standin.hook import redirectable_static
from standin.redirect import overrides, private_member_name, static_member, static_signature
from standin.selector import Signature
from standin.verify import VerificationEngine, VerifyBuilder

import logging
log = logging.getLogger(__name__)

__all__ = ['mock', 'when', 'verify', 'reset', 'clear_invocations', 'invocations',
    'when_static', 'when_constructor', 'when_private',
    'reset_global', 'reset_private', 'reset_all_globals',
    'StubBuilder', 'OverrideBuilder']

dispatcher = Dispatcher()
factory = MockFactory(dispatcher)
engine = VerificationEngine(dispatcher)


class _BehaviorBuilder(object):

    def _store(self, behavior):
        raise NotImplementedError()

    def then_return(self, value):
        self._store(ReturnValue(value))
        return self

    def then_throw(self, exception):
        self._store(ThrowValue(exception))
        return self

    def then_implement(self, func):
        """
        Compute the result with `func`, called with the positional
        arguments of each matching call.
        """
        self._store(Implementation(func))
        return self


class StubBuilder(_BehaviorBuilder):
    """
    Configures the behavior of one selector of a mock. A later
    configuration of the same selector replaces the earlier one.
    """
    def __init__(self, identity, selector):
        self.identity = identity
        self.selector = selector

    def _store(self, behavior):
        dispatcher.configure(self.identity, self.selector, behavior)

    def __repr__(self):
        return '<StubBuilder %s>' % (self.selector.format(self.identity.name), )


class OverrideBuilder(_BehaviorBuilder):
    """
    Configures a process-wide behavior of a static member, constructor or
    private member.
    """
    def __init__(self, signature=None, receiver=None, member=None, owner_check=None):
        self.signature = signature
        self.receiver = receiver
        self.member = member
        self._owner_check = owner_check

    def then_return(self, value):
        if self._owner_check is not None:
            self._owner_check(value)
        return _BehaviorBuilder.then_return(self, value)

    def _store(self, behavior):
        if self.signature is not None:
            overrides.put(self.signature, behavior)
        else:
            overrides.put_private(self.receiver, self.member, behavior)

    def __repr__(self):
        if self.signature is not None:
            return '<OverrideBuilder %s>' % (self.signature, )
        return '<OverrideBuilder %s on %r>' % (self.member, self.receiver)


def mock(shape=None, name=None):
    """
    Create a mock of the class `shape`.

    Calls without a configured behavior return the default value of the
    declared result type. Without `shape` a dynamic mock is returned that
    accepts calls of any member.

    :raises UnsupportedShapeError: if `shape` offers no interception point
    """
    return factory.create(shape, name)


def when(target, member, *args, **kwargs):
    """
    Start configuring the behavior of ``target.member(*args, **kwargs)``.
    """
    identity = identity_of(target)
    dispatcher.check_verification_finished(identity)
    if not isinstance(member, str):
        raise MisuseError('member name must be a string, not %r' % (member, ))
    selector = factory.selector_for(identity, member, args, kwargs)
    return StubBuilder(identity, selector)


def verify(target):
    """
    Start verifying the calls of the mock `target`.
    """
    identity = identity_of(target)
    dispatcher.check_verification_finished(identity)
    return VerifyBuilder(engine, factory, identity)


def reset(target):
    """
    Clear all behaviors and recorded calls of the mock `target`.
    """
    identity = identity_of(target)
    dispatcher.check_verification_finished(identity)
    dispatcher.reset(identity)


def clear_invocations(target):
    """
    Clear the recorded calls of the mock `target`. Configured behaviors
    stay active.
    """
    identity = identity_of(target)
    dispatcher.check_verification_finished(identity)
    dispatcher.clear_invocations(identity)


def invocations(target):
    """
    Return the recorded calls of the mock `target` in call order.
    """
    return dispatcher.state(identity_of(target)).ledger.history()


def _check_owner(owner):
    if not isinstance(owner, type):
        raise MisuseError('expected a class, got %r' % (owner, ))


def when_static(owner, member):
    """
    Start configuring the staticmethod or classmethod `member` of `owner`.
    The behavior applies to all threads until it is reset.
    """
    _check_owner(owner)
    kind, _ = static_member(owner, member)
    if kind is None:
        raise MisuseError('%s.%s is not a staticmethod or classmethod'
            % (owner.__qualname__, member))
    declared = inspect.getattr_static(owner, member)
    if isinstance(declared, redirectable_static) and declared.owner is not owner:
        # the declared seam only consults its defining class
        raise MisuseError('%s.%s is declared redirectable in %s, configure it there'
            ' or install_static_hook(%s, %r)' % (owner.__qualname__, member,
            declared.owner.__qualname__, owner.__qualname__, member))
    return OverrideBuilder(static_signature(owner, member))


def when_constructor(owner, *parameter_types):
    """
    Start configuring constructions of `owner` whose arguments have
    exactly the types `parameter_types`.
    """
    _check_owner(owner)
    for t in parameter_types:
        if not isinstance(t, type):
            raise MisuseError('parameter types must be classes, got %r' % (t, ))

    def check_instance(value):
        if not isinstance(value, owner):
            raise MisuseError('%r is not an instance of %s' % (value, owner.__qualname__))

    return OverrideBuilder(Signature(owner, '__init__', parameter_types),
        owner_check=check_instance)


def when_private(receiver, member):
    """
    Start configuring the private member `member` of the object `receiver`.
    Other instances of the same class are not affected.
    """
    if isinstance(receiver, type):
        raise MisuseError('when_private() needs an instance, not the class %s'
            % receiver.__qualname__)
    if not member.startswith('_') or (member.startswith('__') and member.endswith('__')):
        raise MisuseError('%s is not a private member' % (member, ))
    owner = type(receiver)
    attr = private_member_name(owner, member)
    try:
        inspect.getattr_static(owner, attr)
    except AttributeError:
        raise MisuseError('%s has no member %s' % (owner.__qualname__, member))
    return OverrideBuilder(receiver=receiver, member=attr)


def reset_global(owner, member=None):
    """
    Remove the global behaviors of `owner`.

    :param member: a static member name or ``'__init__'`` to reset only
                   the behaviors of that member, or a single `Signature`
    """
    _check_owner(owner)
    if member is None:
        overrides.reset(owner)
        return
    if isinstance(member, Signature):
        overrides.reset(owner, member)
        return
    for signature in overrides.signatures(owner):
        if signature.member == member:
            overrides.reset(owner, signature)


def reset_private(receiver):
    overrides.reset_private(receiver)


def reset_all_globals():
    overrides.reset_all()
