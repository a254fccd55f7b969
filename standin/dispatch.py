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
Per-mock call dispatch.

Every intercepted call on a mock ends up in `Dispatcher.resolve`: the call
is recorded in the ledger of the mock, then the stub table is consulted,
then the default value provider.
"""

import itertools
import re

from standin.behavior import PROCEED, Outcome
from standin.config import base_config
from standin.defaults import default_provider
from standin.errors import MisuseError
from standin.ledger import InvocationLedger
from standin.stubs import StubTable
from standin.util.collections import SynchronizedDict

import logging
log = logging.getLogger(__name__)

__all__ = ['MockIdentity', 'MockState', 'Dispatcher', 'display_name']

_serials = itertools.count(1)


def display_name(shape):
    """
    Name used for mocks of `shape` in messages.

    >>> display_name(type('UserService', (), {}))
    'user_service'
    """
    if shape is None:
        return 'mock'
    name = getattr(shape, '__name__', None) or 'mock'
    name = re.sub(r'([a-z0-9])([A-Z])', r'\1_\2', name)
    name = re.sub(r'([A-Z]+)([A-Z][a-z])', r'\1_\2', name)
    return name.lower()


def unfinished_verification_message(identity, selector):
    return ('unfinished verification of %s, method() must be followed by'
        ' once(), never(), times(n) or at_least_once()' % selector.format(identity.name))


class MockIdentity(object):
    """
    Opaque handle of one mock. Compared and hashed by identity.

    :ivar members: name -> `standin.factory.MemberSpec` of the intercepted
                   members, ``None`` for dynamic mocks
    """
    __slots__ = ('serial', 'shape', 'name', 'members', '__weakref__')

    def __init__(self, shape=None, name=None, members=None):
        self.serial = next(_serials)
        self.shape = shape
        self.name = name or display_name(shape)
        self.members = members

    def __repr__(self):
        shape_name = getattr(self.shape, '__qualname__', None) or 'dynamic'
        return '<MockIdentity #%d %s (%s)>' % (self.serial, self.name, shape_name)


class MockState(object):
    """
    Stub table, invocation ledger and declared result types of one mock.
    """
    def __init__(self, identity, return_types=None):
        self.identity = identity
        self.stubs = StubTable(identity.name)
        self.ledger = InvocationLedger()
        self.return_types = dict(return_types or {})
        # selector of a `verify(...).method(...)` still waiting for its count
        self.pending_verification = None


class Dispatcher(object):
    """
    Registry of all live mocks and resolution of their calls.

    Calls on different mocks never share state. Calls on the same mock
    from several threads are recorded and resolved without locking the
    whole mock; the stub table and ledger synchronize themselves.
    """
    def __init__(self, default_provider=default_provider):
        self.default_provider = default_provider
        self._states = SynchronizedDict()

    def register(self, identity, return_types=None):
        state = MockState(identity, return_types)
        self._states[identity] = state
        log.debug('registered %r', identity)
        return state

    def forget(self, identity):
        """
        Drop all state of `identity` (called when the mock is collected).
        """
        self._states.pop(identity, None)

    def is_registered(self, identity):
        return identity in self._states

    def state(self, identity):
        state = self._states.get(identity)
        if state is None:
            raise MisuseError('%r is not a live mock' % (identity, ))
        return state

    def configure(self, identity, selector, behavior):
        """
        Store `behavior` for `selector`, replacing an earlier behavior for
        an equal selector. Only affects calls resolved afterwards.
        """
        self.state(identity).stubs.put(selector, behavior)

    def resolve(self, identity, selector, raw_args=None, return_type=None):
        """
        Record the call and return its `Outcome`.

        :param raw_args: the argument vector to record, defaults to the
                         arguments of the selector
        :param return_type: the declared result type, used for the
                            default value if no behavior is configured
        """
        state = self.state(identity)
        args = selector.args if raw_args is None else tuple(raw_args)

        # record first, a raising behavior still counts as a call
        state.ledger.record(selector, args)

        behavior = state.stubs.get(selector)
        if behavior is None:
            if return_type is None:
                return_type = state.return_types.get(selector.member)
            outcome = Outcome.default(self.default_provider(return_type))
        else:
            outcome = behavior.outcome(args)
            if outcome.kind == Outcome.VALUE and outcome.value is PROCEED:
                raise MisuseError('%s: a mock has no original code to proceed to'
                    % selector.format(identity.name))

        if base_config().log.dispatch_debug:
            log.debug('%s -> %r', selector.format(identity.name), outcome)
        return outcome

    def reset(self, identity):
        """
        Clear the stub table and the ledger of `identity`.
        Other mocks are not affected.
        """
        state = self.state(identity)
        state.stubs.clear()
        state.ledger.clear()
        state.pending_verification = None
        log.debug('reset %r', identity)

    def clear_invocations(self, identity):
        """
        Clear the ledger of `identity`, configured behaviors are kept.
        """
        self.state(identity).ledger.clear()
        log.debug('cleared invocations of %r', identity)

    def take_pending_verification(self, identity):
        """
        Return and clear the selector of an unfinished verification of
        `identity`, ``None`` if there is none.
        """
        state = self._states.get(identity)
        if state is None:
            return None
        selector, state.pending_verification = state.pending_verification, None
        return selector

    def check_verification_finished(self, identity):
        """
        Raise `MisuseError` if a verification of `identity` was started
        with ``method()`` but never given a count.
        """
        self.state(identity)
        selector = self.take_pending_verification(identity)
        if selector is not None:
            raise MisuseError(unfinished_verification_message(identity, selector))

    def __len__(self):
        return len(self._states)
