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
Call count verification.
"""

import os

from standin.config import base_config
from standin.errors import MisuseError, VerificationFailure

__all__ = ['VerificationEngine', 'VerifyBuilder']


def _calls(n):
    return '%d call%s' % (n, '' if n == 1 else 's')


def _expected_text(expected):
    if expected is None:
        return 'at least one call'
    if expected == 0:
        return 'no calls'
    return 'exactly %s' % _calls(expected)


class VerificationEngine(object):
    """
    Compares the recorded calls of a mock with an expected count.
    """
    def __init__(self, dispatcher):
        self.dispatcher = dispatcher

    def count(self, identity, selector):
        return self.dispatcher.state(identity).ledger.count(selector)

    def verify(self, identity, selector, expected_count=None):
        """
        Check the number of recorded calls of `selector`.

        :param expected_count: exact number of calls, ``None`` for at
                               least one call
        :returns: the number of recorded calls
        :raises VerificationFailure: if the count does not match
        """
        if expected_count is not None and expected_count < 0:
            raise MisuseError('expected call count must not be negative, got %d'
                % expected_count)

        state = self.dispatcher.state(identity)
        actual = state.ledger.count(selector)
        if expected_count is None:
            ok = actual >= 1
        else:
            ok = actual == expected_count
        if not ok:
            message = self._message(state, selector, expected_count, actual)
            raise VerificationFailure(message, selector, expected_count, actual)
        return actual

    def _message(self, state, selector, expected, actual):
        name = state.identity.name
        message = [base_config().verify.error_prefix + "Unmet expectation:", ""]
        message.append("=> " + selector.format(name))
        message.append(" - Expected: %s" % _expected_text(expected))
        message.append(" - Performed: %s" % _calls(actual))

        others = [inv for inv in state.ledger.history()
            if inv.selector.member == selector.member and inv.selector != selector]
        if others:
            message.append(" - Other calls of %s:" % selector.member)
            for inv in others:
                message.append("   " + inv.selector.format(name))
        message.append("")
        return os.linesep.join(message)


_UNSET = object()


class VerifyBuilder(object):
    """
    Fluent verification of one mock.

    Call the member with the expected arguments, after an optional
    count::

        verify(service).find_by_id(1)            # at least once
        verify(service).once().save(user)
        verify(service).times(2).find_by_id(1)
        verify(service).never().delete(1)

    or name the member with `method` and give the count afterwards::

        verify(service).method('save', user).once()

    `method` also works for members whose names clash with the builder
    methods.
    """
    def __init__(self, engine, factory, identity):
        self._engine = engine
        self._factory = factory
        self._identity = identity
        self._expected = _UNSET
        self._selector = None

    def times(self, count):
        if not isinstance(count, int) or isinstance(count, bool):
            raise MisuseError('times() needs an int, got %r' % (count, ))
        if count < 0:
            raise MisuseError('expected call count must not be negative, got %d' % count)
        return self._expect(count)

    def once(self):
        return self.times(1)

    def never(self):
        return self.times(0)

    def at_least_once(self):
        return self._expect(None)

    def _expect(self, count):
        self._expected = count
        if self._selector is not None:
            selector, self._selector = self._selector, None
            self._engine.dispatcher.take_pending_verification(self._identity)
            self._engine.verify(self._identity, selector, count)
        return self

    def method(self, member, *args, **kwargs):
        """
        Select the calls of `member` with the given arguments. They are
        verified now if a count was given before, else by the next count
        method. A selection that never gets its count makes the next
        `when`, `verify`, `reset` or `clear_invocations` of the mock (and
        `MockSession.restore`) raise `MisuseError`.
        """
        if self._selector is not None:
            self._engine.dispatcher.take_pending_verification(self._identity)
            raise MisuseError('method() %s was not followed by a count'
                % self._selector.format(self._identity.name))
        selector = self._factory.selector_for(self._identity, member, args, kwargs)
        if self._expected is _UNSET:
            self._selector = selector
            self._engine.dispatcher.state(self._identity).pending_verification = selector
        else:
            self._engine.verify(self._identity, selector, self._expected)
        return self

    def call(self, member, *args, **kwargs):
        """
        Verify the calls of `member` now. Without a count, at least one
        call is expected. Returns the number of recorded calls.
        """
        selector = self._factory.selector_for(self._identity, member, args, kwargs)
        expected = None if self._expected is _UNSET else self._expected
        return self._engine.verify(self._identity, selector, expected)

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        def verify_call(*args, **kwargs):
            return self.call(name, *args, **kwargs)
        return verify_call

    def __repr__(self):
        return '<VerifyBuilder %s>' % (self._identity.name, )
