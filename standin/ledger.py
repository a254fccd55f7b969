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
Invocation ledger: the record of observed calls on one mock.
"""

import itertools

from standin.selector import format_call
from standin.util.collections import SynchronizedMultiDict

__all__ = ['Invocation', 'InvocationLedger']


class Invocation(object):
    __slots__ = ('sequence', 'selector', 'args')

    def __init__(self, sequence, selector, args):
        self.sequence = sequence
        self.selector = selector
        self.args = args

    def __repr__(self):
        return 'Invocation(#%d, %s)' % (self.sequence, format_call(self.selector.member, self.args))


class InvocationLedger(object):
    """
    Append-only multimap `Selector` -> observed argument vectors.

    Every call is recorded, whether a behavior matched or not. The
    ledger is only cleared as a whole with `clear`.
    """
    def __init__(self):
        self._invocations = SynchronizedMultiDict()
        self._sequence = itertools.count(1)

    def record(self, selector, args):
        invocation = Invocation(next(self._sequence), selector, tuple(args))
        self._invocations.append(selector, invocation)
        return invocation

    def count(self, selector):
        return self._invocations.count(selector)

    def calls(self, selector):
        """
        Return the argument vectors recorded for `selector`, oldest first.
        """
        return [inv.args for inv in self._invocations.get(selector)]

    def history(self):
        """
        Return all invocations of this ledger in call order.
        """
        invocations = []
        for selector in self._invocations.keys():
            invocations.extend(self._invocations.get(selector))
        invocations.sort(key=lambda inv: inv.sequence)
        return invocations

    def selectors(self):
        return self._invocations.keys()

    def clear(self):
        self._invocations.clear()

    def __len__(self):
        return len(self._invocations)
