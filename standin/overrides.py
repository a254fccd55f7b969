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
Process-wide behaviors for static members, constructors and private
members.

These behaviors are not tied to a mock. They are consulted by the
redirection entry points from any thread and stay active until they are
reset.
"""

from standin.stubs import StubTable
from standin.util.collections import SynchronizedDict

import logging
log = logging.getLogger(__name__)

__all__ = ['GlobalOverrideTable']


def _owner_name(owner):
    return getattr(owner, '__qualname__', None) or repr(owner)


class _ReceiverEntry(object):
    """
    Private member behaviors of one receiver. Holds a reference to the
    receiver, so its id stays unique until the entry is reset.
    """
    __slots__ = ('receiver', 'stubs')

    def __init__(self, receiver):
        self.receiver = receiver
        self.stubs = StubTable('%s@%x' % (_owner_name(type(receiver)), id(receiver)))


class GlobalOverrideTable(object):
    """
    owner type -> (`Signature` -> `Behavior`), and for private members
    receiver -> (member name -> `Behavior`) layered under the owner type
    of the receiver.
    """
    def __init__(self):
        self._owners = SynchronizedDict()
        self._receivers = SynchronizedDict()

    def put(self, signature, behavior):
        """
        Store `behavior` for a static member or constructor `signature`.
        """
        owner = signature.owner
        # store under the owners lock, a concurrent reset must not
        # drop the table between lookup and put
        self._owners.setdefault_apply(owner,
            lambda: StubTable(_owner_name(owner)),
            lambda table: table.put(signature, behavior))

    def get(self, signature):
        table = self._owners.get(signature.owner)
        if table is None:
            return None
        return table.get(signature)

    def put_private(self, receiver, member, behavior):
        self._receivers.setdefault_apply(id(receiver),
            lambda: _ReceiverEntry(receiver),
            lambda entry: entry.stubs.put(member, behavior))

    def get_private(self, receiver, member):
        entry = self._receivers.get(id(receiver))
        if entry is None or entry.receiver is not receiver:
            return None
        return entry.stubs.get(member)

    def reset(self, owner, signature=None):
        """
        Remove the behaviors of `owner`, or only the one for `signature`.
        Resetting the whole owner also removes the private member
        behaviors of all receivers of exactly that type.
        """
        if signature is not None:
            table = self._owners.get(owner)
            if table is not None:
                table.remove(signature)
            log.info('reset global behavior %s', signature)
            return

        self._owners.pop(owner, None)
        for key, entry in self._receivers.items():
            if type(entry.receiver) is owner:
                self._receivers.pop(key, None)
        log.info('reset global behaviors of %s', _owner_name(owner))

    def reset_private(self, receiver):
        entry = self._receivers.get(id(receiver))
        if entry is not None and entry.receiver is receiver:
            self._receivers.pop(id(receiver), None)
            log.info('reset private behaviors of %s', entry.stubs.name)

    def reset_all(self):
        self._owners.clear()
        self._receivers.clear()
        log.info('reset all global behaviors')

    def signatures(self, owner):
        table = self._owners.get(owner)
        if table is None:
            return []
        return table.keys()

    def owners(self):
        return self._owners.keys()

    def receivers(self):
        return [entry.receiver for entry in self._receivers.values()]

    def __len__(self):
        return (sum(len(t) for t in self._owners.values())
            + sum(len(e.stubs) for e in self._receivers.values()))
