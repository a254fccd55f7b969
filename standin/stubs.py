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
Stub tables: key -> `Behavior`.
"""

from standin.behavior import Behavior
from standin.util.collections import SynchronizedDict

import logging
log = logging.getLogger(__name__)

__all__ = ['StubTable']


class StubTable(object):
    """
    Behaviors of one mock (keyed by `Selector`) or of one owner in the
    redirection tables (keyed by `Signature`).

    A later `put` for an equal key replaces the earlier behavior.
    """
    def __init__(self, name=None):
        self.name = name
        self._behaviors = SynchronizedDict()

    def put(self, key, behavior):
        if not isinstance(behavior, Behavior):
            raise TypeError('expected a Behavior, got %r' % (behavior, ))
        replaced = self._behaviors.swap(key, behavior)
        if replaced is not None:
            log.debug('%s: replaced %r for %s with %r', self, replaced, key, behavior)
        else:
            log.debug('%s: %s -> %r', self, key, behavior)

    def get(self, key):
        """
        Return the behavior for `key` or ``None``.
        """
        return self._behaviors.get(key)

    def remove(self, key):
        return self._behaviors.pop(key, None)

    def clear(self):
        self._behaviors.clear()

    def keys(self):
        return self._behaviors.keys()

    def __contains__(self, key):
        return key in self._behaviors

    def __len__(self):
        return len(self._behaviors)

    def __repr__(self):
        return '<StubTable %s (%d)>' % (self.name or hex(id(self)), len(self))
