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

import threading


class SynchronizedDict(object):
    """
    Dictionary where every operation holds a lock.

    Each single operation is atomic. Sequences of operations are not,
    use `setdefault` or `pop` for read-modify-write.

    >>> d = SynchronizedDict()
    >>> d['foo'] = 1
    >>> d.get('foo'), d.get('bar', 2)
    (1, 2)
    """
    def __init__(self, items=None):
        self._lock = threading.RLock()
        self._values = dict(items or ())

    def get(self, key, default=None):
        with self._lock:
            return self._values.get(key, default)

    def setdefault(self, key, default):
        with self._lock:
            return self._values.setdefault(key, default)

    def setdefault_factory(self, key, factory):
        """
        Return the value for `key`, storing ``factory()`` if missing.
        `factory` is only called for missing keys.
        """
        with self._lock:
            if key not in self._values:
                self._values[key] = factory()
            return self._values[key]

    def setdefault_apply(self, key, factory, func):
        """
        Call `func` with the value for `key` (storing ``factory()`` if
        missing) while holding the lock, and return its result.
        Other operations on this dict wait until `func` returns.
        """
        with self._lock:
            if key not in self._values:
                self._values[key] = factory()
            return func(self._values[key])

    def swap(self, key, value):
        """
        Store `value` and return the previous value (or ``None``).
        """
        with self._lock:
            previous = self._values.get(key)
            self._values[key] = value
            return previous

    def pop(self, key, *default):
        with self._lock:
            return self._values.pop(key, *default)

    def __getitem__(self, key):
        with self._lock:
            return self._values[key]

    def __setitem__(self, key, value):
        with self._lock:
            self._values[key] = value

    def __delitem__(self, key):
        with self._lock:
            del self._values[key]

    def __contains__(self, key):
        with self._lock:
            return key in self._values

    def __len__(self):
        with self._lock:
            return len(self._values)

    def clear(self):
        with self._lock:
            self._values.clear()

    def keys(self):
        with self._lock:
            return list(self._values.keys())

    def values(self):
        with self._lock:
            return list(self._values.values())

    def items(self):
        with self._lock:
            return list(self._values.items())

    def __repr__(self):
        return '<%s %r>' % (self.__class__.__name__, self.items())


class SynchronizedMultiDict(object):
    """
    Append-only multimap: key -> list of values in insertion order.

    `get` returns a copy, so readers never observe a list that is
    modified later.

    >>> d = SynchronizedMultiDict()
    >>> d.append('foo', 1)
    >>> d.append('foo', 2)
    >>> d.get('foo'), d.count('foo'), d.count('bar')
    ([1, 2], 2, 0)
    """
    def __init__(self):
        self._lock = threading.RLock()
        self._values = {}

    def append(self, key, value):
        with self._lock:
            self._values.setdefault(key, []).append(value)

    def get(self, key):
        with self._lock:
            return list(self._values.get(key, ()))

    def count(self, key):
        with self._lock:
            return len(self._values.get(key, ()))

    def __contains__(self, key):
        with self._lock:
            return key in self._values

    def __len__(self):
        with self._lock:
            return sum(len(v) for v in self._values.values())

    def keys(self):
        with self._lock:
            return list(self._values.keys())

    def clear(self):
        with self._lock:
            self._values.clear()
