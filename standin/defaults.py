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
Default results for calls without a configured behavior.

The mapping from declared result type to default value is an explicit
table. Types that are not in the table (including classes, ``Any`` and
missing annotations) default to ``None``.

>>> default_for(int)
0
>>> default_for(dict)
{}
"""

import collections.abc
import decimal
import fractions
import threading
import types
import typing

from standin.config import base_config

import logging
log = logging.getLogger(__name__)

__all__ = ['DefaultValueProvider', 'default_provider', 'default_for', 'register_default']

NoneType = type(None)

_TEXT_TYPES = (str, bytes)

# type -> factory, factories are called for every default so that mutable
# containers are never shared between calls
_BUILTIN_DEFAULTS = {
    NoneType: lambda: None,
    bool: lambda: False,
    int: lambda: 0,
    float: lambda: 0.0,
    complex: lambda: 0j,
    decimal.Decimal: decimal.Decimal,
    fractions.Fraction: fractions.Fraction,
    str: str,
    bytes: bytes,
    bytearray: bytearray,
    list: list,
    tuple: tuple,
    dict: dict,
    set: set,
    frozenset: frozenset,
    collections.OrderedDict: collections.OrderedDict,
    collections.deque: collections.deque,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Collection: list,
    collections.abc.Iterable: list,
    collections.abc.Iterator: lambda: iter(()),
    collections.abc.Generator: lambda: iter(()),
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
    collections.abc.Set: set,
    collections.abc.MutableSet: set,
}


class DefaultValueProvider(object):
    """
    Maps a declared result type to its "no behavior configured" value.

    Lookups are exact: a subclass of ``list`` is not a ``list`` here.
    Optional types (``Optional[X]``, ``X | None``) default to ``None``,
    generic aliases (``List[int]``, ``dict[str, int]``) are looked up by
    their origin.
    """
    def __init__(self, table=None):
        self._lock = threading.Lock()
        self._table = dict(_BUILTIN_DEFAULTS if table is None else table)

    def register(self, declared_type, factory):
        """
        Register `factory` (a callable without arguments) for `declared_type`.
        """
        if not callable(factory):
            raise TypeError('factory must be callable')
        with self._lock:
            self._table[declared_type] = factory
        log.debug('registered default for %r', declared_type)

    def unregister(self, declared_type):
        with self._lock:
            self._table.pop(declared_type, None)

    def __call__(self, declared_type):
        return self.default_for(declared_type)

    def default_for(self, declared_type):
        declared_type = _unwrap_annotated(declared_type)

        if declared_type is None or declared_type is NoneType:
            return None
        if _is_optional(declared_type):
            return None

        origin = typing.get_origin(declared_type)
        if origin is not None:
            declared_type = origin

        if declared_type in _TEXT_TYPES and not base_config().defaults.str_empty:
            return None

        with self._lock:
            factory = self._table.get(declared_type)
        if factory is None:
            return None
        return factory()


def _unwrap_annotated(declared_type):
    # Annotated[int, ...] -> int
    while typing.get_origin(declared_type) is typing.Annotated:
        declared_type = typing.get_args(declared_type)[0]
    return declared_type


def _is_optional(declared_type):
    origin = typing.get_origin(declared_type)
    if origin is typing.Union or _is_union_type(origin):
        return NoneType in typing.get_args(declared_type)
    return False


def _is_union_type(origin):
    # X | None on Python 3.10+
    union_type = getattr(types, "UnionType", None)
    return union_type is not None and origin is union_type


default_provider = DefaultValueProvider()

default_for = default_provider.default_for
register_default = default_provider.register
