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
Lookup keys for stub tables and invocation ledgers.

A `Selector` identifies "this member, called with these arguments" and is
compared by value. A `Signature` identifies "this member of this owner,
with these parameter types" and is compared by shape. Selectors key the
per-mock tables, signatures key the redirection tables.
"""

import numbers

__all__ = ['Selector', 'Signature', 'format_call', 'args_equal', 'freeze_arg']


def _arg_equal(a, b):
    if a is b:
        return True
    if isinstance(a, numbers.Number) or isinstance(b, numbers.Number):
        # 1, 1.0 and True are different arguments
        if type(a) is not type(b):
            return False
        return a == b
    if isinstance(a, (list, tuple)):
        if type(a) is not type(b) or len(a) != len(b):
            return False
        for x, y in zip(a, b):
            if not _arg_equal(x, y):
                return False
        return True
    if isinstance(a, dict):
        if not isinstance(b, dict) or a.keys() != b.keys():
            return False
        for key, value in a.items():
            if not _arg_equal(value, b[key]):
                return False
        return True
    return bool(a == b)


def args_equal(args1, args2):
    """
    Compare two argument vectors element-wise.

    >>> args_equal((1, 'a'), (1, 'a'))
    True
    >>> args_equal((1, ), (1.0, ))
    False
    """
    if len(args1) != len(args2):
        return False
    for a, b in zip(args1, args2):
        if not _arg_equal(a, b):
            return False
    return True


def _arg_hash(arg):
    if isinstance(arg, (list, tuple)):
        return hash(tuple(_arg_hash(a) for a in arg))
    if isinstance(arg, dict):
        return hash(frozenset((k, _arg_hash(v)) for k, v in arg.items()))
    if isinstance(arg, (set, bytearray)):
        return hash(frozenset(arg) if isinstance(arg, set) else bytes(arg))
    try:
        return hash(arg)
    except TypeError:
        # unhashable values share one bucket, equality decides
        return 0


def freeze_arg(arg):
    """
    Return a copy of `arg` that later changes of the caller's object do
    not affect. Lists, dicts, sets and bytearrays are copied (recursively
    through lists, tuples and dicts), other objects are kept as they are,
    so arguments that compare by identity still match.

    >>> args = [1, [2]]
    >>> frozen = freeze_arg(args)
    >>> args[1].append(3)
    >>> frozen
    [1, [2]]
    """
    t = type(arg)
    if t is list:
        return [freeze_arg(a) for a in arg]
    if t is tuple:
        return tuple(freeze_arg(a) for a in arg)
    if t is dict:
        return dict((k, freeze_arg(v)) for k, v in arg.items())
    if t is set:
        return set(arg)
    if t is bytearray:
        return bytearray(arg)
    return arg


def format_call(member, args=(), owner_name=None):
    """
    Return a call expression such as ``service.find_by_id(1)``.

    >>> format_call('find_by_id', (1, ), 'service')
    'service.find_by_id(1)'
    """
    call = '%s(%s)' % (member, ', '.join(repr(a) for a in args))
    if owner_name:
        return '%s.%s' % (owner_name, call)
    return call


class Selector(object):
    """
    Immutable (member name, positional arguments) pair. Mutable container
    arguments are copied, see `freeze_arg`.

    Two selectors are equal if the member names are equal and the
    arguments are equal element by element, using the equality of each
    argument. Numbers of different types never match.
    """
    __slots__ = ('member', 'args', '_hash')

    def __init__(self, member, args=()):
        if not isinstance(member, str):
            raise TypeError('member name must be a string, not %r' % (member, ))
        args = tuple(freeze_arg(a) for a in args)
        object.__setattr__(self, 'member', member)
        object.__setattr__(self, 'args', args)
        object.__setattr__(self, '_hash', hash((member, _arg_hash(args))))

    def __setattr__(self, name, value):
        raise AttributeError('Selector is immutable')

    def __delattr__(self, name):
        raise AttributeError('Selector is immutable')

    def __eq__(self, other):
        if not isinstance(other, Selector):
            return NotImplemented
        return self.member == other.member and args_equal(self.args, other.args)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return self._hash

    def __repr__(self):
        return 'Selector(%r, %r)' % (self.member, self.args)

    def __str__(self):
        return format_call(self.member, self.args)

    def format(self, owner_name=None):
        return format_call(self.member, self.args, owner_name)


def _type_name(t):
    if isinstance(t, type):
        return t.__qualname__
    return repr(t)


class Signature(object):
    """
    Shape key of a member: owner, member name and parameter types.

    Owners are compared by identity, parameter types are compared
    exactly (``bool`` is not ``int``, ``List[int]`` equals ``List[int]``).
    Argument values play no role.
    """
    __slots__ = ('owner', 'member', 'parameter_types')

    def __init__(self, owner, member, parameter_types=()):
        object.__setattr__(self, 'owner', owner)
        object.__setattr__(self, 'member', member)
        object.__setattr__(self, 'parameter_types', tuple(parameter_types))

    def __setattr__(self, name, value):
        raise AttributeError('Signature is immutable')

    @classmethod
    def of_arguments(cls, owner, member, args):
        """
        Signature of a concrete call, derived from the argument types.
        """
        return cls(owner, member, tuple(type(a) for a in args))

    def _key(self):
        return (id(self.owner), self.member, self.parameter_types)

    def __eq__(self, other):
        if not isinstance(other, Signature):
            return NotImplemented
        return (self.owner is other.owner and self.member == other.member
            and self.parameter_types == other.parameter_types)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return 'Signature(%s, %r, (%s))' % (
            _type_name(self.owner), self.member,
            ', '.join(_type_name(t) for t in self.parameter_types))

    def __str__(self):
        return '%s.%s(%s)' % (
            _type_name(self.owner), self.member,
            ', '.join(_type_name(t) for t in self.parameter_types))
