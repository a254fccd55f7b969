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

import copy
import pickle

import pytest

from standin.behavior import PROCEED, Implementation, Outcome, ReturnValue, ThrowValue
from standin.errors import MisuseError


class TestProceed(object):
    def test_singleton(self):
        assert type(PROCEED)() is PROCEED
        assert copy.copy(PROCEED) is PROCEED
        assert copy.deepcopy(PROCEED) is PROCEED

    def test_pickle(self):
        assert pickle.loads(pickle.dumps(PROCEED)) is PROCEED

    def test_not_equal_to_values(self):
        for value in (None, False, 0, '', (), object()):
            assert PROCEED != value
            assert not (PROCEED == value)

    def test_no_subclass(self):
        with pytest.raises(TypeError):
            type('MyProceed', (type(PROCEED), ), {})

    def test_repr(self):
        assert repr(PROCEED) == 'PROCEED'

    def test_not_a_return_value(self):
        with pytest.raises(MisuseError):
            ReturnValue(PROCEED)


class TestBehaviors(object):
    def test_return_value(self):
        outcome = ReturnValue(42).outcome(())
        assert outcome.kind == Outcome.VALUE
        assert outcome.unwrap() == 42

    def test_return_none(self):
        outcome = ReturnValue(None).outcome(())
        assert outcome.kind == Outcome.VALUE
        assert outcome.unwrap() is None

    def test_throw_value_identity(self):
        error = RuntimeError('boom')
        outcome = ThrowValue(error).outcome(())
        assert outcome.kind == Outcome.RAISE
        with pytest.raises(RuntimeError) as excinfo:
            outcome.unwrap()
        assert excinfo.value is error

    def test_throw_class(self):
        with pytest.raises(KeyError):
            ThrowValue(KeyError).outcome(()).unwrap()

    def test_throw_needs_exception(self):
        with pytest.raises(MisuseError):
            ThrowValue('boom')
        with pytest.raises(MisuseError):
            ThrowValue(str)

    def test_implementation(self):
        impl = Implementation(lambda a, b: a + b)
        assert impl.outcome((1, 2)).unwrap() == 3

    def test_implementation_raises(self):
        def fail(*args):
            raise ValueError(args)
        with pytest.raises(ValueError):
            Implementation(fail).outcome((1, ))

    def test_implementation_needs_callable(self):
        with pytest.raises(MisuseError):
            Implementation(42)

    def test_immutable(self):
        behavior = ReturnValue(1)
        with pytest.raises(AttributeError):
            behavior.value = 2

    def test_equality(self):
        error = RuntimeError()
        func = len
        assert ReturnValue(1) == ReturnValue(1)
        assert ReturnValue(1) != ReturnValue(2)
        assert ThrowValue(error) == ThrowValue(error)
        assert ThrowValue(error) != ThrowValue(RuntimeError())
        assert Implementation(func) == Implementation(func)
        assert ReturnValue(1) != Implementation(func)


class TestOutcome(object):
    def test_default(self):
        outcome = Outcome.default(0)
        assert outcome.is_default
        assert outcome.unwrap() == 0

    def test_value_is_not_default(self):
        assert not Outcome.returned(0).is_default
