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

from typing import List, Optional

import pytest

from standin.behavior import PROCEED, Implementation, Outcome, ReturnValue, ThrowValue
from standin.config import local_base_config
from standin.dispatch import Dispatcher, MockIdentity, display_name
from standin.errors import MisuseError
from standin.selector import Selector


@pytest.fixture
def dispatcher():
    return Dispatcher()


@pytest.fixture
def identity(dispatcher):
    identity = MockIdentity(name='service')
    dispatcher.register(identity, {'find': Optional[str], 'count': int, 'all': List[str]})
    return identity


class TestResolve(object):
    def test_configured_value(self, dispatcher, identity):
        dispatcher.configure(identity, Selector('find', (1, )), ReturnValue('a'))
        outcome = dispatcher.resolve(identity, Selector('find', (1, )))
        assert outcome.kind == Outcome.VALUE
        assert outcome.unwrap() == 'a'

    def test_other_args_default(self, dispatcher, identity):
        dispatcher.configure(identity, Selector('find', (1, )), ReturnValue('a'))
        outcome = dispatcher.resolve(identity, Selector('find', (2, )))
        assert outcome.is_default
        assert outcome.unwrap() is None

    def test_default_by_declared_type(self, dispatcher, identity):
        assert dispatcher.resolve(identity, Selector('count', ())).unwrap() == 0
        assert dispatcher.resolve(identity, Selector('all', ())).unwrap() == []
        assert dispatcher.resolve(identity, Selector('unknown', ())).unwrap() is None

    def test_explicit_return_type(self, dispatcher, identity):
        assert dispatcher.resolve(identity, Selector('find', (1, )), return_type=int).unwrap() == 0

    def test_throw(self, dispatcher, identity):
        error = RuntimeError('boom')
        dispatcher.configure(identity, Selector('find', (1, )), ThrowValue(error))
        outcome = dispatcher.resolve(identity, Selector('find', (1, )))
        assert outcome.kind == Outcome.RAISE
        assert outcome.value is error

    def test_implementation_gets_raw_args(self, dispatcher, identity):
        dispatcher.configure(identity, Selector('find', (1, 2)), Implementation(lambda a, b: a + b))
        assert dispatcher.resolve(identity, Selector('find', (1, 2)), [1, 2]).unwrap() == 3

    def test_implementation_proceed_is_misuse(self, dispatcher, identity):
        dispatcher.configure(identity, Selector('find', ()), Implementation(lambda: PROCEED))
        with pytest.raises(MisuseError):
            dispatcher.resolve(identity, Selector('find', ()))

    def test_records_before_raising(self, dispatcher, identity):
        dispatcher.configure(identity, Selector('find', (1, )), ThrowValue(RuntimeError()))
        dispatcher.resolve(identity, Selector('find', (1, )))
        state = dispatcher.state(identity)
        assert state.ledger.count(Selector('find', (1, ))) == 1

    def test_records_every_call(self, dispatcher, identity):
        for _ in range(3):
            dispatcher.resolve(identity, Selector('find', (1, )))
        assert dispatcher.state(identity).ledger.count(Selector('find', (1, ))) == 3

    def test_last_write_wins(self, dispatcher, identity):
        dispatcher.configure(identity, Selector('find', (1, )), ReturnValue('a'))
        dispatcher.configure(identity, Selector('find', (1, )), ReturnValue('b'))
        assert dispatcher.resolve(identity, Selector('find', (1, ))).unwrap() == 'b'

    def test_unknown_identity(self, dispatcher):
        with pytest.raises(MisuseError):
            dispatcher.resolve(MockIdentity(), Selector('find', ()))

    def test_dispatch_debug_logging(self, dispatcher, identity, caplog):
        caplog.set_level('DEBUG', logger='standin.dispatch')
        with local_base_config({'log': {'dispatch_debug': True}}):
            dispatcher.resolve(identity, Selector('find', (1, )))
        assert any('service.find(1)' in r.getMessage() for r in caplog.records)


class TestReset(object):
    def test_reset(self, dispatcher, identity):
        dispatcher.configure(identity, Selector('count', ()), ReturnValue(5))
        dispatcher.resolve(identity, Selector('count', ()))
        dispatcher.reset(identity)
        state = dispatcher.state(identity)
        assert state.ledger.count(Selector('count', ())) == 0
        assert dispatcher.resolve(identity, Selector('count', ())).unwrap() == 0

    def test_reset_is_isolated(self, dispatcher, identity):
        other = MockIdentity(name='other')
        dispatcher.register(other)
        dispatcher.configure(identity, Selector('find', ()), ReturnValue('a'))
        dispatcher.configure(other, Selector('find', ()), ReturnValue('b'))
        dispatcher.reset(identity)
        assert dispatcher.resolve(other, Selector('find', ())).unwrap() == 'b'

    def test_forget(self, dispatcher, identity):
        dispatcher.forget(identity)
        assert not dispatcher.is_registered(identity)
        with pytest.raises(MisuseError):
            dispatcher.reset(identity)


def test_display_name():
    assert display_name(None) == 'mock'
    assert display_name(type('UserService', (object, ), {})) == 'user_service'
    assert display_name(type('HTTPClient', (object, ), {})) == 'http_client'


def test_identity_repr():
    identity = MockIdentity(type('UserService', (object, ), {}))
    assert 'user_service' in repr(identity)
    assert MockIdentity() is not MockIdentity()
