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

import asyncio
import inspect
import sys

import pytest

from standin import (
    MisuseError,
    UnsupportedShapeError,
    clear_invocations,
    install_private_hook,
    invocations,
    mock,
    reset,
    verify,
    when,
    when_private,
)
from standin.config import local_base_config
from standin.factory import identity_of, is_mock, shape_members
from standin.test.sample import (
    Empty,
    Greeter,
    OnlyStatic,
    Repository,
    Sequence,
    Token,
    User,
    UserService,
)


class TestScenarios(object):
    def test_stubbed_value_and_optional_default(self):
        user1 = User('alice', 1)
        service = mock(UserService)
        when(service, 'find_by_id', 1).then_return(user1)

        assert service.find_by_id(1) is user1
        assert service.find_by_id(2) is None

    def test_stubbed_exception(self):
        user1 = User('alice', 1)
        error = RuntimeError('boom')
        service = mock(UserService)
        when(service, 'save', user1).then_throw(error)

        with pytest.raises(RuntimeError) as excinfo:
            service.save(user1)
        assert excinfo.value is error
        verify(service).method('save', user1).once()


class TestStubbing(object):
    def test_defaults_by_declared_type(self):
        service = mock(UserService)
        assert service.count() == 0
        assert service.name_of(1) == ''
        assert service.is_active(User('a')) is False
        assert service.find_all() == []
        assert service.stats() == {}
        assert service.save(User('a')) is None
        assert service.tag('a') is None

    def test_other_args_get_default(self):
        service = mock(UserService)
        when(service, 'count').then_return(3)
        when(service, 'name_of', 1).then_return('alice')
        assert service.count() == 3
        assert service.name_of(1) == 'alice'
        assert service.name_of(2) == ''

    def test_no_numeric_coercion(self):
        service = mock(UserService)
        when(service, 'name_of', 1).then_return('alice')
        assert service.name_of(1.0) == ''
        assert service.name_of(True) == ''

    def test_last_write_wins(self):
        service = mock(UserService)
        when(service, 'count').then_return(1)
        when(service, 'count').then_return(2)
        assert service.count() == 2

    def test_return_none_is_configured(self):
        service = mock(UserService)
        when(service, 'name_of', 1).then_return(None)
        assert service.name_of(1) is None

    def test_implementation(self):
        service = mock(UserService)
        when(service, 'delete', 1, True).then_implement(lambda id, force: force)
        assert service.delete(1, True) is True
        assert service.delete(1) is False

    def test_keywords_and_defaults(self):
        service = mock(UserService)
        when(service, 'find_by_name', 'alice').then_return([User('alice')])
        assert service.find_by_name('alice') == [User('alice')]
        assert service.find_by_name('alice', 10) == [User('alice')]
        assert service.find_by_name(name='alice', limit=10) == [User('alice')]
        assert service.find_by_name('alice', 5) == []

    def test_wrong_signature(self):
        service = mock(UserService)
        with pytest.raises(TypeError):
            service.find_by_id()
        with pytest.raises(TypeError):
            service.find_by_id(1, 2)
        with pytest.raises(TypeError):
            when(service, 'find_by_id', 1, 2)

    def test_lax_signature(self):
        with local_base_config({'mock': {'strict_signatures': False}}):
            service = mock(UserService)
            when(service, 'find_by_id', 1, 2).then_return(User('x'))
            assert service.find_by_id(1, 2) == User('x')

    def test_var_args(self):
        service = mock(UserService)
        when(service, 'tag', 'a', 'b', color='red').then_return('tagged')
        assert service.tag('a', 'b', color='red') == 'tagged'
        assert service.tag('a', 'b') is None

    def test_property(self):
        service = mock(UserService)
        assert service.size == 0
        when(service, 'size').then_return(5)
        assert service.size == 5

    def test_async_method(self):
        user = User('alice')
        service = mock(UserService)
        when(service, 'fetch', 1).then_return(user)
        assert asyncio.run(service.fetch(1)) is user
        assert asyncio.run(service.fetch(2)) is None

    def test_async_raises_on_await(self):
        service = mock(UserService)
        when(service, 'fetch', 1).then_throw(KeyError('x'))
        coro = service.fetch(1)
        with pytest.raises(KeyError):
            asyncio.run(coro)

    def test_chaining_returns_builder(self):
        service = mock(UserService)
        builder = when(service, 'count')
        assert builder.then_return(1) is builder

    def test_isolation_between_mocks(self):
        service1 = mock(UserService)
        service2 = mock(UserService)
        when(service1, 'count').then_return(1)
        assert service1.count() == 1
        assert service2.count() == 0

    def test_reset(self):
        service = mock(UserService)
        when(service, 'count').then_return(1)
        service.count()
        reset(service)
        assert service.count() == 0
        verify(service).once().count()

    def test_clear_invocations_keeps_stubs(self):
        service = mock(UserService)
        when(service, 'count').then_return(1)
        service.count()
        service.count()
        clear_invocations(service)
        verify(service).never().count()
        assert invocations(service) == []
        assert service.count() == 1
        verify(service).once().count()

    def test_argument_changed_after_when(self):
        service = mock(UserService)
        tags = ['a']
        when(service, 'tag', tags).then_return('stubbed')
        tags.append('b')
        assert service.tag(['a']) == 'stubbed'
        assert service.tag(['a', 'b']) is None

    def test_argument_changed_after_call(self):
        service = mock(UserService)
        tags = ['a']
        service.tag(tags)
        tags.append('b')
        verify(service).once().tag(['a'])
        verify(service).never().tag(['a', 'b'])

    def test_nested_argument_changed_after_call(self):
        service = mock(UserService)
        options = {'x': [1]}
        service.tag(options)
        options['x'].append(2)
        verify(service).once().tag({'x': [1]})

    def test_identity_arguments_still_match(self):
        service = mock(UserService)
        marker = object()
        when(service, 'tag', marker).then_return(1)
        assert service.tag(marker) == 1
        assert service.tag(object()) is None


class TestMisuse(object):
    def test_when_on_non_mock(self):
        with pytest.raises(MisuseError):
            when(object(), 'foo')
        with pytest.raises(MisuseError):
            when(UserService, 'count')

    def test_verify_on_non_mock(self):
        with pytest.raises(MisuseError):
            verify('service')

    def test_unknown_member(self):
        service = mock(UserService)
        with pytest.raises(MisuseError):
            when(service, 'no_such_member')

    def test_static_member_hint(self):
        service = mock(UserService)
        with pytest.raises(MisuseError) as excinfo:
            when(service, 'version')
        assert 'when_static' in str(excinfo.value)

    def test_private_member_hint(self):
        service = mock(UserService)
        with pytest.raises(MisuseError) as excinfo:
            when(service, '_audit')
        assert 'when_private' in str(excinfo.value)

    def test_member_name_type(self):
        service = mock(UserService)
        with pytest.raises(MisuseError):
            when(service, 42)


class TestProxy(object):
    def test_instance_of_shape(self):
        service = mock(UserService)
        assert isinstance(service, UserService)
        assert is_mock(service)
        assert not is_mock(object())

    def test_constructor_not_run(self):
        # UserService.__init__ raises
        mock(UserService)

    def test_repr_eq_hash(self):
        service1 = mock(UserService)
        service2 = mock(UserService)
        assert repr(service1) == '<StandIn mock of UserService>'
        assert service1 == service1
        assert service1 != service2
        assert len(set([service1, service2])) == 2

    def test_static_and_private_members_are_original(self):
        service = mock(UserService)
        assert service.version() == 'real version'
        assert service._audit() == 'real audit'

    def test_signature_preserved(self):
        service = mock(UserService)
        assert list(inspect.signature(service.find_by_name).parameters) == ['name', 'limit']
        assert service.find_by_id.__name__ == 'find_by_id'

    def test_abstract_class(self):
        repo = mock(Repository)
        assert isinstance(repo, Repository)
        assert repo.get('a') is None
        assert repo.keys() == []
        assert repo.size == 0
        when(repo, 'get', 'a').then_return('b')
        assert repo.get('a') == 'b'

    def test_protocol(self):
        greeter = mock(Greeter)
        assert greeter.greet('bob') == ''
        when(greeter, 'greet', 'bob').then_return('hi bob')
        assert greeter.greet('bob') == 'hi bob'

    def test_protocol_methods(self):
        seq = mock(Sequence)
        assert len(seq) == 0
        assert seq[0] == ''
        assert 'x' not in seq
        when(seq, '__len__').then_return(2)
        when(seq, '__getitem__', 1).then_return('one')
        assert len(seq) == 2
        assert seq[1] == 'one'

    def test_members(self):
        members = shape_members(UserService)
        assert 'find_by_id' in members
        assert 'size' in members
        assert 'fetch' in members and members['fetch'].is_async
        assert 'version' not in members
        assert 'create' not in members
        assert '_audit' not in members
        assert '__init__' not in members

    def test_name(self):
        service = mock(UserService, name='users')
        assert identity_of(service).name == 'users'
        assert identity_of(mock(UserService)).name == 'user_service'

    def test_invocations(self):
        service = mock(UserService)
        service.count()
        service.find_by_id(1)
        assert [inv.selector.member for inv in invocations(service)] == ['count', 'find_by_id']


class TestDynamicMock(object):
    def test_any_member(self):
        m = mock()
        assert m.anything(1, 2) is None
        when(m, 'anything', 1, 2).then_return('x')
        assert m.anything(1, 2) == 'x'
        assert m.anything(1, 2, key='v') is None
        verify(m).times(2).anything(1, 2)

    def test_private_attributes(self):
        m = mock()
        with pytest.raises(AttributeError):
            m._private

    def test_disabled(self):
        with local_base_config({'mock': {'allow_dynamic': False}}):
            with pytest.raises(MisuseError):
                mock()


class TestUnsupportedShapes(object):
    def test_not_a_class(self):
        with pytest.raises(UnsupportedShapeError):
            mock(42)
        with pytest.raises(UnsupportedShapeError):
            mock(User('a'))

    def test_builtin_final(self):
        with pytest.raises(UnsupportedShapeError) as excinfo:
            mock(bool)
        assert excinfo.value.shape is bool

    def test_no_members(self):
        with pytest.raises(UnsupportedShapeError):
            mock(Empty)
        with pytest.raises(UnsupportedShapeError):
            mock(OnlyStatic)

    def test_is_type_error(self):
        with pytest.raises(TypeError):
            mock(Empty)

    @pytest.mark.skipif(sys.version_info < (3, 11), reason='typing.final marks classes since 3.11')
    def test_final_class(self):
        with pytest.raises(UnsupportedShapeError):
            mock(Token)

    @pytest.mark.skipif(sys.version_info < (3, 11), reason='typing.final marks classes since 3.11')
    def test_final_class_with_hooks(self, caplog):
        install_private_hook(Token, '_secret')
        token = mock(Token)
        assert type(token) is Token
        assert 'can not be subclassed' in caplog.text
        assert token.value() == 'real token'
        when_private(token, '_secret').then_return('fake')
        assert token.value() == 'fake'
        with pytest.raises(MisuseError):
            when(token, 'value')
