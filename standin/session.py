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
Test scoped mocking.
"""

import threading

from standin import api, hook
from standin.dispatch import unfinished_verification_message
from standin.errors import MisuseError
from standin.factory import identity_of
from standin.redirect import construct, overrides

import logging
log = logging.getLogger(__name__)

__all__ = ['MockSession']


class MockSession(object):
    """
    Front end for the API that remembers what it changed.

    Global behaviors and hooks stay active until they are reset. A session
    resets everything that was configured or installed through it on
    `restore`, or when the ``with`` block ends::

        with MockSession() as session:
            service = session.mock(UserService)
            session.when_static(Clock, 'now').then_return(0)
            ...

    `restore` removes all hooks of a hooked class, including hooks that
    were installed outside of the session.
    """
    def __init__(self):
        self._lock = threading.Lock()
        self._mocks = []
        self._owners = []
        self._receivers = []
        self._hooked = []

    def _track(self, items, obj):
        with self._lock:
            for item in items:
                if item is obj:
                    return
            items.append(obj)

    def mock(self, shape=None, name=None):
        target = api.mock(shape, name)
        self._track(self._mocks, identity_of(target))
        return target

    def when(self, target, member, *args, **kwargs):
        return api.when(target, member, *args, **kwargs)

    def verify(self, target):
        return api.verify(target)

    def reset(self, target):
        api.reset(target)

    def clear_invocations(self, target):
        api.clear_invocations(target)

    def invocations(self, target):
        return api.invocations(target)

    def when_static(self, owner, member):
        builder = api.when_static(owner, member)
        self._track(self._owners, owner)
        return builder

    def when_constructor(self, owner, *parameter_types):
        builder = api.when_constructor(owner, *parameter_types)
        self._track(self._owners, owner)
        return builder

    def when_private(self, receiver, member):
        builder = api.when_private(receiver, member)
        self._track(self._receivers, receiver)
        return builder

    def construct(self, owner, *args, **kwargs):
        return construct(owner, *args, **kwargs)

    def install_hooks(self, owner, **kw):
        hooked = hook.install_hooks(owner, **kw)
        self._track(self._hooked, owner)
        return hooked

    def install_static_hook(self, owner, member):
        installed = hook.install_static_hook(owner, member)
        self._track(self._hooked, owner)
        return installed

    def install_private_hook(self, owner, member):
        installed = hook.install_private_hook(owner, member)
        self._track(self._hooked, owner)
        return installed

    def install_constructor_hook(self, owner):
        installed = hook.install_constructor_hook(owner)
        self._track(self._hooked, owner)
        return installed

    def restore(self):
        """
        Reset the mocks, global behaviors and hooks of this session.

        :raises MisuseError: after restoring, if a verification of one of
                             the mocks was left without a count
        """
        with self._lock:
            mocks, self._mocks = self._mocks, []
            owners, self._owners = self._owners, []
            receivers, self._receivers = self._receivers, []
            hooked, self._hooked = self._hooked, []

        unfinished = []
        for identity in mocks:
            if api.dispatcher.is_registered(identity):
                selector = api.dispatcher.take_pending_verification(identity)
                if selector is not None:
                    unfinished.append(unfinished_verification_message(identity, selector))
                api.dispatcher.reset(identity)
        for owner in owners:
            overrides.reset(owner)
        for receiver in receivers:
            overrides.reset_private(receiver)
        for owner in hooked:
            hook.uninstall_hooks(owner)
        log.debug('restored session: %d mocks, %d owners, %d receivers, %d hooked',
            len(mocks), len(owners), len(receivers), len(hooked))
        if unfinished:
            raise MisuseError('; '.join(unfinished))

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        try:
            self.restore()
        except MisuseError as ex:
            if exc_type is None:
                raise
            log.warning('%s (while handling %s)', ex, exc_type.__name__)
        return False
