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
StandIn: test doubles for Python classes.
"""

from standin.api import (
    clear_invocations,
    invocations,
    mock,
    reset,
    reset_all_globals,
    reset_global,
    reset_private,
    verify,
    when,
    when_constructor,
    when_private,
    when_static,
)
from standin.behavior import PROCEED
from standin.defaults import register_default
from standin.errors import (
    ConfigurationError,
    MisuseError,
    StandInError,
    UnsupportedShapeError,
    VerificationFailure,
)
from standin.hook import (
    install_constructor_hook,
    install_hooks,
    install_private_hook,
    install_static_hook,
    redirectable_private,
    redirectable_static,
    uninstall_hooks,
)
from standin.redirect import (
    construct,
    resolve_constructor_call,
    resolve_private_call,
    resolve_static_call,
)
from standin.session import MockSession
from standin.version import __version__

__all__ = [
    'mock', 'when', 'verify', 'reset', 'clear_invocations', 'invocations',
    'when_static', 'when_constructor', 'when_private',
    'reset_global', 'reset_private', 'reset_all_globals',
    'construct', 'resolve_constructor_call', 'resolve_static_call',
    'resolve_private_call', 'PROCEED',
    'install_hooks', 'install_static_hook', 'install_private_hook',
    'install_constructor_hook', 'uninstall_hooks',
    'redirectable_static', 'redirectable_private',
    'register_default', 'MockSession',
    'StandInError', 'MisuseError', 'UnsupportedShapeError', 'VerificationFailure',
    'ConfigurationError', '__version__',
]
