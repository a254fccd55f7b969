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
Framework errors.

Exceptions configured with ``then_throw`` are not wrapped in any of these
classes. They are raised as the very object that was configured.
"""


class StandInError(Exception):
    """
    Base class for all errors raised by StandIn itself.
    """


class MisuseError(StandInError):
    """
    Raised at configuration time when the API is used in a way that can
    never work, e.g. ``when()`` on an object that is not a mock.
    """


class UnsupportedShapeError(StandInError, TypeError):
    """
    Raised when a shape offers no interception point at all.

    :ivar shape: the rejected shape
    """
    def __init__(self, message, shape=None):
        StandInError.__init__(self, message)
        self.shape = shape


class ConfigurationError(StandInError):
    """
    Raised when a configuration file can not be loaded.

    :ivar errors: list of validation messages
    """
    def __init__(self, message, errors=None):
        StandInError.__init__(self, message)
        self.errors = list(errors or [])

    def __str__(self):
        if not self.errors:
            return self.args[0]
        return '%s:\n  %s' % (self.args[0], '\n  '.join(self.errors))


class VerificationFailure(AssertionError):
    """
    Raised when the observed call count of a selector does not match.

    :ivar selector: the verified `Selector`
    :ivar expected: expected count, ``None`` for "at least once"
    :ivar actual: observed count
    """
    def __init__(self, message, selector=None, expected=None, actual=None):
        AssertionError.__init__(self, message)
        self.selector = selector
        self.expected = expected
        self.actual = actual
