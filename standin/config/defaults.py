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

mock = dict(
    # bind calls against the declared signature of the mocked member
    strict_signatures = True,
    # fill declared parameter defaults into selectors
    apply_defaults = True,
    # allow mock() without a shape
    allow_dynamic = True,
)

defaults = dict(
    # '' and b'' for str and bytes results, None otherwise
    str_empty = True,
)

redirect = dict(
    # installed constructor hooks copy the fields of a configured instance
    constructor_field_copy = True,
)

verify = dict(
    error_prefix = '[StandIn] ',
)

log = dict(
    dispatch_debug = False,
)
