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

import yaml


class YAMLError(Exception):
    pass


def load_yaml_file(file_or_filename):
    """
    Load a configuration dictionary from a file object or filename.
    """
    if isinstance(file_or_filename, str):
        with open(file_or_filename, 'rb') as f:
            return load_yaml(f)
    return load_yaml(file_or_filename)


def load_yaml(doc):
    """
    Load a configuration dictionary from a file object or string.
    An empty document is an empty configuration.
    """
    try:
        if getattr(yaml, '__with_libyaml__', False):
            data = yaml.load(doc, Loader=yaml.CSafeLoader)
        else:
            data = yaml.safe_load(doc)
    except yaml.YAMLError as ex:
        raise YAMLError(str(ex))

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise YAMLError('configuration not a YAML dictionary')
    return data
