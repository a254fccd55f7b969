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
Process-wide configuration.

The configuration is shared by all threads. Redirection tables are
visible to every thread, so the options that control them are as well.
"""
import copy
import contextlib
import threading

from standin.errors import ConfigurationError
from standin.util.yaml import load_yaml_file, YAMLError

import logging
log = logging.getLogger(__name__)


class Options(dict):
    """
    Dictionary with attribute style access.

    >>> o = Options(bar='foo')
    >>> o.bar
    'foo'
    """
    def __repr__(self):
        return '%s(%s)' % (self.__class__.__name__, dict.__repr__(self))

    def __getattr__(self, name):
        if name in self:
            return self[name]
        else:
            raise AttributeError(name)

    __setattr__ = dict.__setitem__

    def __delattr__(self, name):
        if name in self:
            del self[name]
        else:
            raise AttributeError(name)

    def update(self, other=None, **kw):
        if other is not None:
            if hasattr(other, 'items'):
                it = other.items()
            else:
                it = iter(other)
        else:
            it = kw.items()
        for key, value in it:
            if key in self and isinstance(self[key], Options):
                self[key].update(value)
            else:
                self[key] = value

    def __deepcopy__(self, memo):
        return Options(copy.deepcopy(list(self.items()), memo))


class _ConfigStack(object):
    def __init__(self):
        self._lock = threading.Lock()
        self._stack = []

    @property
    def top(self):
        with self._lock:
            if self._stack:
                return self._stack[-1]
            return None

    def push(self, conf):
        with self._lock:
            self._stack.append(conf)

    def pop(self):
        with self._lock:
            return self._stack.pop()

    def replace_top(self, conf):
        with self._lock:
            if self._stack:
                self._stack[-1] = conf
            else:
                self._stack.append(conf)

_config = _ConfigStack()


def base_config():
    """
    Returns the process-wide configuration, loading the defaults on
    first access.
    """
    config = _config.top
    if config is None:
        config = load_default_config()
        _config.replace_top(config)
    return config


@contextlib.contextmanager
def local_base_config(conf):
    """
    Temporarily replace the configuration (e.g. within a single test).

    `conf` can be a complete `Options` tree or a partial dict that is
    merged on top of the current configuration.
    """
    merged = copy.deepcopy(base_config())
    merged.update(_to_options_map(conf))
    _config.push(merged)
    try:
        yield merged
    finally:
        _config.pop()


def _to_options_map(mapping):
    if isinstance(mapping, dict):
        opt = Options()
        for key, value in mapping.items():
            opt[key] = _to_options_map(value)
        return opt
    elif isinstance(mapping, list):
        return [_to_options_map(m) for m in mapping]
    else:
        return mapping


def _default_config_dict():
    from standin.config import defaults
    config_dict = {}
    for k, v in defaults.__dict__.items():
        if k.startswith('_'): continue
        if not isinstance(v, dict): continue
        config_dict[k] = copy.deepcopy(v)
    return config_dict


def load_default_config():
    default_conf = Options()
    load_config(default_conf, config_dict=_default_config_dict())
    return default_conf


def load_base_config(config_file=None, clear_existing=False):
    """
    Load the process-wide configuration.

    :param config_file: the file name of a standin.yaml configuration.
                        if ``None``, only the built-in defaults are loaded
    :param clear_existing: if ``True`` start from the built-in defaults,
                           else overwrite the current settings.
    """
    if clear_existing or _config.top is None:
        conf = load_default_config()
    else:
        conf = copy.deepcopy(base_config())

    if config_file is not None:
        try:
            config_dict = load_yaml_file(config_file)
        except YAMLError as ex:
            raise ConfigurationError('could not load %s' % config_file, [str(ex)])

        from standin.config.validator import validate
        errors = validate(config_dict)
        if errors:
            raise ConfigurationError('invalid configuration in %s' % config_file, errors)
        load_config(conf, config_dict=config_dict)
        log.info('loaded configuration from %s', config_file)

    _config.replace_top(conf)
    return conf


def load_config(config, config_file=None, config_dict=None, clear_existing=False):
    if clear_existing:
        for key in list(config.keys()):
            del config[key]

    if config_dict is None:
        config_dict = load_yaml_file(config_file)

    defaults = _to_options_map(config_dict)

    if defaults:
        for key, value in defaults.items():
            if key in config and hasattr(config[key], 'update'):
                config[key].update(value)
            else:
                config[key] = value
