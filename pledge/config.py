# -*- coding: utf-8 -*-

"""Manages the settings of the promise library.

Settings are loaded from an optional configuration file, in the ``[pledge]``
section. If they don't exists, default values are provided.

The config file is only read when ``load()`` is called. Without it, all
entries keep their default values, and can be modified with ``set()``.
"""

import configparser
import logging
import os.path
import appdirs

_logger = logging.getLogger(__name__)

_SECTION = 'pledge'

# Default config dict. Values not present in this dict are not valid.
# Each entry contains the type expected, and the default value.
_default_config = {
    'scheduler': {'type': str, 'default': 'thread'},
    'debug_mode': {'type': bool, 'default': False},
}

_config_parser = configparser.ConfigParser()
_config_parser.add_section(_SECTION)


def get_config_file_path():
    """Returns the default path of the config file, in the user config dir."""
    config_dir = appdirs.user_config_dir(appname='pledge', appauthor=False)
    return os.path.join(config_dir, 'pledge.ini')


def load(path=None):
    """Find and load the config file.

    Args:
        path (str, optional): path of the ini file. By default, the file
            'pledge.ini' of the user config directory is used.
    Returns:
        boolean: True if the file has been read; False otherwise.
    """
    if path is None:
        path = get_config_file_path()

    if not _config_parser.read(path):
        _logger.warning('Unable to load config file: %s', path)
        return False

    _logger.debug('Config file %s loaded.', path)
    return True


def get(key):
    """Find and return a configuration entry

    If the entry is not specified, the default value is returned.

    Args:
        key (string): the entry key.
    Returns:
        The corresponding value found.
    Raises:
        KeyError: if the config entry doesn't exists.
    """
    if key not in _default_config:
        raise KeyError(key)
    try:
        if _default_config[key]['type'] is bool:
            return _config_parser.getboolean(_SECTION, key)
        elif _default_config[key]['type'] is int:
            return _config_parser.getint(_SECTION, key)
        else:
            return _config_parser.get(_SECTION, key)
    except configparser.NoOptionError:
        return _default_config[key]['default']
    except ValueError:
        _logger.warning('Invalid value for config entry "%s"; the default '
                        'value is used.', key)
        return _default_config[key]['default']


def set(key, value):
    """Set a configuration entry.

    The value is only modified in memory; the config file is never written.

    Args:
        key (string): the entry key.
        value: the new value to set. It will be converted to string.
    Raises:
        KeyError: if the config entry is not valid.
    """
    if key not in _default_config:
        raise KeyError(key)
    _config_parser.set(_SECTION, key, str(value))


def reset():
    """Forget all loaded and set values, and go back to the defaults."""
    for key in list(_config_parser.options(_SECTION)):
        _config_parser.remove_option(_SECTION, key)
