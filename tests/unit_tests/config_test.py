# -*- coding: utf-8 -*-

import pytest

from pledge import config


class TestConfig(object):

    def test_default_values(self, reset_config):
        assert config.get('scheduler') == 'thread'
        assert config.get('debug_mode') is False

    def test_set_value(self, reset_config):
        config.set('debug_mode', True)
        assert config.get('debug_mode') is True
        config.set('scheduler', 'manual')
        assert config.get('scheduler') == 'manual'

    def test_unknown_key(self, reset_config):
        with pytest.raises(KeyError):
            config.get('foo')
        with pytest.raises(KeyError):
            config.set('foo', 'bar')

    def test_load_file(self, reset_config, tmpdir):
        config_file = tmpdir.join('pledge.ini')
        config_file.write('[pledge]\n'
                          'scheduler = manual\n'
                          'debug_mode = yes\n')

        assert config.load(str(config_file))
        assert config.get('scheduler') == 'manual'
        assert config.get('debug_mode') is True

    def test_load_missing_file(self, reset_config, tmpdir, caplog):
        assert not config.load(str(tmpdir.join('missing.ini')))
        assert 'Unable to load config file' in caplog.text
        assert config.get('scheduler') == 'thread'

    def test_invalid_value(self, reset_config):
        config.set('debug_mode', 'maybe')
        assert config.get('debug_mode') is False

    def test_reset(self, reset_config):
        config.set('scheduler', 'manual')
        config.reset()
        assert config.get('scheduler') == 'thread'

    def test_default_config_file_path(self):
        assert config.get_config_file_path().endswith('pledge.ini')
