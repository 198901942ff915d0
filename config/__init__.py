#/project/config/__init__.py

"""
ISC License

Copyright (c) 2023 Eric Chickering <eric.chickering@gmail.com>

Permission to use, copy, modify, and/or distribute this software for any
purpose with or without fee is hereby granted, provided that the above
copyright notice and this permission notice appear in all copies.

THE SOFTWARE IS PROVIDED "AS IS" AND THE AUTHOR DISCLAIMS ALL WARRANTIES
WITH REGARD TO THIS SOFTWARE INCLUDING ALL IMPLIED WARRANTIES OF
MERCHANTABILITY AND FITNESS. IN NO EVENT SHALL THE AUTHOR BE LIABLE FOR
ANY SPECIAL, DIRECT, INDIRECT, OR CONSEQUENTIAL DAMAGES OR ANY DAMAGES
WHATSOEVER RESULTING FROM LOSS OF USE, DATA OR PROFITS, WHETHER IN AN ACTION
OF CONTRACT, NEGLIGENCE OR OTHER TORTIOUS ACTION, ARISING OUT OF OR IN
CONNECTION WITH THE USE OR PERFORMANCE OF THIS SOFTWARE.

"""
import os
import yaml
import logging

from parse.exceptions import ConfigError

DEFAULT_CONFIG_PATH = '~/.panrules/config.yml'


class AppConfig:
    def __init__(self):
        self.tenant = 'default'
        self.output_path = os.path.join('storage', 'app', 'panorama_rules.ndjson')
        self.log_file = 'debug-log.txt'
        self.console_log_level = 'INFO'
        self.zone_fallback_threshold = 100

    def as_dict(self):
        return dict(vars(self))


class ConfigurationManager:
    """Loads optional overrides for :class:`AppConfig` from a YAML file."""

    def __init__(self, config_file_path=None, load=True):
        self.config_file_path = os.path.expanduser(config_file_path or DEFAULT_CONFIG_PATH)
        self.explicit = config_file_path is not None
        self.app_config = AppConfig()
        self.logger = logging.getLogger(__name__)
        if load:
            self.load()

    def load(self):
        if not os.path.exists(self.config_file_path):
            if self.explicit:
                raise ConfigError(f"Config file not found: {self.config_file_path}")
            self.logger.debug(f"No config file at {self.config_file_path}, using defaults")
            return self.app_config

        try:
            with open(self.config_file_path, 'r') as config_file:
                current_config = yaml.safe_load(config_file) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Unable to read config file {self.config_file_path}: {e}") from e

        if not isinstance(current_config, dict):
            raise ConfigError(f"Config file {self.config_file_path} must contain a mapping")

        known = self.app_config.as_dict()
        for key, value in current_config.items():
            if key not in known:
                self.logger.warning(f"Ignoring unknown setting '{key}' in {self.config_file_path}")
                continue
            setattr(self.app_config, key, value)

        try:
            self.app_config.zone_fallback_threshold = int(self.app_config.zone_fallback_threshold)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"zone_fallback_threshold must be an integer: {e}") from e

        level = str(self.app_config.console_log_level).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigError(f"Unknown console_log_level: {self.app_config.console_log_level}")
        self.app_config.console_log_level = level

        self.logger.info(f"Loaded settings from {self.config_file_path}")
        return self.app_config

    def create_default_config_file(self):
        os.makedirs(os.path.dirname(self.config_file_path) or '.', exist_ok=True)
        with open(self.config_file_path, 'w') as config_file:
            yaml.dump(AppConfig().as_dict(), config_file, default_flow_style=False)
        self.logger.info(f"Config file created at {self.config_file_path}.")
        return self.config_file_path
