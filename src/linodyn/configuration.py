#  Linodyn - Linode Dynamic DNS record synchronizer
#  Copyright (C) 2026 Linodyn contributors
#
#  This program is free software: you can redistribute it and/or modify
#  it under the terms of the GNU General Public License as published by
#  the Free Software Foundation, either version 3 of the License, or
#  (at your option) any later version.
#
#  This program is distributed in the hope that it will be useful,
#  but WITHOUT ANY WARRANTY; without even the implied warranty of
#  MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
#  GNU General Public License for more details.
#
#  You should have received a copy of the GNU General Public License
#  along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""Linodyn settings file parsing"""

import configparser
import os.path
import pathlib
import sys
from typing import Dict, TextIO, Union

if sys.version_info < (3, 10):
    from importlib_metadata import version
else:
    from importlib.metadata import version

from .exceptions import ConfigError


VERSION = version('linodyn')

USER_AGENT = f"linodyn/{VERSION}"


DEFAULT_CONFIG_FILE = '~/.config/linodyn/linodyn.conf'
DEFAULT_DATA_DIR = '~/.local/share/linodyn'
DEFAULT_ENDPOINT = 'https://api.linode.com/'
DEFAULT_TIMEOUT = '20'
DEFAULT_WORKERS = '1'
DEFAULT_LOGFILE = 'stderr'

STORE_FILENAME = 'store.json'


class Config:
    """Linodyn settings (from the ``[linodyn]`` section)

    :param main: Dict of raw settings
    :raises ConfigError: if a setting is invalid
    """

    def __init__(self, main: Dict[str, str]):
        #: Raw settings, with defaults filled in
        self.main: Dict[str, str] = dict(main)
        self._fill_defaults()

        #: Directory holding the store
        self.datadir: str = os.path.expanduser(self.main['datadir'])
        if not os.path.isabs(self.datadir):
            raise ConfigError("Config option 'datadir' cannot be a relative "
                              "path")

        #: Base URL of the API
        self.endpoint: str = self.main['endpoint']

        #: Per-request timeout, in seconds
        try:
            self.timeout: float = float(self.main['timeout'])
        except ValueError:
            raise ConfigError("Config option 'timeout' must be a number"
                              ) from None
        if self.timeout <= 0:
            raise ConfigError("Config option 'timeout' must be positive")

        #: Maximum number of records updated at once
        try:
            self.workers: int = int(self.main['workers'])
        except ValueError:
            raise ConfigError("Config option 'workers' must be an integer"
                              ) from None
        if self.workers < 1:
            raise ConfigError("Config option 'workers' must be at least 1")

        #: ``stderr``, ``syslog``, or a path to a log file
        self.logfile: str = self.main['logfile']

    def _fill_defaults(self):
        """Fill in defaults if they are not yet set"""
        self.main.setdefault('datadir', DEFAULT_DATA_DIR)
        self.main.setdefault('endpoint', DEFAULT_ENDPOINT)
        self.main.setdefault('timeout', DEFAULT_TIMEOUT)
        self.main.setdefault('workers', DEFAULT_WORKERS)
        self.main.setdefault('logfile', DEFAULT_LOGFILE)

    @property
    def store_path(self) -> str:
        """Path to the store file"""
        return os.path.join(self.datadir, STORE_FILENAME)


def _process_config(config: configparser.ConfigParser) -> Config:
    """Process the given :class:`~configparser.ConfigParser` into a
    :class:`Config`

    :param config: The configuration to process
    :raises ConfigError: if the configuration is invalid
    :returns: the processed and validated configuration
    """
    main: Dict[str, str] = dict()

    for section in config.sections():
        if section == 'linodyn':
            main.update(config[section])
        else:
            raise ConfigError("Config section %s is not a linodyn section"
                              % section)

    return Config(main)


def read_config(configfile: TextIO) -> Config:
    """Read settings in from the given file

    :param configfile: Filelike object to read the settings from
    :raises ConfigError: if the file cannot be read or is invalid
    :return: A :class:`Config`
    """
    config = configparser.ConfigParser()
    try:
        config.read_file(configfile)
    except configparser.Error as e:
        raise ConfigError("Error in config file: %s" % e) from e
    except OSError as e:
        raise ConfigError("Could not read config file: %s" % e.strerror
                          ) from e

    return _process_config(config)


def read_config_from_path(filename: Union[str, pathlib.Path]) -> Config:
    """Read settings from the named file or :class:`~pathlib.Path`

    :param filename: Filename or path to read from
    :raises ConfigError: if the file cannot be read or is invalid
    :return: A :class:`Config`
    """
    try:
        with open(filename, 'r') as f:
            return read_config(f)
    except OSError as e:
        raise ConfigError("Could not read config file %s: %s" %
                          (filename, e.strerror)) from e


def default_config() -> Config:
    """Settings to use when the default settings file does not exist"""
    return Config(dict())
