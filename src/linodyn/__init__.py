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

"""Linodyn, the Linode Dynamic DNS record synchronizer

Top-level module, containing the pieces a driver needs to run an update.
"""

from .configstore import ConfigStore, normalize_credential
from .configuration import Config, read_config, read_config_from_path
from .decoder import ResponseDecoder, decode, error_messages
from .engine import SyncEngine
from .exceptions import (LinodynException, LinodynSetupError, ConfigError,
                         ConfigUnavailable, OutcomeNotSaved,
                         RunPreconditionError, MissingCredential,
                         NoRecordsConfigured, UpdateError,
                         TransportError, MalformedResponse,
                         ProviderReportedError)
from .provider import LinodeClient
from .records import TrackedRecord, RunOutcome, Zone
from .report import UpdateResult, RunReport
