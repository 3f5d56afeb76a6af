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

"""ConfigStore: persists the API key, the tracked records, and the outcome of
the last run"""

# Store format:
#
# {
#     "api_key": "abc123",
#     "last_ran": "Mon Oct 19 04:53:00 2026",
#     "last_status": 0,
#     "records": {
#         "www.example.com (A)": "zone_id,record_id"
#         ...
#     }
# }
#
# Any key may be missing. last_status is 0 for success, anything else for
# failure. A missing last_ran means the updater has never run.

import json
import logging
import os
import os.path
import re
import tempfile
from typing import Any, Dict, List, Optional

from .exceptions import ConfigUnavailable
from .records import RunOutcome, TrackedRecord

log = logging.getLogger('linodyn.store')

_NOT_ALPHANUMERIC = re.compile(r'[^0-9a-zA-Z]')


def normalize_credential(token: str) -> str:
    """Strip everything except ASCII letters and digits from an API key"""
    return _NOT_ALPHANUMERIC.sub('', token)


class ConfigStore:
    """Manage the persisted store. Every setter writes the whole document
    back to disk before returning.

    :param path: Path to the store file. Parent directories are created on
                 the first write.

    :raises ConfigUnavailable: if the store exists but cannot be read or
                               is not a JSON object
    """

    def __init__(self, path):
        #: Path to the store file
        self.path = path

        #: Store contents between writes
        self._data: Dict[str, Any] = self._read_store()

    def _read_store(self) -> Dict[str, Any]:
        """Read the store in. A nonexistent store is an empty one."""
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            log.debug("Store %s does not exist yet. Starting empty.",
                      self.path)
            return dict()
        except json.JSONDecodeError as e:
            log.critical("Malformed JSON in store %s at (%d:%d)",
                         self.path, e.lineno, e.colno)
            raise ConfigUnavailable(f"Store {self.path} is not valid JSON"
                                    ) from e
        except UnicodeDecodeError as e:
            log.critical("Store %s is not valid UTF-8", self.path)
            raise ConfigUnavailable(f"Store {self.path} is not valid UTF-8"
                                    ) from e
        except OSError as e:
            log.critical("Could not read store %s: %s", self.path, e.strerror)
            raise ConfigUnavailable(f"Could not read store {self.path}: "
                                    f"{e.strerror}") from e

        if not isinstance(data, dict):
            log.critical("Store %s has unexpected JSON structure", self.path)
            raise ConfigUnavailable(f"Store {self.path} has unexpected JSON "
                                    "structure")

        if not isinstance(data.get('records', {}), dict):
            log.warning("Store %s has unexpected structure for 'records'. "
                        "Treating as empty.", self.path)
            data['records'] = dict()

        return data

    def _write_store(self):
        """Write out the store atomically and durably

        :raises ConfigUnavailable: if the store could not be written
        """
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.store.')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(self._data, f, sort_keys=True, indent=4)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_path, self.path)
            except BaseException:
                os.unlink(tmp_path)
                raise
            dir_fd = os.open(directory, os.O_RDONLY)
            try:
                os.fsync(dir_fd)
            finally:
                os.close(dir_fd)
        except OSError as e:
            log.error("Could not write store %s: %s", self.path, e.strerror)
            raise ConfigUnavailable(f"Could not write store {self.path}: "
                                    f"{e.strerror}") from e

    def get_credential(self) -> str:
        """Get the API key, or an empty string if none has been set"""
        credential = self._data.get('api_key', '')
        if not isinstance(credential, str):
            log.warning("Store %s has a non-string API key. Ignoring it.",
                        self.path)
            return ''
        return credential

    def set_credential(self, token: str):
        """Normalize and save the API key

        :param token: The new API key. Characters outside ``[0-9a-zA-Z]``
                      are removed.
        :raises ConfigUnavailable: if the store could not be written
        """
        self._data['api_key'] = normalize_credential(token)
        self._write_store()

    def list_tracked_records(self) -> List[TrackedRecord]:
        """Get the tracked records, sorted ordinally by display name.
        Malformed entries are logged and skipped."""
        result = []
        for name, value in self._data.get('records', {}).items():
            if not isinstance(value, str):
                log.warning("Skipping malformed entry for %s in store", name)
                continue
            try:
                result.append(TrackedRecord.decode(name, value))
            except ValueError as e:
                log.warning("Skipping malformed entry for %s in store: %s",
                            name, e)
        result.sort(key=lambda r: r.display_name)
        return result

    def add_tracked_record(self, record: TrackedRecord):
        """Start tracking a record. Does nothing if a record with the same
        display name is already tracked.

        :raises ConfigUnavailable: if the store could not be written
        """
        records = self._data.setdefault('records', dict())
        if record.display_name in records:
            log.debug("%s is already tracked", record.display_name)
            return
        records[record.display_name] = record.encode()
        self._write_store()
        log.info("Now tracking %s", record.display_name)

    def remove_tracked_record(self, display_name: str):
        """Stop tracking a record. Does nothing if it is not tracked.

        :raises ConfigUnavailable: if the store could not be written
        """
        records = self._data.get('records', {})
        if display_name not in records:
            log.debug("%s is not tracked", display_name)
            return
        del records[display_name]
        self._write_store()
        log.info("No longer tracking %s", display_name)

    def get_last_run_outcome(self) -> Optional[RunOutcome]:
        """Get the outcome of the last run, or ``None`` if it never ran"""
        timestamp = self._data.get('last_ran')
        if not timestamp:
            return None
        status = self._data.get('last_status', 1)
        return RunOutcome(str(timestamp), status == 0)

    def set_last_run_outcome(self, outcome: RunOutcome):
        """Overwrite the outcome of the last run

        :raises ConfigUnavailable: if the store could not be written
        """
        self._data['last_ran'] = outcome.timestamp
        self._data['last_status'] = 0 if outcome.success else 1
        self._write_store()
