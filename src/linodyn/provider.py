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

"""Client for the Linode DNS Manager API"""

import logging
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode

import requests

from .configuration import DEFAULT_ENDPOINT, DEFAULT_TIMEOUT, USER_AGENT
from .decoder import decode, error_messages
from .exceptions import (MalformedResponse, ProviderReportedError,
                         TransportError, UpdateError)
from .records import TrackedRecord, Zone
from .report import UpdateResult

#: Target value the API replaces with the address the request came from
REMOTE_ADDR = '[remote_addr]'

UPDATE_ACTION = 'domain.resource.update'


class LinodeClient:
    """Issues API calls and interprets the replies. Each method makes exactly
    one request and never retries.

    :param endpoint: Base URL of the API
    :param timeout: Timeout for each request, in seconds
    """

    def __init__(self,
                 endpoint: str = DEFAULT_ENDPOINT,
                 timeout: float = float(DEFAULT_TIMEOUT)):
        self.log = logging.getLogger('linodyn.provider')
        self.endpoint = endpoint
        self.timeout = timeout

    def _fetch(self,
               credential: str,
               action: str,
               params: Optional[Dict[str, Union[str, int]]] = None) -> str:
        """Issue one API request and return the response body

        :param credential: The API key
        :param action: The ``api_action`` to perform
        :param params: Additional query parameters

        :raises TransportError: if the request fails or returns a non-2xx
                                status
        """
        if credential is None:
            raise TypeError("API key must not be None")
        query: List[Tuple[str, Union[str, int]]] = [
            ('api_key', credential),
            ('api_action', action),
        ]
        if params is not None:
            query.extend(params.items())

        self.log.debug("Calling %s with %s", action, params)
        try:
            # Brackets must stay literal so the API recognizes REMOTE_ADDR
            r = requests.get(self.endpoint,
                             params=urlencode(query, safe='[]'),
                             headers={'User-Agent': USER_AGENT},
                             timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self.log.error("Could not call %s: %s", action, e)
            raise TransportError(f"Could not access {self.endpoint}: {e}"
                                 ) from e

        try:
            r.raise_for_status()
        except requests.exceptions.HTTPError as e:
            self.log.error("Received HTTP %d when calling %s:\n%s",
                           r.status_code, action, r.text)
            raise TransportError(f"Got HTTP {r.status_code} from "
                                 f"{self.endpoint}") from e

        return r.text

    def _decode(self, action: str, text: str) -> Any:
        """Decode a response body and raise for any errors it reports

        :raises MalformedResponse: if the body cannot be decoded
        :raises ProviderReportedError: if the body has a non-empty error array
        """
        try:
            value = decode(text)
        except MalformedResponse as e:
            self.log.error("Could not decode response to %s (%s):\n%s",
                           action, e, text)
            raise

        has_errors, messages = error_messages(value)
        if has_errors:
            self.log.error("API returned error for %s: %s",
                           action, '; '.join(messages))
            raise ProviderReportedError(messages[0])
        return value

    def _call(self,
              credential: str,
              action: str,
              params: Optional[Dict[str, Union[str, int]]] = None) -> Any:
        """Issue one API request and return its decoded response

        :raises UpdateError: if the request or response fails in any way
        """
        return self._decode(action, self._fetch(credential, action, params))

    def update(self, credential: str, record: TrackedRecord) -> UpdateResult:
        """Point a record at the address this request comes from

        Failures are reported in the result, not raised.

        :param credential: The API key
        :param record: The record to update
        :return: The :class:`~linodyn.UpdateResult` for the record
        """
        params = {
            'DomainID': record.zone_id,
            'ResourceID': record.record_id,
            'Target': REMOTE_ADDR,
        }
        try:
            text = self._fetch(credential, UPDATE_ACTION, params)
            response = self._decode(UPDATE_ACTION, text)
        except MalformedResponse as e:
            return UpdateResult(record, False,
                                e.body or "Empty response from server")
        except UpdateError as e:
            return UpdateResult(record, False, str(e))

        expected = {
            'ACTION': UPDATE_ACTION,
            'DATA': {'ResourceID': record.record_id},
            'ERRORARRAY': [],
        }
        if response != expected:
            self.log.error("Unexpected response updating %s:\n%s",
                           record.display_name, text)
            return UpdateResult(record, False, f"Unexpected response: {text}")

        self.log.info("Updated %s", record.display_name)
        return UpdateResult(record, True)

    def check_credential(self, credential: str) -> bool:
        """Check whether the API key is accepted, using the ``test.echo``
        action

        :raises TransportError: if the API could not be reached
        :raises MalformedResponse: if the reply could not be decoded
        """
        try:
            response = self._call(credential, 'test.echo', {'foo': 'bar'})
        except ProviderReportedError:
            return False
        return response == {
            'ACTION': 'test.echo',
            'DATA': {'foo': 'bar'},
            'ERRORARRAY': [],
        }

    def _data_entries(self, action: str, response: Any) -> List[Any]:
        try:
            data = response['DATA']
        except (KeyError, TypeError):
            data = None
        if not isinstance(data, list):
            self.log.error("Unknown response structure from %s", action)
            raise MalformedResponse(f"Unknown response structure from "
                                    f"{action}")
        return data

    def list_zones(self, credential: str) -> List[Zone]:
        """Get the master zones under the account, sorted by domain

        :raises UpdateError: if the zones could not be fetched
        """
        response = self._call(credential, 'domain.list')

        zones: Dict[str, Zone] = dict()
        try:
            for entry in self._data_entries('domain.list', response):
                if str(entry['TYPE']).lower() != 'master':
                    continue
                domain = str(entry['DOMAIN'])
                zones.setdefault(domain, Zone(int(entry['DOMAINID']), domain))
        except (KeyError, TypeError, ValueError) as e:
            self.log.error("Unknown response structure from domain.list")
            raise MalformedResponse("Unknown response structure from "
                                    "domain.list") from e

        return [zones[domain] for domain in sorted(zones)]

    def list_records(self, credential: str, zone: Zone) -> List[TrackedRecord]:
        """Get the A and AAAA records in a zone, sorted by display name

        :param credential: The API key
        :param zone: The zone to list

        :raises UpdateError: if the records could not be fetched
        """
        action = 'domain.resource.list'
        response = self._call(credential, action, {'DomainID': zone.zone_id})

        records: Dict[str, TrackedRecord] = dict()
        try:
            for entry in self._data_entries(action, response):
                rec_type = str(entry['TYPE']).upper()
                if rec_type not in ('A', 'AAAA'):
                    continue
                name = str(entry['NAME'])
                if name:
                    display_name = f"{name}.{zone.domain} ({rec_type})"
                else:
                    display_name = f"{zone.domain} ({rec_type})"
                records.setdefault(display_name, TrackedRecord(
                    display_name, zone.zone_id, int(entry['RESOURCEID'])
                ))
        except (KeyError, TypeError, ValueError) as e:
            self.log.error("Unknown response structure from %s", action)
            raise MalformedResponse(f"Unknown response structure from "
                                    f"{action}") from e

        return [records[name] for name in sorted(records)]
