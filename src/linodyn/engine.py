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

"""SyncEngine: runs one synchronization pass over the tracked records"""

import concurrent.futures
import datetime
import logging
import threading
from typing import Callable, List, Optional, Sequence

from .configstore import ConfigStore
from .exceptions import (ConfigUnavailable, MissingCredential,
                         NoRecordsConfigured, OutcomeNotSaved,
                         RunPreconditionError)
from .provider import LinodeClient
from .records import RunOutcome, TrackedRecord
from .report import RunReport, UpdateResult

CANCELLED = "cancelled"


def _now() -> str:
    return datetime.datetime.now().strftime('%c')


class SyncEngine:
    """Updates every tracked record once and records the outcome.

    A failure on one record never stops the others from being attempted.
    Every run that gets past reading the store overwrites the last run
    outcome, including runs that fail for lack of an API key or records.

    :param client: The :class:`~linodyn.LinodeClient` to update records with
    :param store: The :class:`~linodyn.ConfigStore` to record the outcome in
    :param workers: Maximum number of records to update at once. Results are
                    reported in record order regardless.
    :param clock: Returns the timestamp for a run
    """

    def __init__(self,
                 client: LinodeClient,
                 store: ConfigStore,
                 workers: int = 1,
                 clock: Callable[[], str] = _now):
        self.log = logging.getLogger('linodyn.engine')
        self.client = client
        self.store = store
        self.workers = workers
        self.clock = clock

    def run(self,
            credential: str,
            records: Sequence[TrackedRecord],
            cancel: Optional[threading.Event] = None) -> RunReport:
        """Update each record and return the report

        :param credential: The API key
        :param records: The records to update, in report order
        :param cancel: If given and set, records not yet attempted are
                       reported as failed without contacting the API

        :raises OutcomeNotSaved: if the outcome could not be saved. The
                                 exception carries the finished report.
        """
        timestamp = self.clock()
        try:
            self._check_preconditions(credential, records)
        except RunPreconditionError as e:
            self.log.error("Update did not run: %s", e)
            report = RunReport((), False, timestamp, str(e))
        else:
            self.log.info("Updating %d record(s)", len(records))
            if self.workers > 1 and len(records) > 1:
                results = self._update_concurrently(credential, records,
                                                    cancel)
            else:
                results = [self._update_one(credential, record, cancel)
                           for record in records]
            success = all(result.success for result in results)
            report = RunReport(tuple(results), success, timestamp)

        if report.success:
            self.log.info("Update run succeeded")
        else:
            self.log.warning("Update run failed")
        try:
            self.store.set_last_run_outcome(RunOutcome(timestamp,
                                                       report.success))
        except ConfigUnavailable as e:
            raise OutcomeNotSaved(str(e), report) from e
        return report

    @staticmethod
    def _check_preconditions(credential: str,
                             records: Sequence[TrackedRecord]):
        if not credential:
            raise MissingCredential("Linode API key has not been set")
        if not records:
            raise NoRecordsConfigured("No records found to be updated")

    def _update_one(self,
                    credential: str,
                    record: TrackedRecord,
                    cancel: Optional[threading.Event]) -> UpdateResult:
        if cancel is not None and cancel.is_set():
            self.log.info("Skipping %s: run cancelled", record.display_name)
            return UpdateResult(record, False, CANCELLED)
        self.log.debug("Updating %s", record.display_name)
        result = self.client.update(credential, record)
        if not result.success:
            self.log.error("Failed to update %s: %s",
                           record.display_name, result.error_detail)
        return result

    def _update_concurrently(
        self,
        credential: str,
        records: Sequence[TrackedRecord],
        cancel: Optional[threading.Event],
    ) -> List[UpdateResult]:
        """Update records on a thread pool. Waits for all of them, then
        returns the results in the same order as ``records``."""
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=self.workers
        ) as executor:
            futures = [executor.submit(self._update_one, credential, record,
                                       cancel)
                       for record in records]
            return [future.result() for future in futures]
