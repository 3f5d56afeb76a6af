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

"""Per-record results and the report of a whole run"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from .records import TrackedRecord


@dataclass(frozen=True)
class UpdateResult:
    """Result of updating a single record

    :param record: The record that was updated
    :param success: Whether the provider confirmed the update
    :param error_detail: Why the update failed, if known
    """
    record: TrackedRecord
    success: bool
    error_detail: Optional[str] = None

    def line(self) -> str:
        """One report line: ``name: SUCCESS`` or ``name: FAILED[, detail]``"""
        if self.success:
            return f"{self.record.display_name}: SUCCESS"
        if self.error_detail:
            return f"{self.record.display_name}: FAILED, {self.error_detail}"
        return f"{self.record.display_name}: FAILED"


@dataclass(frozen=True)
class RunReport:
    """Read-only summary of one synchronization run. Drivers decide how to
    present it; :meth:`lines` is the common text form.

    :param results: One :class:`UpdateResult` per record, in record order
    :param success: ``True`` only if every record updated successfully
    :param timestamp: When the run happened
    :param message: Why the run never started, for runs that failed a
                    precondition
    """
    results: Tuple[UpdateResult, ...]
    success: bool
    timestamp: str
    message: Optional[str] = None

    @property
    def started(self) -> bool:
        """Whether any record was attempted"""
        return self.message is None

    def lines(self) -> List[str]:
        lines = [result.line() for result in self.results]
        if self.message is not None:
            lines.append(f"ERROR: {self.message}")
        return lines

    def summary(self) -> str:
        if self.success:
            return (f"All {len(self.results)} record(s) updated "
                    "successfully")
        if not self.started:
            return "Update did not run"
        failed = sum(1 for result in self.results if not result.success)
        return f"{failed} of {len(self.results)} record(s) failed to update"

    def __str__(self):
        return '\n'.join(self.lines() + [self.summary()])
