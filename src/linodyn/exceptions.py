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

"""All Linodyn exceptions"""


class LinodynException(Exception):
    """Base class for all Linodyn exceptions"""


class LinodynSetupError(LinodynException):
    """Base class for Linodyn exceptions that happen during startup"""


class ConfigError(LinodynSetupError):
    """Raised when the settings file is malformed or has other errors"""


class ConfigUnavailable(LinodynSetupError):
    """Raised when the persisted store cannot be opened, created, parsed, or
    written. Fatal to any driver."""


class OutcomeNotSaved(ConfigUnavailable):
    """Raised when a run finished but its outcome could not be written to the
    store. The updates themselves already happened.

    :param message: Description of the problem
    :param report: The report of the run that finished
    """

    def __init__(self, message: str, report):
        super().__init__(message)
        #: The :class:`~linodyn.RunReport` of the finished run
        self.report = report


class RunPreconditionError(LinodynException):
    """Base class for conditions that prevent a synchronization run from
    starting"""


class MissingCredential(RunPreconditionError):
    """Raised when no API key has been set"""


class NoRecordsConfigured(RunPreconditionError):
    """Raised when there are no tracked records to update"""


class UpdateError(LinodynException):
    """Base class for failures of a single API call. These never escape
    :meth:`~linodyn.LinodeClient.update`, which turns them into a failed
    :class:`~linodyn.UpdateResult`."""


class TransportError(UpdateError):
    """The request could not be completed: DNS resolution, connection,
    timeout, or a non-2xx HTTP status"""


class MalformedResponse(UpdateError):
    """The response body could not be decoded

    :param message: Description of the problem
    :param body: The raw response body
    """

    def __init__(self, message: str, body: str = ''):
        super().__init__(message)
        #: The raw response body that failed to decode
        self.body = body


class ProviderReportedError(UpdateError):
    """The provider answered with a non-empty error array. The message is the
    first entry's ``ERRORMESSAGE``."""
