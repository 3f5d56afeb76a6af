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

"""Value types shared by the store, the provider client and the engine"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TrackedRecord:
    """A DNS record whose address should follow this host

    :param display_name: Fully qualified name shown to the user, e.g.
                         ``www.example.com (A)``. Unique within the store.
    :param zone_id: Provider's ID for the zone containing the record
    :param record_id: Provider's ID for the record itself
    """
    display_name: str
    zone_id: int
    record_id: int

    def encode(self) -> str:
        """The on-disk value for this record: ``"<zone_id>,<record_id>"``"""
        return f"{self.zone_id},{self.record_id}"

    @classmethod
    def decode(cls, display_name: str, value: str) -> 'TrackedRecord':
        """Rebuild a record from its display name and on-disk value

        :raises ValueError: if the value is not two comma-separated integers
        """
        zone_id, sep, record_id = value.partition(',')
        if sep == '':
            raise ValueError(f"Expected '<zone>,<record>', got {value!r}")
        return cls(display_name, int(zone_id), int(record_id))


@dataclass(frozen=True)
class RunOutcome:
    """Timestamp and overall result of the most recent run"""
    timestamp: str
    success: bool


@dataclass(frozen=True)
class Zone:
    """A master DNS zone under the account"""
    zone_id: int
    domain: str
