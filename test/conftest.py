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

import logging

import pytest

import doubles
import linodyn


ENDPOINT = doubles.ENDPOINT


@pytest.fixture
def empty_store(tmp_path):
    """Fixture creating a ConfigStore backed by a nonexistent file"""
    return linodyn.ConfigStore(tmp_path / "data" / "store.json")


@pytest.fixture
def memory_store():
    """Fixture creating a ConfigStore that never touches the disk"""
    return doubles.MemoryStore()


@pytest.fixture
def record_factory():
    """Fixture creating a factory for TrackedRecords with distinct IDs"""
    count = 0

    def factory(name=None):
        nonlocal count
        count += 1
        if name is None:
            name = f"host{count}.example.com (A)"
        return linodyn.TrackedRecord(name, 100, count)
    return factory


@pytest.fixture
def client():
    """Fixture creating a LinodeClient pointed at a test endpoint"""
    return linodyn.LinodeClient(ENDPOINT, timeout=5)


@pytest.fixture
def fake_client_factory():
    """Fixture creating a factory for clients that don't use the network"""
    def factory(failures=None):
        return doubles.FakeClient(failures)
    return factory


@pytest.fixture
def clock():
    """Fixture providing a fixed clock for SyncEngine"""
    return lambda: "Mon Oct 19 04:53:00 2026"


@pytest.fixture(autouse=True)
def reset_logging():
    """Remove any handler main() attached so later tests don't log to a
    closed capture stream"""
    yield
    log = logging.getLogger('linodyn')
    for handler in list(log.handlers):
        log.removeHandler(handler)
    log.setLevel(logging.NOTSET)
