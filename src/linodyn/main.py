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

import argparse
import logging
import logging.handlers
import os.path
import signal
import sys
import threading

from . import configuration
from .configstore import ConfigStore
from .engine import SyncEngine
from .exceptions import (ConfigError, ConfigUnavailable, OutcomeNotSaved,
                         UpdateError)
from .provider import LinodeClient
from .records import TrackedRecord

log = logging.getLogger('linodyn')


def _normalize_args(argv):
    """Accept the historical ``-run`` batch flag in any letter case"""
    return ['--run' if arg.lower() in ('-run', '--run') else arg
            for arg in argv]


def parse_args(argv):
    """Parse command line arguments

    :param argv: Either ``None`` or a list of arguments
    :returns: a :class:`argparse.Namespace` containing the parsed arguments
    """
    if argv is None:
        argv = sys.argv[1:]
    parser = argparse.ArgumentParser(
        description="Keep Linode DNS records pointed at this host",
        epilog="With --run (or -run), update every tracked record once and "
               "exit with status 0 on success or 1 on any failure. Suitable "
               "for cron or a scheduled task.",
    )
    parser.add_argument("-c", "--configfile",
                        help="Path to the settings file (default: "
                             f"{configuration.DEFAULT_CONFIG_FILE})")
    parser.add_argument("-d", "--debug-logs", action="store_true",
                        help="Increase verbosity of logging significantly")
    parser.add_argument("-s", "--stderr", action="store_true",
                        help="Log to stderr instead of syslog or file")
    parser.add_argument("--run", action="store_true",
                        help="Update all tracked records once and exit")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.add_parser("status",
                          help="Show the API key state, tracked records, "
                               "and last run (default)")
    set_key = subparsers.add_parser("set-key", help="Save the API key")
    set_key.add_argument("token", help="The Linode API key")
    subparsers.add_parser("test-key",
                          help="Check that the saved API key is accepted")
    subparsers.add_parser("zones", help="List master zones on the account")
    records = subparsers.add_parser("records",
                                    help="List A and AAAA records in a zone")
    records.add_argument("zone_id", type=int, help="Zone ID (see 'zones')")
    add = subparsers.add_parser("add", help="Start tracking a record")
    add.add_argument("name", help="Display name, e.g. 'www.example.com (A)'")
    add.add_argument("zone_id", type=int, help="Zone ID")
    add.add_argument("record_id", type=int, help="Record ID")
    remove = subparsers.add_parser("remove", help="Stop tracking a record")
    remove.add_argument("name", help="Display name of the record")
    subparsers.add_parser("update",
                          help="Update all tracked records now and show the "
                               "results")

    return parser.parse_args(_normalize_args(argv))


def load_config(configfile):
    """Read the settings file. A missing default settings file means default
    settings; a missing explicitly named one is an error.

    :raises ConfigError: if the settings file cannot be read or is invalid
    """
    if configfile is None:
        default_path = os.path.expanduser(configuration.DEFAULT_CONFIG_FILE)
        if not os.path.exists(default_path):
            return configuration.default_config()
        configfile = default_path
    return configuration.read_config_from_path(configfile)


def setup_logging(logfile, debug):
    """Attach the log handler selected by the ``logfile`` setting"""
    if logfile == 'syslog':
        log_handler = logging.handlers.SysLogHandler()
    elif logfile == 'stderr':
        log_handler = logging.StreamHandler()
    else:
        log_handler = logging.FileHandler(logfile)
    log_handler.setFormatter(
        logging.Formatter("%(name)s: %(levelname)s: %(message)s")
    )
    for handler in list(log.handlers):
        log.removeHandler(handler)
    log.addHandler(log_handler)

    if debug:
        log.setLevel(logging.DEBUG)
    else:
        log.setLevel(logging.INFO)


def batch_run(store, engine):
    """Run unattended: update every tracked record once, printing a
    transcript. SIGINT and SIGTERM cancel the records not yet attempted.

    :returns: The exit code, 0 if every record updated successfully
    """
    print(f"Begin linodyn v{configuration.VERSION} at {engine.clock()}")

    cancel = threading.Event()

    def handle_signals(sig, _):
        log.info("Received signal: %s", signal.Signals(sig).name)
        cancel.set()
    old_sigint = signal.signal(signal.SIGINT, handle_signals)
    old_sigterm = signal.signal(signal.SIGTERM, handle_signals)

    error = None
    try:
        report = engine.run(store.get_credential(),
                            store.list_tracked_records(),
                            cancel)
    except OutcomeNotSaved as e:
        report = e.report
        error = e
    except ConfigUnavailable as e:
        print(f"ERROR: {e}")
        return 1
    finally:
        signal.signal(signal.SIGINT, old_sigint)
        signal.signal(signal.SIGTERM, old_sigterm)

    for line in report.lines():
        print(line)
    print(report.summary())
    if error is not None:
        print(f"ERROR: {error}")
    print(f"End linodyn v{configuration.VERSION} at {engine.clock()}")
    return 0 if report.success and error is None else 1


def cmd_status(args, store, client, engine):
    if store.get_credential():
        print("API key: set")
    else:
        print("API key: not set")

    records = store.list_tracked_records()
    if records:
        print("Tracked records:")
        for record in records:
            print(f"  {record.display_name} (zone {record.zone_id}, "
                  f"record {record.record_id})")
    else:
        print("Tracked records: none")

    outcome = store.get_last_run_outcome()
    if outcome is None:
        print("Last run: never")
    else:
        status = "Successful" if outcome.success else "Failed"
        print(f"Last run: {outcome.timestamp} ({status})")
    return 0


def cmd_set_key(args, store, client, engine):
    store.set_credential(args.token)
    credential = store.get_credential()
    if not credential:
        print("ERROR: API key is empty after removing non-alphanumeric "
              "characters")
        return 1
    if credential != args.token:
        print("Removed non-alphanumeric characters from the API key")
    print("API key saved")
    return 0


def _require_credential(store):
    credential = store.get_credential()
    if not credential:
        print("ERROR: Linode API key has not been set. Use 'set-key' first.")
    return credential


def cmd_test_key(args, store, client, engine):
    credential = _require_credential(store)
    if not credential:
        return 1
    try:
        valid = client.check_credential(credential)
    except UpdateError as e:
        print(f"ERROR: {e}")
        return 1
    if valid:
        print("Your API key appears to be valid!")
        return 0
    print("Your API key does not appear to be valid!")
    return 1


def cmd_zones(args, store, client, engine):
    credential = _require_credential(store)
    if not credential:
        return 1
    try:
        zones = client.list_zones(credential)
    except UpdateError as e:
        print(f"ERROR: Unable to get zone list: {e}")
        return 1
    if not zones:
        print("No master zones were found on this account")
        return 1
    for zone in zones:
        print(f"{zone.zone_id}\t{zone.domain}")
    return 0


def cmd_records(args, store, client, engine):
    credential = _require_credential(store)
    if not credential:
        return 1
    try:
        zones = client.list_zones(credential)
        for zone in zones:
            if zone.zone_id == args.zone_id:
                break
        else:
            print(f"ERROR: No master zone with ID {args.zone_id}")
            return 1
        records = client.list_records(credential, zone)
    except UpdateError as e:
        print(f"ERROR: Unable to get record list: {e}")
        return 1
    for record in records:
        print(f"{record.record_id}\t{record.display_name}")
    return 0


def cmd_add(args, store, client, engine):
    store.add_tracked_record(
        TrackedRecord(args.name, args.zone_id, args.record_id)
    )
    print(f"Tracking {args.name}")
    return 0


def cmd_remove(args, store, client, engine):
    store.remove_tracked_record(args.name)
    print(f"Not tracking {args.name}")
    return 0


def cmd_update(args, store, client, engine):
    try:
        report = engine.run(store.get_credential(),
                            store.list_tracked_records())
    except OutcomeNotSaved as e:
        print("Update results:\n")
        print(e.report)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    print("Update results:\n")
    print(report)
    print(f"Last run: {report.timestamp}")
    return 0 if report.success else 1


COMMANDS = {
    'status': cmd_status,
    'set-key': cmd_set_key,
    'test-key': cmd_test_key,
    'zones': cmd_zones,
    'records': cmd_records,
    'add': cmd_add,
    'remove': cmd_remove,
    'update': cmd_update,
}


def main(argv=None):
    """Main entry point when run as a standalone program

    :param argv: List of arguments. If ``None``, read :data:`sys.argv`.
    """
    args = parse_args(argv)
    try:
        conf = load_config(args.configfile)
    except ConfigError as e:
        print("Config error:", e, file=sys.stderr)
        # Batch callers only distinguish success from failure
        sys.exit(1 if args.run else 2)

    if args.stderr:
        conf.logfile = 'stderr'
    setup_logging(conf.logfile, args.debug_logs)

    try:
        store = ConfigStore(conf.store_path)
    except ConfigUnavailable as e:
        log.critical("Linodyn failed to start.")
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    client = LinodeClient(conf.endpoint, conf.timeout)
    engine = SyncEngine(client, store, conf.workers)

    if args.run:
        sys.exit(batch_run(store, engine))

    command = COMMANDS[args.command or 'status']
    try:
        sys.exit(command(args, store, client, engine))
    except ConfigUnavailable as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)
