"""
notify-pipe: log every line read from stdin through a notifier.

    some_program | notify-pipe --service beacon --instance beacon_01 --log-all logs/beacon.log
    some_program 2>&1 | notify-pipe --code 3 logs/beacon_errors.log
"""

# System modules
import argparse
import sys
from typing import TextIO

# Notify modules
from notify.config import ConfigError, load_config
from notify.syswarn import syswarn

PIPE_SENDER = "pipe"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="notify-pipe", description="Log lines from stdin through a notifier")
    parser.add_argument("endpoints", nargs="*", help="Log files (use 'stdout' for the console)")
    parser.add_argument("--config", help="YAML file with a 'notify' section")
    parser.add_argument("--service", help="Service name written to every line")
    parser.add_argument("--instance", help="Instance name written to every line")
    parser.add_argument("--json", action="store_true", default=None, help="Write JSON objects instead of tab-separated fields")
    parser.add_argument("--log-all", action="store_true", default=None, help="Also log plain messages")
    parser.add_argument("--async", dest="async_send", action="store_true", default=None, help="Never block on a full queue")
    parser.add_argument("--capacity", type=int, help="Capacity of the note queue")
    parser.add_argument("--code", type=int, help="Send every line as a notification with this code")
    return parser


def main(argv: list[str] | None = None, stdin: TextIO | None = None) -> int:
    args = build_parser().parse_args(argv)
    stdin = stdin if stdin is not None else sys.stdin

    try:
        config = load_config(args.config)
    except ConfigError as e:
        syswarn(str(e))
        return 2

    # Command line wins over the configuration file
    overrides = {
        "service": args.service,
        "instance": args.instance,
        "json_format": args.json,
        "log_all": args.log_all,
        "async_send": args.async_send,
        "capacity": args.capacity,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(config, key, value)
    if args.endpoints:
        config.endpoints = list(args.endpoints)

    notifier = config.build()
    consumer = notifier.start()

    send = notifier.sender(PIPE_SENDER)
    fail = notifier.failure(PIPE_SENDER)
    for line in stdin:
        line = line.rstrip("\n")
        if not line:
            continue
        if args.code is None:
            send(line)
        else:
            fail(args.code, "%s", line)

    err = notifier.exit()
    consumer.join(timeout=5.0)
    if err is not None:
        syswarn(str(err))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
