import argparse
import json
import logging
import sys

from flexlog import Direction, LogOptions, tail_log
from flexlog.errors import FlexlogError


# ---------------- CLI ----------------

def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Follow a FlexNet license-server log and print check-outs, check-ins and denials"
    )
    parser.add_argument("--log-file", required=True)
    parser.add_argument("--timezone", default=None, help="IANA name, default UTC")
    parser.add_argument("--report-parsing-errors", action="store_true", default=None)
    parser.add_argument("--report-unmatched", action="store_true", default=None)
    parser.add_argument(
        "--no-follow",
        action="store_true",
        help="Read to the end of the file and exit instead of tailing",
    )
    parser.add_argument(
        "--max-events",
        type=int,
        default=0,
        help="Stop after this many events (0 = no limit)",
    )
    parser.add_argument("--json", action="store_true", help="One JSON object per event")
    parser.add_argument("-v", "--verbose", action="store_true")

    return parser.parse_args(argv)


# ---------------- Helpers ----------------

DIRECTION_LABELS = {
    Direction.CHECK_OUT: "Check-out",
    Direction.CHECK_IN: "Check-in",
    Direction.DENIED: "Denied check-out",
}


def format_event(event) -> str:
    label = DIRECTION_LABELS.get(event.direction)
    if label is None:
        return f"{event.when or '-'} {event.error or ''}: {event.raw_line}"

    text = f"{label} of {event.license_name} for {event.username} on {event.machine}"
    if event.error:
        text += f" ({event.error})"
    return text


def print_summary(stats):
    print("\nIngestion summary", file=sys.stderr)
    print(f"  Lines read     : {stats.lines}", file=sys.stderr)
    print(f"  Events emitted : {stats.emitted}", file=sys.stderr)
    print(f"  Lines dropped  : {stats.dropped}", file=sys.stderr)
    print(f"  Unmatched      : {stats.unmatched}", file=sys.stderr)
    print(f"  Parse failures : {stats.parse_failures}", file=sys.stderr)


# ---------------- Main ----------------

def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        options = LogOptions.from_env(
            timezone=args.timezone,
            report_parsing_errors=args.report_parsing_errors,
            report_unmatched_log_lines=args.report_unmatched,
        )
        stream = tail_log(args.log_file, options, follow=not args.no_follow)
    except FlexlogError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    count = 0
    try:
        for event in stream:
            if args.json:
                print(json.dumps(event.to_dict()), flush=True)
            else:
                print(format_event(event), flush=True)

            count += 1
            if args.max_events and count >= args.max_events:
                stream.cancel()
                break
    except KeyboardInterrupt:
        print("\nStopped", file=sys.stderr)
    finally:
        stream.close()

    print_summary(stream.engine.stats)
    return 0


if __name__ == "__main__":
    sys.exit(main())
