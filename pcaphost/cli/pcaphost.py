from __future__ import annotations

import argparse
import json
import signal
import sys
from pathlib import Path
from typing import List, Optional

from pcaphost.analysis.run import (
    LIST_HEADER,
    count_hosts,
    format_host_line,
    list_host_records,
    parse_capture,
    truncate_store,
)
from pcaphost.core.config import Settings
from pcaphost.utils.errors import handle_error
from pcaphost.utils.logger import print_success, setup_logger

# ----------------------------
# Commands
# ----------------------------

def cli_progress(count: int):
    print(f"\rProcessed {count} packets...", end="", flush=True)


def cmd_parse(args, settings: Settings) -> int:
    inserted = parse_capture(
        args.pcap,
        settings=settings,
        include_local=True if args.include_local else None,
        limit=args.limit,
        progress_cb=cli_progress,
    )
    print()  # end progress line
    print_success(f"Stored {inserted} new hosts in {settings.db_path}")
    return 0


def cmd_show(args, settings: Settings) -> int:
    records = list_host_records(settings=settings)

    if args.format == "json":
        print(json.dumps([r.to_dict() for r in records], indent=2))
        return 0

    print(LIST_HEADER)
    for r in records:
        print(format_host_line(r))
    return 0


def cmd_count(args, settings: Settings) -> int:
    print(f"DB entries size:{count_hosts(settings=settings)}")
    return 0


def cmd_truncate(args, settings: Settings) -> int:
    truncate_store(settings.db_path)
    print("truncated.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="pcaphost",
        description="Collect destination hosts of IPv4 traffic from capture files",
    )
    p.add_argument("--db", default=None, help="Host store path (default: ~/.pcapdb or $PCAPHOST_DB)")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="Increase verbosity (-v for INFO, -vv for DEBUG)")
    p.add_argument("--log-file", default=None, help="Also write logs to this file")
    sub = p.add_subparsers(dest="command", required=True)

    parse = sub.add_parser("parse", help="Read a PCAP and store its destination hosts")
    parse.add_argument("pcap", help="Path to .pcap/.pcapng")
    parse.add_argument("--include-local", action="store_true",
                       help="Also store site-local (RFC1918) destinations")
    parse.add_argument("--limit", type=int, default=None, help="Limit number of packets processed")
    parse.set_defaults(func=cmd_parse)

    show = sub.add_parser("show", help="Show the stored destination hosts")
    show.add_argument("--format", choices=["csv", "json"], default="csv", help="Output format")
    show.set_defaults(func=cmd_show)

    count = sub.add_parser("count", help="Count the stored destination hosts")
    count.set_defaults(func=cmd_count)

    truncate = sub.add_parser("truncate", help="Delete the host store")
    truncate.set_defaults(func=cmd_truncate)
    return p


def _exit_on_sigterm(signum, frame):
    # SystemExit unwinds open stores and runs atexit hooks
    sys.exit(128 + signum)


def install_signal_handlers() -> None:
    signal.signal(signal.SIGTERM, _exit_on_sigterm)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logger("pcaphost", args.verbose, args.log_file)
    install_signal_handlers()

    try:
        settings = Settings.from_env()
        if args.db:
            settings = settings.replace(db_path=Path(args.db).expanduser())
        return args.func(args, settings)
    except KeyboardInterrupt:
        print("\n[+] Interrupted.")
        return 130
    except Exception as e:
        return handle_error(e, show_traceback=args.verbose >= 2)


if __name__ == "__main__":
    raise SystemExit(main())
