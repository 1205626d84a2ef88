import argparse
import logging
import sys

import requests

from explorer_report.config import ConfigError, load_config
from explorer_report.query_service import QueryError, QueryService
from explorer_report.table import results_to_table


def _param(text: str) -> tuple[str, str]:
    key, sep, value = text.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {text!r}")
    return key, value


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Run a Discourse Data Explorer query and print a Markdown table"
    )
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    parser.add_argument("--hostname", default=None, help="Forum hostname, without scheme")
    parser.add_argument("--query-id", default=None, help="Data Explorer query ID")
    parser.add_argument(
        "--param", action="append", type=_param, default=[], metavar="KEY=VALUE",
        help="Query parameter (repeatable)",
    )
    parser.add_argument("--output", default=None, help="Write the table here instead of stdout")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument("--debug", action="store_true", help="Log request and response bodies")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(
            args.config,
            hostname=args.hostname,
            query_id=args.query_id,
            params=dict(args.param) or None,
            timeout=args.timeout,
            debug=args.debug or None,
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    level = logging.DEBUG if config.debug else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    # basicConfig is a no-op when the host already configured logging
    logging.getLogger("explorer_report").setLevel(level)

    service = QueryService(config.hostname, config.api_key, timeout=config.timeout)
    try:
        results = service.execute(config.query_id, config.params)
    except (QueryError, requests.RequestException) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    table = results_to_table(results)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(table)
    else:
        sys.stdout.write(table)
    return 0


if __name__ == "__main__":
    sys.exit(main())
