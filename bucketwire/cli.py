"""Command-line interface for bucketwire.

Sends a single signed storage request, e.g.:

    python -m bucketwire GET my-bucket photos/cat.jpg -o cat.jpg
    python -m bucketwire PUT my-bucket notes.txt -d "hello"
    python -m bucketwire GET my-bucket --resource location
"""

import argparse
import dataclasses
import logging
import sys
from typing import Optional

from rich.console import Console

from bucketwire.client import StorageClient
from bucketwire.config import ConfigError, load_config
from bucketwire.errors import BucketwireError
from bucketwire.models import Operation


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="bucketwire",
        description="Send a signed request to an S3 or OSS compatible endpoint",
    )

    parser.add_argument("method", help="HTTP method, e.g. GET, PUT, DELETE")
    parser.add_argument("bucket", nargs="?", default=None, help="Target bucket")
    parser.add_argument("object", nargs="?", default=None, help="Target object key")

    parser.add_argument(
        "-c", "--config",
        default="config.json",
        help="Path to configuration file (default: config.json)",
    )

    parser.add_argument("--region", help="Region override for this request")

    parser.add_argument(
        "--resource",
        help="Sub-resource to address, e.g. 'location' or 'acl'",
    )

    parser.add_argument(
        "-Q", "--query",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Extra query parameter (repeatable)",
    )

    parser.add_argument(
        "-H", "--header",
        action="append",
        default=[],
        metavar="'NAME: VALUE'",
        help="Extra request header (repeatable)",
    )

    body = parser.add_mutually_exclusive_group()
    body.add_argument("-d", "--data", help="Text payload")
    body.add_argument("--data-file", metavar="PATH", help="Upload the file as a stream")

    parser.add_argument(
        "-o", "--output",
        metavar="PATH",
        help="Stream the response body to a file",
    )

    parser.add_argument(
        "--trace",
        action="store_true",
        help="Dump requests and responses",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def parse_queries(values: list[str]) -> dict[str, Optional[str]]:
    """Parse ``KEY=VALUE`` pairs; a bare ``KEY`` maps to None."""
    queries: dict[str, Optional[str]] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not key:
            raise ValueError(f"Invalid query parameter: {item!r}")
        queries[key] = value if sep else None
    return queries


def parse_headers(values: list[str]) -> dict[str, str]:
    """Parse ``NAME: VALUE`` header strings."""
    headers: dict[str, str] = {}
    for item in values:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise ValueError(f"Invalid header: {item!r}")
        headers[name.strip()] = value.strip()
    return headers


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for a 2xx response, 1 for other statuses, 2 for errors
    """
    args = parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    # Load configuration
    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    if args.trace:
        config = dataclasses.replace(config, enable_trace=True)

    try:
        queries = parse_queries(args.query)
        headers = parse_headers(args.header)
    except ValueError as e:
        print(f"Usage error: {e}", file=sys.stderr)
        return 2

    console = Console(legacy_windows=True)
    try:
        data_file = open(args.data_file, "rb") if args.data_file else None
    except OSError as e:
        print(f"Usage error: cannot read {args.data_file}: {e}", file=sys.stderr)
        return 2

    try:
        operation = Operation(
            method=args.method,
            bucket=args.bucket,
            object_key=args.object,
            region=args.region,
            resource=args.resource,
            queries=queries or None,
            headers=headers or None,
            payload=data_file if data_file is not None else (args.data or ""),
        )

        with StorageClient(config) as client:
            if args.output:
                try:
                    f = open(args.output, "wb")
                except OSError as e:
                    print(f"Usage error: cannot write {args.output}: {e}", file=sys.stderr)
                    return 2
                with f:
                    response = client.request_stream(operation)
                    try:
                        for chunk in response.iter_bytes():
                            f.write(chunk)
                    finally:
                        response.close()
            else:
                response = client.request(operation)
                if response.content:
                    console.print(response.text, markup=False, highlight=False)
    except BucketwireError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 2
    finally:
        if data_file is not None:
            data_file.close()

    if response.is_success:
        console.print(f"[green]{response.status_code} {response.reason_phrase}[/green]")
        return 0

    console.print(f"[red]{response.status_code} {response.reason_phrase}[/red]")
    return 1


if __name__ == "__main__":
    sys.exit(main())
