"""
mbucket command line: `mbucket raw PATH` and `mbucket info STORAGE-URI`.
"""

import argparse
import logging
import sys
from typing import List, Optional

from mbucket import __version__
from mbucket.client import BucketClient
from mbucket.config import load_config
from mbucket.errors import MbucketError
from mbucket.info import run_info
from mbucket.logs import setup_logging
from mbucket.raw import do_raw
from mbucket.target import StorageUri

log = logging.getLogger(__name__)

RAW_EPILOG = """
This attempts to be a raw curl-like command for calling the storage API.
Some notes/limitations:

- When the response status is >=400 the error body has already been read
  and, when it is JSON, *parsed* by the HTTP client. Therefore you cannot
  trust that the body printed by this command is exactly the bytes that the
  server sent.
- A response status >=400 still exits 0.
- This is not tested for writing/reading large or binary objects.

Examples:
  %(prog)s ~~/mahbukkit -X PUT \\
      -H "Content-Type: application/json"  # CreateBucket

  %(prog)s /                  # ListBuckets
  %(prog)s / -i               # ... with response headers
  %(prog)s / -v               # ... with req and res headers
  %(prog)s /mahbukkit?max-keys=2
"""

INFO_EPILOG = """
Examples:
  # Bucket HTTP headers
  %(prog)s s3:mybucket

  # Object HTTP headers
  %(prog)s s3:mybucket/foo.txt
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='mbucket',
        description="Command line client for an object-storage HTTP API",
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")

    # Service and credentials
    parser.add_argument('--url', help='Service URL (env MBUCKET_URL).')
    parser.add_argument('--account', help='Account name used for "~~" paths (env MBUCKET_ACCOUNT).')
    parser.add_argument('--id', help='Profile name from config or actual Access Key ID (env MBUCKET_KEY_ID).')
    parser.add_argument('--key', help='Secret Key (unsafe on command line; env MBUCKET_SECRET_KEY).')
    parser.add_argument('--config', default='',
                        help='Path to profile file (chmod 600). Defaults to ./.mbucket or ~/.mbucket.')
    parser.add_argument('--region', default='', help='Signing region (default: us-east-1)')

    # Transport
    parser.add_argument('--timeout', type=int, default=30,
                        help='Request timeout in seconds (default: 30)')
    parser.add_argument('--retries', type=int, default=3,
                        help='Max number of transport retries (default: 3)')

    # Output options
    parser.add_argument('--debug', action='store_true', help='Show debug info on stderr')
    parser.add_argument('--logFile', help='Capture full debug info in a log file')

    subparsers = parser.add_subparsers(dest='command', metavar='COMMAND')
    subparsers.required = True

    raw = subparsers.add_parser(
        'raw',
        help='Raw API request.',
        description='Raw API request.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=RAW_EPILOG,
    )
    raw.add_argument('-v', '--verbose', action='store_true',
                     help='Curl-like verbose: show sent data and received headers.')
    raw.add_argument('-X', '--method', metavar='METHOD',
                     help='Request method to use. Default is "GET" ("PUT" with --data).')
    raw.add_argument('-H', '--header', metavar='HEADER', action='append', default=[],
                     help='Headers to send with request ("Name: value").')
    raw.add_argument('-i', '--include', action='store_true',
                     help='Print response headers before the body.')
    raw.add_argument('-d', '--data', metavar='DATA',
                     help='Request body. By convention this must be valid JSON.')
    raw.add_argument('path', metavar='PATH')

    info = subparsers.add_parser(
        'info',
        help='Show HTTP headers for a bucket or bucket object.',
        description='Show HTTP headers for a bucket or bucket object.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=INFO_EPILOG,
    )
    info.add_argument('--json', action='store_true', help='Output headers in JSON format')
    info.add_argument('uri', metavar='STORAGE-URI')

    return parser


def main(argv: Optional[List[str]] = None, stdout=None, stderr=None, transport=None) -> int:
    stdout = stdout if stdout is not None else sys.stdout
    stderr = stderr if stderr is not None else sys.stderr

    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(debug=args.debug, log_file=args.logFile, stream=stderr)

    try:
        config = load_config(args)
        client = BucketClient(config, transport=transport)
        if args.command == 'raw':
            do_raw(
                client,
                args.path,
                out=stdout,
                trace=stderr,
                method=args.method,
                headers=args.header,
                data=args.data,
                verbose=args.verbose,
                include=args.include,
            )
        else:
            run_info(client, StorageUri.parse(args.uri), out=stdout, as_json=args.json)
    except MbucketError as e:
        log.error("%s: %s", args.command, e)
        return 1
    return 0
