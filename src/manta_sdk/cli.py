"""
Command-line interface for Manta Python SDK
Provides object store, directory, signed URL and job status operations
"""

import argparse
import json
import logging
import sys
import time
from typing import Optional

from . import __version__
from .config import ClientConfig
from .exceptions import MantaSDKError
from .http_client import MantaClient, MAX_LIMIT

DEFAULT_KEY_PATH = '~/.ssh/id_rsa'
DEFAULT_URL_LIFETIME = 3600


def create_parser() -> argparse.ArgumentParser:
    """Create the main argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog='manta-cli',
        description='Command-line client for the Manta object store and job service'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'Manta Python SDK {__version__}'
    )
    parser.add_argument('--url', help='Manta service URL (default: $MANTA_URL)')
    parser.add_argument('--user', help='Manta account name (default: $MANTA_USER)')
    parser.add_argument('--key', help=f'Private key file (default: $MANTA_KEY or {DEFAULT_KEY_PATH})')
    parser.add_argument('--attempts', type=int, help='Attempts per request (default: $MANTA_ATTEMPTS or 3)')
    parser.add_argument(
        '--insecure',
        action='store_true',
        help='Disable TLS certificate verification'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    setup_object_parsers(subparsers)
    setup_directory_parsers(subparsers)
    setup_sign_url_parser(subparsers)
    setup_job_parser(subparsers)

    return parser


def setup_object_parsers(subparsers):
    """Setup object subcommands."""
    put_parser = subparsers.add_parser('put', help='Upload an object')
    put_parser.add_argument('path', help='Object path, e.g. /user/stor/file.txt')
    put_parser.add_argument('file', nargs='?', default='-', help='Local file to upload (default: stdin)')
    put_parser.add_argument('--content-type', help='Content-Type stored with the object')
    put_parser.add_argument('--durability', type=int, help='Number of copies to keep')

    get_parser = subparsers.add_parser('get', help='Download an object')
    get_parser.add_argument('path', help='Object path')
    get_parser.add_argument('-o', '--output', help='Write to this file instead of stdout')

    rm_parser = subparsers.add_parser('rm', help='Delete an object')
    rm_parser.add_argument('path', help='Object path')


def setup_directory_parsers(subparsers):
    """Setup directory subcommands."""
    ls_parser = subparsers.add_parser('ls', help='List a directory')
    ls_parser.add_argument('path', help='Directory path')
    ls_parser.add_argument('--limit', type=int, default=MAX_LIMIT, help=f'Maximum entries (default: {MAX_LIMIT})')
    ls_parser.add_argument('--marker', help='Entry name to start listing from')
    ls_parser.add_argument('--json', action='store_true', help='Print raw JSON entries')

    mkdir_parser = subparsers.add_parser('mkdir', help='Create a directory')
    mkdir_parser.add_argument('path', help='Directory path')

    rmdir_parser = subparsers.add_parser('rmdir', help='Remove an empty directory')
    rmdir_parser.add_argument('path', help='Directory path')


def setup_sign_url_parser(subparsers):
    """Setup signed URL subcommand."""
    sign_parser = subparsers.add_parser('sign-url', help='Generate a signed URL')
    sign_parser.add_argument('path', help='Object path')
    sign_parser.add_argument(
        '--expires-in',
        type=int,
        default=DEFAULT_URL_LIFETIME,
        help=f'Seconds until the URL expires (default: {DEFAULT_URL_LIFETIME})'
    )
    sign_parser.add_argument(
        '-m', '--method',
        action='append',
        help='HTTP method the URL is valid for; repeat for several (default: GET)'
    )


def setup_job_parser(subparsers):
    """Setup job subcommand."""
    job_parser = subparsers.add_parser('job-status', help='Show a job status document')
    job_parser.add_argument('job_path', help='Job path, e.g. /user/jobs/<id>')


def build_client(args) -> MantaClient:
    """Build a client from global options, falling back to the environment."""
    config = ClientConfig.from_env(
        url=args.url,
        user=args.user,
        key_path=args.key,
        attempts=args.attempts,
        disable_ssl_verification=True if args.insecure else None,
    )
    if not config.key_path:
        config.key_path = DEFAULT_KEY_PATH
    return MantaClient.from_config(config)


def handle_put_command(client: MantaClient, args) -> int:
    """Handle object upload."""
    if args.file == '-':
        data = sys.stdin.buffer.read()
    else:
        with open(args.file, 'rb') as f:
            data = f.read()

    client.put_object(args.path, data, content_type=args.content_type, durability_level=args.durability)
    print(f"Uploaded {len(data)} bytes to {args.path}", file=sys.stderr)
    return 0


def handle_get_command(client: MantaClient, args) -> int:
    """Handle object download."""
    data, _ = client.get_object(args.path)
    if args.output:
        with open(args.output, 'wb') as f:
            f.write(data)
    else:
        sys.stdout.buffer.write(data)
        sys.stdout.flush()
    return 0


def handle_ls_command(client: MantaClient, args) -> int:
    """Handle directory listing."""
    entries, headers = client.list_directory(args.path, limit=args.limit, marker=args.marker)
    for entry in entries:
        if args.json:
            print(json.dumps(entry))
        elif entry.get('type') == 'directory':
            print(f"{entry.get('name')}/")
        else:
            print(entry.get('name'))

    if args.verbose:
        print(f"# {len(entries)} of {headers.get('Result-Set-Size')} entries", file=sys.stderr)
    return 0


def handle_mkdir_command(client: MantaClient, args) -> int:
    client.put_directory(args.path)
    return 0


def handle_rm_command(client: MantaClient, args) -> int:
    client.delete_object(args.path)
    return 0


def handle_rmdir_command(client: MantaClient, args) -> int:
    client.delete_directory(args.path)
    return 0


def handle_sign_url_command(client: MantaClient, args) -> int:
    """Handle signed URL generation."""
    if args.expires_in < 1:
        print("Error: --expires-in must be positive", file=sys.stderr)
        return 1

    expires = int(time.time()) + args.expires_in
    methods = args.method or ['GET']
    method = methods[0] if len(methods) == 1 else methods
    print(client.gen_signed_url(expires, method, args.path))
    return 0


def handle_job_status_command(client: MantaClient, args) -> int:
    """Handle job status lookup."""
    job, _ = client.get_job(args.job_path)
    print(json.dumps(job, indent=2, sort_keys=True))
    return 0


COMMAND_HANDLERS = {
    'put': handle_put_command,
    'get': handle_get_command,
    'ls': handle_ls_command,
    'mkdir': handle_mkdir_command,
    'rm': handle_rm_command,
    'rmdir': handle_rmdir_command,
    'sign-url': handle_sign_url_command,
    'job-status': handle_job_status_command,
}


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point for the CLI

    Args:
        argv: Command line arguments (None to use sys.argv)

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s %(name)s %(levelname)s %(message)s'
        )

    handler = COMMAND_HANDLERS.get(args.command)
    if handler is None:
        # No command specified, show help
        parser.print_help()
        return 1

    try:
        with build_client(args) as client:
            return handler(client, args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user", file=sys.stderr)
        return 130
    except MantaSDKError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
