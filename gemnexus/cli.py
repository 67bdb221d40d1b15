# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Command-line interface for gemnexus.

This module provides the ``gem-nexus`` entry point: upload built gems to a
rubygems repository on a Nexus server, or manage the stored configuration.

Example:
    Upload gems (prompts for URL and credentials on first use):
        ```bash
        $ gem-nexus pkg/foo-1.0.gem pkg/bar-2.1.gem
        ```

    Upload to a second, named repository:
        ```bash
        $ gem-nexus --repo internal --url https://nexus.example.com/repository/gems pkg/foo-1.0.gem
        ```

    Re-enter URL and credentials of a repository:
        ```bash
        $ gem-nexus --repo internal --clear-repo pkg/foo-1.0.gem
        ```

    Delete the stored credentials by signing in anonymously:
        ```bash
        $ gem-nexus --clear-repo --credential : pkg/foo-1.0.gem
        ```

    Encrypt stored credentials with a master password:
        ```bash
        $ gem-nexus --encrypt
        ```

Exit Codes:

- 0: Success
- 1: Error (configuration, network, or rejected upload)

Note:
    The CLI uses argparse for command parsing. A ``.env`` file in the
    working directory is loaded first, so proxy variables can be set per
    project. Verbose mode shows full tracebacks on errors.

"""

from __future__ import annotations

import argparse
from pathlib import Path
import sys

from dotenv import load_dotenv

from gemnexus import __version__
from gemnexus.auth import TerminalPrompter
from gemnexus.config import ConfigStore, SslVerifyMode, default_file
from gemnexus.core import (
    UploadOptions,
    UploadOrchestrator,
    clear_all_credentials,
    disable_always_prompt,
    enable_always_prompt,
    list_repos,
    set_encryption,
)
from gemnexus.exceptions import GemNexusError
from gemnexus.io import NO_PROXY
from gemnexus.logging import get_logger, set_global_logger


def _probe_gem_names(args: argparse.Namespace) -> list[str] | None:
    """Return the GEM arguments, or None when none were given."""
    names = list(getattr(args, "gems", None) or [])
    return names or None


def _admin_requested(args: argparse.Namespace) -> bool:
    return bool(
        args.all_repos
        or args.clear_all
        or args.prompt is not None
        or args.encrypt is not None
        or args.secrets is not None
    )


def cmd_nexus(args: argparse.Namespace) -> int:
    """Handler for the gem-nexus command.

    Runs exactly one administrative action if one was requested, otherwise
    uploads the given gems.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Exit code (0 for success, 1 for failure).

    """
    # Configure global logger
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    names = _probe_gem_names(args)
    if names and _admin_requested(args):
        print(
            f"given gemfile(s) {' '.join(names)} get ignored due to the options used",
            file=sys.stderr,
        )

    prompter = TerminalPrompter()

    try:
        store = ConfigStore(args.nexus_config)
        logger.verbose("CONFIG", f"Using configuration file {store}")

        if args.all_repos:
            list_repos(store)
        elif args.prompt:
            enable_always_prompt(store, prompter)
        elif args.prompt is False:
            disable_always_prompt(store)
        elif args.clear_all:
            clear_all_credentials(store, prompter)
        elif args.encrypt is not None:
            set_encryption(store, prompter, enabled=args.encrypt)
        elif args.secrets is False:
            store.relocate_secrets(None)
        elif args.secrets:
            store.relocate_secrets(args.secrets)
        else:
            options = UploadOptions(
                repo=args.repo,
                url=args.url,
                credential=args.credential,
                clear=args.clear_repo,
                ssl_verify_mode=args.ssl_verify_mode,
                http_proxy=args.http_proxy,
            )
            return UploadOrchestrator(store, options, prompter).run(names or [])
    except GemNexusError as err:
        print(f"Error: {err}")
        if args.verbose or args.debug:
            import traceback

            traceback.print_exc()
        return 1

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gem-nexus",
        description="Upload a gem up to Nexus server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"gem-nexus {__version__}",
    )
    parser.add_argument(
        "gems",
        nargs="*",
        metavar="GEM",
        help="built gem to upload. some options do not require it.",
    )

    # Repository selection and upload settings
    parser.add_argument(
        "-r",
        "--repo",
        metavar="KEY",
        default=None,
        help="pick the configuration under that key. can be used in conjunction "
        "with --clear-repo and the upload itself.",
    )
    parser.add_argument(
        "-c",
        "--clear-repo",
        action="store_true",
        help="Clears the nexus config for the given repo or the default repo",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="URL of the rubygems repository on a Nexus server",
    )
    parser.add_argument(
        "--credential",
        metavar="USER:PASS",
        default=None,
        help='Enter your Nexus credentials in "Username:Password" format',
    )
    parser.add_argument(
        "--nexus-config",
        metavar="FILE",
        type=lambda value: Path(value).expanduser().resolve(),
        default=None,
        help=f"File location of nexus config to use (default: {default_file()})",
    )
    parser.add_argument(
        "--ignore-ssl-errors",
        dest="ssl_verify_mode",
        action="store_const",
        const=SslVerifyMode.NONE,
        default=None,
        help="No check certificate.",
    )
    parser.add_argument(
        "-p",
        "--http-proxy",
        metavar="URL",
        dest="http_proxy",
        default=None,
        help="Use HTTP proxy for remote operations",
    )
    parser.add_argument(
        "--no-http-proxy",
        dest="http_proxy",
        action="store_const",
        const=NO_PROXY,
        help="Do not use any HTTP proxy, ignoring the environment",
    )

    # Administrative actions
    parser.add_argument(
        "--all-repos",
        action="store_true",
        help="list all configured repos with their respective urls.",
    )
    parser.add_argument(
        "--clear-all",
        action="store_true",
        help="clears all credentials",
    )
    parser.add_argument(
        "--secrets",
        metavar="FILE",
        type=lambda value: Path(value).expanduser().resolve(),
        default=None,
        help="move the credentials to the given secrets file.",
    )
    parser.add_argument(
        "--no-secrets",
        dest="secrets",
        action="store_const",
        const=False,
        help="move the credentials to the configuration file and delete the secrets file.",
    )
    parser.add_argument(
        "--prompt",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="always prompt for the credentials. this is helpful to reset your "
        "username/password for a specific host.",
    )
    parser.add_argument(
        "--encrypt",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="encrypt/decrypt the credentials with a master password.",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    parser.set_defaults(func=cmd_nexus)
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the gem-nexus CLI.

    This function is registered as the 'gem-nexus' console script in
    pyproject.toml.
    """
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
