#!/usr/bin/env python3
"""Command line argument parsing and configuration building."""

from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional, Sequence

from config import (DEFAULT_CONCURRENCY, Config, GitHubConfig, GogsConfig,
                    MigrationBehaviorConfig, RepoType)
from filters import FilterPatternError, compile_filters
from logging_utils import Logger
from security import SecurityValidator

# Exit codes
EXIT_MISSING_ARGUMENTS = 2


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Mirror the GitHub repositories of a user or organization into Gogs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        usage="%(prog)s [options] [pattern ...]",
        # Leave single-dash words free for exclusion patterns such as -hidden
        add_help=False,
        epilog="""
Patterns are regular expressions searched in full repo names (user/repo).
Every pattern must match; patterns prefixed with a dash (-) must not match.

Examples:
  %(prog)s --gogs-url https://git.example.com --gogs-user alice \\
           --github-user alice 'alice/.*' -alice/secret
  %(prog)s --gogs-url https://git.example.com --gogs-user alice \\
           --gogs-organization mirrors --github-user acme --dry-run
  %(prog)s --gogs-url https://git.example.com --gogs-user alice \\
           --repo-type all --include-forks -- -archive-
        """,
    )
    parser.add_argument(
        "--help",
        action="help",
        help="Show this help message and exit",
    )
    parser.add_argument(
        "patterns",
        nargs="*",
        metavar="pattern",
        help="Regular expression that full repo names must (or, with a leading -, must not) match",
    )
    return parser


def _add_github_arguments(parser: argparse.ArgumentParser) -> None:
    """Add GitHub-related arguments to parser."""
    parser.add_argument(
        "--github-api",
        dest="github_api_url",
        default="https://api.github.com",
        help="Base URL of the GitHub API",
    )
    parser.add_argument(
        "--github-token",
        dest="github_token",
        help="GitHub API token (or set GITHUB_TOKEN env var)",
    )
    parser.add_argument(
        "--github-user",
        dest="github_user",
        default="",
        help="GitHub source user or organization (default: the token owner)",
    )


def _add_gogs_arguments(parser: argparse.ArgumentParser) -> None:
    """Add Gogs-related arguments to parser."""
    parser.add_argument(
        "--gogs-url",
        dest="gogs_url",
        help="URL of the target Gogs instance",
    )
    parser.add_argument(
        "--gogs-token",
        dest="gogs_token",
        help="Gogs API token (or set GOGS_TOKEN env var)",
    )
    parser.add_argument(
        "--gogs-user",
        dest="gogs_user",
        help="Gogs target user",
    )
    parser.add_argument(
        "--gogs-organization",
        dest="gogs_organization",
        help="(Optional) Target organization to push to, if not set push to user account",
    )


def _add_behavior_arguments(parser: argparse.ArgumentParser) -> None:
    """Add behavior and configuration arguments to parser."""
    parser.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="Only print information about the migrations that would be performed",
    )
    parser.add_argument(
        "--mirror",
        action=argparse.BooleanOptionalAction,
        dest="mirror",
        default=True,
        help="Create the Gogs repositories as mirrors (default: on)",
    )
    parser.add_argument(
        "--include-forks",
        action="store_true",
        dest="include_forks",
        help="Include forks",
    )
    parser.add_argument(
        "--repo-type",
        dest="repo_type",
        choices=[repo_type.value for repo_type in RepoType],
        default=RepoType.OWNER.value,
        help="Type of GitHub repositories to list (default: owner)",
    )
    parser.add_argument(
        "--workaround-1862",
        action="store_true",
        dest="workaround_1862",
        help='Swap the "private" and "mirror" Gogs API fields '
        "(workaround for https://github.com/gogits/gogs/pull/1862)",
    )
    parser.add_argument(
        "--concurrency",
        dest="concurrency",
        type=int,
        default=DEFAULT_CONCURRENCY,
        help=f"Maximum number of migrations in flight (default: {DEFAULT_CONCURRENCY})",
    )


def _split_patterns(
    parser: argparse.ArgumentParser, patterns: List[str], extras: List[str]
) -> List[str]:
    """Merge positional patterns with dash-prefixed ones argparse set aside."""
    merged = list(patterns)
    for extra in extras:
        if extra == "--":
            continue
        if extra.startswith("--") or extra == "-":
            parser.error(f"unrecognized arguments: {extra}")
        merged.append(extra)
    return merged


def _require(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    """Print usage and exit when a mandatory setting is missing."""
    missing = [
        flag
        for flag, value in (
            ("--repo-type", args.repo_type),
            ("--gogs-url", args.gogs_url),
            ("--gogs-token", args.gogs_token),
            ("--gogs-user", args.gogs_user),
            ("--github-token", args.github_token),
        )
        if not value
    ]
    if missing:
        parser.print_help(sys.stderr)
        Logger.error(f"missing required settings: {', '.join(missing)}")
        sys.exit(EXIT_MISSING_ARGUMENTS)


def _build_config(args: argparse.Namespace, patterns: List[str]) -> Config:
    """Validate parsed arguments and assemble the immutable configuration."""
    try:
        filters = compile_filters(patterns)

        github_api_url = SecurityValidator.validate_url(
            args.github_api_url, ["https", "http"]
        )
        gogs_url = SecurityValidator.validate_url(args.gogs_url, ["https", "http"])
        github_user = (
            SecurityValidator.validate_username(args.github_user)
            if args.github_user
            else ""
        )
        gogs_user = SecurityValidator.validate_username(args.gogs_user)
        gogs_organization: Optional[str] = None
        if args.gogs_organization:
            gogs_organization = SecurityValidator.validate_username(
                args.gogs_organization
            )
        concurrency = SecurityValidator.validate_concurrency(args.concurrency)
    except FilterPatternError as e:
        Logger.error(str(e))
        sys.exit(EXIT_MISSING_ARGUMENTS)
    except ValueError as e:
        Logger.security_event(
            "CONFIG_VALIDATION_FAILED", f"configuration validation failed: {e}"
        )
        Logger.error(f"configuration validation error: {e}")
        sys.exit(EXIT_MISSING_ARGUMENTS)

    return Config(
        github=GitHubConfig(
            api_url=github_api_url,
            token=args.github_token,
            user=github_user,
        ),
        gogs=GogsConfig(
            url=gogs_url,
            token=args.gogs_token,
            user=gogs_user,
            organization=gogs_organization,
        ),
        behavior=MigrationBehaviorConfig(
            dry_run=args.dry_run,
            mirror=args.mirror,
            include_forks=args.include_forks,
            repo_type=RepoType(args.repo_type),
            workaround_1862=args.workaround_1862,
            concurrency=concurrency,
        ),
        filters=filters,
    )


def parse_arguments(argv: Optional[Sequence[str]] = None) -> Config:
    """Parse command line arguments and return configuration object."""
    parser = _create_argument_parser()
    _add_github_arguments(parser)
    _add_gogs_arguments(parser)
    _add_behavior_arguments(parser)

    args, extras = parser.parse_known_args(argv)
    patterns = _split_patterns(parser, args.patterns, extras)

    args.github_token = args.github_token or os.getenv("GITHUB_TOKEN")
    args.gogs_token = args.gogs_token or os.getenv("GOGS_TOKEN")
    _require(parser, args)

    return _build_config(args, patterns)
