#!/usr/bin/env python3
"""
gogs-mirror - Mirror the GitHub repositories of a user or organization
into a self-hosted Gogs instance.

Repositories are listed from GitHub, filtered by include/exclude patterns
and created on Gogs through its migrate API, either as pull mirrors or as
one-time clones. Repositories already present on Gogs are skipped, so the
tool can be re-run with the same patterns.

Licensed under the MIT License.
"""

from __future__ import annotations

import sys
from typing import NoReturn

from argument_parser import parse_arguments
from migration_orchestrator import MigrationOrchestrator


def main() -> NoReturn:
    cfg = parse_arguments()
    orchestrator = MigrationOrchestrator(cfg)
    sys.exit(orchestrator.run())


if __name__ == "__main__":
    main()
