#!/usr/bin/env python3
"""Main orchestrator for mirroring GitHub repositories into Gogs."""

from __future__ import annotations

from typing import List

from config import Config
from github_source import GitHubSource
from gogs_target import GogsTarget
from logging_utils import Logger
from migration_dispatcher import MigrationDispatcher
from models import MigrationResult

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1


class MigrationOrchestrator:
    def __init__(self, cfg: Config) -> None:
        self.cfg = cfg
        self.source = GitHubSource(cfg.github)
        self.target = GogsTarget(cfg.gogs)
        self.results: List[MigrationResult] = []

    def run(self) -> int:
        try:
            self.source.connect()

            behavior = self.cfg.behavior
            candidates = self.source.list_candidates(
                user=self.cfg.github.user,
                repo_type=behavior.repo_type,
                include_forks=behavior.include_forks,
                filters=self.cfg.filters,
            )

            owner = self.target.resolve_owner()

            Logger.info(f"preparing to copy {len(candidates)} repos")
            dispatcher = MigrationDispatcher(
                self.target,
                owner,
                source_login=self.source.token_login,
                source_token=self.cfg.github.token,
                behavior=behavior,
            )
            self.results = dispatcher.dispatch(candidates)

            if behavior.dry_run:
                Logger.info("dry-run completed")
            else:
                Logger.info("mission accomplished")
            return EXIT_SUCCESS
        except SystemExit as e:
            return int(e.code) if isinstance(e.code, int) else EXIT_EXECUTION_ERROR
        except Exception as e:
            Logger.error(f"unexpected error: {e}")
            return EXIT_EXECUTION_ERROR
