#!/usr/bin/env python3
"""Concurrent dispatch of Gogs migrate requests."""

from __future__ import annotations

import threading
from pprint import pformat
from typing import List, Optional

from tqdm import tqdm

from config import MigrationBehaviorConfig
from gogs_target import GogsTarget
from logging_utils import Logger
from models import (DestinationOwner, MigrationCandidate, MigrationOutcome,
                    MigrationRequest, MigrationResult)


def build_request(
    candidate: MigrationCandidate,
    owner: DestinationOwner,
    source_login: str,
    source_token: str,
    behavior: MigrationBehaviorConfig,
) -> MigrationRequest:
    """Build the migrate request for one candidate.

    With ``workaround_1862`` the private and mirror values trade places, for
    Gogs releases that read each field into the other.
    """
    private, mirror = candidate.is_private, behavior.mirror
    if behavior.workaround_1862:
        private, mirror = mirror, private

    return MigrationRequest(
        clone_addr=candidate.clone_url,
        auth_username=source_login,
        auth_password=source_token,
        uid=owner.id,
        repo_name=candidate.short_name,
        description=candidate.description,
        private=private,
        mirror=mirror,
    )


class MigrationDispatcher:
    """Runs one worker thread per candidate, at most ``concurrency`` at a time."""

    def __init__(
        self,
        target: GogsTarget,
        owner: DestinationOwner,
        source_login: str,
        source_token: str,
        behavior: MigrationBehaviorConfig,
    ) -> None:
        self.target = target
        self.owner = owner
        self.source_login = source_login
        self.source_token = source_token
        self.behavior = behavior

    def _request_for(self, candidate: MigrationCandidate) -> MigrationRequest:
        return build_request(
            candidate, self.owner, self.source_login, self.source_token, self.behavior
        )

    def dispatch(self, candidates: List[MigrationCandidate]) -> List[MigrationResult]:
        if self.behavior.dry_run:
            self._dump_requests(candidates)
            return []
        return self._run_workers(candidates)

    def _dump_requests(self, candidates: List[MigrationCandidate]) -> None:
        for candidate in candidates:
            request = self._request_for(candidate)
            tqdm.write(f"{candidate.full_name}:")
            tqdm.write(pformat(request.redacted().to_payload(), sort_dicts=False))

    def _run_workers(self, candidates: List[MigrationCandidate]) -> List[MigrationResult]:
        results: List[Optional[MigrationResult]] = [None] * len(candidates)
        slots = threading.Semaphore(max(1, self.behavior.concurrency))
        progress_lock = threading.Lock()
        workers: List[threading.Thread] = []

        with tqdm(total=len(candidates), unit="repo", desc="migrating") as bar:

            def work(index: int, candidate: MigrationCandidate) -> None:
                try:
                    results[index] = self._migrate_one(candidate)
                finally:
                    with progress_lock:
                        bar.update(1)
                    slots.release()

            for index, candidate in enumerate(candidates):
                slots.acquire()
                worker = threading.Thread(
                    target=work,
                    args=(index, candidate),
                    name=f"migrate-{candidate.short_name}",
                    daemon=True,
                )
                workers.append(worker)
                worker.start()

            for worker in workers:
                worker.join()

        return [result for result in results if result is not None]

    def _migrate_one(self, candidate: MigrationCandidate) -> MigrationResult:
        owner_name = self.owner.name
        try:
            existing = self.target.get_repo(owner_name, candidate.short_name)
        except Exception as e:
            # A failed lookup is treated the same as an absent repository
            Logger.debug(f"lookup of {owner_name}/{candidate.short_name} failed: {e}")
            existing = None

        if existing is not None:
            Logger.info(
                f"skipping already present repo: {candidate.full_name} -> "
                f"{owner_name}/{candidate.short_name}"
            )
            return MigrationResult(
                candidate, MigrationOutcome.SKIPPED_EXISTING, repository=existing
            )

        try:
            created = self.target.migrate_repo(self._request_for(candidate))
        except Exception as e:
            Logger.error(f"failed to migrate repo {candidate.full_name}: {e}")
            return MigrationResult(candidate, MigrationOutcome.FAILED, error=str(e))

        Logger.debug(f"migrated: {candidate.full_name} -> {created.full_name}")
        return MigrationResult(candidate, MigrationOutcome.CREATED, repository=created)
