"""Tests for request building and concurrent dispatch."""

from __future__ import annotations

import threading
import time
from typing import Dict, List, Optional, Set

import pytest

from config import MigrationBehaviorConfig
from gogs_target import GogsAPIError
from migration_dispatcher import MigrationDispatcher, build_request
from models import (DestinationOwner, DestinationRepository,
                    MigrationCandidate, MigrationOutcome, MigrationRequest,
                    OwnerKind)

OWNER = DestinationOwner(id=3, name='alice', kind=OwnerKind.USER)


class FakeGogs:
    """In-memory Gogs that records calls and tracks concurrent workers."""

    def __init__(self, existing: Optional[Set[str]] = None, failing: Optional[Set[str]] = None,
                 delay: float = 0.0) -> None:
        self.repos: Dict[str, DestinationRepository] = {
            name: DestinationRepository(id=i, full_name=f'alice/{name}')
            for i, name in enumerate(sorted(existing or ()), start=1)
        }
        self.failing = failing or set()
        self.delay = delay
        self.lookups: List[str] = []
        self.migrations: List[MigrationRequest] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def _enter(self) -> None:
        with self._lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)

    def _leave(self) -> None:
        with self._lock:
            self.in_flight -= 1

    def get_repo(self, owner: str, name: str) -> Optional[DestinationRepository]:
        self._enter()
        try:
            time.sleep(self.delay)
            with self._lock:
                self.lookups.append(name)
                if name not in self.repos:
                    raise GogsAPIError(404, 'Not Found')
                return self.repos[name]
        finally:
            self._leave()

    def migrate_repo(self, request: MigrationRequest) -> DestinationRepository:
        self._enter()
        try:
            time.sleep(self.delay)
            with self._lock:
                self.migrations.append(request)
                if request.repo_name in self.failing:
                    raise GogsAPIError(500, 'migration failed')
                repo = DestinationRepository(
                    id=len(self.repos) + 1, full_name=f'alice/{request.repo_name}'
                )
                self.repos[request.repo_name] = repo
                return repo
        finally:
            self._leave()


def _candidate(name: str, private: bool = False) -> MigrationCandidate:
    return MigrationCandidate(
        full_name=f'acme/{name}',
        short_name=name,
        clone_url=f'https://github.com/acme/{name}.git',
        description=f'{name} repo',
        is_private=private,
        is_fork=False,
    )


def _dispatcher(target: FakeGogs, **behavior) -> MigrationDispatcher:
    return MigrationDispatcher(
        target,
        OWNER,
        source_login='octocat',
        source_token='gh-token',
        behavior=MigrationBehaviorConfig(**behavior),
    )


def test_build_request_carries_candidate_and_credentials() -> None:
    request = build_request(
        _candidate('app', private=True), OWNER, 'octocat', 'gh-token',
        MigrationBehaviorConfig(mirror=True),
    )

    assert request == MigrationRequest(
        clone_addr='https://github.com/acme/app.git',
        auth_username='octocat',
        auth_password='gh-token',
        uid=3,
        repo_name='app',
        description='app repo',
        private=True,
        mirror=True,
    )


def test_workaround_swaps_private_and_mirror() -> None:
    """The compatibility toggle exchanges the two flags and nothing else."""
    plain = build_request(
        _candidate('app', private=False), OWNER, 'octocat', 'gh-token',
        MigrationBehaviorConfig(mirror=True),
    )
    swapped = build_request(
        _candidate('app', private=False), OWNER, 'octocat', 'gh-token',
        MigrationBehaviorConfig(mirror=True, workaround_1862=True),
    )

    assert (plain.private, plain.mirror) == (False, True)
    assert (swapped.private, swapped.mirror) == (True, False)
    assert swapped.repo_name == plain.repo_name


def test_missing_repos_are_created() -> None:
    target = FakeGogs()
    results = _dispatcher(target).dispatch([_candidate('app'), _candidate('web')])

    assert [r.outcome for r in results] == [MigrationOutcome.CREATED] * 2
    assert [r.repository.full_name for r in results] == ['alice/app', 'alice/web']
    assert sorted(m.repo_name for m in target.migrations) == ['app', 'web']


def test_existing_repos_are_skipped() -> None:
    target = FakeGogs(existing={'app'})
    results = _dispatcher(target).dispatch([_candidate('app'), _candidate('web')])

    assert [r.outcome for r in results] == [
        MigrationOutcome.SKIPPED_EXISTING,
        MigrationOutcome.CREATED,
    ]
    assert [m.repo_name for m in target.migrations] == ['web']


def test_second_run_issues_no_migrations() -> None:
    """Re-running over the same candidates only skips."""
    target = FakeGogs()
    candidates = [_candidate(name) for name in ('a', 'b', 'c', 'd')]

    _dispatcher(target).dispatch(candidates)
    first_run = len(target.migrations)
    results = _dispatcher(target).dispatch(candidates)

    assert first_run == 4
    assert len(target.migrations) == 4
    assert {r.outcome for r in results} == {MigrationOutcome.SKIPPED_EXISTING}


@pytest.mark.parametrize('order', [('bad', 'good'), ('good', 'bad')])
def test_failure_does_not_affect_other_candidates(order) -> None:
    target = FakeGogs(failing={'bad'})
    results = _dispatcher(target).dispatch([_candidate(name) for name in order])

    by_name = {r.candidate.short_name: r for r in results}
    assert by_name['good'].outcome == MigrationOutcome.CREATED
    assert by_name['good'].repository is not None
    assert by_name['bad'].outcome == MigrationOutcome.FAILED
    assert by_name['bad'].repository is None
    assert 'migration failed' in by_name['bad'].error


@pytest.mark.parametrize('limit, count', [(1, 5), (3, 12), (10, 4)])
def test_concurrency_never_exceeds_limit(limit: int, count: int) -> None:
    target = FakeGogs(delay=0.01)
    results = _dispatcher(target, concurrency=limit).dispatch(
        [_candidate(f'repo{i}') for i in range(count)]
    )

    assert len(results) == count
    assert 1 <= target.max_in_flight <= limit


def test_results_keep_candidate_order() -> None:
    target = FakeGogs(delay=0.005)
    names = [f'repo{i}' for i in range(8)]
    results = _dispatcher(target, concurrency=4).dispatch([_candidate(n) for n in names])

    assert [r.candidate.short_name for r in results] == names


def test_dry_run_makes_no_calls(capsys) -> None:
    target = FakeGogs()
    candidates = [_candidate('app', private=True)]

    results = _dispatcher(target, dry_run=True).dispatch(candidates)

    assert results == []
    assert target.lookups == []
    assert target.migrations == []
    out = capsys.readouterr().out
    assert 'acme/app:' in out
    assert "'repo_name': 'app'" in out
    assert 'gh-token' not in out


def test_dry_run_prints_the_live_payload(capsys) -> None:
    """The dumped request equals the one a live run would send, minus the secret."""
    candidate = _candidate('app')
    dispatcher = _dispatcher(FakeGogs(), dry_run=True, workaround_1862=True)
    dispatcher.dispatch([candidate])
    out = capsys.readouterr().out

    live = FakeGogs()
    _dispatcher(live, workaround_1862=True).dispatch([candidate])
    sent = live.migrations[0]

    assert f"'private': {sent.private}" in out
    assert f"'mirror': {sent.mirror}" in out
    assert f"'uid': {sent.uid}" in out
    assert f"'clone_addr': '{sent.clone_addr}'" in out


def test_empty_candidate_list() -> None:
    assert _dispatcher(FakeGogs()).dispatch([]) == []


class RecordingBar:
    """Stand-in for tqdm that records updates and closing."""

    instances: List["RecordingBar"] = []

    def __init__(self, *_args, **kwargs) -> None:
        self.total = kwargs.get('total')
        self.events: List[object] = []
        RecordingBar.instances.append(self)

    def __enter__(self) -> 'RecordingBar':
        return self

    def __exit__(self, *_exc) -> None:
        self.events.append('closed')

    def update(self, n: int = 1) -> None:
        self.events.append(n)


def test_progress_advances_once_per_finished_item(monkeypatch) -> None:
    """Skipped, failed and created items each tick the bar before it closes."""
    RecordingBar.instances = []
    monkeypatch.setattr('migration_dispatcher.tqdm', RecordingBar)
    target = FakeGogs(existing={'a'}, failing={'b'})

    results = _dispatcher(target, concurrency=2).dispatch(
        [_candidate('a'), _candidate('b'), _candidate('c')]
    )

    assert [r.outcome for r in results] == [
        MigrationOutcome.SKIPPED_EXISTING,
        MigrationOutcome.FAILED,
        MigrationOutcome.CREATED,
    ]
    (bar,) = RecordingBar.instances
    assert bar.total == 3
    assert bar.events == [1, 1, 1, 'closed']
