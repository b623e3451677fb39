#!/usr/bin/env python3
"""Value objects shared by the source, target and dispatcher."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from enum import Enum
from typing import Any, Dict, Optional

MAX_DESCRIPTION_LENGTH = 255
REDACTED = "[REDACTED]"


def truncate_description(description: Optional[str]) -> str:
    """Clip a description to the longest value Gogs accepts."""
    if not description:
        return ""
    return description[:MAX_DESCRIPTION_LENGTH]


class OwnerKind(Enum):
    USER = "user"
    ORGANIZATION = "organization"


class MigrationOutcome(Enum):
    CREATED = "created"
    SKIPPED_EXISTING = "skipped-existing"
    FAILED = "failed"


@dataclass(frozen=True)
class MigrationCandidate:
    """A GitHub repository selected for migration."""
    full_name: str
    short_name: str
    clone_url: str
    description: str
    is_private: bool
    is_fork: bool

    @classmethod
    def from_github_repo(cls, repo: Any) -> "MigrationCandidate":
        return cls(
            full_name=repo.full_name,
            short_name=repo.name,
            clone_url=repo.clone_url,
            description=truncate_description(repo.description),
            is_private=bool(repo.private),
            is_fork=bool(repo.fork),
        )


@dataclass(frozen=True)
class DestinationOwner:
    id: int
    name: str
    kind: OwnerKind


@dataclass(frozen=True)
class DestinationRepository:
    id: int
    full_name: str
    html_url: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "DestinationRepository":
        return cls(
            id=int(data.get("id", 0)),
            full_name=data.get("full_name", ""),
            html_url=data.get("html_url", ""),
        )


@dataclass(frozen=True)
class MigrationRequest:
    """Body of a Gogs ``POST /repos/migrate`` call."""
    clone_addr: str
    auth_username: str
    auth_password: str
    uid: int
    repo_name: str
    description: str
    private: bool
    mirror: bool

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)

    def redacted(self) -> "MigrationRequest":
        """Copy safe to print: the password is masked."""
        return replace(self, auth_password=REDACTED if self.auth_password else "")


@dataclass(frozen=True)
class MigrationResult:
    candidate: MigrationCandidate
    outcome: MigrationOutcome
    repository: Optional[DestinationRepository] = None
    error: Optional[str] = None
