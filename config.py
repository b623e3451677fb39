#!/usr/bin/env python3
"""Configuration dataclasses for gogs-mirror."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from filters import FilterSet

DEFAULT_CONCURRENCY = 10


class RepoType(Enum):
    """GitHub repository listing type filter."""
    ALL = "all"
    OWNER = "owner"
    PUBLIC = "public"
    PRIVATE = "private"
    MEMBER = "member"


@dataclass(frozen=True)
class GitHubConfig:
    """GitHub source configuration.

    An empty ``user`` selects the account owning the token.
    """
    api_url: str
    token: str
    user: str = ""


@dataclass(frozen=True)
class GogsConfig:
    """Gogs target configuration."""
    url: str
    token: str
    user: str
    organization: Optional[str] = None


@dataclass(frozen=True)
class MigrationBehaviorConfig:
    """Migration behavior configuration."""
    dry_run: bool = False
    mirror: bool = True
    include_forks: bool = False
    repo_type: RepoType = RepoType.OWNER
    # Swap the "private" and "mirror" fields, see gogs/gogs#1862
    workaround_1862: bool = False
    concurrency: int = DEFAULT_CONCURRENCY


@dataclass(frozen=True)
class Config:
    """Main configuration for a GitHub-to-Gogs migration run."""
    github: GitHubConfig
    gogs: GogsConfig
    behavior: MigrationBehaviorConfig
    filters: FilterSet = field(default_factory=FilterSet)
