#!/usr/bin/env python3
"""GitHub API wrapper for discovering the repositories to migrate."""

from __future__ import annotations

import sys
from typing import Iterator, List, Optional

import github

from config import GitHubConfig, RepoType
from filters import FilterSet
from logging_utils import Logger
from models import MigrationCandidate
from utils import RateLimiter

# Exit codes
EXIT_AUTH_ERROR = 40
EXIT_GITHUB_ERROR = 30

PUBLIC_API_URL = "https://api.github.com"
PAGE_SIZE = 100
ORGANIZATION_TYPE = "Organization"


class GitHubSource:
    """Wrapper around the GitHub API to enumerate migration candidates."""

    def __init__(self, config: GitHubConfig) -> None:
        self.config = config
        self.api: Optional[github.Github] = None
        self.token_login: str = ""
        self.rate_limiter = RateLimiter(
            max_requests_per_minute=50
        )  # GitHub's standard rate limit

    def connect(self) -> None:
        """Create the client and look up the login that owns the token."""
        Logger.info(f"init github API: {self.config.api_url}")
        try:
            auth = github.Auth.Token(self.config.token)
            if self.config.api_url != PUBLIC_API_URL:
                self.api = github.Github(
                    base_url=self.config.api_url, auth=auth, per_page=PAGE_SIZE
                )
            else:
                self.api = github.Github(auth=auth, per_page=PAGE_SIZE)
            self.rate_limiter.wait_if_needed("GitHub API")
            self.token_login = self.api.get_user().login
            Logger.debug(f"github token owner: {self.token_login}")
        except github.BadCredentialsException:
            Logger.error("authentication failed (github): invalid token")
            sys.exit(EXIT_AUTH_ERROR)
        except github.GithubException as e:
            Logger.error(f"couldn't fetch GitHub user: {e}")
            sys.exit(EXIT_GITHUB_ERROR)

    def list_candidates(
        self,
        user: str,
        repo_type: RepoType,
        include_forks: bool,
        filters: FilterSet,
    ) -> List[MigrationCandidate]:
        """Page through the account's repositories and keep those that pass.

        ``user`` may name an individual or an organization; an empty value
        lists the repositories of the token owner.
        """
        if self.api is None:
            Logger.error("github API not initialized")
            sys.exit(EXIT_GITHUB_ERROR)

        candidates: List[MigrationCandidate] = []
        try:
            listing = self._repositories(user, repo_type)
            for repo in self._iter_pages(listing):
                if repo.fork and not include_forks:
                    continue
                if not filters.passes(repo.full_name):
                    continue
                Logger.info(f"found: {repo.full_name}")
                candidates.append(MigrationCandidate.from_github_repo(repo))
        except github.GithubException as e:
            Logger.error(f"couldn't fetch GitHub repository list: {e}")
            sys.exit(EXIT_GITHUB_ERROR)

        Logger.info(f"found {len(candidates)} repositories to migrate")
        return candidates

    def _repositories(self, user: str, repo_type: RepoType):
        """Return the paginated repository listing for the account."""
        self.rate_limiter.wait_if_needed("GitHub API")
        if not user:
            Logger.info(f"listing repositories of {self.token_login} ({repo_type.value})")
            return self.api.get_user().get_repos(type=repo_type.value)

        account = self.api.get_user(user)
        if account.type == ORGANIZATION_TYPE:
            Logger.info(f"listing repositories of organization {user} ({repo_type.value})")
            self.rate_limiter.wait_if_needed("GitHub API")
            return self.api.get_organization(user).get_repos(type=repo_type.value)

        Logger.info(f"listing repositories of user {user} ({repo_type.value})")
        return account.get_repos(type=repo_type.value)

    def _iter_pages(self, listing) -> Iterator:
        """Yield repositories page by page, throttling every page request.

        A short or empty page is the last one.
        """
        page = 0
        while True:
            self.rate_limiter.wait_if_needed("GitHub API")
            repos = listing.get_page(page)
            yield from repos
            if len(repos) < PAGE_SIZE:
                return
            page += 1
