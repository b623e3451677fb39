#!/usr/bin/env python3
"""Gogs API wrapper for resolving owners and creating mirrors."""

from __future__ import annotations

import sys
from typing import Any, Dict, Optional

import requests

from config import GogsConfig
from logging_utils import Logger
from models import (DestinationOwner, DestinationRepository, MigrationRequest,
                    OwnerKind)
from utils import RateLimiter

# Exit codes
EXIT_AUTH_ERROR = 40
EXIT_GOGS_ERROR = 31

REQUEST_TIMEOUT_S = 30
# The migrate call returns once Gogs has cloned the source
MIGRATE_TIMEOUT_S = 600


class GogsAPIError(Exception):
    """Non-2xx answer or transport failure talking to Gogs."""

    def __init__(self, status: Optional[int], message: str) -> None:
        super().__init__(f"{status or 'request'} error: {message}")
        self.status = status
        self.message = message


class GogsTarget:
    """Thin client for the subset of the Gogs v1 API used for migration."""

    def __init__(self, config: GogsConfig) -> None:
        self.config = config
        self.api_url = f"{config.url.rstrip('/')}/api/v1"
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"token {config.token}",
                "Accept": "application/json",
                "User-Agent": "gogs-mirror",
            }
        )
        self.rate_limiter = RateLimiter(max_requests_per_minute=120)

    def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        timeout: float = REQUEST_TIMEOUT_S,
    ) -> Dict[str, Any]:
        self.rate_limiter.wait_if_needed("Gogs API")
        url = f"{self.api_url}{path}"
        try:
            response = self.session.request(method, url, json=payload, timeout=timeout)
        except requests.RequestException as e:
            raise GogsAPIError(None, str(e)) from e

        if not 200 <= response.status_code < 300:
            raise GogsAPIError(response.status_code, self._error_message(response))
        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text.strip() or response.reason or ""
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return response.text.strip()

    def resolve_owner(self) -> DestinationOwner:
        """Look up the configured organization, or the user when none is set."""
        if self.config.organization:
            kind, name = OwnerKind.ORGANIZATION, self.config.organization
            path, label = f"/orgs/{name}", "Gogs organization"
        else:
            kind, name = OwnerKind.USER, self.config.user
            path, label = f"/users/{name}", "Gogs user"

        Logger.info(f"init gogs API: {self.config.url}")
        try:
            data = self._request("GET", path)
        except GogsAPIError as e:
            Logger.error(f"couldn't fetch {label} '{name}': {e}")
            if e.status in (401, 403):
                sys.exit(EXIT_AUTH_ERROR)
            sys.exit(EXIT_GOGS_ERROR)

        owner = DestinationOwner(id=int(data["id"]), name=name, kind=kind)
        Logger.debug(f"gogs owner: {owner.name} (id {owner.id}, {owner.kind.value})")
        return owner

    def get_repo(self, owner: str, name: str) -> Optional[DestinationRepository]:
        try:
            data = self._request("GET", f"/repos/{owner}/{name}")
        except GogsAPIError as e:
            if e.status == 404:
                return None
            raise
        return DestinationRepository.from_api(data)

    def migrate_repo(self, request: MigrationRequest) -> DestinationRepository:
        data = self._request(
            "POST", "/repos/migrate", request.to_payload(), timeout=MIGRATE_TIMEOUT_S
        )
        return DestinationRepository.from_api(data)
