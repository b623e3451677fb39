#!/usr/bin/env python3
"""Security validation utilities for gogs-mirror."""

import re
from typing import List, Optional


class SecurityValidator:
    """Input validation and log sanitization."""

    MAX_URL_LENGTH = 2048
    MAX_USERNAME_LENGTH = 100
    MAX_CONCURRENCY = 100

    # GitHub logins and Gogs user/org names share this alphabet
    SAFE_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")

    @classmethod
    def validate_url(cls, url: str, allowed_schemes: Optional[List[str]] = None) -> str:
        """Validate an HTTP(S) base URL and return it without a trailing slash."""
        if not url or not isinstance(url, str):
            raise ValueError("URL must be a non-empty string")

        if len(url) > cls.MAX_URL_LENGTH:
            raise ValueError(f"URL exceeds maximum length of {cls.MAX_URL_LENGTH}")

        if "\x00" in url or any(ord(c) < 32 for c in url):
            raise ValueError("URL contains null bytes or control characters")

        if not url.startswith(("http://", "https://")):
            raise ValueError("URL must use http or https scheme")

        scheme = url.split("://")[0].lower()
        if allowed_schemes and scheme not in allowed_schemes:
            raise ValueError(
                f"URL scheme '{scheme}' not in allowed schemes: {allowed_schemes}"
            )

        # Credentials belong in the token flags, never in the URL
        if "@" in url.split("://", 1)[1].split("/", 1)[0]:
            raise ValueError("URL must not embed credentials")

        return url.rstrip("/")

    @classmethod
    def validate_username(cls, username: str) -> str:
        """Validate a GitHub or Gogs account name."""
        if not username or not isinstance(username, str):
            raise ValueError("Username must be a non-empty string")

        if len(username) > cls.MAX_USERNAME_LENGTH:
            raise ValueError(
                f"Username exceeds maximum length of {cls.MAX_USERNAME_LENGTH}"
            )

        if not cls.SAFE_USERNAME_PATTERN.match(username):
            raise ValueError(f"Username '{username}' contains invalid characters")

        return username

    @classmethod
    def validate_concurrency(cls, value: int) -> int:
        if value < 1 or value > cls.MAX_CONCURRENCY:
            raise ValueError(
                f"concurrency must be between 1 and {cls.MAX_CONCURRENCY}"
            )
        return value

    @classmethod
    def sanitize_for_logging(cls, message: str) -> str:
        """Sanitize message for safe logging by removing potential credentials."""
        if not message:
            return message

        patterns = [
            (r"https?://[^:/@\s]+:[^@\s]+@", "https://[REDACTED]@"),  # URLs with credentials
            (r"token['\"]?\s*[=:]\s*['\"]?[^\s,'\"}]+", "token=[REDACTED]"),  # Token assignments
            (r"password['\"]?\s*[=:]\s*['\"]?[^\s,'\"}]+", "password=[REDACTED]"),  # Password assignments
            (r"\btoken\s+[0-9a-f]{32,}", "token [REDACTED]"),  # Authorization headers
            (r"gh[pousr]_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # GitHub tokens
            (r"github_pat_[A-Za-z0-9_]+", "[GITHUB_TOKEN_REDACTED]"),  # Fine-grained tokens
        ]

        sanitized = message
        for pattern, replacement in patterns:
            sanitized = re.sub(pattern, replacement, sanitized, flags=re.IGNORECASE)

        return sanitized
