#!/usr/bin/env python3
"""Logging utilities for gogs-mirror."""

import os
import sys
import threading
import time

import colorama
from tqdm import tqdm

from security import SecurityValidator

# Initialize colorama for cross-platform colored output
colorama.init(autoreset=True)


class Logger:
    """Handles formatted console output with colors and credential redaction."""

    PROCESS_NAME = "gogs-mirror"

    # Dispatcher workers log from several threads at once
    _lock = threading.Lock()

    @classmethod
    def debug(cls, *messages: str) -> None:
        cls._write(sys.stdout, colorama.Fore.LIGHTBLACK_EX, *messages)

    @classmethod
    def info(cls, *messages: str) -> None:
        cls._write(sys.stdout, colorama.Fore.CYAN, *messages)

    @classmethod
    def warn(cls, *messages: str) -> None:
        cls._write(sys.stdout, colorama.Fore.YELLOW, *messages)

    @classmethod
    def error(cls, *messages: str) -> None:
        cls._write(sys.stderr, colorama.Fore.RED, *messages)

    @classmethod
    def security_event(cls, event_type: str, details: str) -> None:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
        cls._write(
            sys.stderr,
            colorama.Fore.MAGENTA,
            f"[SECURITY:{event_type}] {timestamp}: {details}",
        )

    @classmethod
    def _write(cls, stream, color: str, *messages: str) -> None:
        sanitized = [
            SecurityValidator.sanitize_for_logging(str(msg)) for msg in messages
        ]
        line = cls._format_line(color, *sanitized)
        # tqdm.write clears and redraws any progress bar around the line
        with cls._lock:
            tqdm.write(line, file=stream)

    @classmethod
    def _get_header(cls) -> str:
        return f"[{cls.PROCESS_NAME}:{os.getpid()}]"

    @classmethod
    def _format_line(cls, color: str, *messages: str) -> str:
        header = cls._get_header()
        message = " ".join(messages)
        return f"{color}{header}{colorama.Style.RESET_ALL} {message}"
