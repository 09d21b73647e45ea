"""Reading per-host state from the run's output directory."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .normalize import clean_terminal_output, detect_input_prompt

logger = logging.getLogger(__name__)

OUTPUT_FILE = "out.log"
STATUS_FILE = "status"
META_FILE = "meta.json"
KEEP_MARKER = ".keep"

# Entries in the output directory that are never hosts
IGNORED_ENTRIES = {"tmux.sock"}


class HostStatus(Enum):
    """Status of a host's execution."""

    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"

    @classmethod
    def parse(cls, text: str) -> HostStatus:
        """Parse status file content; anything unrecognized is pending."""
        try:
            return cls(text.strip().lower())
        except ValueError:
            return cls.PENDING

    @property
    def finished(self) -> bool:
        return self in (HostStatus.SUCCESS, HostStatus.FAILED)


@dataclass
class HostMeta:
    """Timing and exit code written next to a host's output."""

    exit_code: int | None = None
    started_at: float | None = None
    finished_at: float | None = None

    @property
    def duration(self) -> float | None:
        if self.started_at is None or self.finished_at is None:
            return None
        return max(self.finished_at - self.started_at, 0.0)


@dataclass
class HostState:
    """Snapshot of one host for a single refresh."""

    name: str
    status: HostStatus = HostStatus.PENDING
    lines: list[str] = field(default_factory=list)
    meta: HostMeta | None = None
    waiting_for_input: bool = False
    error: str = ""


class RefreshError(Exception):
    """The output directory itself could not be read."""


def discover_hosts(output_dir: Path) -> list[str]:
    """Find host subdirectories, sorted by name.

    A directory that does not exist yet simply has no hosts. Any other failure
    to list it raises ``RefreshError``.
    """
    hosts = []
    try:
        for entry in output_dir.iterdir():
            name = entry.name
            if name.startswith(".") or name in IGNORED_ENTRIES:
                continue
            if entry.is_dir():
                hosts.append(name)
    except FileNotFoundError:
        return []
    except OSError as e:
        raise RefreshError(f"Cannot read {output_dir}: {e.strerror or e}") from e

    return sorted(hosts)


def read_status(host_dir: Path) -> HostStatus:
    """Read a host's status file; missing means pending."""
    try:
        return HostStatus.parse(
            (host_dir / STATUS_FILE).read_text(encoding="utf-8", errors="replace")
        )
    except FileNotFoundError:
        return HostStatus.PENDING


def read_output(host_dir: Path) -> bytes:
    """Read a host's raw capture; missing means nothing written yet."""
    try:
        return (host_dir / OUTPUT_FILE).read_bytes()
    except FileNotFoundError:
        return b""


def read_meta(host_dir: Path) -> HostMeta | None:
    """Read optional metadata. Malformed content is logged and ignored."""
    path = host_dir / META_FILE
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("Ignoring malformed %s: %s", path, e)
        return None

    if not isinstance(raw, dict):
        logger.warning("Ignoring malformed %s: expected an object", path)
        return None

    return HostMeta(
        exit_code=_optional_number(raw.get("exit_code"), int),
        started_at=_optional_number(raw.get("started_at"), float),
        finished_at=_optional_number(raw.get("finished_at"), float),
    )


def _optional_number(value, kind):
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return kind(value)


def read_host(output_dir: Path, name: str, prompt_detection: bool = True) -> HostState:
    """Read everything known about one host.

    I/O failures are recorded on the returned state instead of raised, so one
    unreadable host never stops the others from refreshing.
    """
    host_dir = output_dir / name
    state = HostState(name=name)

    try:
        state.status = read_status(host_dir)
        raw = read_output(host_dir)
        state.meta = read_meta(host_dir)
    except OSError as e:
        logger.warning("Failed to read host %s: %s", name, e)
        state.error = e.strerror or str(e)
        return state

    state.lines = clean_terminal_output(raw)
    if prompt_detection and state.status == HostStatus.RUNNING:
        state.waiting_for_input = detect_input_prompt(raw)

    return state


def keep_marker_exists(output_dir: Path) -> bool:
    try:
        return (output_dir / KEEP_MARKER).exists()
    except OSError as e:
        logger.warning("Cannot check keep marker in %s: %s", output_dir, e)
        return False


def write_keep_marker(output_dir: Path, keep: bool) -> None:
    """Create or remove the marker that tells teardown to keep the directory."""
    marker = output_dir / KEEP_MARKER
    if keep:
        marker.touch()
    else:
        marker.unlink(missing_ok=True)
