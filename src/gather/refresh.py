"""Re-deriving the view from the files on disk."""

from __future__ import annotations

import logging
from pathlib import Path

from .consensus import compute_consensus
from .hosts import RefreshError, discover_hosts, read_host, write_keep_marker
from .view import ViewState

logger = logging.getLogger(__name__)


def refresh_view(view: ViewState, output_dir: Path, prompt_detection: bool = True) -> bool:
    """Re-read every host and rebuild the consensus in place.

    Returns False when the output directory could not be listed. In that case
    ``view.error`` describes the failure and the previous lines stay on screen.
    """
    try:
        hosts = discover_hosts(output_dir)
    except RefreshError as e:
        logger.warning("Refresh failed: %s", e)
        view.error = str(e)
        return False

    view.error = ""
    view.hosts = hosts
    view.has_hosts = bool(hosts)
    view.host_states = {
        name: read_host(output_dir, name, prompt_detection=prompt_detection)
        for name in hosts
    }
    view.lines = compute_consensus(
        hosts, {name: state.lines for name, state in view.host_states.items()}
    )

    view.selection.reconcile(view.lines)
    if view.tail:
        view.selection.jump_bottom(view.lines)

    return True


def toggle_keep(view: ViewState, output_dir: Path) -> None:
    """Flip the keep flag and mirror it to the marker file."""
    view.keep_output = not view.keep_output
    flush_keep(view, output_dir)


def flush_keep(view: ViewState, output_dir: Path) -> bool:
    """Make the marker file match ``view.keep_output``."""
    try:
        write_keep_marker(output_dir, view.keep_output)
    except OSError as e:
        logger.warning("Failed to update keep marker in %s: %s", output_dir, e)
        view.keep_error = f"Cannot update keep marker: {e.strerror or e}"
        return False
    view.keep_error = ""
    return True
