"""gather: live consensus view over command output from many hosts."""

import logging

from .config import Config, load_config
from .consensus import Consensus, ConsensusLine, Differs, compute_consensus
from .hosts import HostMeta, HostState, HostStatus, RefreshError
from .layout import Frame, Highlight, Row, build_frame, render_text, truncate
from .normalize import clean_terminal_output, detect_input_prompt
from .refresh import refresh_view
from .selection import Selection
from .view import ViewState

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "Config",
    "load_config",
    "Consensus",
    "ConsensusLine",
    "Differs",
    "compute_consensus",
    "HostMeta",
    "HostState",
    "HostStatus",
    "RefreshError",
    "Frame",
    "Highlight",
    "Row",
    "build_frame",
    "render_text",
    "truncate",
    "clean_terminal_output",
    "detect_input_prompt",
    "refresh_view",
    "Selection",
    "ViewState",
]
