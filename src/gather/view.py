"""The single view value shared by the refresh loop and the layout."""

from __future__ import annotations

from dataclasses import dataclass, field

from .consensus import ConsensusLine, Differs
from .hosts import HostState, HostStatus
from .selection import Selection


@dataclass
class ViewState:
    """Everything the dashboard draws.

    Only ``selection``, ``scroll_offset`` and the ``tail``/``keep_output`` toggles
    survive a refresh; the rest is replaced every cycle.
    """

    hosts: list[str] = field(default_factory=list)
    host_states: dict[str, HostState] = field(default_factory=dict)
    lines: list[ConsensusLine] = field(default_factory=list)
    selection: Selection = field(default_factory=Selection)
    scroll_offset: int = 0
    tail: bool = True
    keep_output: bool = False
    error: str = ""
    keep_error: str = ""
    has_hosts: bool = False

    def status_of(self, host: str) -> HostStatus:
        state = self.host_states.get(host)
        return state.status if state else HostStatus.PENDING

    @property
    def host_errors(self) -> dict[str, str]:
        return {name: s.error for name, s in self.host_states.items() if s.error}

    @property
    def finished_count(self) -> int:
        return sum(1 for s in self.host_states.values() if s.status.finished)

    @property
    def diff_count(self) -> int:
        return sum(1 for line in self.lines if isinstance(line, Differs))
