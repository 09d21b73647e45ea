"""Two-level cursor over the consensus view."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .consensus import ConsensusLine, Differs


@dataclass
class Selection:
    """Selected line, selected variant within it, and which lines are expanded.

    The cursor is ``(line_index, variant_index)`` rather than a flat row number,
    so expanding or collapsing another line never moves it::

        0  identical line               (0, None)
        1  [2] collapsed difference     (1, None)
        2  [3] expanded difference      (2, None)
             host1 | variant A          (2, 0)
             host2 | variant B          (2, 1)
             host3 | variant C          (2, 2)
        3  another line                 (3, None)
    """

    line_index: int = 0
    variant_index: int | None = None
    expanded: set[int] = field(default_factory=set)

    @property
    def cursor(self) -> tuple[int, int | None]:
        return self.line_index, self.variant_index

    def is_expanded(self, lines: Sequence[ConsensusLine], index: int) -> bool:
        """True if the line at ``index`` is a difference currently showing variants."""
        return (
            index in self.expanded
            and 0 <= index < len(lines)
            and isinstance(lines[index], Differs)
        )

    def _expanded_variant_count(self, lines: Sequence[ConsensusLine], index: int) -> int:
        if not self.is_expanded(lines, index):
            return 0
        return lines[index].variant_count

    def move_down(self, lines: Sequence[ConsensusLine]) -> None:
        if not lines:
            return
        last_line = len(lines) - 1
        count = self._expanded_variant_count(lines, self.line_index)

        if count:
            if self.variant_index is None:
                self.variant_index = 0
                return
            if self.variant_index + 1 < count:
                self.variant_index += 1
                return
            # Leaving the last variant of the last line would be irreversible
            if self.line_index >= last_line:
                return

        self.variant_index = None
        self.line_index = min(self.line_index + 1, last_line)

    def move_up(self, lines: Sequence[ConsensusLine]) -> None:
        if not lines:
            return
        if self.variant_index is not None:
            self.variant_index = self.variant_index - 1 if self.variant_index > 0 else None
            return

        if self.line_index == 0:
            return
        self.line_index -= 1
        count = self._expanded_variant_count(lines, self.line_index)
        self.variant_index = count - 1 if count else None

    def toggle_expand(self, lines: Sequence[ConsensusLine]) -> None:
        if self.is_expanded(lines, self.line_index):
            self.collapse_current(lines)
        else:
            self.expand_current(lines)

    def expand_current(self, lines: Sequence[ConsensusLine]) -> None:
        if 0 <= self.line_index < len(lines) and isinstance(lines[self.line_index], Differs):
            self.expanded.add(self.line_index)
            self.variant_index = None

    def collapse_current(self, lines: Sequence[ConsensusLine]) -> None:
        self.expanded.discard(self.line_index)
        self.variant_index = None

    def expand_all(self, lines: Sequence[ConsensusLine]) -> None:
        self.expanded = {i for i, line in enumerate(lines) if isinstance(line, Differs)}
        self.variant_index = None

    def collapse_all(self, lines: Sequence[ConsensusLine]) -> None:
        self.expanded.clear()
        self.variant_index = None

    def next_diff(self, lines: Sequence[ConsensusLine]) -> bool:
        """Jump to the next difference, wrapping at the end. Returns False if none."""
        total = len(lines)
        for step in range(1, total + 1):
            index = (self.line_index + step) % total
            if isinstance(lines[index], Differs):
                self.line_index = index
                self.variant_index = None
                return True
        return False

    def prev_diff(self, lines: Sequence[ConsensusLine]) -> bool:
        """Jump to the previous difference, wrapping at the start."""
        total = len(lines)
        for step in range(1, total + 1):
            index = (self.line_index - step) % total
            if isinstance(lines[index], Differs):
                self.line_index = index
                self.variant_index = None
                return True
        return False

    def jump_top(self, lines: Sequence[ConsensusLine]) -> None:
        self.line_index = 0
        self.variant_index = None

    def jump_bottom(self, lines: Sequence[ConsensusLine]) -> None:
        if not lines:
            self.jump_top(lines)
            return
        self.line_index = len(lines) - 1
        count = self._expanded_variant_count(lines, self.line_index)
        self.variant_index = count - 1 if count else None

    def reconcile(self, lines: Sequence[ConsensusLine]) -> None:
        """Clamp the cursor and drop expansion flags that no longer apply."""
        self.expanded = {i for i in self.expanded if self.is_expanded(lines, i)}
        self.line_index = max(0, min(self.line_index, len(lines) - 1))

        count = self._expanded_variant_count(lines, self.line_index)
        if self.variant_index is None:
            return
        if count:
            self.variant_index = min(self.variant_index, count - 1)
        else:
            self.variant_index = None
