"""Positional consensus across host outputs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence, Union


@dataclass(frozen=True)
class Consensus:
    """Every host that has this line agrees on its text."""

    text: str


@dataclass(frozen=True)
class Differs:
    """Two or more distinct texts at the same position.

    ``variants`` maps each distinct text to the hosts that produced it. Both the
    mapping and each host tuple follow the host scan order.
    """

    variants: dict[str, tuple[str, ...]]

    @property
    def text(self) -> str:
        """The most common variant; ties go to the one seen first."""
        return max(self.variants, key=lambda content: len(self.variants[content]))

    @property
    def variant_count(self) -> int:
        return len(self.variants)

    @property
    def hosts(self) -> set[str]:
        return {host for hosts in self.variants.values() for host in hosts}

    def variant(self, index: int) -> tuple[str, tuple[str, ...]]:
        """Return the ``(text, hosts)`` pair at ``index``."""
        return list(self.variants.items())[index]


ConsensusLine = Union[Consensus, Differs]


def compute_consensus(
    hosts: Sequence[str], host_lines: Mapping[str, Sequence[str]]
) -> list[ConsensusLine]:
    """Merge per-host lines into one sequence by comparing them index by index.

    A host with fewer lines simply has nothing to say past its end, so a host
    that is still producing output never shows up as a difference.
    """
    if not hosts:
        return []

    lines_by_host = [(host, host_lines.get(host, ())) for host in hosts]
    max_lines = max(len(lines) for _, lines in lines_by_host)

    result: list[ConsensusLine] = []
    for index in range(max_lines):
        groups: dict[str, list[str]] = {}
        for host, lines in lines_by_host:
            if index < len(lines):
                groups.setdefault(lines[index], []).append(host)

        if len(groups) == 1:
            result.append(Consensus(next(iter(groups))))
        else:
            result.append(
                Differs({text: tuple(members) for text, members in groups.items()})
            )

    return result
