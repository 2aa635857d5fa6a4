"""Manipulation groups and the ordered sequence the pipeline consumes.

A group is a plain insertion-ordered dict (operation name -> argument) and
maps to exactly one engine call. Building sequences from a DSL is left to the
caller; this module only holds them.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import Any

ManipulationGroup = dict[str, Any]


class ManipulationSequence:
    def __init__(self) -> None:
        self._groups: list[ManipulationGroup] = [{}]

    @classmethod
    def from_groups(cls, groups: Iterable[Mapping[str, Any]]) -> ManipulationSequence:
        seq = cls()
        for group in groups:
            seq.start_group()
            for name, argument in group.items():
                seq.add_manipulation(name, argument)
        return seq

    def add_manipulation(self, name: str, argument: Any) -> ManipulationSequence:
        self._groups[-1][name] = argument
        return self

    def start_group(self) -> ManipulationSequence:
        """Close the current group; later manipulations land in a new one."""
        if self._groups[-1]:
            self._groups.append({})
        return self

    def groups(self) -> list[ManipulationGroup]:
        # copies, so callers can't alias into the sequence
        return [dict(g) for g in self._groups if g]

    def is_empty(self) -> bool:
        return not any(self._groups)

    def __iter__(self) -> Iterator[ManipulationGroup]:
        return iter(self.groups())

    def __len__(self) -> int:
        return sum(1 for g in self._groups if g)

    def __repr__(self) -> str:
        return f"ManipulationSequence({self.groups()!r})"
