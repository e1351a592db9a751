"""
Hierarchical path filters.

A path identifies a node in the B1 → B2 → B3 hierarchy. Stores accept one of
the four explicit filter variants below instead of ad-hoc query dicts:

    B1Filter()                    every entry
    B2Filter(b1)                  entries under one B1
    B3Filter(b1, b2)              entries under one B1/B2 pair
    DetailFilter(b1, b2, b3)      entries of one exact B1/B2/B3 triple

Each variant knows which entry columns it constrains (``columns``) and the
values it pins them to (``keys``), which is everything the SQL layer needs to
build a WHERE clause.
"""

from dataclasses import dataclass
from typing import ClassVar, Tuple, Union

from renew_admin.models.enums import Level


@dataclass(frozen=True)
class B1Filter:
    level: ClassVar[Level] = Level.B1

    @property
    def columns(self) -> Tuple[str, ...]:
        return ()

    @property
    def keys(self) -> Tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class B2Filter:
    b1: str
    level: ClassVar[Level] = Level.B2

    @property
    def columns(self) -> Tuple[str, ...]:
        return ('b1',)

    @property
    def keys(self) -> Tuple[str, ...]:
        return (self.b1,)


@dataclass(frozen=True)
class B3Filter:
    b1: str
    b2: str
    level: ClassVar[Level] = Level.B3

    @property
    def columns(self) -> Tuple[str, ...]:
        return ('b1', 'b2')

    @property
    def keys(self) -> Tuple[str, ...]:
        return (self.b1, self.b2)


@dataclass(frozen=True)
class DetailFilter:
    b1: str
    b2: str
    b3: str
    level: ClassVar[Level] = Level.DETAIL

    @property
    def columns(self) -> Tuple[str, ...]:
        return ('b1', 'b2', 'b3')

    @property
    def keys(self) -> Tuple[str, ...]:
        return (self.b1, self.b2, self.b3)


PathFilter = Union[B1Filter, B2Filter, B3Filter, DetailFilter]


def filter_for_children(level: Level, parent_path: Tuple[str, ...]) -> PathFilter:
    """
    Build the filter that selects the parent of ``level``'s values.

    ``filter_for_children(Level.B2, ('X',))`` selects all entries under B1
    ``X``, whose B2 values are the children being distributed.

    Raises:
        ValueError: If ``level`` has no parent or the path length is wrong.
    """
    expected = {Level.B2: 1, Level.B3: 2, Level.DETAIL: 3}
    if level not in expected:
        raise ValueError(f"Level {level.value} has no parent path")
    if len(parent_path) != expected[level]:
        raise ValueError(
            f"Level {level.value} needs {expected[level]} path component(s), "
            f"got {len(parent_path)}"
        )
    if level == Level.B2:
        return B2Filter(*parent_path)
    if level == Level.B3:
        return B3Filter(*parent_path)
    return DetailFilter(*parent_path)


__all__ = [
    'B1Filter',
    'B2Filter',
    'B3Filter',
    'DetailFilter',
    'PathFilter',
    'filter_for_children',
]
