"""Record types shared by the comparison tests."""

from collections import namedtuple
from dataclasses import dataclass, field
from typing import Any, List, NamedTuple, Optional

from pydantic import BaseModel, PrivateAttr


@dataclass
class Triple:
    A: int
    B: int
    C: int


@dataclass
class Holder:
    a: Optional[int]


@dataclass
class Inner:
    x: int


@dataclass
class Outer:
    inner: Optional[Inner]


@dataclass
class Boxed:
    value: Any


@dataclass
class Tagged:
    tags: Optional[List[str]]


@dataclass
class Node:
    value: int
    next: Optional["Node"] = None


# Eagle -> Dreamer -> Any animal -> Goat -> GoatImmutable

@dataclass
class GoatImmutable:
    id: str
    state: int


@dataclass
class Goat:
    target: str
    immutable: Optional[GoatImmutable]


@dataclass
class Dreamer:
    name: str
    animal: List[Any] = field(default_factory=list)


@dataclass
class Eagle:
    name: str
    dreamers: List[Dreamer] = field(default_factory=list)


# Encapsulation

@dataclass
class Ledger:
    total: int
    _entries: List[int]


@dataclass
class Account:
    owner: str
    _ledger: Ledger


class Metrics(BaseModel):
    revenue: float
    orders: int
    tags: List[str] = []
    _cache: dict = PrivateAttr(default_factory=dict)


class Point(NamedTuple):
    x: float
    y: float


Pair = namedtuple('Pair', ['left', 'right'])


class CaseInsensitive:
    """Value type with its own equality operation."""

    def __init__(self, text: str):
        self.text = text

    def equal(self, other: "CaseInsensitive") -> bool:
        return self.text.lower() == other.text.lower()

    def __repr__(self) -> str:
        return f"CaseInsensitive({self.text!r})"
