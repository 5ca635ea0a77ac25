"""
Comparison Path

A Path is the stack of steps from the comparison root to the node currently
being compared. Step 0 is always a Root step that only carries the root type.

Two renderings:
- str(path): simplified, field names only ("Slaps.Immutable.ID")
- path.render(): full, every step including references and transforms
  ("*{teststructs.Eagle}.Dreamers[1].Animal[0].(teststructs.Goat).Immutable.State")
"""

import sys
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional


ANONYMOUS_TRANSFORM = "λ"


def _module_label(t: type) -> str:
    # classes re-exported by their top-level package use that package name
    root = t.__module__.split(".", 1)[0]
    package = sys.modules.get(root)
    if package is not None and getattr(package, t.__name__, None) is t:
        return root
    return t.__module__.rsplit(".", 1)[-1]


def type_name(t: Any) -> str:
    """Printable name of a type as used in path renderings."""
    if t is None:
        return ""
    if t is type(None):
        return "None"
    if isinstance(t, type) and not getattr(t, "__args__", None):
        qualname = t.__qualname__.replace("<locals>.", "")
        if t.__module__ in ("builtins", "typing"):
            return qualname
        return f"{_module_label(t)}.{qualname}"
    return repr(t).replace("typing.", "")


def is_valid_name(name: str) -> bool:
    """Identifier check for transformer names: letters, digits, underscore."""
    if not name or name == "_":
        return False
    for i, ch in enumerate(name):
        if i == 0 and ch.isdigit():
            return False
        if not (ch == "_" or ch.isalpha() or ch.isdigit()):
            return False
    return True


@dataclass(frozen=True)
class PathStep:
    """One step of a Path; ``type`` is the type after applying the step."""
    type: Any

    def __str__(self) -> str:
        name = type_name(self.type)
        if not name:
            return "root"
        return "{" + name + "}"


class Root(PathStep):
    """The top-level value."""


@dataclass(frozen=True)
class StructField(PathStep):
    name: str
    index: int = 0
    unexported: bool = False

    def __str__(self) -> str:
        return f".{self.name}"


@dataclass(frozen=True)
class SliceIndex(PathStep):
    key: int

    def __str__(self) -> str:
        return f"[{self.key}]"


@dataclass(frozen=True)
class MapIndex(PathStep):
    key: Any

    def __str__(self) -> str:
        return f"[{self.key!r}]"


class Indirect(PathStep):
    """Dereference of an Optional[T] node."""

    def __str__(self) -> str:
        return "*"


class TypeAssertion(PathStep):
    """Narrowing of an open declared type to the runtime class."""

    def __str__(self) -> str:
        return f".({type_name(self.type)})"


@dataclass(frozen=True)
class Transform(PathStep):
    transformer: Any = None

    @property
    def name(self) -> str:
        return self.transformer.name

    @property
    def func(self) -> Callable:
        return self.transformer.fn

    def __str__(self) -> str:
        return f"{self.name}()"


class Path:
    """Ordered list of steps from the root to the current node."""

    def __init__(self, steps: Optional[List[PathStep]] = None):
        self._steps: List[PathStep] = list(steps or [])

    def push(self, step: PathStep) -> None:
        self._steps.append(step)

    def pop(self) -> None:
        self._steps.pop()

    def copy(self) -> "Path":
        return Path(self._steps)

    @property
    def last(self) -> Optional[PathStep]:
        return self._steps[-1] if self._steps else None

    def __len__(self) -> int:
        return len(self._steps)

    def __getitem__(self, index):
        return self._steps[index]

    def __iter__(self) -> Iterator[PathStep]:
        return iter(self._steps)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Path):
            return NotImplemented
        return self._steps == other._steps

    def __hash__(self) -> int:
        return hash(tuple(self._steps))

    def __str__(self) -> str:
        names = "".join(str(s) for s in self._steps if isinstance(s, StructField))
        return names.lstrip(".")

    def __repr__(self) -> str:
        return f"Path({self.render()!r})"

    def render(self) -> str:
        """Full rendering with references, narrowing and transforms."""
        prefix: List[str] = []
        postfix: List[str] = []
        indirects = 0
        for i, step in enumerate(self._steps):
            next_step = self._steps[i + 1] if i + 1 < len(self._steps) else None

            if isinstance(step, Indirect):
                indirects += 1
                if isinstance(next_step, Indirect):
                    continue
                opening, closing = "(", ")"
                if isinstance(next_step, StructField):
                    # field access dereferences implicitly
                    indirects -= 1
                elif next_step is None:
                    opening, closing = "", ""
                if indirects > 0:
                    prefix.append(opening + "*" * indirects)
                    postfix.append(closing)
                indirects = 0
                continue

            if isinstance(step, Transform):
                prefix.append(step.name + "(")
                postfix.append(")")
                continue

            if isinstance(step, TypeAssertion) and isinstance(next_step, Transform):
                continue

            postfix.append(str(step))

        return "".join(reversed(prefix)) + "".join(postfix)
