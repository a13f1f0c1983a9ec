"""
Stache Nodes - AST node types produced by the template parser.

Nodes are frozen dataclasses and node sequences are tuples, so a parsed
template is immutable. Type annotations (`VarType`, `SectionType`) and
variable scopes are never produced by the grammar; callers attach them with
`dataclasses.replace` or build annotated trees directly.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Optional, Union

Path = tuple[str, ...]

GLOBAL_SCOPE = "global"
LOCAL_SCOPE = "local"


def dotted(path: Path) -> str:
    return ".".join(path)


def _require_path(name: Path, kind: str) -> Path:
    name = tuple(name)
    if not name:
        raise ValueError(f"{kind} must have at least one path segment")
    return name


@dataclass(frozen=True)
class VarType:
    """Declared type of a variable tag: its type alternatives and optionality."""

    alternatives: tuple[str, ...] = ()
    optional: bool = False


@dataclass(frozen=True)
class SectionType:
    """Declared type of a section: optional presence, and whether it iterates a sequence."""

    optional: bool = False
    array: bool = False


@dataclass(frozen=True)
class Text:
    content: str


@dataclass(frozen=True)
class Variable:
    name: Path
    triple: bool = False
    var_type: Optional[VarType] = None
    scope: Optional[str] = None  # GLOBAL_SCOPE, LOCAL_SCOPE or None (local)

    def __post_init__(self):
        object.__setattr__(self, "name", _require_path(self.name, "variable"))
        if self.scope not in (None, GLOBAL_SCOPE, LOCAL_SCOPE):
            raise ValueError(f"unknown variable scope: {self.scope!r}")

    @property
    def is_global(self) -> bool:
        return self.scope == GLOBAL_SCOPE


@dataclass(frozen=True)
class ImplicitVariable:
    triple: bool = False


@dataclass(frozen=True)
class Section:
    name: Path
    content: tuple["Node", ...] = field(default_factory=tuple)
    var_type: Optional[SectionType] = None

    def __post_init__(self):
        object.__setattr__(self, "name", _require_path(self.name, "section"))
        object.__setattr__(self, "content", tuple(self.content))


@dataclass(frozen=True)
class InvertedSection:
    name: Path
    content: tuple["Node", ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "name", _require_path(self.name, "inverted section"))
        object.__setattr__(self, "content", tuple(self.content))


@dataclass(frozen=True)
class Comment:
    content: str = ""


@dataclass(frozen=True)
class Partial:
    name: Path

    def __post_init__(self):
        object.__setattr__(self, "name", _require_path(self.name, "partial"))


Node = Union[Text, Variable, ImplicitVariable, Section, InvertedSection, Comment, Partial]
Template = tuple[Node, ...]

NODE_TYPE_NAMES = {
    Text: "text",
    Variable: "variable",
    ImplicitVariable: "implicit-variable",
    Section: "section",
    InvertedSection: "inverted",
    Comment: "comment",
    Partial: "partial",
}


def node_to_dict(node: Any) -> Any:
    """Convert a node (or a sequence of nodes) to JSON-ready data."""
    if isinstance(node, (list, tuple)):
        return [node_to_dict(n) for n in node]
    if isinstance(node, (VarType, SectionType)):
        return {f.name: getattr(node, f.name) for f in fields(node)}

    d: dict[str, Any] = {"type": NODE_TYPE_NAMES[type(node)]}
    for f in fields(node):
        value = getattr(node, f.name)
        if value is None:
            continue
        if f.name == "content" and isinstance(value, tuple):
            d[f.name] = node_to_dict(value)
        elif f.name == "name":
            d[f.name] = list(value)
        elif f.name == "var_type":
            d[f.name] = node_to_dict(value)
        else:
            d[f.name] = value
    return d
