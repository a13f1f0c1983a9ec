"""
Stache Type Tree - The intermediate shape inferred from a template.

A TypeTree is a dict mapping keys to either a Leaf (a set of type
alternatives) or another TypeTree. Keys may carry two markers:

    ?name      the key is not guaranteed to be present
    name[]     the value is a sequence of the described type

Fragments are built per tag by nested_fragment(), folded together with
merge(), and cleaned up once with finalize() before printing.
"""

from dataclasses import dataclass
from typing import Iterable, Union

from stachetype.StacheNodes import Path, dotted

OPTIONAL_PREFIX = "?"
ARRAY_SUFFIX = "[]"

# Placeholder for "any primitive"; expanded by the printer.
DEFAULT_TYPE = "*"
DEFAULT_EXPANSION = ("string", "boolean", "number")


# --- Errors ---


class TypeInferenceError(Exception):
    """Raised when no type can be inferred for a template."""

    pass


class TypeConflictError(TypeInferenceError):
    """Raised when one path is used with two incompatible shapes."""

    def __init__(self, path: Path, left: "TypeNode", right: "TypeNode"):
        self.path = tuple(path)
        self.left = left
        self.right = right
        super().__init__(
            f"Type conflict at '{dotted(self.path)}': "
            f"{describe(left)} vs {describe(right)}"
        )


class InvalidKeyError(TypeInferenceError):
    """Raised when a path segment looks like an array index."""

    def __init__(self, path: Path, segment: str):
        self.path = tuple(path)
        self.segment = segment
        super().__init__(
            f"'{segment}' in '{dotted(self.path)}' is an index, not an object key"
        )


# --- Tree Values ---


@dataclass(frozen=True)
class Leaf:
    """Type alternatives for a single value."""

    alternatives: frozenset = frozenset({DEFAULT_TYPE})

    @classmethod
    def of(cls, *alternatives: str) -> "Leaf":
        """Build a leaf; the placeholder is dropped next to concrete types."""
        names = frozenset(alternatives) - {DEFAULT_TYPE}
        if not names:
            return DEFAULT_LEAF
        return cls(names)

    @property
    def is_default(self) -> bool:
        return self.alternatives == frozenset({DEFAULT_TYPE})


DEFAULT_LEAF = Leaf()
BOOLEAN_LEAF = Leaf(frozenset({"boolean"}))

TypeTree = dict
TypeNode = Union[Leaf, TypeTree]


def describe(node: TypeNode) -> str:
    if isinstance(node, Leaf):
        if node.is_default:
            return " | ".join(DEFAULT_EXPANSION)
        return " | ".join(sorted(node.alternatives))
    return "object"


def split_key(key: str) -> tuple[str, bool, bool]:
    """Return (base name, optional, array) for a possibly marked key."""
    optional = key.startswith(OPTIONAL_PREFIX)
    if optional:
        key = key[len(OPTIONAL_PREFIX):]
    array = key.endswith(ARRAY_SUFFIX)
    if array:
        key = key[: -len(ARRAY_SUFFIX)]
    return key, optional, array


def make_key(base: str, optional: bool = False, array: bool = False) -> str:
    key = base + ARRAY_SUFFIX if array else base
    return OPTIONAL_PREFIX + key if optional else key


# --- Builder ---


def check_path(path: Path, prefix: Path = ()) -> None:
    for segment in path:
        if segment.isdigit():
            raise InvalidKeyError(tuple(prefix) + tuple(path), segment)


def nested_fragment(
    path: Path, value: TypeNode, optional: bool = False, prefix: Path = ()
) -> TypeTree:
    """
    Build the chain of single-key objects leading to `value`.

    ("user", "emails", "address") -> {"user": {"emails": {"address": value}}}

    The innermost key is marked optional when `optional` is set. `prefix`
    only locates the fragment for error messages.
    """
    path = tuple(path)
    if not path:
        raise ValueError("cannot build a fragment for an empty path")
    check_path(path, prefix)

    keys = list(path)
    if optional:
        keys[-1] = make_key(keys[-1], optional=True)

    node: TypeNode = value
    for key in reversed(keys):
        node = {key: node}
    return node


def _mark(tree: TypeTree, path: Path, optional: bool, array: bool) -> TypeTree:
    head, rest = path[0], path[1:]
    marked = {}
    for key, value in tree.items():
        base, is_optional, is_array = split_key(key)
        if base != head:
            marked[key] = value
        elif rest:
            if not isinstance(value, dict):
                raise KeyError(dotted(path))
            marked[key] = _mark(value, rest, optional, array)
        else:
            marked[make_key(base, is_optional or optional, is_array or array)] = value
    return marked


def mark_optional(tree: TypeTree, path: Path) -> TypeTree:
    """Return a copy of `tree` whose key at `path` is marked optional."""
    return _mark(tree, tuple(path), optional=True, array=False)


def mark_array(tree: TypeTree, path: Path) -> TypeTree:
    """Return a copy of `tree` whose key at `path` holds a sequence."""
    return _mark(tree, tuple(path), optional=False, array=True)


# --- Merger ---


def merge_leaves(left: Leaf, right: Leaf, path: Path = ()) -> Leaf:
    """
    Merge two leaves: the placeholder yields; equal sets merge; different
    concrete sets conflict.
    """
    if left.is_default:
        return right
    if right.is_default or left == right:
        return left
    raise TypeConflictError(path, left, right)


def merge_nodes(left: TypeNode, right: TypeNode, path: Path = ()) -> TypeNode:
    left_leaf = isinstance(left, Leaf)
    right_leaf = isinstance(right, Leaf)
    if left_leaf and right_leaf:
        return merge_leaves(left, right, path)
    if not left_leaf and not right_leaf:
        return merge(left, right, path)
    if left_leaf and left.is_default:
        return right
    if right_leaf and right.is_default:
        return left
    raise TypeConflictError(path, left, right)


def merge(left: TypeTree, right: TypeTree, prefix: Path = ()) -> TypeTree:
    """
    Merge two trees without modifying either.

    Keys present on one side pass through, keys present on both are merged
    recursively. Keys keep the left tree's order, followed by new keys from
    the right tree.
    """
    merged = dict(left)
    for key, value in right.items():
        if key in merged:
            location = tuple(prefix) + (split_key(key)[0],)
            merged[key] = merge_nodes(merged[key], value, location)
        else:
            merged[key] = value
    return merged


def merge_all(fragments: Iterable[TypeTree], prefix: Path = ()) -> TypeTree:
    tree: TypeTree = {}
    for fragment in fragments:
        tree = merge(tree, fragment, prefix)
    return tree


# --- Finalize ---


def _pick_shape(plain, sequence, path: Path) -> tuple[TypeNode, bool]:
    """Choose between the plain and the sequence use of one name."""
    if sequence is None:
        return plain, False
    if plain is None:
        return sequence, True
    if isinstance(plain, Leaf) and plain.is_default:
        return sequence, True
    if isinstance(sequence, Leaf) and sequence.is_default:
        return plain, False
    raise TypeConflictError(path, plain, sequence)


def _settle_keys(tree: TypeTree, prefix: Path) -> TypeTree:
    groups: dict[str, list[str]] = {}
    for key in tree:
        groups.setdefault(split_key(key)[0], []).append(key)

    settled: TypeTree = {}
    for base, keys in groups.items():
        location = tuple(prefix) + (base,)
        plain = sequence = None
        required = False
        for key in keys:
            _, optional, array = split_key(key)
            required = required or not optional
            value = tree[key]
            if array:
                sequence = value if sequence is None else merge_nodes(sequence, value, location)
            else:
                plain = value if plain is None else merge_nodes(plain, value, location)
        value, array = _pick_shape(plain, sequence, location)
        settled[make_key(base, not required, array)] = value
    return settled


def finalize(tree: TypeTree, prefix: Path = ()) -> TypeTree:
    """
    Resolve markers that only make sense once every fragment is merged.

    All keys sharing a base name become one key. A name used both as a
    sequence and as a plain value keeps whichever side is not the
    placeholder; when neither is, the two uses conflict. The surviving key
    is required if any of the merged keys was.
    """
    tree = _settle_keys(tree, prefix)
    result: TypeTree = {}
    for key, value in tree.items():
        if isinstance(value, dict):
            value = finalize(value, tuple(prefix) + (split_key(key)[0],))
        result[key] = value
    return result
