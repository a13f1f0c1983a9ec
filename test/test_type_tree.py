# test/test_type_tree.py

import pytest

from stachetype.StacheTypeTree import (
    BOOLEAN_LEAF,
    DEFAULT_LEAF,
    InvalidKeyError,
    Leaf,
    TypeConflictError,
    finalize,
    make_key,
    mark_array,
    mark_optional,
    merge,
    merge_all,
    nested_fragment,
    split_key,
)

STRING = Leaf.of("string")
NUMBER = Leaf.of("number")


# ---------- LEAVES / KEYS ----------


def test_leaf_without_alternatives_is_the_placeholder():
    assert Leaf.of() is DEFAULT_LEAF
    assert Leaf.of("*") is DEFAULT_LEAF
    assert DEFAULT_LEAF.is_default


def test_leaf_drops_placeholder_next_to_concrete_types():
    assert Leaf.of("string", "*") == STRING
    assert not STRING.is_default


@pytest.mark.parametrize(
    "key, parts",
    [
        ("name", ("name", False, False)),
        ("?name", ("name", True, False)),
        ("name[]", ("name", False, True)),
        ("?name[]", ("name", True, True)),
    ],
)
def test_key_markers(key, parts):
    assert split_key(key) == parts
    assert make_key(*parts) == key


# ---------- BUILDER ----------


def test_nested_fragment_builds_single_key_chain():
    assert nested_fragment(("user", "emails", "address"), DEFAULT_LEAF) == {
        "user": {"emails": {"address": DEFAULT_LEAF}}
    }


def test_nested_fragment_marks_innermost_key_optional():
    assert nested_fragment(("user", "nick"), STRING, optional=True) == {
        "user": {"?nick": STRING}
    }


def test_index_like_segment_is_rejected():
    with pytest.raises(InvalidKeyError) as info:
        nested_fragment(("items", "0", "name"), DEFAULT_LEAF, prefix=("page",))
    assert info.value.segment == "0"
    assert info.value.path == ("page", "items", "0", "name")


def test_mark_optional_returns_a_marked_copy():
    tree = {"a": {"b": STRING}, "c": NUMBER}
    marked = mark_optional(tree, ("a", "b"))

    assert marked == {"a": {"?b": STRING}, "c": NUMBER}
    assert tree == {"a": {"b": STRING}, "c": NUMBER}


def test_array_and_optional_markers_combine():
    tree = mark_optional(mark_array({"items": STRING}, ("items",)), ("items",))
    assert tree == {"?items[]": STRING}


# ---------- MERGER ----------


FRAGMENTS = [
    {"user": {"name": DEFAULT_LEAF}},
    {"user": {"age": NUMBER}, "flag": BOOLEAN_LEAF},
    {"user": DEFAULT_LEAF},
    {"user": {"name": STRING}},
]


@pytest.mark.parametrize("left", FRAGMENTS)
@pytest.mark.parametrize("right", FRAGMENTS)
def test_merge_is_commutative(left, right):
    assert merge(left, right) == merge(right, left)


@pytest.mark.parametrize("fragment", FRAGMENTS)
def test_merge_is_idempotent(fragment):
    assert merge(fragment, fragment) == fragment


def test_merge_is_associative():
    a, b, c = FRAGMENTS[0], FRAGMENTS[1], FRAGMENTS[3]
    assert merge(merge(a, b), c) == merge(a, merge(b, c))


def test_merge_does_not_modify_its_inputs():
    left = {"a": {"b": STRING}}
    right = {"a": {"c": NUMBER}}
    merge(left, right)
    assert left == {"a": {"b": STRING}}
    assert right == {"a": {"c": NUMBER}}


def test_merge_keeps_construction_order():
    merged = merge_all([{"b": STRING}, {"a": STRING}, {"b": DEFAULT_LEAF}])
    assert list(merged) == ["b", "a"]


def test_concrete_type_wins_over_placeholder():
    assert merge({"x": NUMBER}, {"x": DEFAULT_LEAF}) == {"x": NUMBER}
    assert merge({"x": DEFAULT_LEAF}, {"x": NUMBER}) == {"x": NUMBER}


def test_placeholder_leaf_yields_to_object():
    assert merge({"user": DEFAULT_LEAF}, {"user": {"name": STRING}}) == {
        "user": {"name": STRING}
    }


def test_distinct_concrete_types_conflict():
    with pytest.raises(TypeConflictError) as info:
        merge({"a": {"b": STRING}}, {"a": {"b": NUMBER}})
    assert info.value.path == ("a", "b")
    assert "a.b" in str(info.value)
    assert "string" in str(info.value) and "number" in str(info.value)


def test_concrete_leaf_against_object_conflicts():
    with pytest.raises(TypeConflictError, match="object"):
        merge({"user": BOOLEAN_LEAF}, {"user": {"name": STRING}})


def test_conflict_is_found_in_any_order():
    fragments = [{"x": STRING}, {"x": DEFAULT_LEAF}, {"x": NUMBER}]
    for order in (fragments, fragments[::-1], fragments[1:] + fragments[:1]):
        with pytest.raises(TypeConflictError):
            merge_all(order)


# ---------- FINALIZE ----------


def test_required_key_absorbs_optional_twin():
    tree = {"?name": DEFAULT_LEAF, "name": STRING}
    assert finalize(tree) == {"name": STRING}


def test_optional_twin_content_is_kept():
    tree = {"user": {"name": STRING}, "?user": {"email": STRING}}
    assert finalize(tree) == {"user": {"name": STRING, "email": STRING}}


def test_lone_optional_key_stays_optional():
    assert finalize({"?nick": STRING}) == {"?nick": STRING}


def test_finalize_recurses():
    tree = {"a": {"?b": DEFAULT_LEAF, "b": BOOLEAN_LEAF}}
    assert finalize(tree) == {"a": {"b": BOOLEAN_LEAF}}


def test_placeholder_yields_to_sequence():
    tree = {"items": DEFAULT_LEAF, "items[]": {"name": STRING}}
    assert finalize(tree) == {"items[]": {"name": STRING}}


def test_sequence_and_plain_use_conflict():
    with pytest.raises(TypeConflictError) as info:
        finalize({"items": BOOLEAN_LEAF, "items[]": {"name": STRING}})
    assert info.value.path == ("items",)


def test_required_plain_key_makes_optional_sequence_required():
    tree = {"items": DEFAULT_LEAF, "?items[]": {"name": STRING}}
    assert finalize(tree) == {"items[]": {"name": STRING}}


def test_optional_plain_and_optional_sequence_stay_optional():
    tree = {"?items": DEFAULT_LEAF, "?items[]": STRING}
    assert finalize(tree) == {"?items[]": STRING}
