"""
Stache Type Inference - Infers the params shape a template requires.

This module walks a parsed template and, for every tag that reads data,
builds a TypeTree fragment describing what that tag needs:

- Variables need a primitive value (or their declared alternatives)
- Sections need a boolean, or an object when they read nested variables
- Inverted sections need a boolean; their content is not inspected

Fragments are merged as they are produced, so conflicting uses of one path
are reported as soon as the second use is seen.
"""

import logging
from typing import Iterator

from stachetype.StacheNodes import InvertedSection, Path, Section, Template, Variable
from stachetype.StacheTypeTree import (
    BOOLEAN_LEAF,
    DEFAULT_LEAF,
    Leaf,
    TypeTree,
    finalize,
    mark_array,
    mark_optional,
    merge,
    nested_fragment,
)

logger = logging.getLogger(__name__)

# A fragment together with whether it is rooted at the document root.
Fragment = tuple[bool, TypeTree]


class TypeInferrer:
    """
    Folds the fragments of every tag in a template into one TypeTree.
    """

    def __init__(self):
        self.tree: TypeTree = {}

    def infer(self, template: Template) -> TypeTree:
        """Infer and finalize the tree for a whole template."""
        for _, fragment in self._fragments(template, ()):
            self.tree = merge(self.tree, fragment)
        self.tree = finalize(self.tree)
        logger.debug("inferred %d top-level field(s)", len(self.tree))
        return self.tree

    # --- Fragment Production ---

    def _fragments(self, nodes: Template, prefix: Path) -> Iterator[Fragment]:
        """
        Yield fragments for `nodes`, in document order.

        Local fragments are relative to the enclosing section; `prefix` is
        that section's path from the root and only locates errors.
        """
        for node in nodes:
            if isinstance(node, Variable):
                yield self._handle_variable(node, prefix)
            elif isinstance(node, Section):
                yield from self._handle_section(node, prefix)
            elif isinstance(node, InvertedSection):
                yield self._handle_inverted(node, prefix)

    def _handle_variable(self, node: Variable, prefix: Path) -> Fragment:
        var_type = node.var_type
        leaf = Leaf.of(*var_type.alternatives) if var_type else DEFAULT_LEAF
        optional = bool(var_type and var_type.optional)
        if node.is_global:
            return True, nested_fragment(node.name, leaf, optional)
        return False, nested_fragment(node.name, leaf, optional, prefix)

    def _handle_inverted(self, node: InvertedSection, prefix: Path) -> Fragment:
        return False, nested_fragment(node.name, BOOLEAN_LEAF, prefix=prefix)

    def _handle_section(self, node: Section, prefix: Path) -> Iterator[Fragment]:
        location = prefix + node.name
        section_type = node.var_type

        body: TypeTree = {}
        for is_global, fragment in self._fragments(node.content, location):
            if is_global:
                yield True, fragment
            else:
                body = merge(body, fragment, location)

        if body:
            value = body
        elif section_type and section_type.array:
            value = DEFAULT_LEAF
        else:
            value = BOOLEAN_LEAF

        fragment = nested_fragment(node.name, value, prefix=prefix)
        if section_type and section_type.array:
            fragment = mark_array(fragment, node.name)
        # Only after the body is complete: a required use elsewhere still wins.
        if section_type and section_type.optional:
            fragment = mark_optional(fragment, node.name)
        yield False, fragment


def infer_type_tree(template: Template) -> TypeTree:
    """Infer the finalized TypeTree for a parsed template."""
    return TypeInferrer().infer(template)
