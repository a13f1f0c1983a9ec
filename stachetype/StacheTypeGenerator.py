"""
Stache Type Generator - Prints an inferred TypeTree as a type declaration.

The output is a TypeScript-style object type:

    {
      user: {
        name: string | boolean | number;
      };
      tags?: string[];
    }
"""

from stachetype.StacheNodes import Template
from stachetype.StacheTypeInference import infer_type_tree
from stachetype.StacheTypeTree import (
    DEFAULT_EXPANSION,
    Leaf,
    TypeNode,
    TypeTree,
    make_key,
    split_key,
)

INDENT = "  "


class TypeDeclarationGenerator:
    """
    Generates declaration text from a TypeTree.
    """

    def __init__(self):
        self.indent_level = 0

    def generate(self, tree: TypeTree) -> str:
        return self._generate_object(tree)

    def _generate_object(self, tree: TypeTree) -> str:
        if not tree:
            return "{}"
        self.indent_level += 1
        lines = ["{"]
        for key, value in tree.items():
            if self._is_shadowed(key, tree):
                continue
            lines.append(self._generate_field(key, value))
        self.indent_level -= 1
        lines.append(INDENT * self.indent_level + "}")
        return "\n".join(lines)

    def _generate_field(self, key: str, value: TypeNode) -> str:
        base, optional, array = split_key(key)
        name = base + "?" if optional else base
        type_text = self._generate_value(value)
        if array:
            if isinstance(value, Leaf) and " | " in type_text:
                type_text = f"({type_text})"
            type_text += "[]"
        return f"{INDENT * self.indent_level}{name}: {type_text};"

    def _generate_value(self, value: TypeNode) -> str:
        if isinstance(value, Leaf):
            return self._generate_leaf(value)
        return self._generate_object(value)

    def _generate_leaf(self, leaf: Leaf) -> str:
        if leaf.is_default:
            return " | ".join(DEFAULT_EXPANSION)
        return " | ".join(sorted(leaf.alternatives))

    def _is_shadowed(self, key: str, tree: TypeTree) -> bool:
        # An optional key is redundant next to a required key of the same name.
        base, optional, array = split_key(key)
        return optional and make_key(base, False, array) in tree


def render_type_tree(tree: TypeTree) -> str:
    """Print a finished TypeTree."""
    return TypeDeclarationGenerator().generate(tree)


def gen_type(template: Template) -> str:
    """
    Generate the type declaration for the params a parsed template needs.

    Raises TypeConflictError when two tags need incompatible shapes for the
    same path, and InvalidKeyError for index-like path segments.
    """
    return render_type_tree(infer_type_tree(template))
