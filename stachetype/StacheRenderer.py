"""
Stache Renderer - Renders a parsed template against runtime params.
"""

import json
import logging
from collections.abc import Mapping, Sequence
from typing import Any

from stachetype.StacheNodes import (
    Comment,
    ImplicitVariable,
    InvertedSection,
    Partial,
    Section,
    Template,
    Text,
    Variable,
    dotted,
)
from stachetype.StacheParser import ParseFailure, parse

logger = logging.getLogger(__name__)

SCALAR_TYPES = (str, bool, int, float)

ESCAPED_CHARACTERS = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&apos;",
}

_ESCAPE_TABLE = str.maketrans(ESCAPED_CHARACTERS)


def escape_html(text: str) -> str:
    return text.translate(_ESCAPE_TABLE)


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def deep_seek(obj: Any, path: Sequence[str]) -> Any:
    """
    Resolve `path` inside `obj`.

    A scalar context has no fields and is returned as-is whatever the path.
    A segment that cannot be found resolves the whole lookup to "".
    """
    if isinstance(obj, SCALAR_TYPES):
        return obj

    current = obj
    for key in path:
        if isinstance(current, Mapping) and key in current:
            current = current[key]
        elif is_sequence(current) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
        else:
            return ""
    return current


def stringify(value: Any) -> str:
    # Containers print as compact JSON, never as a Python repr.
    if isinstance(value, Mapping) or is_sequence(value):
        return json.dumps(value, separators=(",", ":"), default=str)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def render_variable(value: Any, escape: bool) -> str:
    if value is None:
        return ""
    text = stringify(value)
    if escape:
        return escape_html(text)
    return text


class TemplateRenderer:
    """
    Walks template nodes, keeping the root params and the current context.
    """

    def __init__(self, params: Any):
        self.root = params

    def render(self, nodes: Template, context: Any) -> str:
        return "".join(self._render_node(node, context) for node in nodes)

    def _render_node(self, node, context: Any) -> str:
        if isinstance(node, Text):
            return node.content
        if isinstance(node, Variable):
            return self._render_variable(node, context)
        if isinstance(node, Section):
            return self._render_section(node, context)
        if isinstance(node, InvertedSection):
            return self._render_inverted(node, context)
        if isinstance(node, Comment):
            return ""
        if isinstance(node, Partial):
            return "{{>" + dotted(node.name) + "}}"
        if isinstance(node, ImplicitVariable):
            return render_variable(deep_seek(context, ()), not node.triple)
        return ""

    def _render_variable(self, node: Variable, context: Any) -> str:
        base = self.root if node.is_global else context
        return render_variable(deep_seek(base, node.name), not node.triple)

    def _render_section(self, node: Section, context: Any) -> str:
        value = deep_seek(context, node.name)
        if not value:
            return ""
        if is_sequence(value):
            return "".join(self.render(node.content, item) for item in value)
        return self.render(node.content, value)

    def _render_inverted(self, node: InvertedSection, context: Any) -> str:
        value = deep_seek(context, node.name)
        if value:
            return ""
        return self.render(node.content, context)


def apply_parsed(template: Template, params: Any) -> str:
    """Render an already parsed template."""
    return TemplateRenderer(params).render(template, params)


def apply(template: str, params: Any) -> str:
    """
    Parse and render `template`.

    A template that fails to parse renders as "". Call parse() directly to
    see why it failed.
    """
    parsed = parse(template)
    if isinstance(parsed, ParseFailure):
        logger.debug("template failed to parse: %s", parsed)
        return ""
    return apply_parsed(parsed, params)
