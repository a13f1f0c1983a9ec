"""
Stache Parser - Parses template text into a tuple of AST nodes.

The grammar lives in Mustache.ebnf and is compiled with Tatsu. The
TemplateSemantics class is a Tatsu semantic actions class that turns each
matched rule into the node dataclasses from StacheNodes.
"""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Union

import tatsu
from tatsu.exceptions import FailedParse

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

logger = logging.getLogger(__name__)

DEFAULT_GRAMMAR_FILE = Path(__file__).parent / "Mustache.ebnf"


def grammar_path() -> Path:
    """Grammar file to compile; STACHE_GRAMMAR overrides the packaged one."""
    return Path(os.environ.get("STACHE_GRAMMAR", DEFAULT_GRAMMAR_FILE))


@lru_cache(maxsize=None)
def _compile(path: Path):
    with open(path, "r") as f:
        grammar = f.read()
    return tatsu.compile(grammar)


def get_parser():
    """Return the compiled grammar model, compiling it on first use."""
    return _compile(grammar_path())


# --- Parse Failures ---


@dataclass(frozen=True)
class ParseFailure:
    """Why and where a template failed to parse."""

    reason: str
    position: int
    line: int = 1
    col: int = 1

    def __str__(self) -> str:
        return f"(line {self.line}, col {self.col}) {self.reason}"

    @classmethod
    def from_error(cls, error: FailedParse, source: str) -> "ParseFailure":
        position = getattr(error, "pos", None) or 0
        reason = getattr(error, "message", None) or str(error)
        consumed = source[:position]
        line = consumed.count("\n") + 1
        col = position - (consumed.rfind("\n") + 1) + 1
        return cls(str(reason), position, line, col)


# --- Semantic Actions ---


class TemplateSemantics:
    """
    Tatsu semantic actions for the template grammar.

    Each method receives the AST matched by the rule of the same name and
    returns the node it stands for.
    """

    def template(self, ast):
        return tuple(ast)

    def path(self, ast):
        return tuple(str(segment) for segment in ast)

    def triple_variable(self, ast):
        return Variable(name=ast["name"], triple=True)

    def double_variable(self, ast):
        return Variable(name=ast["name"], triple=False)

    def triple_implicit_variable(self, ast):
        return ImplicitVariable(triple=True)

    def double_implicit_variable(self, ast):
        return ImplicitVariable(triple=False)

    def section(self, ast):
        self._check_closing(ast)
        return Section(name=ast["name"], content=tuple(ast["content"] or ()))

    def inverted(self, ast):
        self._check_closing(ast)
        return InvertedSection(name=ast["name"], content=tuple(ast["content"] or ()))

    def comment(self, ast):
        return Comment(content=ast["content"])

    def partial(self, ast):
        return Partial(name=ast["name"])

    def text(self, ast):
        return Text(content=ast["content"])

    def _check_closing(self, ast: Any) -> None:
        # Closing tags are accepted whatever path they name.
        if ast["closing"] != ast["name"]:
            logger.debug(
                "section '%s' closed by '{{/%s}}'",
                dotted(ast["name"]),
                dotted(ast["closing"]),
            )


def parse(template: str) -> Union[Template, ParseFailure]:
    """
    Parse template text.

    Returns the tuple of top-level nodes, or a ParseFailure describing the
    first point where the grammar could not continue.
    """
    parser = get_parser()
    try:
        return parser.parse(template, semantics=TemplateSemantics())
    except FailedParse as e:
        return ParseFailure.from_error(e, template)
