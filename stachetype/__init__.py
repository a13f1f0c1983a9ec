"""
stachetype - Logic-less templates with static params type inference.
"""

from stachetype.StacheNodes import (
    GLOBAL_SCOPE,
    LOCAL_SCOPE,
    Comment,
    ImplicitVariable,
    InvertedSection,
    Partial,
    Section,
    SectionType,
    Text,
    Variable,
    VarType,
)
from stachetype.StacheParser import ParseFailure, parse
from stachetype.StacheRenderer import apply, apply_parsed
from stachetype.StacheTypeGenerator import gen_type
from stachetype.StacheTypeTree import (
    InvalidKeyError,
    TypeConflictError,
    TypeInferenceError,
)

__version__ = "0.1.0"

__all__ = [
    "GLOBAL_SCOPE",
    "LOCAL_SCOPE",
    "Comment",
    "ImplicitVariable",
    "InvalidKeyError",
    "InvertedSection",
    "ParseFailure",
    "Partial",
    "Section",
    "SectionType",
    "Text",
    "TypeConflictError",
    "TypeInferenceError",
    "VarType",
    "Variable",
    "apply",
    "apply_parsed",
    "gen_type",
    "parse",
]
