"""Battle Report Engine - Template tokenizer and resolver"""
from .tokenizer import (
    Literal,
    DataTag,
    ListTag,
    MsgTag,
    NewlineTag,
    Token,
    tokenize,
)
from .resolver import TemplateResolver, ResolutionContext, ResolvedText, FULL_VIEW

__all__ = [
    "Literal",
    "DataTag",
    "ListTag",
    "MsgTag",
    "NewlineTag",
    "Token",
    "tokenize",
    "TemplateResolver",
    "ResolutionContext",
    "ResolvedText",
    "FULL_VIEW",
]
