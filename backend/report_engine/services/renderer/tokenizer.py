"""
Battle Report Engine - Template Tokenizer

Splits a raw catalog template into a flat token list before any value is
substituted.

Tag rule: a '<' opens a tag only when a '>' follows it and no other '<'
appears before that '>'. Any other '<' is literal text, so an unterminated
tag never fails, it just stays in the output as written.

Recognised tag bodies:
    data          -> DataTag
    list          -> ListTag
    msg:A,B       -> MsgTag(A, B)   (A and B must be integer catalog ids)
    newline       -> NewlineTag
Anything else stays a Literal holding the bracketed text unchanged.
"""
from dataclasses import dataclass
from typing import List, Union


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class DataTag:
    pass


@dataclass(frozen=True)
class ListTag:
    pass


@dataclass(frozen=True)
class MsgTag:
    if_true: int
    if_false: int


@dataclass(frozen=True)
class NewlineTag:
    pass


Token = Union[Literal, DataTag, ListTag, MsgTag, NewlineTag]

MSG_PREFIX = "msg:"


def _parse_tag(body: str) -> Token:
    if body == "data":
        return DataTag()
    if body == "list":
        return ListTag()
    if body == "newline":
        return NewlineTag()
    if body.startswith(MSG_PREFIX):
        first, sep, second = body[len(MSG_PREFIX):].partition(",")
        if sep:
            try:
                return MsgTag(int(first), int(second))
            except ValueError:
                pass
    return Literal(f"<{body}>")


def tokenize(template: str) -> List[Token]:
    """Turn ``template`` into tokens. Adjacent literal text is merged."""
    tokens: List[Token] = []
    buffer: List[str] = []

    def flush():
        if buffer:
            tokens.append(Literal("".join(buffer)))
            buffer.clear()

    i = 0
    length = len(template)
    while i < length:
        char = template[i]
        if char != "<":
            buffer.append(char)
            i += 1
            continue

        end = template.find(">", i)
        next_open = template.find("<", i + 1)
        if end == -1 or (next_open != -1 and next_open < end):
            buffer.append(char)
            i += 1
            continue

        token = _parse_tag(template[i + 1:end])
        if isinstance(token, Literal):
            buffer.append(token.text)
        else:
            flush()
            tokens.append(token)
        i = end + 1

    flush()
    return tokens
