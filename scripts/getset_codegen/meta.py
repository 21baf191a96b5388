"""Attribute text reader.

Turns attribute text into the MetaItem tree the directive parser walks:

    get_copy(pub, const), set(pub = "crate"), skip(set_with)

Grammar (recursive descent):

    attribute := '#' '[' IDENT '(' items ')' ']'  |  items
    items     := [item (',' item)* [',']]
    item      := IDENT [ '(' items ')' | '=' literal ]
    literal   := STRING | IDENT | NUMBER

Public API:
    parse_meta(text)  → tuple[MetaItem, ...]
    tokenize(text)    → list[Token]
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto

from getset_codegen.errors import AnnotationSyntaxError
from getset_codegen.types import MetaItem

ATTRIBUTE_NAME = "getset2"


class TokType(Enum):
    IDENT = auto()
    STRING = auto()
    NUMBER = auto()
    LPAREN = auto()
    RPAREN = auto()
    LBRACK = auto()
    RBRACK = auto()
    COMMA = auto()
    EQ = auto()
    HASH = auto()
    EOF = auto()


@dataclass(frozen=True)
class Token:
    type: TokType
    value: str
    col: int


_PUNCT: dict[str, TokType] = {
    "(": TokType.LPAREN,
    ")": TokType.RPAREN,
    "[": TokType.LBRACK,
    "]": TokType.RBRACK,
    ",": TokType.COMMA,
    "=": TokType.EQ,
    "#": TokType.HASH,
}

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<ident>(?:r\#)?[A-Za-z_][A-Za-z0-9_]*)
  | (?P<string>"(?:[^"\\]|\\.)*")
  | (?P<number>-?[0-9][A-Za-z0-9_.]*)
  | (?P<punct>[()\[\],=\#])
    """,
    re.VERBOSE,
)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "\\": "\\", '"': '"', "'": "'"}


def tokenize(text: str) -> list[Token]:
    """Split attribute text into tokens; raises AnnotationSyntaxError on stray input."""
    tokens: list[Token] = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if m is None:
            raise AnnotationSyntaxError(
                f"Unexpected character {text[pos]!r} at column {pos + 1} in {text!r}. "
                f"Attribute text may only contain identifiers, string literals, "
                f"numbers and the punctuation ( ) , =. "
                f"Fix: remove or quote the offending character."
            )
        kind = m.lastgroup
        raw = m.group()
        if kind == "ident":
            tokens.append(Token(TokType.IDENT, raw, pos + 1))
        elif kind == "string":
            tokens.append(Token(TokType.STRING, _unescape(raw[1:-1]), pos + 1))
        elif kind == "number":
            tokens.append(Token(TokType.NUMBER, raw, pos + 1))
        elif kind == "punct":
            tokens.append(Token(_PUNCT[raw], raw, pos + 1))
        pos = m.end()
    tokens.append(Token(TokType.EOF, "", len(text) + 1))
    return tokens


def _unescape(body: str) -> str:
    out: list[str] = []
    chars = iter(body)
    for ch in chars:
        if ch != "\\":
            out.append(ch)
            continue
        nxt = next(chars, "")
        out.append(_ESCAPES.get(nxt, nxt))
    return "".join(out)


class _Parser:
    def __init__(self, tokens: list[Token], text: str):
        self.tokens = tokens
        self.text = text
        self.pos = 0

    def peek(self) -> Token:
        return self.tokens[self.pos]

    def eat(self, ttype: TokType) -> Token:
        tok = self.peek()
        if tok.type != ttype:
            found = "end of input" if tok.type == TokType.EOF else repr(tok.value)
            raise AnnotationSyntaxError(
                f"Expected {ttype.name.lower()} but found {found} at column {tok.col} "
                f"in {self.text!r}. "
                f"Fix: write the annotation as a comma-separated list such as "
                f'get_ref, set(pub = "crate").'
            )
        self.pos += 1
        return tok

    def maybe_eat(self, ttype: TokType) -> Token | None:
        if self.peek().type == ttype:
            return self.eat(ttype)
        return None

    def parse_attribute(self) -> tuple[MetaItem, ...]:
        if self.maybe_eat(TokType.HASH) is None:
            items = self.parse_items(TokType.EOF)
            self.eat(TokType.EOF)
            return items
        self.eat(TokType.LBRACK)
        name = self.eat(TokType.IDENT)
        if name.value != ATTRIBUTE_NAME:
            raise AnnotationSyntaxError(
                f"Unexpected attribute #[{name.value}] in {self.text!r}. "
                f"Only #[{ATTRIBUTE_NAME}(...)] carries getset directives. "
                f"Fix: rename the attribute or pass only its argument list."
            )
        self.eat(TokType.LPAREN)
        items = self.parse_items(TokType.RPAREN)
        self.eat(TokType.RPAREN)
        self.eat(TokType.RBRACK)
        self.eat(TokType.EOF)
        return items

    def parse_items(self, closer: TokType) -> tuple[MetaItem, ...]:
        items: list[MetaItem] = []
        while self.peek().type != closer:
            items.append(self.parse_item())
            if self.maybe_eat(TokType.COMMA) is None:
                break
        return tuple(items)

    def parse_item(self) -> MetaItem:
        path = self.eat(TokType.IDENT).value
        if self.maybe_eat(TokType.LPAREN) is not None:
            nested = self.parse_items(TokType.RPAREN)
            self.eat(TokType.RPAREN)
            return MetaItem(path, nested=nested)
        if self.maybe_eat(TokType.EQ) is not None:
            tok = self.peek()
            if tok.type == TokType.STRING:
                self.pos += 1
                return MetaItem(path, value=tok.value, quoted=True)
            if tok.type in (TokType.IDENT, TokType.NUMBER):
                self.pos += 1
                return MetaItem(path, value=tok.value)
            self.eat(TokType.STRING)  # always raises: '=' needs a literal
        return MetaItem(path)


def parse_meta(text: str) -> tuple[MetaItem, ...]:
    """Parse attribute text into a tuple of MetaItems.

    Accepts either the bare argument list (`get_ref, set`) or the whole
    attribute (`#[getset2(get_ref, set)]`). Empty text yields ().
    """
    return _Parser(tokenize(text), text).parse_attribute()
