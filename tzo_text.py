#!/usr/bin/env python3
import re

from lark import Lark, Transformer, v_args
from lark.exceptions import LarkError

from exceptions import InstructionFormatError
from instructions import PushNumber, PushString, InvokeFunction

# --- Concise Tzo text: whitespace separated numbers, "strings" and opcode words ---
tzo_grammar = r"""
    start: item*

    // '#name' labels the instruction that follows it
    item: LABEL? instruction

    ?instruction: NUMBER   -> number
                | STRING   -> string
                | WORD     -> invoke

    NUMBER.2: /-?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?(?![^\s";#])/
    STRING: /"(?:[^"\\]|\\.)*"/
    LABEL: /#[^\s";#]+/
    WORD: /[^\s";#]+/

    COMMENT: /;[^\n]*/

    %import common.WS
    %ignore WS
    %ignore COMMENT
"""

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r"}


def unescape_string(token: str) -> str:
    """Strip the quotes and resolve \\n, \\t, \\r; any other escaped char is kept as-is."""
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), token[1:-1], flags=re.S)


def parse_number(token: str):
    if re.fullmatch(r"-?\d+", token):
        return int(token)
    return float(token)


class InstructionTransformer(Transformer):
    def start(self, items): return list(items)

    def item(self, items):
        label = str(items[0])[1:] if len(items) > 1 else None
        kind, value = items[-1]
        return kind(value, label)

    @v_args(inline=True)
    def number(self, token): return (PushNumber, parse_number(str(token)))

    @v_args(inline=True)
    def string(self, token): return (PushString, unescape_string(str(token)))

    @v_args(inline=True)
    def invoke(self, token): return (InvokeFunction, str(token))


parser = Lark(tzo_grammar, parser="lalr", transformer=InstructionTransformer())


def tokenize(code: str) -> list:
    """
    Turn concise Tzo text such as '1 2 + "x" pop' into instructions.

    Numbers may be written 1, -2, 1., .5 or 2.5e3; a word that only starts
    like a number (2x, 1.5.3) is an opcode name.
    """
    try:
        return parser.parse(code)
    except LarkError as e:
        raise InstructionFormatError(f"Could not tokenize program: {e}") from e


def load_concise_text(path) -> list:
    with open(path, "r", encoding="utf-8") as f:
        return tokenize(f.read())
