#!/usr/bin/env python3
import json

from exceptions import (
    UnknownOpcodeError,
    UnterminatedBlockError,
    MissingOperandError,
    InternalAnalyzerError,
)
from function_typedefs import FunctionTable
from instructions import PushNumber, PushString, InvokeFunction, is_invoke
import render_dot

BLOCK_OPEN = "{"
BLOCK_CLOSE = "}"


# ---------------------------
# Expressions
# ---------------------------
class Expression:
    """
    A reconstructed tree node. consumes/produces describe the node's own
    stack effect; children are kept in program order.
    """

    type = None
    children = ()

    def __init__(self, value, consumes, produces, label=None):
        self._set(value=value, consumes=consumes, produces=produces, label=label)

    def _set(self, **attrs):
        for name, value in attrs.items():
            object.__setattr__(self, name, value)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable, cannot set '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable, cannot delete '{name}'")

    def to_dict(self) -> dict:
        out = {
            "type": self.type,
            "value": self.value,
            "consumes": self.consumes,
            "produces": self.produces,
        }
        if self.label is not None:
            out["label"] = self.label
        return out

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None

    def __repr__(self):
        if self.children:
            return f"{type(self).__name__}({self.value!r}, {list(self.children)!r})"
        return f"{type(self).__name__}({self.value!r})"


class NumberLiteral(Expression):
    type = "number_literal"

    def __init__(self, value, label=None):
        super().__init__(value, 0, 1, label)


class StringLiteral(Expression):
    type = "string_literal"

    def __init__(self, value, label=None):
        super().__init__(value, 0, 1, label)


class FunctionCall(Expression):
    type = "function"

    def __init__(self, name, children, definition, label=None):
        super().__init__(name, definition.consumes, definition.produces, label)
        children = tuple(children)
        self._set(
            children=children,
            children_consumes=sum(c.consumes for c in children),
            children_produces=sum(c.produces for c in children),
        )

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["children"] = [c.to_dict() for c in self.children]
        out["children_consumes"] = self.children_consumes
        out["children_produces"] = self.children_produces
        return out


class Block(Expression):
    type = "block"

    def __init__(self, children, label=None):
        children = tuple(children)
        super().__init__(
            "{}",
            sum(c.consumes for c in children),
            sum(c.produces for c in children),
            label,
        )
        self._set(children=children)

    def to_dict(self) -> dict:
        out = super().to_dict()
        out["children"] = [c.to_dict() for c in self.children]
        return out


# ---------------------------
# Reconstruction
# ---------------------------
class _Frame:
    """An opcode or block still collecting its children, newest first."""

    __slots__ = ("index", "instr", "definition", "depth", "children", "counted")

    def __init__(self, index, instr, definition=None):
        self.index = index
        self.instr = instr
        self.definition = definition  # None for a block
        self.depth = 1
        self.children = []
        self.counted = 0

    def add(self, node):
        if node is None:
            return
        self.children.append(node)
        if not isinstance(node, Block):
            self.counted += 1

    def next_index(self, instructions, cursor):
        """Index of the next position to claim, or None when this frame is done."""
        nxt = cursor - 1
        if self.definition is None:
            if nxt < 0:
                raise UnterminatedBlockError(self.index)
            candidate = instructions[nxt]
            if is_invoke(candidate, BLOCK_OPEN):
                self.depth -= 1
                if self.depth == 0:
                    return None
            elif is_invoke(candidate, BLOCK_CLOSE):
                self.depth += 1
            return nxt

        # blocks are kept as operands but do not count toward the arity
        if self.counted >= self.definition.consumes:
            return None
        if nxt < 0:
            raise MissingOperandError(self.instr.function_name, self.index)
        return nxt

    def build(self):
        children = self.children[::-1]
        if self.definition is None:
            return Block(children, self.instr.label)
        return FunctionCall(self.instr.function_name, children, self.definition, self.instr.label)


def _begin(instr, index, table):
    """Returns (expression, None) for leaves or (None, frame) for opcodes and blocks."""
    if isinstance(instr, PushNumber):
        return NumberLiteral(instr.value, instr.label), None
    if isinstance(instr, PushString):
        return StringLiteral(instr.value, instr.label), None
    if isinstance(instr, InvokeFunction):
        name = instr.function_name
        if name == BLOCK_CLOSE:
            return None, _Frame(index, instr)
        if name == BLOCK_OPEN:
            # absorbed by the matching '}'
            return None, None
        definition = table.lookup(name)
        if definition is None:
            raise UnknownOpcodeError(name)
        return None, _Frame(index, instr, definition)
    raise InternalAnalyzerError(f"Unexpected instruction at {index}: {instr!r}")


def reconstruct(instructions, table=None, visit=None) -> list[Expression]:
    """
    Rebuild the expression forest of a straight-line Tzo program.

    The program is scanned right to left. `cursor` is the lowest index
    visited so far and only ever decreases; every frame resumes at
    cursor - 1, so an instruction claimed by a nested subtree is never seen
    again. `visit`, if given, is called with each index as it is visited.
    """
    if table is None:
        table = FunctionTable()

    roots = []
    frames = []
    cursor = len(instructions)
    while cursor > 0:
        index = cursor - 1
        while True:
            cursor = index
            if visit is not None:
                visit(index)

            node, frame = _begin(instructions[index], index, table)
            if frame is not None:
                frames.append(frame)
            elif frames:
                frames[-1].add(node)

            while frames:
                index = frames[-1].next_index(instructions, cursor)
                if index is not None:
                    break
                node = frames.pop().build()
                if frames:
                    frames[-1].add(node)

            if not frames:
                if node is not None:
                    roots.append(node)
                break

    roots.reverse()
    return roots


class Analyzer:
    def __init__(self, instructions, additional_typedefs=None):
        self.input = list(instructions)
        self.table = FunctionTable(additional_typedefs)
        self.items = reconstruct(self.input, self.table)

    def get_expressions(self) -> list[Expression]:
        return list(self.items)

    def get_json(self, indent=2) -> str:
        return json.dumps([e.to_dict() for e in self.items], indent=indent)

    def get_tree_as_dot(self):
        return render_dot.expressions_to_dot(self.items)

    def get_program_list_as_dot(self):
        return render_dot.program_list_to_dot(self.input)
