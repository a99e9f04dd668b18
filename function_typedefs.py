#!/usr/bin/env python3
import json

from exceptions import FunctionDefinitionError

NUMBER = "number"
STRING = "string"
ANY = "string | number"


class FunctionDefinition:
    """Declared stack effect of an opcode: operand types in, result types out."""

    __slots__ = ("inputs", "outputs")

    def __init__(self, inputs=(), outputs=()):
        self.inputs = tuple(inputs)
        self.outputs = tuple(outputs)

    @property
    def consumes(self) -> int:
        return len(self.inputs)

    @property
    def produces(self) -> int:
        return len(self.outputs)

    def to_dict(self) -> dict:
        return {"in": list(self.inputs), "out": list(self.outputs)}

    def __eq__(self, other):
        if not isinstance(other, FunctionDefinition):
            return NotImplemented
        return self.inputs == other.inputs and self.outputs == other.outputs

    def __hash__(self):
        return hash((self.inputs, self.outputs))

    def __repr__(self):
        return f"FunctionDefinition(in={list(self.inputs)}, out={list(self.outputs)})"


def _fdef(inputs, outputs):
    return FunctionDefinition(inputs, outputs)


FUNCTION_TYPEDEFS: dict[str, FunctionDefinition] = {
    "nop":        _fdef([], []),
    "pop":        _fdef([ANY], []),
    "+":          _fdef([NUMBER, NUMBER], [NUMBER]),
    "plus":       _fdef([NUMBER, NUMBER], [NUMBER]),
    "-":          _fdef([NUMBER, NUMBER], [NUMBER]),
    "min":        _fdef([NUMBER, NUMBER], [NUMBER]),
    "*":          _fdef([NUMBER, NUMBER], [NUMBER]),
    "mul":        _fdef([NUMBER, NUMBER], [NUMBER]),
    "or":         _fdef([NUMBER, NUMBER], [NUMBER]),
    "and":        _fdef([NUMBER, NUMBER], [NUMBER]),
    "lt":         _fdef([NUMBER, NUMBER], [NUMBER]),
    "gt":         _fdef([NUMBER, NUMBER], [NUMBER]),
    "not":        _fdef([NUMBER], [NUMBER]),
    "jz":         _fdef([NUMBER], []),
    "jgz":        _fdef([NUMBER], []),
    "dup":        _fdef([ANY], [ANY, ANY]),
    "eq":         _fdef([ANY, ANY], [NUMBER]),
    "goto":       _fdef([ANY], []),
    "delContext": _fdef([STRING], []),
    "setContext": _fdef([ANY, STRING], []),
    "getContext": _fdef([ANY], [ANY]),
    "{":          _fdef([], []),
    "}":          _fdef([], []),
    "exit":       _fdef([], []),
    "pause":      _fdef([], []),
    "ppc":        _fdef([], [NUMBER]),
    "stacksize":  _fdef([], [NUMBER]),
    "charCode":   _fdef([NUMBER], [STRING]),
    "concat":     _fdef([STRING, STRING], [STRING]),
    "rconcat":    _fdef([STRING, STRING], [STRING]),
    "randInt":    _fdef([NUMBER], [NUMBER]),
}


class FunctionTable:
    """
    Built-in typedefs merged with caller-supplied ones. Caller entries win on
    name collision. The table is not changed after construction.
    """

    def __init__(self, additional=None):
        merged = dict(FUNCTION_TYPEDEFS)
        for name, fdef in (additional or {}).items():
            if not isinstance(fdef, FunctionDefinition):
                fdef = definition_from_dict(fdef, name)
            merged[name] = fdef
        self._typedefs = merged

    def lookup(self, name: str) -> FunctionDefinition | None:
        """Return the definition for name, or None when it is not declared."""
        return self._typedefs.get(name)

    def names(self) -> list[str]:
        return sorted(self._typedefs)

    def __contains__(self, name):
        return name in self._typedefs

    def __len__(self):
        return len(self._typedefs)

    def __repr__(self):
        return f"FunctionTable({len(self._typedefs)} definitions)"


def definition_from_dict(record, name="<anonymous>") -> FunctionDefinition:
    """Decode {"in": [...], "out": [...]} as found in .json definition files."""
    if not isinstance(record, dict):
        raise FunctionDefinitionError(f"Definition of '{name}' must be an object, got: {record!r}")
    for key in ("in", "out"):
        tags = record.get(key)
        if not isinstance(tags, list):
            raise FunctionDefinitionError(f"Definition of '{name}' needs a list under '{key}'")
        for tag in tags:
            # tags are descriptive, but they should at least be strings
            if not isinstance(tag, str):
                raise FunctionDefinitionError(f"Definition of '{name}' has a non-string type tag: {tag!r}")
    return FunctionDefinition(record["in"], record["out"])


def load_function_definitions(paths) -> dict[str, FunctionDefinition]:
    """Load and merge definition files; later files override earlier ones."""
    merged = {}
    for path in paths:
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise FunctionDefinitionError(f"{path}: invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise FunctionDefinitionError(f"{path}: expected an object mapping names to definitions")
        for name, record in data.items():
            merged[name] = definition_from_dict(record, name)
    return merged
