#!/usr/bin/env python3
import json
import re
from pathlib import Path

from exceptions import InstructionFormatError

PUSH_NUMBER = "push-number-instruction"
PUSH_STRING = "push-string-instruction"
INVOKE_FUNCTION = "invoke-function-instruction"


# ---------------------------
# Instructions
# ---------------------------
class Instruction:
    __slots__ = ("label",)
    type = None

    def __init__(self, label=None):
        object.__setattr__(self, "label", label)  # opaque provenance tag

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable, cannot set '{name}'")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable, cannot delete '{name}'")

    def _key(self):
        raise NotImplementedError

    def __eq__(self, other):
        return type(self) is type(other) and self._key() == other._key()

    def __hash__(self):
        return hash((type(self).__name__,) + self._key())


class PushNumber(Instruction):
    __slots__ = ("value",)
    type = PUSH_NUMBER

    def __init__(self, value, label=None):
        super().__init__(label)
        object.__setattr__(self, "value", value)

    def _key(self):
        return (self.value, self.label)

    def __repr__(self):
        return f"PushNumber({self.value!r}, label={self.label!r})"


class PushString(Instruction):
    __slots__ = ("value",)
    type = PUSH_STRING

    def __init__(self, value, label=None):
        super().__init__(label)
        object.__setattr__(self, "value", value)

    def _key(self):
        return (self.value, self.label)

    def __repr__(self):
        return f"PushString({self.value!r}, label={self.label!r})"


class InvokeFunction(Instruction):
    __slots__ = ("function_name",)
    type = INVOKE_FUNCTION

    def __init__(self, function_name, label=None):
        super().__init__(label)
        object.__setattr__(self, "function_name", function_name)

    def _key(self):
        return (self.function_name, self.label)

    def __repr__(self):
        return f"InvokeFunction({self.function_name!r}, label={self.label!r})"


def is_invoke(instr: Instruction, name: str) -> bool:
    return isinstance(instr, InvokeFunction) and instr.function_name == name


# ---------------------------
# JSON records (Tzo VM state)
# ---------------------------
def instruction_from_dict(record: dict) -> Instruction:
    """
    Decode one entry of a Tzo programList, e.g.
    {"type": "invoke-function-instruction", "functionName": "+"}.
    """
    if not isinstance(record, dict):
        raise InstructionFormatError(f"Instruction record must be an object, got: {record!r}")

    kind = record.get("type")
    label = record.get("label")
    try:
        if kind == PUSH_NUMBER:
            value = record["value"]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InstructionFormatError(f"push-number value is not a number: {value!r}")
            return PushNumber(value, label)
        if kind == PUSH_STRING:
            value = record["value"]
            if not isinstance(value, str):
                raise InstructionFormatError(f"push-string value is not a string: {value!r}")
            return PushString(value, label)
        if kind == INVOKE_FUNCTION:
            name = record["functionName"]
            if not isinstance(name, str):
                raise InstructionFormatError(f"invoke-function name is not a string: {name!r}")
            return InvokeFunction(name, label)
    except KeyError as e:
        raise InstructionFormatError(f"Instruction record {record!r} is missing {e}") from e

    raise InstructionFormatError(f"Unknown instruction type: {kind!r}")


def instruction_to_dict(instr: Instruction) -> dict:
    if isinstance(instr, InvokeFunction):
        out = {"type": INVOKE_FUNCTION, "functionName": instr.function_name}
    elif isinstance(instr, (PushNumber, PushString)):
        out = {"type": instr.type, "value": instr.value}
    else:
        raise InstructionFormatError(f"Not an instruction: {instr!r}")
    if instr.label is not None:
        out["label"] = instr.label
    return out


def load_program_list(path) -> list[Instruction]:
    """Read the programList out of a Tzo VM state .json file."""
    with open(path, "r", encoding="utf-8") as f:
        state = json.load(f)
    if not isinstance(state, dict) or "programList" not in state:
        raise InstructionFormatError(f"{path}: no programList in VM state")
    return [instruction_from_dict(r) for r in state["programList"]]


def make_vm_state(instrs: list[Instruction]) -> dict:
    return {
        "programCounter": 0,
        "exit": False,
        "pause": False,
        "labelMap": {},
        "stack": [],
        "context": {},
        "programList": [instruction_to_dict(i) for i in instrs],
    }


def save_vm_state(path, instrs: list[Instruction]):
    Path(path).write_text(json.dumps(make_vm_state(instrs), indent=2), encoding="utf-8")


# ---------------------------
# Concise text output
# ---------------------------
_STRING_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t"}


def quote_string(value: str) -> str:
    return '"' + re.sub(r'[\\"\n\t]', lambda m: _STRING_ESCAPES[m.group(0)], value) + '"'


def format_instruction(instr: Instruction) -> str:
    if isinstance(instr, PushNumber):
        text = repr(instr.value)
    elif isinstance(instr, PushString):
        text = quote_string(instr.value)
    elif isinstance(instr, InvokeFunction):
        text = instr.function_name
    else:
        raise InstructionFormatError(f"Not an instruction: {instr!r}")
    if instr.label is not None:
        return f"#{instr.label} {text}"
    return text


def format_program(instrs: list[Instruction]) -> str:
    return " ".join(format_instruction(i) for i in instrs)
