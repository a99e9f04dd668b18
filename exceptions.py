class AnalyzeError(Exception):
    """Base class for all analyzer exceptions."""


class UnknownOpcodeError(AnalyzeError):
    """Raised when an invoked function has no definition in the table."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"Could not find typedef for function: {name}")


class UnterminatedBlockError(AnalyzeError):
    """Raised when a '}' has no matching '{' before the start of the program."""

    def __init__(self, index):
        self.index = index
        super().__init__(f"Unterminated }} at instruction {index}")


class MissingOperandError(AnalyzeError):
    """Raised when an opcode needs more operands than precede it."""

    def __init__(self, name, index):
        self.name = name
        self.index = index
        super().__init__(f"Missing operand for '{name}' at instruction {index}")


class InternalAnalyzerError(AnalyzeError):
    """Raised when an instruction reaches a path well-formed input never takes."""


class InstructionFormatError(AnalyzeError):
    """Raised when an instruction record or source token cannot be decoded."""


class FunctionDefinitionError(AnalyzeError):
    """Raised when a function definition record is malformed."""


class RenderError(AnalyzeError):
    """Raised when Graphviz fails to render a graph."""
