"""
Whitespace Language - Instruction Set
Opcodes, operand kinds and the prefix encoding shared by parser and encoder
"""

from dataclasses import dataclass
from enum import IntEnum, auto
from typing import Dict, Optional, Tuple, Union

from .lexer import TokenType

S = TokenType.SPACE
T = TokenType.TAB
N = TokenType.NEWLINE

class OpCode(IntEnum):
    # Stack manipulation
    PUSH = auto()
    DUP = auto()
    REF = auto()
    SLIDE = auto()
    SWAP = auto()
    DISCARD = auto()

    # Arithmetic
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    MOD = auto()

    # Heap access
    STORE = auto()
    RETRIEVE = auto()

    # Control flow
    LABEL = auto()
    CALL = auto()
    JUMP = auto()
    JZ = auto()          # Jump if zero
    JN = auto()          # Jump if negative
    RET = auto()
    END = auto()

    # I/O
    OUTPUT_CHAR = auto()
    OUTPUT_NUM = auto()
    READ_CHAR = auto()
    READ_NUM = auto()

class Operand(IntEnum):
    NONE = auto()
    NUMBER = auto()
    LABEL = auto()

# Every prefix with the opcode it selects. No prefix is a prefix of another.
PREFIXES: Dict[Tuple[TokenType, ...], OpCode] = {
    (S, S): OpCode.PUSH,
    (S, N, S): OpCode.DUP,
    (S, T, S): OpCode.REF,
    (S, T, N): OpCode.SLIDE,
    (S, N, T): OpCode.SWAP,
    (S, N, N): OpCode.DISCARD,

    (T, S, S, S): OpCode.ADD,
    (T, S, S, T): OpCode.SUB,
    (T, S, S, N): OpCode.MUL,
    (T, S, T, S): OpCode.DIV,
    (T, S, T, T): OpCode.MOD,

    (T, T, S): OpCode.STORE,
    (T, T, T): OpCode.RETRIEVE,

    (N, S, S): OpCode.LABEL,
    (N, S, T): OpCode.CALL,
    (N, S, N): OpCode.JUMP,
    (N, T, S): OpCode.JZ,
    (N, T, T): OpCode.JN,
    (N, T, N): OpCode.RET,
    (N, N, N): OpCode.END,

    (T, N, S, S): OpCode.OUTPUT_CHAR,
    (T, N, S, T): OpCode.OUTPUT_NUM,
    (T, N, T, S): OpCode.READ_CHAR,
    (T, N, T, T): OpCode.READ_NUM,
}

ENCODINGS: Dict[OpCode, Tuple[TokenType, ...]] = {op: prefix for prefix, op in PREFIXES.items()}

OPERANDS: Dict[OpCode, Operand] = {op: Operand.NONE for op in OpCode}
OPERANDS.update({
    OpCode.PUSH: Operand.NUMBER,
    OpCode.REF: Operand.NUMBER,
    OpCode.SLIDE: Operand.NUMBER,
    OpCode.LABEL: Operand.LABEL,
    OpCode.CALL: Operand.LABEL,
    OpCode.JUMP: Operand.LABEL,
    OpCode.JZ: Operand.LABEL,
    OpCode.JN: Operand.LABEL,
})

# Opcodes whose operand names a jump target
TRANSFERS = frozenset((OpCode.CALL, OpCode.JUMP, OpCode.JZ, OpCode.JN))

@dataclass(slots=True, frozen=True)
class Instruction:
    """One decoded instruction. The operand type is fixed by the opcode."""
    op: OpCode
    arg: Optional[Union[int, str]] = None

    def __post_init__(self):
        kind = OPERANDS[self.op]
        if kind is Operand.NONE:
            if self.arg is not None:
                raise ValueError(f"{self.op.name} takes no operand, got {self.arg!r}")
        elif kind is Operand.NUMBER:
            if type(self.arg) is not int:
                raise TypeError(f"{self.op.name} needs an int operand, got {self.arg!r}")
        elif not isinstance(self.arg, str):
            raise TypeError(f"{self.op.name} needs a label operand, got {self.arg!r}")

    @property
    def number(self) -> int:
        if OPERANDS[self.op] is not Operand.NUMBER:
            raise TypeError(f"{self.op.name} has no number operand")
        return self.arg

    @property
    def label(self) -> str:
        if OPERANDS[self.op] is not Operand.LABEL:
            raise TypeError(f"{self.op.name} has no label operand")
        return self.arg

    def __repr__(self):
        if self.arg is None:
            return f"Instruction({self.op.name})"
        return f"Instruction({self.op.name}, {self.arg!r})"
