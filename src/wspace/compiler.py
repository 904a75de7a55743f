"""
Whitespace Language - Program Compiler
Resolves labels into a jump table and converts instruction lists back to source
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Union
from .lexer import Token, TokenType
from .parser import parse, ParseError
from .instructions import Instruction, OpCode, Operand, OPERANDS, ENCODINGS, TRANSFERS
from .helpers import init_logger, label_repr

logger = init_logger("COMPILER")

CHARS = {
    TokenType.SPACE: ' ',
    TokenType.TAB: '\t',
    TokenType.NEWLINE: '\n',
}

class DuplicateLabelError(ParseError):
    def __init__(self, label: str, first: int, second: int):
        super().__init__(f"Label {label_repr(label)} defined at instruction {first} and again at {second}")
        self.label = label

@dataclass(frozen=True)
class Program:
    """Compiled program: the instruction list plus its label table"""
    instructions: tuple = ()
    labels: Mapping[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def __iter__(self):
        return iter(self.instructions)


def resolve_labels(instructions: List[Instruction]) -> Mapping[str, int]:
    """Map every label name to the index of its Label instruction"""
    labels = {}
    for i, instr in enumerate(instructions):
        if instr.op != OpCode.LABEL:
            continue
        if instr.label in labels:
            raise DuplicateLabelError(instr.label, labels[instr.label], i)
        labels[instr.label] = i
    return labels


def link(instructions: List[Instruction]) -> Program:
    labels = resolve_labels(instructions)
    for i, instr in enumerate(instructions):
        if instr.op in TRANSFERS and instr.label not in labels:
            logger.warning("%s at instruction %d targets undefined label %s",
                           instr.op.name, i, label_repr(instr.label))
    logger.debug("linked %d instructions, %d labels", len(instructions), len(labels))
    return Program(tuple(instructions), MappingProxyType(labels))


def compile_program(source: Union[str, bytes, List[Token]]) -> Program:
    """Tokenize, decode and link source text"""
    return link(parse(source))


class Encoder:
    """Emit whitespace source for instructions; the inverse of the parser"""

    __slots__ = ('chars',)

    def __init__(self):
        self.chars: List[str] = []

    def emit_tokens(self, types):
        self.chars.extend(CHARS[t] for t in types)

    def emit_number(self, value: int):
        self.chars.append('\t' if value < 0 else ' ')
        magnitude = abs(value)
        if magnitude:
            self.chars.extend(' ' if b == '0' else '\t' for b in format(magnitude, 'b'))
        self.chars.append('\n')

    def emit_label(self, label: str):
        for ch in label:
            code = ord(ch)
            if code > 0xFF:
                raise ValueError(f"Label character {ch!r} does not fit in 8 bits")
            self.chars.extend(' ' if b == '0' else '\t' for b in format(code, '08b'))
        self.chars.append('\n')

    def emit(self, instr: Instruction):
        self.emit_tokens(ENCODINGS[instr.op])
        kind = OPERANDS[instr.op]
        if kind is Operand.NUMBER:
            self.emit_number(instr.number)
        elif kind is Operand.LABEL:
            self.emit_label(instr.label)

    def source(self) -> str:
        return ''.join(self.chars)


def encode(instructions) -> str:
    """Convert instructions back into whitespace source"""
    encoder = Encoder()
    for instr in instructions:
        encoder.emit(instr)
    return encoder.source()


def disassemble(program) -> str:
    """Human readable listing, one instruction per line"""
    lines = []
    for i, instr in enumerate(program):
        kind = OPERANDS[instr.op]
        if kind is Operand.NUMBER:
            lines.append(f"{i:4d}  {instr.op.name} {instr.number}")
        elif kind is Operand.LABEL:
            lines.append(f"{i:4d}  {instr.op.name} {label_repr(instr.label)}")
        else:
            lines.append(f"{i:4d}  {instr.op.name}")
    return '\n'.join(lines)
