"""
Whitespace Language Package
"""

from .lexer import tokenize, Lexer, Token, TokenType
from .instructions import Instruction, OpCode, Operand
from .parser import parse, Parser, ParseError
from .compiler import compile_program, Program, DuplicateLabelError, encode, disassemble
from .vm import execute, VM, RuntimeError

__version__ = "0.1.0"
__all__ = [
    "tokenize", "Lexer", "Token", "TokenType",
    "Instruction", "OpCode", "Operand",
    "parse", "Parser", "ParseError",
    "compile_program", "Program", "DuplicateLabelError", "encode", "disassemble",
    "execute", "VM", "RuntimeError",
]
