"""
Whitespace Language - Parser
Prefix-code instruction decoder with bit-string operands
"""

from typing import Dict, List, Optional, Union
from .lexer import Token, TokenType, tokenize
from .instructions import Instruction, OpCode, Operand, OPERANDS, PREFIXES
from .helpers import init_logger

logger = init_logger("PARSER")

BITS_PER_CHAR = 8

class ParseError(Exception):
    exit_code = 2

    def __init__(self, message: str, token: Optional[Token] = None):
        if token is not None:
            message = f"{message} at line {token.line}, col {token.col}"
        super().__init__(message)
        self.token = token


def build_trie(prefixes: Dict[tuple, OpCode]) -> dict:
    """Nest the prefix table into dicts keyed by token type; leaves are opcodes"""
    root: dict = {}
    for prefix, op in prefixes.items():
        node = root
        for type in prefix[:-1]:
            node = node.setdefault(type, {})
        node[prefix[-1]] = op
    return root

PREFIX_TRIE = build_trie(PREFIXES)

class Parser:
    """Single pass decoder: match an instruction prefix, then read its operand"""

    __slots__ = ('tokens', 'pos', 'length')

    def __init__(self, tokens: List[Token]):
        if not tokens or tokens[-1].type != TokenType.END:
            raise ParseError("Token list does not end with END", tokens[-1] if tokens else None)
        self.tokens = tokens
        self.pos = 0
        self.length = len(tokens)

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx >= self.length:
            return self.tokens[-1]  # END
        return self.tokens[idx]

    def current(self) -> Token:
        return self.peek(0)

    def advance(self) -> Token:
        token = self.current()
        if token.type != TokenType.END:
            self.pos += 1
        return token

    def check(self, *types: TokenType) -> bool:
        return self.current().type in types

    def parse(self) -> List[Instruction]:
        """Decode every instruction up to END"""
        instructions = []
        while not self.check(TokenType.END):
            instructions.append(self.parse_instruction())
        logger.debug("decoded %d instructions from %d tokens", len(instructions), self.length)
        return instructions

    def parse_instruction(self) -> Instruction:
        op = self.match_prefix()
        kind = OPERANDS[op]
        if kind is Operand.NUMBER:
            return Instruction(op, self.parse_number())
        if kind is Operand.LABEL:
            return Instruction(op, self.parse_label())
        return Instruction(op)

    def match_prefix(self) -> OpCode:
        """Walk the prefix trie until it yields an opcode"""
        start = self.current()
        node = PREFIX_TRIE
        while True:
            token = self.current()
            if token.type == TokenType.END:
                raise ParseError("Unexpected end of program inside instruction", start)
            node = node.get(token.type)
            if node is None:
                raise ParseError("Unrecognised instruction", start)
            self.advance()
            if isinstance(node, OpCode):
                return node

    def read_bits(self) -> List[int]:
        """Collect operand bits up to and including the terminating newline"""
        bits = []
        while True:
            token = self.advance()
            if token.type == TokenType.NEWLINE:
                return bits
            if token.type == TokenType.END:
                raise ParseError("Unterminated operand", token)
            bits.append(1 if token.type == TokenType.TAB else 0)

    def parse_number(self) -> int:
        """Sign bit first (tab is negative), then magnitude MSB first"""
        bits = self.read_bits()
        if not bits:
            return 0
        value = bits_to_int(bits[1:])
        return -value if bits[0] else value

    def parse_label(self) -> str:
        """Eight bits per character; a short trailing group still makes one"""
        bits = self.read_bits()
        return ''.join(
            chr(bits_to_int(bits[i:i + BITS_PER_CHAR]))
            for i in range(0, len(bits), BITS_PER_CHAR)
        )


def bits_to_int(bits: List[int]) -> int:
    value = 0
    for bit in bits:
        value = (value << 1) | bit
    return value


def parse(source: Union[str, bytes, List[Token]]) -> List[Instruction]:
    """Convenience function to decode source text or an existing token list"""
    tokens = source if isinstance(source, list) else tokenize(source)
    return Parser(tokens).parse()
