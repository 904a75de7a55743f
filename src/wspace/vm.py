"""
Whitespace Language - Virtual Machine
Stack machine with a call stack and a sparse heap
"""

import io
import logging
import re
import sys
from typing import Dict, List, Optional, Union

from .compiler import Program, compile_program
from .instructions import Instruction, OpCode
from .helpers import init_logger, label_repr

logger = init_logger("VM")

NUMBER_RE = re.compile(r'\s*[+-]?[0-9]+\s*')

class RuntimeError(Exception):
    exit_code = 1

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
        self.pc: Optional[int] = None
        self.instr: Optional[Instruction] = None

    def locate(self, pc: int, instr: Instruction):
        """Attach the failing instruction, once"""
        if self.pc is None:
            self.pc = pc
            self.instr = instr

    def __str__(self):
        if self.pc is None:
            return self.message
        return f"{self.message} at instruction {self.pc} ({self.instr.op.name})"

class UndefinedLabelError(RuntimeError):
    exit_code = 3

class StackUnderflowError(RuntimeError):
    exit_code = 4

class ArithmeticFault(RuntimeError):
    exit_code = 5

class InputError(RuntimeError):
    exit_code = 6

class EndOfInputError(RuntimeError):
    exit_code = 7

class HeapAddressError(RuntimeError):
    exit_code = 8

class ProgramCounterError(RuntimeError):
    exit_code = 9

    def locate(self, pc: int, instr: Instruction):
        pass  # no instruction at the failing address


class Stack:
    """Integer stack growing at the tail; index 0 is the bottom"""

    __slots__ = ('name', 'values')

    def __init__(self, name: str, values=()):
        self.name = name
        self.values: List[int] = list(values)

    def __len__(self):
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    def __repr__(self):
        return f"Stack({self.name}, {self.values})"

    def push(self, value: int):
        self.values.append(value)

    def pop(self) -> int:
        if not self.values:
            raise StackUnderflowError(f"Pop from empty {self.name}")
        return self.values.pop()

    def peek(self) -> int:
        if not self.values:
            raise StackUnderflowError(f"Peek at empty {self.name}")
        return self.values[-1]

    def ref(self, index: int) -> int:
        """Element at an absolute position counted from the bottom"""
        if not 0 <= index < len(self.values):
            raise StackUnderflowError(
                f"No element {index} on {self.name} of depth {len(self.values)}"
            )
        return self.values[index]

    def slide(self, count: int):
        """Drop count elements just below the top, keeping the top"""
        if count < 0:
            raise StackUnderflowError(f"Cannot slide {count} elements off {self.name}")
        if count >= len(self.values):
            raise StackUnderflowError(
                f"Cannot slide {count} elements under the top of {self.name} of depth {len(self.values)}"
            )
        if count:
            del self.values[-1 - count:-1]

    def swap(self):
        if len(self.values) < 2:
            raise StackUnderflowError(f"Swap needs two elements on {self.name}")
        self.values[-1], self.values[-2] = self.values[-2], self.values[-1]


class Heap:
    """Sparse memory; addresses never written read as 0"""

    __slots__ = ('cells',)

    def __init__(self):
        self.cells: Dict[int, int] = {}

    def __len__(self):
        return len(self.cells)

    def __repr__(self):
        return f"Heap({dict(sorted(self.cells.items()))})"

    @staticmethod
    def check(addr: int):
        if addr < 0:
            raise HeapAddressError(f"Negative heap address {addr}")

    def read(self, addr: int) -> int:
        self.check(addr)
        return self.cells.get(addr, 0)

    def write(self, addr: int, value: int):
        self.check(addr)
        self.cells[addr] = value


def trunc_div(x: int, y: int) -> int:
    """Integer division rounding toward zero"""
    q = abs(x) // abs(y)
    return q if (x < 0) == (y < 0) else -q

def trunc_mod(x: int, y: int) -> int:
    """Remainder matching trunc_div; takes the sign of x"""
    return x - y * trunc_div(x, y)


class VM:
    """Fetch, advance, execute until End"""

    __slots__ = ('program', 'pc', 'stack', 'calls', 'heap', 'stdin', 'stdout',
                 'text_out', 'trace', 'steps')

    def __init__(self, program: Program, stdin=None, stdout=None, trace: bool = False):
        self.program = program
        self.pc = 0
        self.stack = Stack("value stack")
        self.calls = Stack("call stack")
        self.heap = Heap()
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout.buffer
        self.text_out = isinstance(self.stdout, io.TextIOBase)
        self.trace = trace
        if trace and not logger.isEnabledFor(logging.DEBUG):
            logger.setLevel(logging.DEBUG)
        self.steps = 0

    def write(self, data: bytes):
        if self.text_out:
            self.stdout.write(data.decode('latin-1'))
        else:
            self.stdout.write(data)

    def flush(self):
        flush = getattr(self.stdout, 'flush', None)
        if flush is not None:
            flush()

    def read_line(self) -> str:
        """Next input line without its newline; raises at end of input"""
        self.flush()  # prompts must be visible before blocking
        line = self.stdin.readline()
        if isinstance(line, bytes):
            line = line.decode('latin-1')
        if not line:
            raise EndOfInputError("Unexpected end of input")
        return line[:-1] if line.endswith('\n') else line

    def jump(self, label: str):
        target = self.program.labels.get(label)
        if target is None:
            raise UndefinedLabelError(f"Undefined label {label_repr(label)}")
        self.pc = target

    def run(self):
        """Execute bytecode - main interpreter loop"""
        code = self.program.instructions
        size = len(code)
        stack = self.stack
        heap = self.heap
        instr = None
        logger.debug("running %d instructions", size)

        try:
            while True:
                if not 0 <= self.pc < size:
                    raise ProgramCounterError(f"Program counter {self.pc} outside program of {size} instructions")
                instr = code[self.pc]
                if self.trace:
                    logger.debug("%5d  %r  stack=%s", self.pc, instr, stack.values)
                self.pc += 1
                self.steps += 1
                op = instr.op

                if op == OpCode.PUSH:
                    stack.push(instr.arg)

                elif op == OpCode.DUP:
                    stack.push(stack.peek())

                elif op == OpCode.REF:
                    stack.push(stack.ref(instr.arg))

                elif op == OpCode.SLIDE:
                    stack.slide(instr.arg)

                elif op == OpCode.SWAP:
                    stack.swap()

                elif op == OpCode.DISCARD:
                    stack.pop()

                elif op == OpCode.ADD:
                    y = stack.pop()
                    x = stack.pop()
                    stack.push(x + y)

                elif op == OpCode.SUB:
                    y = stack.pop()
                    x = stack.pop()
                    stack.push(x - y)

                elif op == OpCode.MUL:
                    y = stack.pop()
                    x = stack.pop()
                    stack.push(x * y)

                elif op == OpCode.DIV:
                    y = stack.pop()
                    x = stack.pop()
                    if y == 0:
                        raise ArithmeticFault("Division by zero")
                    stack.push(trunc_div(x, y))

                elif op == OpCode.MOD:
                    y = stack.pop()
                    x = stack.pop()
                    if y == 0:
                        raise ArithmeticFault("Modulo by zero")
                    stack.push(trunc_mod(x, y))

                elif op == OpCode.STORE:
                    value = stack.pop()
                    addr = stack.pop()
                    heap.write(addr, value)

                elif op == OpCode.RETRIEVE:
                    stack.push(heap.read(stack.pop()))

                elif op == OpCode.LABEL:
                    pass

                elif op == OpCode.CALL:
                    self.calls.push(self.pc)
                    self.jump(instr.arg)

                elif op == OpCode.JUMP:
                    self.jump(instr.arg)

                elif op == OpCode.JZ:
                    if stack.pop() == 0:
                        self.jump(instr.arg)

                elif op == OpCode.JN:
                    if stack.pop() < 0:
                        self.jump(instr.arg)

                elif op == OpCode.RET:
                    self.pc = self.calls.pop()

                elif op == OpCode.END:
                    logger.debug("halted after %d steps", self.steps)
                    return

                elif op == OpCode.OUTPUT_CHAR:
                    self.write(bytes((stack.pop() & 0xFF,)))

                elif op == OpCode.OUTPUT_NUM:
                    self.write(str(stack.pop()).encode('ascii'))

                elif op == OpCode.READ_CHAR:
                    line = self.read_line()
                    char = line[0] if line else '\n'
                    heap.write(abs(stack.pop()), ord(char))

                elif op == OpCode.READ_NUM:
                    line = self.read_line()
                    if not NUMBER_RE.fullmatch(line):
                        raise InputError(f"Expected a number, got {line!r}")
                    heap.write(stack.pop(), int(line))

        except RuntimeError as e:
            if instr is not None:
                e.locate(self.pc - 1, instr)
            raise
        finally:
            self.flush()


def execute(source: Union[str, bytes], stdin=None, stdout=None, trace: bool = False) -> VM:
    """Compile and execute source code, returning the halted machine"""
    vm = VM(compile_program(source), stdin=stdin, stdout=stdout, trace=trace)
    vm.run()
    return vm
