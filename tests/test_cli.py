import io
import logging

from wspace.compiler import encode
from wspace.instructions import Instruction as I, OpCode
from wspace.wspace import main, run_file, usage, VERSION, EXIT_OK, EXIT_USAGE
from wspace import helpers

HELLO = [
    I(OpCode.PUSH, 72), I(OpCode.OUTPUT_CHAR),
    I(OpCode.PUSH, 105), I(OpCode.OUTPUT_CHAR),
    I(OpCode.END),
]

def write(tmp_path, instrs, name="prog.ws"):
    path = tmp_path / name
    path.write_text(encode(instrs))
    return str(path)

def testRunFile(tmp_path):
    out = io.BytesIO()
    assert EXIT_OK == run_file(write(tmp_path, HELLO), stdout=out)
    assert b"Hi" == out.getvalue()

def testRunFileWithComments(tmp_path):
    path = tmp_path / "commented.ws"
    path.write_bytes(b"a program:\r\n" + encode(HELLO).encode() + b"\xffthe end")
    out = io.BytesIO()
    assert EXIT_OK == run_file(str(path), stdout=out)
    assert b"Hi" == out.getvalue()

def testMainRunsFile(tmp_path):
    assert EXIT_OK == main([write(tmp_path, [I(OpCode.END)])])

def testNoArguments(capsys):
    assert EXIT_USAGE == main([])
    assert "Usage:" in capsys.readouterr().err

def testTooManyArguments(capsys, tmp_path):
    path = write(tmp_path, [I(OpCode.END)])
    assert EXIT_USAGE == main([path, path])
    assert "Usage:" in capsys.readouterr().err

def testHelp(capsys):
    assert EXIT_OK == main(["--help"])
    assert usage() in capsys.readouterr().out

def testVersion(capsys):
    assert EXIT_OK == main(["-v"])
    assert VERSION in capsys.readouterr().out

def testDashNamedFile(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    write(tmp_path, [I(OpCode.END)], "-prog.ws")
    assert EXIT_OK == main(["-prog.ws"])

def testDashArgumentIsAPath(capsys):
    assert EXIT_USAGE == main(["--fast"])
    assert "cannot read" in capsys.readouterr().err

def testMissingFile(capsys, tmp_path):
    assert EXIT_USAGE == main([str(tmp_path / "missing.ws")])
    assert "cannot read" in capsys.readouterr().err

def testParseErrorExitCode(capsys, tmp_path):
    path = tmp_path / "bad.ws"
    path.write_text("\t\n\n")
    assert 2 == run_file(str(path))
    assert "Parse error: Unrecognised instruction" in capsys.readouterr().err

def testDuplicateLabelExitCode(capsys, tmp_path):
    path = write(tmp_path, [I(OpCode.LABEL, "a"), I(OpCode.LABEL, "a"), I(OpCode.END)])
    assert 2 == run_file(path)
    assert "Parse error: Label" in capsys.readouterr().err

def testRuntimeErrorExitCodes(capsys, tmp_path):
    cases = [
        ([I(OpCode.JUMP, "x")], 3),
        ([I(OpCode.DISCARD)], 4),
        ([I(OpCode.PUSH, 1), I(OpCode.PUSH, 0), I(OpCode.MOD)], 5),
        ([I(OpCode.PUSH, 0), I(OpCode.READ_NUM)], 6),
        ([I(OpCode.PUSH, 0), I(OpCode.READ_CHAR)], 7),
        ([I(OpCode.PUSH, -4), I(OpCode.RETRIEVE)], 8),
        ([I(OpCode.PUSH, 1)], 9),
    ]
    for i, (instrs, code) in enumerate(cases):
        path = write(tmp_path, instrs, f"case{i}.ws")
        stdin = io.StringIO("x\n" if code == 6 else "")
        assert code == run_file(path, stdin=stdin, stdout=io.BytesIO()), instrs
        assert "Runtime error:" in capsys.readouterr().err

def testTraceSetting(monkeypatch):
    monkeypatch.delenv(helpers.TRACE_ENV, raising=False)
    assert not helpers.trace_enabled()
    monkeypatch.setenv(helpers.TRACE_ENV, "0")
    assert not helpers.trace_enabled()
    monkeypatch.setenv(helpers.TRACE_ENV, "1")
    assert helpers.trace_enabled()

def testLogLevelSetting(monkeypatch):
    monkeypatch.delenv(helpers.LOG_LEVEL_ENV, raising=False)
    assert logging.WARNING == helpers.log_level()
    monkeypatch.setenv(helpers.LOG_LEVEL_ENV, "debug")
    assert logging.DEBUG == helpers.log_level()
    monkeypatch.setenv(helpers.LOG_LEVEL_ENV, "chatty")
    assert logging.WARNING == helpers.log_level()

def testInitLoggerOnce():
    a = helpers.init_logger("WSPACE-TEST")
    b = helpers.init_logger("WSPACE-TEST")
    assert a is b
    assert 1 == len(b.handlers)

def testLabelRepr():
    assert '"loop"' == helpers.label_repr("loop")
    assert '"\\x00\\xff"' == helpers.label_repr("\x00\xff")

def testTraceFromEnvironment(monkeypatch, caplog, tmp_path):
    monkeypatch.setenv(helpers.TRACE_ENV, "1")
    monkeypatch.delenv(helpers.LOG_LEVEL_ENV, raising=False)
    vm_logger = logging.getLogger("VM")
    level = vm_logger.level
    vm_logger.setLevel(logging.WARNING)
    try:
        assert EXIT_OK == run_file(write(tmp_path, HELLO), stdout=io.BytesIO())
    finally:
        vm_logger.setLevel(level)
    assert any("OUTPUT_CHAR" in r.getMessage() for r in caplog.records)
