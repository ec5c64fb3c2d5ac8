import sys
from pathlib import Path

import pytest

from singlib.shell import Shell, ShellError, exec_command


def python(code):
    return exec_command(sys.executable, "-c", code)


def test_read_output_strips():
    assert python("print('  hello  ')").read_output() == "hello"


def test_read_combines_streams():
    text = python("import sys; sys.stdout.write('out'); sys.stdout.flush(); sys.stderr.write('err')").read()
    assert "out" in text
    assert "err" in text


def test_run_failure_reports_exit_status():
    with pytest.raises(ShellError) as info:
        python("import sys; sys.exit(3)").run()
    assert "exit status 3" in str(info.value)
    assert sys.executable in str(info.value)


def test_read_failure_keeps_output():
    with pytest.raises(ShellError) as info:
        python("import sys; print('partial'); sys.exit(2)").read()
    assert "partial" in info.value.output


def test_set_dir(tmp_path):
    shell = python("import os; print(os.getcwd())")
    assert shell.set_dir(tmp_path) is shell
    assert Path(shell.read_output()).resolve() == tmp_path.resolve()


def test_set_env():
    shell = python("import os; print(os.environ['SINGLIB_TEST_VALUE'])")
    shell.set_env(["SINGLIB_TEST_VALUE=a=b"])
    assert shell.read_output() == "a=b"


def test_missing_command():
    with pytest.raises(ShellError):
        exec_command("singlib-command-that-does-not-exist").run()


def test_wait_before_start():
    with pytest.raises(ShellError):
        python("pass").wait()


def test_cannot_start_twice():
    shell = python("pass")
    shell.run()
    with pytest.raises(ShellError):
        shell.run()


def test_attach_uses_process_streams():
    shell = Shell("true")
    assert shell.attach() is shell
    assert shell.stdin is sys.stdin
    assert shell.stdout is sys.stderr
    assert shell.stderr is sys.stderr