import errno

import pytest

from pdp import log
from pdp.check import AssertionFailure, CheckError, check, check_and_terminate, on_assert_failed
from pdp.log import Level


@pytest.fixture(autouse=True)
def reset_level():
    log.set_console_log_level(Level.INFO)
    yield
    log.set_console_log_level(Level.INFO)


def test_check_success_values(capsys):
    assert check(0, "pipe") is True
    assert check(7, "open") is True
    assert check(object(), "mmap") is True
    assert capsys.readouterr().out == ""


def test_check_negative_status_logs(capsys):
    assert check(-1, "read") is False
    out = capsys.readouterr().out
    assert "'read' returned '-1'." in out


def test_check_none_pointer_fails(capsys):
    assert check(None, "mmap") is False
    assert "'mmap'" in capsys.readouterr().out


def test_check_os_error_reports_errno(capsys):
    exc = OSError(errno.ENOENT, "No such file or directory")
    assert check(exc, "open") is False
    out = capsys.readouterr().out
    assert f"Error '{errno.ENOENT}': 'No such file or directory'." in out


def test_check_and_terminate_passes():
    assert check_and_terminate(3, "dup2") is None


def test_check_and_terminate_raises():
    with pytest.raises(CheckError):
        check_and_terminate(-1, "execlp")


def test_check_and_terminate_keeps_errno():
    with pytest.raises(CheckError) as info:
        check_and_terminate(OSError(errno.EPIPE, "Broken pipe"), "write")
    assert info.value.errno == errno.EPIPE


def test_on_assert_failed_reports_and_raises(capsys):
    with pytest.raises(AssertionFailure) as info:
        on_assert_failed("Extra arguments for format", "x {}")
    err = capsys.readouterr().err
    assert err.startswith("[*** PDP ERROR ***] Extra arguments for format")
    assert " occured with: x {}" in str(info.value)