import os
import sys

import pytest

from pdp.check import CheckError
from pdp.gdb_driver import AsyncKind, GdbDriver, classify_async, process_cstring


def test_process_cstring_plain():
    assert process_cstring('"hello"') == "hello"


def test_process_cstring_escapes():
    assert process_cstring('"a\\nb"') == "a\nb"
    assert process_cstring('"say \\"hi\\""') == 'say "hi"'
    assert process_cstring('"back\\\\slash"') == "back\\slash"


def test_process_cstring_malformed_returned_unchanged(capsys):
    assert process_cstring("abc") == "abc"
    assert "Unexpected start/end of stream message" in capsys.readouterr().out


@pytest.mark.parametrize(
    "name, kind",
    [
        ("stopped", AsyncKind.STOPPED),
        ("running", AsyncKind.RUNNING),
        ("cmd-param-changed", AsyncKind.CMD_PARAM_CHANGED),
        ("breakpoint-created", AsyncKind.BREAKPOINT_CREATED),
        ("breakpoint-deleted", AsyncKind.BREAKPOINT_DELETED),
        ("breakpoint-modified", AsyncKind.BREAKPOINT_MODIFIED),
        ("thread-created", AsyncKind.THREAD_CREATED),
        ("thread-selected", AsyncKind.THREAD_SELECTED),
        ("thread-group-started", AsyncKind.THREAD_GROUP_STARTED),
        ("library-loaded", AsyncKind.LIBRARY_LOADED),
        ("breakpoint-", AsyncKind.UNKNOWN),
        ("", AsyncKind.UNKNOWN),
        ("nonsense", AsyncKind.UNKNOWN),
    ],
)
def test_classify_async(name, kind):
    assert classify_async(name) is kind


def test_stream_message_printed(capsys):
    driver = GdbDriver()
    driver.handle_line('~"Hello\\n"\n')
    assert capsys.readouterr().out == "Hello\n"


def test_result_done_invokes_callback():
    driver = GdbDriver()
    received = []
    driver.callbacks.bind(7, received.append)
    driver.handle_line(b'7^done,bkpt={number="1",type="breakpoint"}\n')
    assert len(received) == 1
    assert received[0]["bkpt"]["number"] == "1"
    assert received[0]["bkpt"]["type"] == "breakpoint"
    assert 7 not in driver.callbacks


def test_result_done_without_record():
    driver = GdbDriver()
    received = []
    driver.callbacks.bind(3, received.append)
    driver.handle_line("3^done\n")
    assert len(received) == 1
    assert received[0].count() == 0


def test_result_error_logged(capsys):
    driver = GdbDriver()
    driver.handle_line('4^error,msg="No symbol"\n')
    assert "No symbol" in capsys.readouterr().out


def test_parse_failure_logged(capsys):
    driver = GdbDriver()
    received = []
    driver.callbacks.bind(1, received.append)
    driver.handle_line("1^done,bad\n")
    assert "Parsing bad failed!" in capsys.readouterr().out
    assert received == []


def test_missing_class_name_warns(capsys):
    driver = GdbDriver()
    driver.handle_line('5^,x="1"\n')
    assert "Missing class name for message with token 5" in capsys.readouterr().out


def test_short_line_ignored(capsys):
    driver = GdbDriver()
    driver.handle_line("\n")
    assert capsys.readouterr().out == ""


def test_line_without_newline_rejected():
    driver = GdbDriver()
    with pytest.raises(ValueError):
        driver.handle_line('1^done,x="1"')


def test_on_async_message_returns_kind():
    driver = GdbDriver()
    assert driver.on_async_message("stopped", None) is AsyncKind.STOPPED


def test_request_without_process_fails(capsys):
    driver = GdbDriver()
    assert driver.request("-exec-run") is False
    assert driver.token_counter == 2
    assert "Failed to submit request -exec-run" in capsys.readouterr().out


def test_start_missing_executable(tmp_path):
    driver = GdbDriver(gdb=str(tmp_path / "no-such-gdb"))
    with pytest.raises(CheckError):
        driver.start()


def test_request_and_poll_round_trip(tmp_path):
    script = tmp_path / "fake-gdb"
    script.write_text("#!/bin/sh\nexec cat\n")
    os.chmod(script, 0o755)
    received = []
    with GdbDriver(gdb=str(script)) as driver:
        driver.callbacks.bind(1, received.append)
        assert driver.request('^done,value="x"') is True
        for _ in range(20):
            driver.poll(0.5)
            if received:
                break
    assert len(received) == 1
    assert received[0]["value"] == "x"
    assert sys.platform != "win32"