import pytest

from pdp import log
from pdp.callbacks import CallbackTable
from pdp.log import Level


@pytest.fixture(autouse=True)
def reset_level():
    log.set_console_log_level(Level.INFO)
    yield
    log.set_console_log_level(Level.INFO)


def test_invoke_runs_callback_with_args():
    table = CallbackTable()
    seen = []
    table.bind(1, lambda *a: seen.append(a))
    assert table.invoke(1, "done", 3) is True
    assert seen == [("done", 3)]


def test_callback_runs_only_once(capsys):
    table = CallbackTable()
    seen = []
    table.bind(5, lambda: seen.append(5))
    assert table.invoke(5) is True
    assert table.invoke(5) is False
    assert seen == [5]
    assert "Could not invoke with id=5, not found!" in capsys.readouterr().out


def test_unknown_id_returns_false():
    table = CallbackTable()
    assert table.invoke(42) is False
    assert len(table) == 0


def test_duplicate_bind_rejected():
    table = CallbackTable()
    table.bind(2, print)
    with pytest.raises(ValueError):
        table.bind(2, print)


@pytest.mark.parametrize("bad_id", [-1, 0xFFFFFFFF, 1 << 40])
def test_invalid_ids_rejected(bad_id):
    table = CallbackTable()
    with pytest.raises(ValueError):
        table.bind(bad_id, print)


def test_pending_len_and_contains():
    table = CallbackTable()
    for callback_id in (9, 3, 7):
        table.bind(callback_id, lambda: None)
    table.invoke(3)
    assert table.pending() == [9, 7]
    assert len(table) == 2
    assert 9 in table
    assert 3 not in table


def test_many_binds_grow_past_default_size():
    table = CallbackTable()
    results = []
    for callback_id in range(1, 101):
        table.bind(callback_id, lambda value, i=callback_id: results.append(i * value))
    for callback_id in range(100, 0, -1):
        assert table.invoke(callback_id, 1)
    assert sorted(results) == list(range(1, 101))
    assert len(table) == 0


def test_capacity_limit():
    table = CallbackTable()
    for callback_id in range(CallbackTable.max_elements):
        table.bind(callback_id, lambda: None)
    with pytest.raises(OverflowError):
        table.bind(CallbackTable.max_elements, lambda: None)
    assert len(table) == CallbackTable.max_elements