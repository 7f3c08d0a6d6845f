# pdp

A small library for talking to GDB through its machine interface (GDB/MI).
It also includes a decoder for MessagePack-encoded RPC records.

## Modules

- `pdp.mi_parser`: `parse_mi(text)` parses the payload of an MI record,
  such as `bkpt={number="1",type="breakpoint"}`. It returns an `ExprTuple`
  when the top level holds `key=value` results and a `list` when it holds
  bare values. An empty record gives an empty `ExprTuple`. C-strings become
  `str` with their escapes resolved. Malformed input raises `MiParseError`.
  The module also provides `is_mi_identifier` and `reverse_escape_character`.
- `pdp.expr`: the value types `ExprTuple` and `ExprMap`, the `ExprKind`
  enum, `expr_kind_of` and `expr_kind_name`. `ExprView` wraps a value and
  gives forgiving access to it:
  - `view["key"]` and `view[0]` look members up. A miss gives an empty view,
    which is falsy.
  - `count()` returns the number of members.
  - `string_or(alt)` and `number_or(alt)` return the value, or `alt` when
    the value has the wrong kind.
  - `view == "text"` compares strings, and integers by their decimal
    spelling.
  - `to_json()` renders the tree as JSON-like text.
- `pdp.rpc_parser`: `RpcParser(source).parse()` reads one MessagePack array
  or map and returns it as the same kind of tree:
  - arrays become `list`;
  - maps become `ExprMap`, whose keys must be strings or integers;
  - nil becomes `None`;
  - booleans and integers become `int`.

  Anything else raises `RpcError`, as does a top level that is neither an
  array nor a map. `source` may be a file descriptor, a binary file object or
  a `ByteStream`.
- `pdp.byte_stream`: `ByteStream` pops big-endian integers
  (`pop_uint8` … `pop_int64`) and raw bytes (`read(n)`). It raises
  `StreamTimeout` when not enough data arrives within `max_wait` seconds.
- `pdp.rolling_buffer`: `RollingBuffer.read_line(timeout)` returns the next
  newline-terminated line from a descriptor as `bytes`, newline included.
  It returns `None` when no whole line arrives within `timeout` seconds or
  the input ends.
- `pdp.callbacks`: `CallbackTable` keeps one-shot callbacks keyed by id.
  Its methods are `bind`, `invoke`, `pending`, `len()` and `in`. Binding an
  id that is already bound raises `ValueError`. Invoking an unknown id logs
  a warning and returns `False`.
- `pdp.text`: `format_pack(fmt, *args)` fills `{}` placeholders. A mismatch
  between placeholders and arguments raises `FormatError`. The module also
  has digit-counting helpers.
- `pdp.log`: writes timestamped, coloured log lines to standard output.
  - `trace`, `info`, `warning`, `error` and `critical` log a message.
  - `set_console_log_level` sets the threshold; the default is `INFO`.
    Trace level cannot be switched on this way.
- `pdp.check`: `check(result, operation)` logs and returns `False` for a
  negative status, `None` or an `OSError`. `check_and_terminate` raises
  `CheckError` instead.

## Driving GDB

`pdp.gdb_driver.GdbDriver(program, gdb)` runs the `gdb` executable with
`--interpreter=mi2` on `program`. The driver:

- sends numbered requests with `request(command)`;
- handles one output line per `poll(timeout)` call, with `timeout` in
  seconds;
- echoes anything GDB writes to stderr as error log lines.

It can also be used as a context manager:

```python
from pdp.gdb_driver import GdbDriver
from pdp.expr import ExprView

with GdbDriver("./a.out") as driver:
    driver.callbacks.bind(driver.token_counter, lambda view: print(view.to_json()))
    driver.request("-break-insert main")
    for _ in range(10):
        driver.poll(1.0)
```

Output records are handled as follows:

- Stream records (`~`, `@`, `&`) are printed as they are.
- A `done` result runs the callback bound to its token, if there is one,
  passing it an `ExprView` of the record.
- An `error` result is logged together with its `msg`.
- Async records are classified by `classify_async` into an `AsyncKind` and
  nothing more. Subclass the driver and override `on_async_message` or
  `on_result_message` to act on them.

`handle_line(line)` dispatches a single line without a running GDB. This is
useful for feeding captured output.

## Command line

Installing the package provides a `pdp` command:

```
pdp [program] [--gdb GDB]
```

The command:

1. starts GDB on `program` (default `Debug/pdp`);
2. runs it to its entry point with `-exec-run --start`;
3. prints what GDB reports until GDB exits or you press Ctrl-C.

## What it does not do

- The driver does not track program state, breakpoints or threads from
  async records; it only classifies them.
- The RPC decoder reads records but nothing in the package sends RPC
  requests or serves them.

## Running the tests

```
pip install -e ".[test]"
pytest
```