# ibtelemetry

This package reads and writes `.ibt` telemetry files from a racing simulator.
It can also look up values in the YAML session-info string those files carry.

An `.ibt` file has these parts, in order:

- a fixed binary header;
- a disk sub-header with the session times, the lap count and the record count;
- a table that describes each variable;
- a YAML session-info string;
- one fixed-size record per sample.

Each variable has a type: `char`, `bool`, `int`, `bitField`, `float` or `double`. It also has an offset into the record and an element count. Array variables, such as per-car positions, have a count greater than one.

The package uses only the standard library.

## Installation

```
pip install ibtelemetry
```

## Reading a file

```python
from ibtelemetry.reader import IbtReader

with IbtReader("session.ibt") as reader:
    print(reader.num_vars(), "variables,", reader.record_count(), "records")
    speed = reader.var_index("Speed")
    print(reader.var_name(speed), reader.var_unit(speed), reader.var_desc(speed))
    while reader.next_record():
        print(reader.get_float("Speed"), reader.get_int("CarIdxPosition", 3))
```

Opening the file:

- Pass the path to `IbtReader(path)`, or call `open(path)` on a reader created with no arguments.
- `open()` reads the header, the sub-header, the variable table and the session info. It then places the reader before the first record.
- If the file is truncated or a length in the header is negative, `open()` raises `IbtFormatError`, a subclass of `ValueError`.

Reading records:

- `next_record()` loads the next record. It returns `False` once no full record is left.
- `record_count()` returns the count stored in the sub-header.

Looking up variables:

- Give a variable either by name or by index.
- `var_index(name)` raises `KeyError` for an unknown name.
- An index or entry out of range raises `IndexError`.
- Calling a method on a closed reader raises `ValueError`.
- `var_type()` returns a `VarType`. If the stored type code is not one it knows, it returns the raw integer.

Reading values:

- `get_bool`, `get_int`, `get_float` and `get_double` convert the stored value to the type you ask for.
- `entry` defaults to 0.
- `get_bool` counts a float or double as true when it is at least 1.0. It counts any other type as true when it is non-zero.
- `get_float` rounds to single precision.
- A variable with an unknown type code reads as `False`, `0` or `0.0`.

## Session info

`session_info()` returns the whole YAML string.

`session_value(path)` looks up one value with the simulator's simple path syntax. A path is a run of `key:` segments. A `{value}` after a key selects the list entry whose key has that value. The method returns the raw text of the value exactly as it appears, with quotes and trailing spaces kept. It returns `None` if the path is not found.

```python
name = reader.session_value("DriverInfo:Drivers:CarIdx:{4}UserName:")
```

You can use the same lookup on any string:

```python
from ibtelemetry.yaml_path import parse_yaml

parse_yaml(yaml_text, "WeekendInfo:TrackName:")
```

A value counts only when a newline ends its line.

## Writing a file

```python
from ibtelemetry.defines import VarType
from ibtelemetry.writer import IbtWriter

with IbtWriter("out.ibt") as writer:
    writer.add_variable("Speed", "Vehicle speed", "m/s", VarType.FLOAT, 1)
    writer.add_variable("CarIdxPosition", "Position by car index", "", VarType.INT, 64)
    writer.finalize_header()
    writer.session_lap_count = 3
    for speed, position in [(41.5, 2), (43.0, 1)]:
        writer.set_var(speed, "Speed")
        writer.set_var(position, "CarIdxPosition", 0)
        writer.write_line()
```

Steps, in order:

1. Declare every variable with `add_variable(name, desc, unit, var_type, count=1)` before calling `finalize_header()`. The method returns the new variable's index. Names and units are cut to 32 characters and descriptions to 64.
2. Call `finalize_header()`. It lays out and writes the header, the variable table and the session info.
3. For each record, set values with `set_var(value, key, entry=0)`, then call `write_line()`. `set_var` converts the value to the variable's type. `write_line()` appends the record and clears it for the next one.
4. Close the writer. `close()` writes the disk sub-header in place, including the record count.

Before closing, you can set the sub-header fields through the properties `session_start_date`, `session_start_time`, `session_end_time` and `session_lap_count`.

Errors:

- `IbtWriterError` is raised for misuse:
  - opening a writer that is already open;
  - calling methods on a closed writer;
  - adding variables after the header is finalized;
  - finalizing twice;
  - writing records before finalizing;
  - exceeding 1000 variables or the record size limit.
- A `count` below 1 raises `ValueError`.
- An entry out of range raises `IndexError`.
- A value that does not fit its integer type raises `OverflowError`.

## Other helpers

- `ibtelemetry.defines` holds the format's constants and enumerations, such as `VarType`, `SessionState`, `TrackLocation`, `TrackSurface`, `Flags`, `EngineWarnings`, `PitServiceStatus` and `BroadcastMsg`.
- `ibtelemetry.defines` also holds the binary structures `Header`, `DiskSubHeader`, `VarHeader` and `VarBuf`. Each has `pack()` and `unpack()`.
- `var_type_size()` gives the byte size of one element of a type.
- `ibtelemetry.carnum.pad_car_num(num, zero)` encodes a car number that has leading zeros. For example, car #001 is `pad_car_num(1, 2)`.

## What it does not do

- The package works with files only. It does not connect to a running simulator's live telemetry, and it cannot wait for live data.
- It cannot send broadcast messages to the simulator. `BroadcastMsg` is only an enumeration of the message codes.
- The writer always stores the placeholder session info `"---\n...\n"`. It offers no way to supply a session-info string of your own.
- There is no command-line program.