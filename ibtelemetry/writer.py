"""Sequential writer for ``.ibt`` telemetry disk files."""

from __future__ import annotations

import struct
from typing import BinaryIO, List, Optional, Union

from .defines import (
    MAX_DESC,
    MAX_STRING,
    DiskSubHeader,
    Header,
    StatusField,
    VarHeader,
    VarType,
    var_type_size,
)

Key = Union[int, str]

MAX_VAR_COUNT = 1000
MAX_VAR_BUF_SIZE = MAX_VAR_COUNT * 32

# placeholder session info written until a real one is supplied
_DEFAULT_SESSION_INFO = "---\n...\n"

_FORMATS = {
    VarType.CHAR: "<b",
    VarType.BOOL: "<b",
    VarType.INT: "<i",
    VarType.BITFIELD: "<i",
    VarType.FLOAT: "<f",
    VarType.DOUBLE: "<d",
}


class IbtWriterError(Exception):
    """Raised when the writer is used in a state that does not allow the call."""


class IbtWriter:
    """Writes a telemetry file: declare variables, finalize, then write rows.

    Values for the current row are set with :meth:`set_var`;
    :meth:`write_line` appends the row and clears it for the next one.  The
    disk sub-header (record count, lap count, session times) is written when
    the file is closed.
    """

    def __init__(self, path=None):
        self._file: Optional[BinaryIO] = None
        self._header = Header()
        self._sub_header = DiskSubHeader()
        self._sub_header_offset = 0
        self._finalized = False
        self._session_info = ""
        self._var_headers: List[VarHeader] = []
        self._row = bytearray()
        if path is not None:
            self.open(path)

    def __enter__(self) -> "IbtWriter":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def is_open(self) -> bool:
        return self._file is not None

    def open(self, path) -> None:
        """Create ``path`` and start a fresh, empty variable table."""
        if self._file is not None:
            raise IbtWriterError("a telemetry file is already open")
        handle = open(path, "wb")
        self._header = Header()
        self._sub_header = DiskSubHeader()
        self._sub_header_offset = 0
        self._finalized = False
        self._session_info = _DEFAULT_SESSION_INFO
        self._var_headers = []
        self._row = bytearray()
        self._file = handle

    def close(self) -> None:
        """Write the disk sub-header in place and close the file."""
        if self._file is not None:
            try:
                self._file.seek(self._sub_header_offset)
                self._file.write(self._sub_header.pack())
            finally:
                self._file.close()
        self._file = None

    def _require_open(self) -> None:
        if self._file is None:
            raise IbtWriterError("telemetry file is not open")

    def add_variable(self, name: str, desc: str, unit: str, var_type, count: int = 1) -> int:
        """Declare a variable and return its index."""
        self._require_open()
        if self._finalized:
            raise IbtWriterError("header is already finalized")
        if count < 1:
            raise ValueError(f"variable count must be at least 1, got {count}")
        var_type = VarType(var_type)
        size = var_type_size(var_type)
        if not (
            self._header.num_vars < MAX_VAR_COUNT
            and self._header.buf_len + count < MAX_VAR_BUF_SIZE
        ):
            raise IbtWriterError("no room left for another variable")

        index = self._header.num_vars
        self._var_headers.append(
            VarHeader(
                var_type=var_type,
                offset=self._header.buf_len,
                count=count,
                count_as_time=False,
                name=name[:MAX_STRING],
                desc=desc[:MAX_DESC],
                unit=unit[:MAX_STRING],
            )
        )
        self._header.num_vars += 1
        added = count * size
        self._header.buf_len += added
        self._row.extend(bytes(added))
        return index

    def is_header_finalized(self) -> bool:
        return self._finalized

    def finalize_header(self) -> None:
        """Lay out and write the headers, variable table and session info."""
        self._require_open()
        if self._finalized:
            raise IbtWriterError("header is already finalized")

        header = self._header
        header.ver = 1
        header.status = int(StatusField.CONNECTED)
        header.tick_rate = 60
        offset = Header.SIZE

        # the sub-header is rewritten when the file is closed
        self._sub_header = DiskSubHeader()
        self._sub_header_offset = offset
        offset += DiskSubHeader.SIZE

        header.var_header_offset = offset
        offset += header.num_vars * VarHeader.SIZE

        session_bytes = self._session_info.encode("latin-1")
        header.session_info_update = 0
        header.session_info_len = len(session_bytes)
        header.session_info_offset = offset
        offset += header.session_info_len

        header.num_buf = 1
        header.var_buf[0].buf_offset = offset
        header.var_buf[0].tick_count = 0

        self._file.write(header.pack())
        self._file.write(self._sub_header.pack())
        self._file.write(b"".join(var.pack() for var in self._var_headers))
        self._file.write(session_bytes)

        position = self._file.tell()
        if position != header.var_buf[0].buf_offset:
            raise IbtWriterError(
                f"file position mismatch: {position} != {header.var_buf[0].buf_offset}"
            )
        self._finalized = True

    def write_line(self) -> None:
        """Append the current row and clear it for the next one."""
        self._require_open()
        if not self._finalized:
            raise IbtWriterError("header must be finalized before writing rows")
        self._file.write(bytes(self._row[: self._header.buf_len]))
        self._sub_header.session_record_count += 1
        self._row = bytearray(len(self._row))

    def record_count(self) -> int:
        """Number of rows written so far."""
        return self._sub_header.session_record_count

    def num_vars(self) -> int:
        self._require_open()
        return self._header.num_vars

    def var_index(self, name: str) -> int:
        """Return the index of variable ``name``; raise KeyError if absent."""
        self._require_open()
        wanted = name[:MAX_STRING]
        for index, var in enumerate(self._var_headers):
            if var.name[:MAX_STRING] == wanted:
                return index
        raise KeyError(name)

    def _var(self, key: Key) -> VarHeader:
        self._require_open()
        index = self.var_index(key) if isinstance(key, str) else key
        if not 0 <= index < len(self._var_headers):
            raise IndexError(f"variable index out of range: {index}")
        return self._var_headers[index]

    def var_name(self, key: Key) -> str:
        return self._var(key).name

    def var_desc(self, key: Key) -> str:
        return self._var(key).desc

    def var_unit(self, key: Key) -> str:
        return self._var(key).unit

    def var_type(self, key: Key) -> VarType:
        return VarType(self._var(key).var_type)

    def var_count(self, key: Key) -> int:
        return self._var(key).count

    def set_var(self, value, key: Key, entry: int = 0) -> None:
        """Store ``value`` converted to the variable's type in the current row."""
        var = self._var(key)
        if not 0 <= entry < var.count:
            raise IndexError(f"entry {entry} out of range for {var.name!r}")
        var_type = VarType(var.var_type)
        if var_type in (VarType.CHAR, VarType.BOOL):
            converted = 1 if value else 0
        elif var_type in (VarType.INT, VarType.BITFIELD):
            converted = int(value)
        else:
            converted = float(value)
        position = var.offset + entry * var_type_size(var_type)
        try:
            struct.pack_into(_FORMATS[var_type], self._row, position, converted)
        except struct.error as exc:
            raise OverflowError(
                f"value {value!r} does not fit variable {var.name!r}"
            ) from exc

    @property
    def session_start_date(self) -> int:
        return self._sub_header.session_start_date

    @session_start_date.setter
    def session_start_date(self, value: int) -> None:
        self._sub_header.session_start_date = int(value)

    @property
    def session_start_time(self) -> float:
        return self._sub_header.session_start_time

    @session_start_time.setter
    def session_start_time(self, value: float) -> None:
        self._sub_header.session_start_time = float(value)

    @property
    def session_end_time(self) -> float:
        return self._sub_header.session_end_time

    @session_end_time.setter
    def session_end_time(self, value: float) -> None:
        self._sub_header.session_end_time = float(value)

    @property
    def session_lap_count(self) -> int:
        return self._sub_header.session_lap_count

    @session_lap_count.setter
    def session_lap_count(self, value: int) -> None:
        self._sub_header.session_lap_count = int(value)