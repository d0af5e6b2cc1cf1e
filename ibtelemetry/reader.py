"""Sequential reader for ``.ibt`` telemetry disk files."""

from __future__ import annotations

import math
import struct
from typing import BinaryIO, List, Optional, Union

from .defines import (
    MAX_STRING,
    DiskSubHeader,
    Header,
    VarHeader,
    VarType,
    var_type_size,
)
from .yaml_path import parse_yaml

Key = Union[int, str]

_FORMATS = {
    VarType.CHAR: "<b",
    VarType.BOOL: "<b",
    VarType.INT: "<i",
    VarType.BITFIELD: "<i",
    VarType.FLOAT: "<f",
    VarType.DOUBLE: "<d",
}


class IbtFormatError(ValueError):
    """Raised when a file does not hold a complete telemetry layout."""


def _to_float32(value: float) -> float:
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


class IbtReader:
    """Reads the header, variable table, session info and data rows of a file.

    Rows are read one after another with :meth:`next_record`; the ``get_*``
    methods then convert a variable of the current row to the requested type.
    """

    def __init__(self, path=None):
        self._file: Optional[BinaryIO] = None
        self._header = Header()
        self._sub_header = DiskSubHeader()
        self._session_info = ""
        self._var_headers: List[VarHeader] = []
        self._row = b""
        if path is not None:
            self.open(path)

    def __enter__(self) -> "IbtReader":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def is_open(self) -> bool:
        return self._file is not None

    def open(self, path) -> None:
        """Open ``path`` and position the reader before the first row."""
        self.close()
        handle = open(path, "rb")
        try:
            self._load(handle)
        except BaseException:
            handle.close()
            self._reset()
            raise
        self._file = handle

    def _load(self, handle: BinaryIO) -> None:
        header = Header.unpack(self._read_exact(handle, Header.SIZE, "header"))
        sub_header = DiskSubHeader.unpack(
            self._read_exact(handle, DiskSubHeader.SIZE, "disk sub-header")
        )

        if header.session_info_len < 0:
            raise IbtFormatError("negative session info length")
        handle.seek(header.session_info_offset)
        raw = self._read_exact(handle, header.session_info_len, "session info")
        # the last byte is forced to NUL, as the stored string may lack one
        raw = raw[:-1]
        session_info = raw.split(b"\0", 1)[0].decode("latin-1")

        if header.num_vars < 0:
            raise IbtFormatError("negative variable count")
        handle.seek(header.var_header_offset)
        table = self._read_exact(
            handle, header.num_vars * VarHeader.SIZE, "variable headers"
        )
        var_headers = [
            VarHeader.unpack(table[i:i + VarHeader.SIZE])
            for i in range(0, len(table), VarHeader.SIZE)
        ]

        if header.buf_len < 0:
            raise IbtFormatError("negative row length")
        handle.seek(header.var_buf[0].buf_offset)

        self._header = header
        self._sub_header = sub_header
        self._session_info = session_info
        self._var_headers = var_headers
        self._row = bytes(header.buf_len)

    @staticmethod
    def _read_exact(handle: BinaryIO, size: int, what: str) -> bytes:
        data = handle.read(size)
        if len(data) != size:
            raise IbtFormatError(f"truncated file: {what} incomplete")
        return data

    def _reset(self) -> None:
        self._header = Header()
        self._sub_header = DiskSubHeader()
        self._session_info = ""
        self._var_headers = []
        self._row = b""

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
        self._file = None
        self._reset()

    def _require_open(self) -> None:
        if self._file is None:
            raise ValueError("telemetry file is not open")

    def next_record(self) -> bool:
        """Read the next data row; return False once no full row is left."""
        self._require_open()
        data = self._file.read(self._header.buf_len)
        if len(data) != self._header.buf_len:
            return False
        self._row = data
        return True

    def record_count(self) -> int:
        """Number of rows recorded, as stated in the disk sub-header."""
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

    def var_type(self, key: Key) -> Union[VarType, int]:
        raw = self._var(key).var_type
        try:
            return VarType(raw)
        except ValueError:
            return raw

    def var_count(self, key: Key) -> int:
        return self._var(key).count

    def _value(self, key: Key, entry: int):
        var = self._var(key)
        if not 0 <= entry < var.count:
            raise IndexError(f"entry {entry} out of range for {var.name!r}")
        try:
            var_type = VarType(var.var_type)
        except ValueError:
            return None
        position = var.offset + entry * var_type_size(var_type)
        try:
            (value,) = struct.unpack_from(_FORMATS[var_type], self._row, position)
        except struct.error:
            raise IbtFormatError(
                f"variable {var.name!r} lies outside the data row"
            ) from None
        return var_type, value

    def get_bool(self, key: Key, entry: int = 0) -> bool:
        result = self._value(key, entry)
        if result is None:
            return False
        var_type, value = result
        if var_type in (VarType.FLOAT, VarType.DOUBLE):
            return value >= 1.0
        return value != 0

    def get_int(self, key: Key, entry: int = 0) -> int:
        result = self._value(key, entry)
        if result is None:
            return 0
        return int(result[1])

    def get_float(self, key: Key, entry: int = 0) -> float:
        result = self._value(key, entry)
        if result is None:
            return 0.0
        return _to_float32(float(result[1]))

    def get_double(self, key: Key, entry: int = 0) -> float:
        result = self._value(key, entry)
        if result is None:
            return 0.0
        return float(result[1])

    def session_info(self) -> str:
        """The whole session-info YAML string."""
        self._require_open()
        return self._session_info

    def session_value(self, path: str) -> Optional[str]:
        """The raw session-info value at ``path``, or None if not found."""
        self._require_open()
        return parse_yaml(self._session_info, path)