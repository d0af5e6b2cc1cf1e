"""Constants, enumerations and binary record layouts of the telemetry format.

Live telemetry and ``.ibt`` disk files share the same layout: a main
:class:`Header`, (on disk) a :class:`DiskSubHeader`, an array of
:class:`VarHeader` entries describing each variable, a YAML session-info
string and finally fixed-length rows of variable data.  All integers are
little-endian.
"""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass, field
from typing import ClassVar, List

DATA_VALID_EVENT_NAME = "Local\\IRSDKDataValidEvent"
MEM_MAP_FILE_NAME = "Local\\IRSDKMemMapFileName"
BROADCAST_MSG_NAME = "IRSDK_BROADCASTMSG"

MAX_BUFS = 4
MAX_STRING = 32
# descriptions can be longer than MAX_STRING
MAX_DESC = 64

# markers for unlimited session laps and time
UNLIMITED_LAPS = 32767
UNLIMITED_TIME = 604800.0

# latest version of the telemetry headers
VERSION = 2


class StatusField(enum.IntFlag):
    CONNECTED = 1


class VarType(enum.IntEnum):
    """Base type of a telemetry variable."""

    CHAR = 0
    BOOL = 1
    INT = 2
    BITFIELD = 3
    FLOAT = 4
    DOUBLE = 5


_VAR_TYPE_BYTES = {
    VarType.CHAR: 1,
    VarType.BOOL: 1,
    VarType.INT: 4,
    VarType.BITFIELD: 4,
    VarType.FLOAT: 4,
    VarType.DOUBLE: 8,
}


def var_type_size(var_type) -> int:
    """Return the size in bytes of one element of ``var_type``."""
    try:
        return _VAR_TYPE_BYTES[VarType(var_type)]
    except ValueError:
        raise ValueError(f"unknown variable type: {var_type!r}") from None


class TrackLocation(enum.IntEnum):
    NOT_IN_WORLD = -1
    OFF_TRACK = 0
    IN_PIT_STALL = 1
    # lead in to pit road as well as pit road itself
    APPROACHING_PITS = 2
    ON_TRACK = 3


class TrackSurface(enum.IntEnum):
    SURFACE_NOT_IN_WORLD = -1
    UNDEFINED_MATERIAL = 0
    ASPHALT1 = 1
    ASPHALT2 = 2
    ASPHALT3 = 3
    ASPHALT4 = 4
    CONCRETE1 = 5
    CONCRETE2 = 6
    RACING_DIRT1 = 7
    RACING_DIRT2 = 8
    PAINT1 = 9
    PAINT2 = 10
    RUMBLE1 = 11
    RUMBLE2 = 12
    RUMBLE3 = 13
    RUMBLE4 = 14
    GRASS1 = 15
    GRASS2 = 16
    GRASS3 = 17
    GRASS4 = 18
    DIRT1 = 19
    DIRT2 = 20
    DIRT3 = 21
    DIRT4 = 22
    SAND = 23
    GRAVEL1 = 24
    GRAVEL2 = 25
    GRASSCRETE = 26
    ASTROTURF = 27


class SessionState(enum.IntEnum):
    INVALID = 0
    GET_IN_CAR = 1
    WARMUP = 2
    PARADE_LAPS = 3
    RACING = 4
    CHECKERED = 5
    COOL_DOWN = 6


class CarLeftRight(enum.IntEnum):
    OFF = 0
    CLEAR = 1
    CAR_LEFT = 2
    CAR_RIGHT = 3
    CAR_LEFT_RIGHT = 4
    TWO_CARS_LEFT = 5
    TWO_CARS_RIGHT = 6


class PitServiceStatus(enum.IntEnum):
    NONE = 0
    IN_PROGRESS = 1
    COMPLETE = 2
    TOO_FAR_LEFT = 100
    TOO_FAR_RIGHT = 101
    TOO_FAR_FORWARD = 102
    TOO_FAR_BACK = 103
    BAD_ANGLE = 104
    CANT_FIX_THAT = 105


class PaceMode(enum.IntEnum):
    SINGLE_FILE_START = 0
    DOUBLE_FILE_START = 1
    SINGLE_FILE_RESTART = 2
    DOUBLE_FILE_RESTART = 3
    NOT_PACING = 4


class TrackWetness(enum.IntEnum):
    UNKNOWN = 0
    DRY = 1
    MOSTLY_DRY = 2
    VERY_LIGHTLY_WET = 3
    LIGHTLY_WET = 4
    MODERATELY_WET = 5
    VERY_WET = 6
    EXTREMELY_WET = 7


class EngineWarnings(enum.IntFlag):
    WATER_TEMP_WARNING = 0x0001
    FUEL_PRESSURE_WARNING = 0x0002
    OIL_PRESSURE_WARNING = 0x0004
    ENGINE_STALLED = 0x0008
    PIT_SPEED_LIMITER = 0x0010
    REV_LIMITER_ACTIVE = 0x0020
    OIL_TEMP_WARNING = 0x0040


class Flags(enum.IntFlag):
    # global flags
    CHECKERED = 0x00000001
    WHITE = 0x00000002
    GREEN = 0x00000004
    YELLOW = 0x00000008
    RED = 0x00000010
    BLUE = 0x00000020
    DEBRIS = 0x00000040
    CROSSED = 0x00000080
    YELLOW_WAVING = 0x00000100
    ONE_LAP_TO_GREEN = 0x00000200
    GREEN_HELD = 0x00000400
    TEN_TO_GO = 0x00000800
    FIVE_TO_GO = 0x00001000
    RANDOM_WAVING = 0x00002000
    CAUTION = 0x00004000
    CAUTION_WAVING = 0x00008000
    # driver black flags
    BLACK = 0x00010000
    DISQUALIFY = 0x00020000
    SERVICIBLE = 0x00040000
    FURLED = 0x00080000
    REPAIR = 0x00100000
    # start lights
    START_HIDDEN = 0x10000000
    START_READY = 0x20000000
    START_SET = 0x40000000
    START_GO = 0x80000000


class CameraState(enum.IntFlag):
    IS_SESSION_SCREEN = 0x0001
    IS_SCENIC_ACTIVE = 0x0002
    CAM_TOOL_ACTIVE = 0x0004
    UI_HIDDEN = 0x0008
    USE_AUTO_SHOT_SELECTION = 0x0010
    USE_TEMPORARY_EDITS = 0x0020
    USE_KEY_ACCELERATION = 0x0040
    USE_KEY_10X_ACCELERATION = 0x0080
    USE_MOUSE_AIM_MODE = 0x0100


class PitServiceFlags(enum.IntFlag):
    LF_TIRE_CHANGE = 0x0001
    RF_TIRE_CHANGE = 0x0002
    LR_TIRE_CHANGE = 0x0004
    RR_TIRE_CHANGE = 0x0008
    FUEL_FILL = 0x0010
    WINDSHIELD_TEAROFF = 0x0020
    FAST_REPAIR = 0x0040


class PaceFlags(enum.IntFlag):
    END_OF_LINE = 0x0001
    FREE_PASS = 0x0002
    WAVED_AROUND = 0x0004


class BroadcastMsg(enum.IntEnum):
    CAM_SWITCH_POS = 0
    CAM_SWITCH_NUM = 1
    CAM_SET_STATE = 2
    REPLAY_SET_PLAY_SPEED = 3
    REPLAY_SET_PLAY_POSITION = 4
    REPLAY_SEARCH = 5
    REPLAY_SET_STATE = 6
    RELOAD_TEXTURES = 7
    CHAT_COMMAND = 8
    PIT_COMMAND = 9
    TELEM_COMMAND = 10
    FFB_COMMAND = 11
    REPLAY_SEARCH_SESSION_TIME = 12
    VIDEO_CAPTURE = 13


def _c_string(raw: bytes) -> str:
    """Decode a fixed-size, NUL-padded character field."""
    return raw.split(b"\0", 1)[0].decode("latin-1")


def _check_length(data: bytes, size: int, what: str) -> None:
    if len(data) < size:
        raise ValueError(f"{what} needs {size} bytes, got {len(data)}")


@dataclass
class VarHeader:
    """Description of one telemetry variable."""

    var_type: int = 0
    offset: int = 0
    count: int = 0
    count_as_time: bool = False
    name: str = ""
    desc: str = ""
    unit: str = ""

    _STRUCT: ClassVar[struct.Struct] = struct.Struct(
        f"<iii?3x{MAX_STRING}s{MAX_DESC}s{MAX_STRING}s"
    )
    SIZE: ClassVar[int] = _STRUCT.size

    def pack(self) -> bytes:
        return self._STRUCT.pack(
            int(self.var_type),
            self.offset,
            self.count,
            bool(self.count_as_time),
            self.name.encode("latin-1"),
            self.desc.encode("latin-1"),
            self.unit.encode("latin-1"),
        )

    @classmethod
    def unpack(cls, data: bytes) -> "VarHeader":
        _check_length(data, cls.SIZE, "variable header")
        var_type, offset, count, as_time, name, desc, unit = cls._STRUCT.unpack_from(data)
        return cls(
            var_type=var_type,
            offset=offset,
            count=count,
            count_as_time=as_time,
            name=_c_string(name),
            desc=_c_string(desc),
            unit=_c_string(unit),
        )


@dataclass
class VarBuf:
    """Location and tick count of one data row buffer."""

    tick_count: int = 0
    buf_offset: int = 0

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<ii8x")
    SIZE: ClassVar[int] = _STRUCT.size

    def pack(self) -> bytes:
        return self._STRUCT.pack(self.tick_count, self.buf_offset)

    @classmethod
    def unpack(cls, data: bytes) -> "VarBuf":
        _check_length(data, cls.SIZE, "variable buffer")
        tick_count, buf_offset = cls._STRUCT.unpack_from(data)
        return cls(tick_count=tick_count, buf_offset=buf_offset)


def _default_var_bufs() -> List[VarBuf]:
    return [VarBuf() for _ in range(MAX_BUFS)]


@dataclass
class Header:
    """Main telemetry header."""

    ver: int = 0
    status: int = 0
    tick_rate: int = 0
    session_info_update: int = 0
    session_info_len: int = 0
    session_info_offset: int = 0
    num_vars: int = 0
    var_header_offset: int = 0
    num_buf: int = 0
    buf_len: int = 0
    var_buf: List[VarBuf] = field(default_factory=_default_var_bufs)

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<10i8x")
    SIZE: ClassVar[int] = _STRUCT.size + MAX_BUFS * VarBuf.SIZE

    def pack(self) -> bytes:
        if len(self.var_buf) > MAX_BUFS:
            raise ValueError(f"at most {MAX_BUFS} variable buffers are allowed")
        bufs = list(self.var_buf) + [VarBuf()] * (MAX_BUFS - len(self.var_buf))
        head = self._STRUCT.pack(
            self.ver,
            self.status,
            self.tick_rate,
            self.session_info_update,
            self.session_info_len,
            self.session_info_offset,
            self.num_vars,
            self.var_header_offset,
            self.num_buf,
            self.buf_len,
        )
        return head + b"".join(buf.pack() for buf in bufs)

    @classmethod
    def unpack(cls, data: bytes) -> "Header":
        _check_length(data, cls.SIZE, "header")
        values = cls._STRUCT.unpack_from(data)
        base = cls._STRUCT.size
        bufs = [
            VarBuf.unpack(data[base + i * VarBuf.SIZE: base + (i + 1) * VarBuf.SIZE])
            for i in range(MAX_BUFS)
        ]
        return cls(*values, var_buf=bufs)


@dataclass
class DiskSubHeader:
    """Session summary stored after the main header in disk files."""

    session_start_date: int = 0
    session_start_time: float = 0.0
    session_end_time: float = 0.0
    session_lap_count: int = 0
    session_record_count: int = 0

    _STRUCT: ClassVar[struct.Struct] = struct.Struct("<qddii")
    SIZE: ClassVar[int] = _STRUCT.size

    def pack(self) -> bytes:
        return self._STRUCT.pack(
            self.session_start_date,
            self.session_start_time,
            self.session_end_time,
            self.session_lap_count,
            self.session_record_count,
        )

    @classmethod
    def unpack(cls, data: bytes) -> "DiskSubHeader":
        _check_length(data, cls.SIZE, "disk sub-header")
        return cls(*cls._STRUCT.unpack_from(data))