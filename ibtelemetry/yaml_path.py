"""Look up single values in a telemetry session-info YAML string.

The session info is YAML in a fixed, simple shape.  Instead of a full YAML
parser, values are found with a single linear scan driven by a path of the
form ``"DriverInfo:Drivers:CarIdx:{3}UserName:"``.  Each ``Key:`` step
descends one level.  A ``{value}`` right after a key picks the list entry
whose key holds that value.
"""

from __future__ import annotations

import enum
from typing import Optional


class _State(enum.Enum):
    SPACE = enum.auto()
    KEY = enum.auto()
    KEYSEP = enum.auto()
    VALUE = enum.auto()
    NEWLINE = enum.auto()


def _char_at(text: str, index: int) -> str:
    return text[index] if index < len(text) else "\0"


def parse_yaml(data: str, path: str) -> Optional[str]:
    """Return the raw text of the value at ``path`` in ``data``, or ``None``.

    The value is returned exactly as it appears on its line, with quotes and
    trailing spaces kept.  A value is only seen once its line is ended by a
    newline.
    """
    state = _State.SPACE
    depth = 0

    key_start = 0
    key_len = 0

    value_start: Optional[int] = None
    value_len = 0

    path_pos = 0
    path_depth = 0

    def current_value() -> str:
        if value_start is None:
            return ""
        return data[value_start:value_start + value_len]

    for pos, ch in enumerate(data):
        if ch in " -":
            if state is _State.NEWLINE:
                state = _State.SPACE
            if state is _State.SPACE:
                depth += 1
            elif state is _State.KEY:
                key_len += 1
            elif state is _State.VALUE:
                value_len += 1
            elif ch == "-" and state is _State.KEYSEP:
                state = _State.VALUE
                value_start = pos
                value_len = 1
        elif ch == ":":
            if state is _State.KEY:
                state = _State.KEYSEP
                key_len += 1
            elif state is _State.KEYSEP:
                state = _State.VALUE
                value_start = pos
            elif state is _State.VALUE:
                value_len += 1
        elif ch in "\r\n":
            if state is not _State.NEWLINE:
                if depth < path_depth:
                    return None
                key = data[key_start:key_start + key_len]
                if key_len and key == path[path_pos:path_pos + key_len]:
                    found = True
                    if _char_at(path, path_pos + key_len) == "{":
                        wanted_start = path_pos + key_len + 1
                        close = path.find("}", wanted_start)
                        if close == -1:
                            close = len(path)
                        wanted = path[wanted_start:close]
                        if current_value() == wanted:
                            path_pos += value_len + 2
                        else:
                            found = False

                    if found:
                        path_pos += key_len
                        path_depth = depth
                        if path_pos >= len(path):
                            return current_value()

                depth = 0
                key_len = 0
                value_len = 0
            state = _State.NEWLINE
        else:
            if state in (_State.SPACE, _State.NEWLINE):
                state = _State.KEY
                key_start = pos
                key_len = 0
            elif state is _State.KEYSEP:
                state = _State.VALUE
                value_start = pos
                value_len = 0
            if state is _State.KEY:
                key_len += 1
            if state is _State.VALUE:
                value_len += 1

    return None