import pytest

from ibtelemetry.defines import DiskSubHeader, Header, VarHeader, VarType
from ibtelemetry.reader import IbtReader
from ibtelemetry.writer import MAX_VAR_COUNT, IbtWriter, IbtWriterError


def _basic_writer(path):
    writer = IbtWriter(path)
    writer.add_variable("Speed", "Car speed", "m/s", VarType.FLOAT)
    writer.add_variable("Lap", "Lap number", "", VarType.INT)
    writer.add_variable("OnTrack", "Car on track", "", VarType.BOOL)
    writer.add_variable("Times", "Split times", "s", VarType.DOUBLE, 3)
    return writer


def test_round_trip_through_reader(tmp_path):
    path = tmp_path / "run.ibt"
    with _basic_writer(path) as writer:
        writer.finalize_header()
        writer.set_var(12.5, "Speed")
        writer.set_var(3, "Lap")
        writer.set_var(True, "OnTrack")
        writer.set_var(1.25, "Times", 2)
        writer.write_line()
        writer.set_var(20.0, "Speed")
        writer.set_var(4, "Lap")
        writer.write_line()
        assert writer.record_count() == 2

    with IbtReader(path) as reader:
        assert reader.num_vars() == 4
        assert reader.record_count() == 2
        assert reader.var_type("Times") is VarType.DOUBLE
        assert reader.var_count("Times") == 3
        assert reader.var_unit("Speed") == "m/s"
        assert reader.var_desc("Lap") == "Lap number"
        assert reader.next_record()
        assert reader.get_float("Speed") == 12.5
        assert reader.get_int("Lap") == 3
        assert reader.get_bool("OnTrack") is True
        assert reader.get_double("Times", 2) == 1.25
        assert reader.get_double("Times", 0) == 0.0
        assert reader.next_record()
        assert reader.get_float("Speed") == 20.0
        assert reader.get_int("Lap") == 4
        assert reader.get_bool("OnTrack") is False
        assert not reader.next_record()


def test_header_layout(tmp_path):
    path = tmp_path / "layout.ibt"
    with _basic_writer(path) as writer:
        writer.finalize_header()
    data = path.read_bytes()
    header = Header.unpack(data[: Header.SIZE])
    assert header.ver == 1
    assert header.status == 1
    assert header.tick_rate == 60
    assert header.num_buf == 1
    assert header.num_vars == 4
    assert header.var_header_offset == Header.SIZE + DiskSubHeader.SIZE
    assert header.session_info_len == len("---\n...\n")
    assert header.var_buf[0].buf_offset == len(data)
    start = header.session_info_offset
    assert data[start:start + header.session_info_len] == b"---\n...\n"
    first = VarHeader.unpack(data[header.var_header_offset:])
    assert first.name == "Speed"
    assert first.offset == 0


def test_write_line_clears_row(tmp_path):
    path = tmp_path / "clear.ibt"
    with _basic_writer(path) as writer:
        writer.finalize_header()
        writer.set_var(7, "Lap")
        writer.write_line()
        writer.write_line()
    with IbtReader(path) as reader:
        reader.next_record()
        assert reader.get_int("Lap") == 7
        reader.next_record()
        assert reader.get_int("Lap") == 0


def test_value_conversion(tmp_path):
    path = tmp_path / "conv.ibt"
    with _basic_writer(path) as writer:
        writer.finalize_header()
        writer.set_var(3.7, "Lap")
        writer.set_var(5, "OnTrack")
        writer.set_var(2, "Speed")
        writer.write_line()
    with IbtReader(path) as reader:
        reader.next_record()
        assert reader.get_int("Lap") == 3
        assert reader.get_int("OnTrack") == 1
        assert reader.get_float("Speed") == 2.0


def test_set_var_by_index(tmp_path):
    path = tmp_path / "idx.ibt"
    with _basic_writer(path) as writer:
        writer.finalize_header()
        writer.set_var(9, writer.var_index("Lap"))
        writer.write_line()
    with IbtReader(path) as reader:
        reader.next_record()
        assert reader.get_int(1) == 9


def test_sub_header_written_on_close(tmp_path):
    path = tmp_path / "sub.ibt"
    writer = _basic_writer(path)
    writer.finalize_header()
    writer.session_lap_count = 5
    writer.session_start_time = 1.5
    writer.session_end_time = 90.25
    writer.write_line()
    writer.close()
    data = path.read_bytes()
    sub = DiskSubHeader.unpack(data[Header.SIZE:])
    assert sub.session_lap_count == 5
    assert sub.session_start_time == 1.5
    assert sub.session_end_time == 90.25
    assert sub.session_record_count == 1
    assert not writer.is_open()


def test_metadata_accessors(tmp_path):
    with _basic_writer(tmp_path / "meta.ibt") as writer:
        assert writer.num_vars() == 4
        assert writer.var_index("Times") == 3
        assert writer.var_name(0) == "Speed"
        assert writer.var_type("OnTrack") is VarType.BOOL
        assert writer.var_count(3) == 3
        assert not writer.is_header_finalized()
        writer.finalize_header()
        assert writer.is_header_finalized()


def test_long_name_is_truncated(tmp_path):
    long_name = "N" * 40
    with IbtWriter(tmp_path / "long.ibt") as writer:
        index = writer.add_variable(long_name, "d", "u", VarType.INT)
        assert writer.var_name(index) == long_name[:32]
        assert writer.var_index(long_name) == index


def test_variable_offsets_follow_type_sizes(tmp_path):
    with _basic_writer(tmp_path / "off.ibt") as writer:
        speed = writer.var_index("Speed")
        lap = writer.var_index("Lap")
        assert writer._var(lap).offset == writer._var(speed).offset + 4


def test_errors_on_invalid_state(tmp_path):
    writer = _basic_writer(tmp_path / "err.ibt")
    with pytest.raises(IbtWriterError):
        writer.write_line()
    writer.finalize_header()
    with pytest.raises(IbtWriterError):
        writer.add_variable("X", "", "", VarType.INT)
    with pytest.raises(IbtWriterError):
        writer.finalize_header()
    with pytest.raises(IbtWriterError):
        writer.open(tmp_path / "other.ibt")
    writer.close()
    with pytest.raises(IbtWriterError):
        writer.num_vars()


def test_errors_on_bad_arguments(tmp_path):
    with _basic_writer(tmp_path / "args.ibt") as writer:
        with pytest.raises(ValueError):
            writer.add_variable("Zero", "", "", VarType.INT, 0)
        with pytest.raises(ValueError):
            writer.add_variable("Bad", "", "", 42)
        with pytest.raises(KeyError):
            writer.set_var(1, "Missing")
        with pytest.raises(IndexError):
            writer.set_var(1, "Times", 3)
        with pytest.raises(IndexError):
            writer.var_name(10)
        with pytest.raises(OverflowError):
            writer.set_var(2 ** 40, "Lap")


def test_variable_capacity(tmp_path):
    with IbtWriter(tmp_path / "cap.ibt") as writer:
        for i in range(MAX_VAR_COUNT):
            writer.add_variable(f"v{i}", "", "", VarType.CHAR)
        assert writer.num_vars() == MAX_VAR_COUNT
        with pytest.raises(IbtWriterError):
            writer.add_variable("extra", "", "", VarType.CHAR)


def test_reopen_after_close_resets_state(tmp_path):
    writer = _basic_writer(tmp_path / "a.ibt")
    writer.finalize_header()
    writer.write_line()
    writer.close()
    writer.open(tmp_path / "b.ibt")
    assert writer.num_vars() == 0
    assert writer.record_count() == 0
    assert not writer.is_header_finalized()
    writer.close()