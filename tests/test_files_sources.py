from pathlib import Path

import pytest

from codexpreview.errors import PreviewError, PreviewPathError
from codexpreview.files import FileSystemFileReader
from codexpreview.sources import FileBufferSource, StaticBufferSource


def test_reader_reads_and_reports_missing(tmp_path: Path):
    (tmp_path / "a.txt").write_text("one\r\ntwo\n", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    reader = FileSystemFileReader(tmp_path)

    assert reader.read(Path("a.txt")) == "one\r\ntwo\n"
    assert reader.read(tmp_path / "a.txt") == "one\r\ntwo\n"
    assert reader.read(Path("missing.txt")) is None
    assert reader.read(Path("sub")) is None


def test_reader_refuses_escaping_paths(tmp_path: Path):
    reader = FileSystemFileReader(tmp_path / "root")

    with pytest.raises(PreviewPathError):
        reader.read(Path("../outside.txt"))
    assert issubclass(PreviewPathError, PreviewError)
    assert issubclass(PreviewError, ValueError)


def test_file_buffer_source(tmp_path: Path):
    log = tmp_path / "session.log"
    source = FileBufferSource(log)

    assert source() is None

    log.write_bytes(b"hello \xff world")
    assert source() == "hello � world"


def test_static_buffer_source():
    source = StaticBufferSource("text")
    assert source() == "text"
    source.text = None
    assert source() is None
