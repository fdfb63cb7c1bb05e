"""
File header parsing and page access
"""
import logging

import pytest

from .builders import build_file_header, build_page, write_database
from .context import Pager, FileHeader, InvalidPageAccess, TruncatedInput


@pytest.mark.parametrize("page_size", [512, 1024, 2048, 4096, 8192, 16384, 32768, 65536])
def test_page_size_from_header(page_size):
    header = FileHeader.parse(build_file_header(page_size))
    assert header.page_size == page_size


def test_header_fields():
    header = FileHeader.parse(build_file_header(4096, text_encoding=3, page_count=7))
    assert header.text_encoding == "utf-16-be"
    assert header.page_count == 7
    assert header.reserved_space == 0


def test_unset_text_encoding_defaults_to_utf8():
    header = FileHeader.parse(build_file_header(4096, text_encoding=0))
    assert header.text_encoding == "utf-8"


def test_bad_magic_is_logged_not_fatal(caplog):
    raw = bytearray(build_file_header(1024))
    raw[0:16] = b"not a database!!"
    with caplog.at_level(logging.WARNING):
        header = FileHeader.parse(bytes(raw))
    assert header.page_size == 1024
    assert "magic" in caplog.text


def test_short_header_raises():
    with pytest.raises(TruncatedInput):
        FileHeader.parse(build_file_header(4096)[:50])


@pytest.fixture
def two_page_db(tmp_path):
    first = build_page([], page_size=512, header_offset=100)
    second = build_page([], page_size=512)
    second[100:105] = b"hello"
    return write_database(tmp_path / "two.db", [first, second], page_size=512)


def test_pager_reads_page_size_from_file(two_page_db):
    with Pager(two_page_db) as pager:
        assert pager.page_size == 512
        assert pager.num_pages == 2
        assert pager.read_file_header().page_count == 2


def test_get_page(two_page_db):
    with Pager(two_page_db) as pager:
        page = pager.get_page(2)
        assert len(page) == 512
        assert page[100:105] == b"hello"
        # page 1 begins with the file header
        assert pager.get_page(1)[:6] == b"SQLite"


def test_page_exists(two_page_db):
    with Pager(two_page_db) as pager:
        assert pager.page_exists(1)
        assert pager.page_exists(2)
        assert not pager.page_exists(0)
        assert not pager.page_exists(3)


def test_invalid_page_access(two_page_db):
    with Pager(two_page_db) as pager:
        with pytest.raises(InvalidPageAccess):
            pager.get_page(0)
        with pytest.raises(InvalidPageAccess):
            pager.get_page(3)


def test_partial_last_page_raises(two_page_db):
    with open(two_page_db, "ab") as fp:
        fp.write(b"\x00" * 10)
    with Pager(two_page_db) as pager:
        # a page size larger than the actual pages makes page 2 run past the end of file
        pager.page_size = 1024
        assert len(pager.get_page(1)) == 1024
        assert pager.page_exists(2)
        with pytest.raises(TruncatedInput):
            pager.get_page(2)


def test_read_past_end_raises(two_page_db):
    with Pager(two_page_db) as pager:
        with pytest.raises(TruncatedInput):
            pager.read(1000, 100)


def test_pager_closes_handle(two_page_db):
    with Pager.pager_open(two_page_db) as pager:
        pass
    assert pager.fileptr is None
    # closing again is a no-op
    pager.close()


def test_header_parsed_once_when_page_size_unknown(two_page_db, monkeypatch):
    calls = []
    parse = FileHeader.parse.__func__

    def counting_parse(cls, header):
        calls.append(len(header))
        return parse(cls, header)

    monkeypatch.setattr(FileHeader, "parse", classmethod(counting_parse))
    with Pager(two_page_db) as pager:
        assert pager.header.page_size == 512
    assert calls == [100]

    # page size given: the header isn't read at all
    with Pager(two_page_db, page_size=512) as pager:
        assert pager.header is None
    assert calls == [100]


def test_handle_released_when_header_is_truncated(tmp_path, monkeypatch):
    path = tmp_path / "short.db"
    path.write_bytes(build_file_header(4096)[:50])

    opened = []

    def recording_open(*args, **kwargs):
        fp = open(*args, **kwargs)
        opened.append(fp)
        return fp

    monkeypatch.setattr("litereader.pager.open", recording_open, raising=False)
    with pytest.raises(TruncatedInput):
        Pager(str(path))
    assert len(opened) == 1
    assert opened[0].closed


def test_usable_size_excludes_reserved_space():
    raw = bytearray(build_file_header(1024))
    raw[20] = 32
    header = FileHeader.parse(bytes(raw))
    assert header.reserved_space == 32
    assert header.usable_size == 992
