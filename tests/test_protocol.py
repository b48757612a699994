import pytest

from miniredis.protocol import (
    Array,
    Bulk,
    EndOfStream,
    Error,
    Integer,
    Null,
    Parse,
    ParseError,
    ProtocolError,
    Simple,
)


def test_parse_rejects_non_array():
    with pytest.raises(ParseError, match="expected array"):
        Parse(Simple("GET"))


def test_next_string_from_simple_and_bulk():
    parse = Parse(Array([Simple("GET"), Bulk(b"hello")]))
    assert parse.next_string() == "GET"
    assert parse.next_string() == "hello"


def test_next_string_invalid_utf8():
    parse = Parse(Array([Bulk(b"\xff\xfe")]))
    with pytest.raises(ParseError, match="invalid string"):
        parse.next_string()


def test_next_string_rejects_integer():
    parse = Parse(Array([Integer(1)]))
    with pytest.raises(ParseError) as info:
        parse.next_string()
    assert not isinstance(info.value, EndOfStream)


def test_end_of_stream():
    parse = Parse(Array([]))
    with pytest.raises(EndOfStream, match="unexpected end of stream"):
        parse.next_string()


def test_end_of_stream_is_parse_error():
    parse = Parse(Array([]))
    with pytest.raises(ParseError):
        parse.next_bytes()


def test_next_bytes_from_simple_and_bulk():
    parse = Parse(Array([Simple("world"), Bulk(b"\x00\x01")]))
    assert parse.next_bytes() == b"world"
    assert parse.next_bytes() == b"\x00\x01"


def test_next_bytes_rejects_null():
    parse = Parse(Array([Null()]))
    with pytest.raises(ParseError):
        parse.next_bytes()


def test_next_int_from_each_kind():
    parse = Parse(Array([Integer(1), Simple("500"), Bulk(b"42")]))
    assert parse.next_int() == 1
    assert parse.next_int() == 500
    assert parse.next_int() == 42


def test_next_int_ignores_trailing_text():
    parse = Parse(Array([Simple("42abc")]))
    assert parse.next_int() == 42


def test_next_int_invalid():
    parse = Parse(Array([Simple("abc")]))
    with pytest.raises(ParseError, match="invalid number"):
        parse.next_int()


def test_next_int_rejects_array():
    parse = Parse(Array([Array([])]))
    with pytest.raises(ParseError, match="expected int frame"):
        parse.next_int()


def test_finish_when_consumed():
    parse = Parse(Array([Simple("PING")]))
    assert parse.next_string() == "PING"
    assert parse.finish() is None


def test_finish_with_leftover():
    parse = Parse(Array([Simple("PING"), Simple("extra")]))
    parse.next_string()
    with pytest.raises(ParseError, match="expected end of frame"):
        parse.finish()


def test_push_bulk_and_int():
    frame = Array()
    frame.push_bulk(b"px")
    frame.push_int(500)
    assert frame == Array([Bulk(b"px"), Integer(500)])


def test_to_error_mentions_frame():
    error = Error("boom").to_error()
    assert isinstance(error, ProtocolError)
    assert "unexpected frame" in str(error)
    assert "boom" in str(error)


def test_null_equality():
    assert Null() == Null()
    assert Null() != Bulk(b"")