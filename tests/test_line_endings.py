from espcli.line_endings import normalized


def test_normalized():
    data = b"This is a string \n with \n some \n\r\n random newlines\r\n\n"
    assert (
        bytes(normalized(data))
        == b"This is a string \r\n with \r\n some \r\n\r\n random newlines\r\n\r\n"
    )


def test_existing_crlf_untouched():
    assert bytes(normalized(b"a\r\nb\r\n")) == b"a\r\nb\r\n"


def test_lone_cr_kept():
    assert bytes(normalized(b"a\rb")) == b"a\rb"


def test_empty_input():
    assert list(normalized(b"")) == []


def test_cr_then_other_then_lf():
    assert bytes(normalized(b"\rx\n")) == b"\rx\r\n"