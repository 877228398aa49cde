from memcalc.core.calc.flags import parse_flags


def test_blank_input_yields_no_tokens():
    assert parse_flags("") == []
    assert parse_flags("   \t\n ") == []


def test_whitespace_runs_collapse():
    assert parse_flags("  -Xmx1G    -Xss1M\t-server ") == ["-Xmx1G", "-Xss1M", "-server"]


def test_escaped_quotes_inside_double_quotes():
    assert parse_flags(r'-Dvalue="She said \"Hello\""') == ['-Dvalue=She said "Hello"']


def test_single_quotes_keep_spaces():
    assert parse_flags("-Dx='a b' -Xmx1G") == ["-Dx=a b", "-Xmx1G"]


def test_other_quote_char_is_literal_inside_span():
    assert parse_flags("'it\"s'") == ['it"s']
    assert parse_flags("\"it's\"") == ["it's"]


def test_empty_quoted_span_yields_empty_token():
    assert parse_flags("a '' b") == ["a", "", "b"]
    assert parse_flags('""') == [""]


def test_backslash_escapes_outside_quotes():
    assert parse_flags(r"a\ b c") == ["a b", "c"]


def test_trailing_backslash_is_dropped():
    assert parse_flags("abc\\") == ["abc"]


def test_unterminated_quote_is_flushed():
    assert parse_flags('"unclosed quote') == ["unclosed quote"]
    assert parse_flags("-Xmx1G 'open") == ["-Xmx1G", "open"]


def test_closing_quote_ends_token():
    assert parse_flags('a"b"c') == ["ab", "c"]
