"""
Unit tests for the greedy line wrapper.
"""

from notify_printer.wrapping import wrap_lines


def mono(text):
    return len(text) * 12


def test_words_that_fit_stay_on_one_line():
    assert wrap_lines(mono, 384, 0, "hello world") == ["hello world"]


def test_blank_line_is_preserved():
    assert wrap_lines(mono, 384, 0, "a\n\nb") == ["a", "", "b"]


def test_trailing_newline_adds_no_line():
    assert wrap_lines(mono, 384, 0, "hello\n") == ["hello"]


def test_each_segment_starts_a_fresh_line():
    # "bbbbbbbb" alone fits, it must not be measured against the width left by "aaaa"
    assert wrap_lines(mono, 96, 0, "aaaa\nbbbbbbbb") == ["aaaa", "bbbbbbbb"]


def test_empty_text():
    assert wrap_lines(mono, 384, 0, "") == []


def test_empty_text_after_partial_line_reserves_the_line():
    assert wrap_lines(mono, 384, 50, "") == [""]


def test_start_beyond_width_begins_on_a_new_line():
    assert wrap_lines(mono, 100, 150, "hi") == ["", "hi"]


def test_partial_line_overflow_leaves_empty_first_line():
    # 100px used + one space leaves no room for "hello" (60px) in 120px
    assert wrap_lines(mono, 120, 100, "hello world") == ["", "hello", "world"]


def test_continuation_fits_on_partial_line():
    assert wrap_lines(mono, 384, 60, "more text") == ["more text"]


def test_leading_space_dropped_at_line_start():
    assert wrap_lines(mono, 60, 0, "aaaa bbbb") == ["aaaa", "bbbb"]


def test_every_line_fits():
    text = "the quick brown fox jumps over the lazy dog and keeps running far away"
    lines = wrap_lines(mono, 120, 0, text)

    assert len(lines) > 1
    for line in lines:
        assert mono(line) <= 120
    assert " ".join(lines) == text


def test_oversized_token_is_split_into_characters():
    url = "https://example.com/a/very/long/path/that/never/fits"
    lines = wrap_lines(mono, 60, 0, url)

    assert len(lines) > 1
    for line in lines:
        assert mono(line) <= 60
    assert "".join(lines) == url


def test_oversized_token_after_words():
    lines = wrap_lines(mono, 60, 0, "go abcdefghijkl")

    for line in lines:
        assert mono(line) <= 60
    assert "".join(lines).replace(" ", "") == "goabcdefghijkl"


def test_glyph_wider_than_page_terminates():
    def wide(text):
        return len(text) * 100

    assert wrap_lines(wide, 50, 0, "ab") == ["a", "b"]


def test_measure_is_memoized_per_token():
    calls = []

    def counting(text):
        calls.append(text)
        return len(text) * 12

    wrap_lines(counting, 1000, 0, "ab ab ab ab")

    assert sorted(calls) == [" ", " ab", "ab"]


def test_repeated_spaces_are_kept():
    assert wrap_lines(mono, 384, 0, "a  b") == ["a  b"]
