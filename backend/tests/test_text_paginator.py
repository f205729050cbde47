import time

import pytest

import services.text_paginator as tp
from services.text_paginator import PaginationError, paginate_review, tokenize, wrap_paragraph, wrap_text


def _measure(text: str) -> float:
    # fixed-pitch stand-in for font metrics: 10px per character
    return len(text) * 10.0


def test_tokenize_splits_whitespace_and_punctuation_and_round_trips():
    text = "맛있어요. 또 올게요!  Great,food？"
    tokens = tokenize(text)
    assert "".join(tokens) == text
    assert "." in tokens
    assert "!" in tokens
    assert "  " in tokens
    assert "," in tokens
    assert "？" in tokens
    assert "" not in tokens


def test_korean_words_wrap_at_whitespace_not_mid_word():
    text = "가나다 라마바 사아자"
    for width in (75, 80):
        lines = wrap_text(text, width, _measure)
        assert lines == ["가나다 라마바", "사아자"]


def test_breaks_after_sentence_punctuation():
    assert wrap_paragraph("aaaa.bbbb", 60, _measure) == ["aaaa.", "bbbb"]
    assert wrap_paragraph("맛있다。좋다", 40, _measure) == ["맛있다。", "좋다"]


def test_every_line_fits_the_width():
    text = "the quick brown fox jumps over the lazy dog, again and again. " * 20
    lines = wrap_text(text, 200, _measure)
    assert lines
    assert all(_measure(line) <= 200 for line in lines)
    assert " ".join(lines).split() == text.split()


def test_unbroken_token_is_cut_into_fitting_chunks():
    text = "a" * 10_000
    lines = wrap_paragraph(text, 100, _measure)
    assert len(lines) == 1000
    assert all(line == "a" * 10 for line in lines)
    assert "".join(lines) == text


def test_long_word_after_short_words_keeps_following_text():
    lines = wrap_paragraph("hi " + "x" * 25 + " end", 100, _measure)
    assert lines == ["hi", "x" * 10, "x" * 10, "xxxxx end"]


def test_character_wider_than_width_terminates_with_verbatim_remainder():
    def huge(text: str) -> float:
        return len(text) * 1000.0

    assert wrap_paragraph("ab cd", 10, huge) == ["ab cd"]


def test_user_line_breaks_start_new_lines_and_blank_runs_collapse():
    text = "  첫 줄\r\n\r\n\n둘째 줄\r셋째  \n   \n"
    assert wrap_text(text, 1000, _measure) == ["첫 줄", "둘째 줄", "셋째"]


def test_paginate_empty_text_gives_no_pages():
    assert paginate_review("", 3, 500, _measure) == []
    assert paginate_review(" \n\n \t", 3, 500, _measure) == []


def test_pages_are_bounded_and_keep_every_line_in_order():
    text = "\n".join(f"line {i} with some words in it" for i in range(23))
    wrapped = wrap_text(text, 150, _measure)
    pages = paginate_review(text, 4, 150, _measure)

    assert all(1 <= len(page) <= 4 for page in pages)
    assert [line for page in pages for line in page] == wrapped
    assert len(pages) == -(-len(wrapped) // 4)


def test_pagination_is_deterministic():
    text = "반복 가능한 결과. " * 30
    first = paginate_review(text, 3, 240, _measure)
    second = paginate_review(text, 3, 240, _measure)
    assert first == second


@pytest.mark.parametrize("max_lines,max_width", [(0, 100), (-1, 100), (3, 0), (3, -5)])
def test_paginate_rejects_non_positive_limits(max_lines, max_width):
    with pytest.raises(ValueError):
        paginate_review("text", max_lines, max_width, _measure)


def test_step_guard_raises_pagination_error(monkeypatch):
    text = "word " * 10
    monkeypatch.setattr(tp, "MAX_WRAP_STEPS", -len(text))
    with pytest.raises(PaginationError):
        wrap_paragraph(text, 30, _measure)


def test_long_paragraph_wraps_in_linear_time():
    text = "word " * 40_000

    started = time.perf_counter()
    lines = wrap_text(text, 1020, lambda s: len(s) * 26.0)
    elapsed = time.perf_counter() - started

    # 39 characters fit per line: eight words and the spaces between them
    assert lines[0] == " ".join(["word"] * 8)
    assert len(lines) == 5_000
    assert all(len(line) * 26.0 <= 1020 for line in lines)
    assert sum(len(line.split()) for line in lines) == 40_000
    assert elapsed < 5.0


def test_hard_cut_resumes_mid_token_across_steps():
    text = "ab " + "x" * 23 + ".yz"
    assert wrap_paragraph(text, 100, _measure) == ["ab", "x" * 10, "x" * 10, "xxx.yz"]
