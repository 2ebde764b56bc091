import logging

import pytest

from codexpreview.preview import (
    LineEdit,
    LineKind,
    PreviewBlock,
    apply_edits,
    kind_order,
    parse_preview,
)


def _block(*edits: LineEdit, path: str = "f.txt") -> PreviewBlock:
    return PreviewBlock(file_path=path, edits=tuple(edits))


def C(line: int, text: str) -> LineEdit:
    return LineEdit(line, LineKind.CONTEXT, text)


def A(line: int, text: str) -> LineEdit:
    return LineEdit(line, LineKind.ADD, text)


def D(line: int, text: str) -> LineEdit:
    return LineEdit(line, LineKind.DELETE, text)


def test_replace_line_in_place():
    block = _block(C(1, "L1"), D(2, "L2"), A(2, "L2x"), C(3, "L3"))

    assert apply_edits("L1\nL2\nL3", block) == "L1\nL2x\nL3"


def test_encounter_order_does_not_matter():
    block = _block(A(2, "L2x"), C(3, "L3"), D(2, "L2"), C(1, "L1"))

    assert apply_edits("L1\nL2\nL3", block) == "L1\nL2x\nL3"


def test_empty_edits_fail():
    assert apply_edits("a\nb", _block()) is None


def test_pure_insertions_keep_order():
    block = _block(
        C(50, "if (condition) {"),
        A(51, "    // nested comment"),
        A(51, "    doSomething();"),
        C(52, "}"),
    )
    current = "\n".join(["x"] * 49 + ["if (condition) {", "    existing();", "}"])

    result = apply_edits(current, block)

    assert result is not None
    assert result.split("\n")[49:] == [
        "if (condition) {",
        "    // nested comment",
        "    doSomething();",
        "    existing();",
        "}",
    ]


def test_multi_line_replacement():
    block = _block(
        D(2, "b"),
        D(3, "c"),
        A(2, "B"),
        A(3, "C"),
        C(4, "d"),
    )

    assert apply_edits("a\nb\nc\nd", block) == "a\nB\nC\nd"


def test_edits_later_in_file_are_shifted_by_earlier_ones():
    block = _block(
        A(1, "header"),
        D(3, "three"),
        C(5, "five"),
        A(6, "six-and-a-half"),
    )

    result = apply_edits("one\ntwo\nthree\nfour\nfive\nsix", block)

    assert result == "header\none\ntwo\nfour\nfive\nsix-and-a-half\nsix"


def test_append_at_end_of_file():
    block = _block(C(2, "b"), A(3, "c"))

    assert apply_edits("a\nb", block) == "a\nb\nc"


def test_trailing_newline_is_kept():
    block = _block(D(2, "b"), A(2, "B"))

    assert apply_edits("a\nb\n", block) == "a\nB\n"


def test_carriage_returns_are_not_special():
    block = _block(C(1, "a"), D(2, "b"), A(2, "B"))

    assert apply_edits("a\r\nb\r\n", block) == "a\r\nB\n"


@pytest.mark.parametrize(
    "edit",
    [
        D(4, "nope"),
        C(4, "nope"),
        A(5, "too far"),
        D(0, "zero"),
    ],
)
def test_out_of_bounds_fails_closed(edit):
    current = "a\nb\nc"

    assert apply_edits(current, _block(edit)) is None


def test_failure_after_partial_progress_returns_none():
    block = _block(D(1, "a"), A(1, "A"), D(10, "far away"))
    current = "a\nb\nc"

    assert apply_edits(current, block) is None
    assert current == "a\nb\nc"


def test_context_mismatch_is_tolerated(caplog):
    caplog.set_level(logging.WARNING, logger="codexpreview")
    block = _block(C(1, "something else"), D(2, "b"), A(2, "B"))

    result = apply_edits("a\nb", block)

    assert result == "a\nB"
    assert "preview_context_mismatch" in caplog.text


def test_context_whitespace_differences_are_ignored(caplog):
    caplog.set_level(logging.WARNING, logger="codexpreview")
    block = _block(C(1, "      def f():"), D(2, "   return 1"), A(2, "    return 2"))

    result = apply_edits("def f():\n    return 1", block)

    assert result == "def f():\n    return 2"
    assert "preview_context_mismatch" not in caplog.text


def test_strict_context_fails_on_mismatch():
    block = _block(C(1, "something else"), A(2, "B"))

    assert apply_edits("a\nb", block, strict_context=True) is None
    assert apply_edits("a\nb", block) == "a\nB\nb"


def test_blank_context_is_not_compared():
    block = _block(C(1, "   "), A(2, "x"))

    assert apply_edits("code\nmore", block, strict_context=True) == "code\nx\nmore"


def test_kind_order():
    assert kind_order(LineKind.DELETE) < kind_order(LineKind.CONTEXT)
    assert kind_order(LineKind.CONTEXT) < kind_order(LineKind.ADD)


def test_parse_then_apply():
    output = "\n".join(
        [
            "Would you like to make the following edits?",
            "",
            "  src/main.kt (+1 -1)",
            "",
            "      2      fun main() {",
            '      3 -        println("Hello")',
            '      3 +        println("World")',
            "      4      }",
            "",
            "1. Yes, proceed",
        ]
    )
    current = 'package x\nfun main() {\n    println("Hello")\n}\n'

    block = parse_preview(output)
    assert block is not None

    result = apply_edits(current, block)

    # Added lines carry the preview's rendering indent.
    assert result == 'package x\nfun main() {\n         println("World")\n}\n'
