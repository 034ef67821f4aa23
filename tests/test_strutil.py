from sbm.strutil import ELLIPSIS, contains_ci, equals_ci, is_digits, truncate


def test_truncate_keeps_short_strings():
    assert truncate("Example", 63) == "Example"
    assert truncate("x" * 63, 63) == "x" * 63


def test_truncate_marks_cut_with_ellipsis_at_exact_length():
    s = "abcdefghijklmnopqrstuvwxyz"
    got = truncate(s, 10)
    assert len(got) == 10
    assert got.endswith(ELLIPSIS)
    assert got == s[: 10 - len(ELLIPSIS)] + ELLIPSIS


def test_truncate_tiny_limit_is_a_plain_cut():
    assert truncate("abcdef", 2) == "ab"


def test_case_insensitive_helpers():
    assert contains_ci("The Python Tutorial", "python")
    assert contains_ci("anything", "")
    assert not contains_ci("Rust Book", "python")
    assert equals_ci("Tools", "tOOLS")
    assert not equals_ci("tool", "tools")


def test_is_digits_only_accepts_ascii_digits():
    assert is_digits("042")
    assert not is_digits("")
    assert not is_digits("4a")
    assert not is_digits("²")
    assert not is_digits("-1")
