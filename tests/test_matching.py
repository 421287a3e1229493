# ---------- TESTS FOR MATCHING PRIMITIVES ----------

from applyfill.utils.matching import clamp, first_match, normalize_text, tokenize


def test_normalize_text():
    assert normalize_text("Why do you want to work here?") == "why do you want to work here"
    assert normalize_text("  Salary   Expectations (USD)!  ") == "salary expectations usd"


def test_normalize_text_is_idempotent():
    once = normalize_text("What's your  GREATEST strength?!")
    assert normalize_text(once) == once


def test_normalize_text_none():
    assert normalize_text(None) == ""
    assert normalize_text("?!") == ""


def test_tokenize():
    assert tokenize("Tell me, about you.") == ["tell", "me", "about", "you"]
    assert tokenize("") == []


def test_first_match_uses_table_order():
    table = (
        ("specific", ("visa type",)),
        ("general", ("visa",)),
    )
    assert first_match(table, "What VISA TYPE do you hold?") == "specific"
    assert first_match(table, "Do you need a visa?") == "general"
    assert first_match(table, "Nothing relevant") is None
    assert first_match(table, None) is None


def test_clamp():
    assert clamp(1.04, 0.3, 1.0) == 1.0
    assert clamp(0.2, 0.3, 1.0) == 0.3
    assert clamp(0.6500000001, 0.3, 1.0) == 0.65
