"""
Tests for freeform tag matching.
"""

from types import SimpleNamespace

from app.services.matching import count_matches_per_board_tag, match_board_tags, tags_equivalent

VOICE = {"slug": "voice-of-customer", "name": "Voice of Customer"}
PRICING = SimpleNamespace(slug="pricing", name="Pricing & Packaging")


def test_matches_slug_case_insensitively():
    assert tags_equivalent("Voice-Of-Customer", VOICE)
    assert tags_equivalent("VOICE-OF-CUSTOMER", VOICE)


def test_matches_name_case_insensitively():
    assert tags_equivalent("voice of customer", VOICE)
    assert tags_equivalent("pricing & packaging", PRICING)


def test_does_not_match_partial_or_unnormalized():
    assert not tags_equivalent("voice", VOICE)
    assert not tags_equivalent("voice_of_customer", VOICE)
    assert not tags_equivalent("", VOICE)


def test_count_matches_per_board_tag():
    assets = [
        ["Voice-Of-Customer", "voice of customer"],  # counted once
        ["PRICING"],
        ["pricing", "Voice of Customer"],
        None,
        [],
    ]

    counts = count_matches_per_board_tag(assets, [VOICE, PRICING])

    assert counts == {"voice-of-customer": 2, "pricing": 2}


def test_count_matches_with_no_assets():
    assert count_matches_per_board_tag([], [VOICE]) == {"voice-of-customer": 0}


def test_match_board_tags():
    matched = match_board_tags(["Pricing", "unrelated"], [VOICE, PRICING])
    assert matched == [PRICING]
    assert match_board_tags(None, [VOICE]) == []
