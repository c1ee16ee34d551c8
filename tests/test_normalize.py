import pytest

from core.normalize import normalize_artist_name


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("The Black Lips", "black lips"),
        ("  Black    Lips ", "black lips"),
        ("THE NATIONAL", "national"),
        ("Simon & Garfunkel", "simon and garfunkel"),
        ("Guns N’ Roses", "guns n' roses"),
        ("Theo Katzman", "theo katzman"),
        ("AC&DC", "ac&dc"),
    ],
)
def test_normalize_artist_name(raw, expected):
    assert normalize_artist_name(raw) == expected


def test_normalize_empty_values():
    assert normalize_artist_name("") == ""
    assert normalize_artist_name("   ") == ""
    assert normalize_artist_name(None) == ""


def test_normalize_is_stable_for_ordinary_names():
    for name in ["The Strokes", "Yeah Yeah Yeahs", "Belle & Sebastian", "Sleater‘Kinney"]:
        once = normalize_artist_name(name)
        assert normalize_artist_name(once) == once


def test_spotify_and_listing_spellings_meet():
    assert normalize_artist_name("The Black Lips") == normalize_artist_name("black  lips")


def test_ampersand_between_words():
    assert normalize_artist_name("Earth & Fire") == "earth and fire"


def test_case_whitespace_and_article_insensitive():
    assert (
        normalize_artist_name("The Black Lips")
        == normalize_artist_name("the   black lips")
        == normalize_artist_name("Black Lips")
    )


def test_repeated_ampersands_are_all_replaced():
    once = normalize_artist_name("A & & B")
    assert once == "a and and b"
    assert normalize_artist_name(once) == once
