# ABOUTME: Unit tests for collation key derivation.
# ABOUTME: Validates article stripping, punctuation removal and case folding.

from mediaindex.core.keys import SORT_FIRST, key_for


class TestKeyFor:
    """Tests for key_for()."""

    def test_none_passes_through(self) -> None:
        assert key_for(None) is None

    def test_lower_cases_by_default(self) -> None:
        assert key_for("Abbey Road") == "abbey road"

    def test_preserves_case_when_disabled(self) -> None:
        assert key_for("Abbey Road", lower_case=False) == "Abbey Road"

    def test_strips_leading_article(self) -> None:
        assert key_for("The Beatles") == "beatles"
        assert key_for("An Album") == "album"
        assert key_for("A Song") == "song"

    def test_strips_leading_article_without_lower_case(self) -> None:
        assert key_for("The Beatles", lower_case=False) == "Beatles"

    def test_strips_trailing_article(self) -> None:
        assert key_for("Beatles, The") == "beatles"

    def test_removes_punctuation(self) -> None:
        assert key_for('Help! (Remastered) "Live"') == "help remastered live"

    def test_unknown_sorts_first(self) -> None:
        assert key_for("<unknown>") == SORT_FIRST

    def test_sort_first_marker_is_kept(self) -> None:
        assert key_for(f"{SORT_FIRST}The Intro") == f"{SORT_FIRST}intro"

    def test_surrounding_whitespace(self) -> None:
        assert key_for("  Yesterday  ") == "yesterday"
