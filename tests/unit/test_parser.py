"""Unit tests for the selection parser."""

import pytest

from subscalpel.core.parser import (
    build_selection,
    classify_token,
    parse_exclusion,
    parse_selection,
    split_tokens,
)
from subscalpel.exceptions import InvalidSelectionError
from subscalpel.models.selection import (
    FormatToken,
    InvalidToken,
    LanguageToken,
    NumberToken,
)


class TestSplitTokens:
    """Test split_tokens function."""

    def test_trims_and_drops_empty(self):
        """Test whitespace is trimmed and empty tokens are discarded."""
        assert split_tokens(" eng , ,14,, srt ") == ["eng", "14", "srt"]

    def test_empty_input(self):
        """Test empty and missing input."""
        assert split_tokens("") == []
        assert split_tokens(None) == []
        assert split_tokens(" , ") == []


class TestClassifyToken:
    """Test classify_token precedence."""

    def test_number(self):
        """Test integers become track numbers."""
        assert classify_token("14") == NumberToken(raw="14", number=14)
        assert classify_token("007") == NumberToken(raw="007", number=7)

    def test_language(self):
        """Test 2-letter and 3-letter language codes."""
        assert classify_token("eng") == LanguageToken(raw="eng", code="eng")
        assert classify_token("EN") == LanguageToken(raw="EN", code="EN")

    def test_format_is_lowercased(self):
        """Test format tokens are normalized to lower case."""
        assert classify_token("SUP") == FormatToken(raw="SUP", extension="sup")

    def test_invalid(self):
        """Test unknown tokens are invalid."""
        token = classify_token("xyz123abc")
        assert isinstance(token, InvalidToken)
        assert token.raw == "xyz123abc"

    def test_number_checked_before_language(self):
        """Test a numeric token is never read as something else."""
        assert isinstance(classify_token("123"), NumberToken)

    def test_validating_variant_rejects_missing_track(self):
        """Test numbers absent from the available tracks are invalid."""
        token = classify_token("99", available_tracks=[3, 4])
        assert isinstance(token, InvalidToken)
        assert token.reason == "track not available"

    def test_validating_variant_accepts_present_track(self):
        """Test numbers present in the available tracks are accepted."""
        assert classify_token("4", available_tracks=[3, 4]) == NumberToken(raw="4", number=4)


class TestParseSelection:
    """Test parse_selection function."""

    def test_mixed_tokens(self):
        """Test a selection mixing language, number and format."""
        track_filter, invalid = parse_selection("eng,14,srt")

        assert track_filter.language_codes == ["eng"]
        assert track_filter.track_numbers == [14]
        assert track_filter.format_filters == ["srt"]
        assert invalid == []

    def test_invalid_token_does_not_abort(self):
        """Test parsing continues past an invalid token."""
        track_filter, invalid = parse_selection("eng,xyz123abc,sup")

        assert invalid == ["xyz123abc"]
        assert track_filter.language_codes == ["eng"]
        assert track_filter.format_filters == ["sup"]

    def test_empty_input_selects_everything(self):
        """Test an empty selection yields an empty filter."""
        track_filter, invalid = parse_selection("")
        assert track_filter.is_empty
        assert invalid == []

    def test_duplicates_collapse(self):
        """Test repeated tokens are stored once."""
        track_filter, _ = parse_selection("eng,eng,3,3,srt,SRT")
        assert track_filter.language_codes == ["eng"]
        assert track_filter.track_numbers == [3]
        assert track_filter.format_filters == ["srt"]

    def test_validating_variant(self):
        """Test the validating variant reports unavailable numbers."""
        track_filter, invalid = parse_selection("3,15", available_tracks=[3, 4])
        assert track_filter.track_numbers == [3]
        assert invalid == ["15"]


class TestParseExclusion:
    """Test parse_exclusion function."""

    def test_empty_input_excludes_nothing(self):
        """Test an empty exclusion yields an empty filter."""
        track_filter, invalid = parse_exclusion(None)
        assert track_filter.is_empty
        assert invalid == []

    def test_exclusion_tokens(self):
        """Test language and format exclusions."""
        track_filter, invalid = parse_exclusion("chi,sup")
        assert track_filter.language_codes == ["chi"]
        assert track_filter.format_filters == ["sup"]
        assert invalid == []


class TestBuildSelection:
    """Test build_selection function."""

    def test_combines_filters(self):
        """Test selection and exclusion end up in one object."""
        selection = build_selection("eng,spa", "sup")

        assert selection.language_codes == ["eng", "spa"]
        assert selection.exclusions.format_filters == ["sup"]

    def test_lenient_reports_invalid_tokens(self):
        """Test invalid tokens are passed to the hook and skipped."""
        reported = []
        selection = build_selection(
            "eng,bogus",
            "nope",
            on_invalid=lambda kind, token: reported.append((kind, token)),
        )

        assert selection.language_codes == ["eng"]
        assert selection.exclusions.is_empty
        assert reported == [("selection", "bogus"), ("exclusion", "nope")]

    def test_strict_raises_for_selection(self):
        """Test strict mode fails on an invalid selection token."""
        with pytest.raises(InvalidSelectionError) as exc_info:
            build_selection("eng,15", available_tracks=[3, 4], strict=True)

        assert exc_info.value.invalid_tokens == ["15"]
        assert exc_info.value.kind == "selection"

    def test_strict_raises_for_exclusion(self):
        """Test strict mode fails on an invalid exclusion token."""
        with pytest.raises(InvalidSelectionError) as exc_info:
            build_selection("eng", "xyz", strict=True)

        assert exc_info.value.kind == "exclusion"

    def test_available_tracks_generator_is_reusable(self):
        """Test a one-shot iterable validates both expressions."""
        selection = build_selection("3", "4", available_tracks=iter([3, 4]), strict=True)
        assert selection.track_numbers == [3]
        assert selection.exclusions.track_numbers == [4]

    def test_numbers_never_land_elsewhere(self):
        """Test numeric tokens only ever become track numbers."""
        track_filter, invalid = parse_selection("1,+2,-3,0014")

        assert track_filter.track_numbers == [1, 2, -3, 14]
        assert track_filter.language_codes == []
        assert track_filter.format_filters == []
        assert invalid == []
