"""Unit tests for track matching."""

from subscalpel.core.matcher import exclusion_matches, matches, select_tracks
from subscalpel.core.parser import build_selection
from subscalpel.models.selection import TrackFilter, TrackSelection
from subscalpel.models.track import Track


class TestMatches:
    """Test the matches function."""

    def test_empty_selection_matches_all(self, sample_tracks):
        """Test everything is selected when nothing is specified."""
        selection = TrackSelection()
        assert all(matches(track, selection) for track in sample_tracks)

    def test_language_selection(self, sample_tracks):
        """Test selecting by language."""
        selection = build_selection("eng")
        selected = [t.number for t in sample_tracks if matches(t, selection)]
        assert selected == [3, 6]

    def test_two_letter_language_selection(self, sample_tracks):
        """Test selecting with a 2-letter code."""
        selection = build_selection("es")
        selected = [t.number for t in sample_tracks if matches(t, selection)]
        assert selected == [4]

    def test_categories_are_additive(self, sample_tracks):
        """Test language, number and format criteria are combined with OR."""
        selection = build_selection("spa,5,srt")
        selected = [t.number for t in sample_tracks if matches(t, selection)]
        assert selected == [3, 4, 5, 6]

    def test_exclusion_vetoes_inclusion(self, sample_tracks):
        """Test an excluded track is dropped even when explicitly selected."""
        selection = build_selection("3,4", "3")
        selected = [t.number for t in sample_tracks if matches(t, selection)]
        assert selected == [4]

    def test_everything_except(self, sample_tracks):
        """Test an empty selection with exclusions."""
        selection = build_selection("", "chi,sup")
        selected = [t.number for t in sample_tracks if matches(t, selection)]
        assert selected == [3, 4, 6]

    def test_no_match(self, sample_tracks):
        """Test a selection that matches nothing."""
        selection = build_selection("jpn")
        assert not any(matches(t, selection) for t in sample_tracks)


class TestExclusionMatches:
    """Test exclusion_matches function."""

    def test_empty_exclusion_excludes_nothing(self, sample_tracks):
        """Test the empty exclusion filter."""
        assert not any(exclusion_matches(t, TrackFilter()) for t in sample_tracks)

    def test_format_exclusion(self, sample_tracks):
        """Test excluding by format."""
        exclusions = TrackFilter(format_filters=["srt"])
        excluded = [t.number for t in sample_tracks if exclusion_matches(t, exclusions)]
        assert excluded == [3, 6]


class TestSelectTracks:
    """Test select_tracks function."""

    def test_non_subtitle_tracks_are_ignored(self, sample_tracks):
        """Test audio and video tracks are never selected."""
        audio = Track(id=1, number=2, codec_id="A_AAC", language="eng", type="audio")
        tracks = [audio] + sample_tracks

        selected = select_tracks(tracks, build_selection("eng"))

        assert [t.number for t in selected] == [3, 6]

    def test_container_order_is_kept(self, sample_tracks):
        """Test results follow container order, not selection order."""
        selected = select_tracks(sample_tracks, build_selection("6,3"))
        assert [t.number for t in selected] == [3, 6]


class TestScenarios:
    """End-to-end selection scenarios."""

    def test_language_number_and_format_combined(self):
        """Test 'eng,14,srt' selects by each category and skips the rest."""
        tracks = [
            Track(id=0, number=3, codec_id="S_HDMV/PGS", language="eng"),
            Track(id=1, number=14, codec_id="S_HDMV/PGS", language="jpn"),
            Track(id=2, number=5, codec_id="S_TEXT/UTF8", language="ger"),
            Track(id=3, number=6, codec_id="S_TEXT/ASS", language="fre"),
        ]

        selected = select_tracks(tracks, build_selection("eng,14,srt"))

        assert [t.number for t in selected] == [3, 14, 5]

    def test_everything_except_chinese_and_pgs(self):
        """Test an empty selection with a language and format exclusion."""
        tracks = [
            Track(id=0, number=3, codec_id="S_TEXT/UTF8", language="chi"),
            Track(id=1, number=4, codec_id="S_HDMV/PGS", language="spa"),
            Track(id=2, number=5, codec_id="S_TEXT/UTF8", language="eng"),
        ]

        selected = select_tracks(tracks, build_selection("", "chi,sup"))

        assert [t.number for t in selected] == [5]

    def test_exclusion_beats_any_inclusion(self, sample_tracks):
        """Test a track matching every inclusion criterion is still vetoed."""
        track = sample_tracks[0]
        selection = build_selection(f"eng,{track.number},srt", "en")
        assert not matches(track, selection)
