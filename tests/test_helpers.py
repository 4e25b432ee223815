"""
Tests for the pure text and timing helpers.

Covers tap-to-learn tokenizing, playback-time to lyric-line mapping,
pronunciation similarity scoring and the small reshaping helpers used by
the content providers.
"""

import base64
from datetime import datetime, timezone

import pytest

from vocaboo.utils.helpers import (
    _clean_word,
    _current_line_index,
    _decode_base64_audio,
    _difficulty_from_genre,
    _difficulty_from_rating,
    _episode_search_query,
    _format_time,
    _language_name,
    _pair_translated_lines,
    _progress_percentage,
    _release_year,
    _simplify_title,
    _to_number,
    _tokenize_interactive,
    _utcnow_iso,
    _word_similarity,
)
from vocaboo.exceptions import ValidationError
from vocaboo.utils.challenge import DAILY_CHALLENGES, _public_questions, _score_answers


class TestTokenizeInteractive:
    def test_marks_vocabulary_words(self):
        tokens = _tokenize_interactive("The verdant hill.", {"verdant": {"definition": "green"}})
        words = [t for t in tokens if t["type"] == "word"]
        assert [w["text"] for w in words] == ["The", "verdant", "hill"]
        verdant = words[1]
        assert verdant["interactive"] is True
        assert verdant["entry"] == {"definition": "green"}
        assert words[0]["interactive"] is False
        assert tokens[-1] == {"type": "punctuation", "text": "."}

    def test_reassembles_to_original_text(self):
        text = "Once upon a time,  a queen lived!  Really?! Yes."
        tokens = _tokenize_interactive(text, [])
        assert "".join(t["text"] for t in tokens) == text

    def test_inner_punctuation_is_split_off_for_display(self):
        tokens = _tokenize_interactive("castle's gardens", ["castles"])
        castle = tokens[0]
        assert castle["clean"] == "castles"
        assert castle["interactive"] is True
        assert castle["display"] == "castles"
        assert castle["punctuation"] == "'"

    def test_trailing_comma_and_saved_flag(self):
        tokens = _tokenize_interactive("magnificent, castle", ["Magnificent"], saved_words=["magnificent"])
        first = tokens[0]
        assert first["clean"] == "magnificent"
        assert first["display"] == "magnificent"
        assert first["punctuation"] == ","
        assert first["saved"] is True

    def test_non_ascii_letters_are_not_word_characters(self):
        assert _clean_word("Café!") == "caf"

    def test_empty_content(self):
        assert _tokenize_interactive("", {"a": {}}) == []


class TestLyricsTiming:
    LINES = [
        {"start_time_seconds": 0, "end_time_seconds": 4.5, "text": "one"},
        {"start_time_seconds": 5, "end_time_seconds": 9, "text": "two"},
        {"start_time_seconds": 9, "end_time_seconds": 12, "text": "three"},
    ]

    @pytest.mark.parametrize("t,expected", [(0, 0), (4.5, 0), (4.7, -1), (7, 1), (9, 1), (11, 2), (30, -1)])
    def test_current_line_index(self, t, expected):
        assert _current_line_index(self.LINES, t) == expected

    def test_current_line_index_bad_time(self):
        assert _current_line_index(self.LINES, "soon") == -1
        assert _current_line_index([], 3) == -1

    @pytest.mark.parametrize("seconds,expected", [(0, "0:00"), (5.9, "0:05"), (65, "1:05"), (600, "10:00"), (None, "0:00"), (-3, "0:00")])
    def test_format_time(self, seconds, expected):
        assert _format_time(seconds) == expected


class TestWordSimilarity:
    def test_identical(self):
        assert _word_similarity("hello world", "hello world") == 100

    def test_positional_mismatch(self):
        assert _word_similarity("hello there world", "hello world") == 33

    def test_empty_transcription(self):
        assert _word_similarity("", "hello world") == 0

    def test_rounds_half_up(self):
        # 1 of 8 words -> 12.5
        assert _word_similarity("a x x x x x x x", "a b c d e f g h") == 13


class TestProviderHelpers:
    @pytest.mark.parametrize("vote,expected", [(8.4, "advanced"), (8, "advanced"), (6.1, "intermediate"), (5.9, "beginner"), (None, "beginner")])
    def test_difficulty_from_rating(self, vote, expected):
        assert _difficulty_from_rating(vote) == expected

    @pytest.mark.parametrize("genre,track,expected", [
        ("Children's Music", "Wheels", "beginner"),
        ("Rock", "Nursery Rhyme Remix", "beginner"),
        ("Singer/Songwriter Folk", "x", "beginner"),
        ("Pop", "x", "intermediate"),
        ("Country", "x", "intermediate"),
        ("Hip-Hop/Rap", "x", "advanced"),
    ])
    def test_difficulty_from_genre(self, genre, track, expected):
        assert _difficulty_from_genre(genre, track) == expected

    def test_release_year(self):
        assert _release_year("2021-07-30T12:00:00Z") == 2021
        assert _release_year("1999-01-01") == 1999
        assert _release_year("") is None
        assert _release_year(None) is None

    def test_simplify_title(self):
        assert _simplify_title("Don't Stop (Remix)!") == "Don t Stop Remix"

    def test_episode_search_query(self):
        assert _episode_search_query("Friends", 1, 2, "The Sonogram") == (
            "Friends S01E02 The Sonogram full episode english subtitles"
        )
        assert _episode_search_query("Friends", 3, 10) == (
            "Friends season 3 episode 10 full episode english subtitles"
        )

    def test_progress_percentage(self):
        assert _progress_percentage(45, 100) == 45
        assert _progress_percentage(91.5, 100) == 92
        assert _progress_percentage(10, 0) == 0
        assert _progress_percentage(200, 100) == 100
        assert _progress_percentage(float("inf"), 100) == 0

    def test_language_name(self):
        assert _language_name("FR") == "French"
        assert _language_name("xx") == "xx"
        assert _language_name("") == "Spanish"

    def test_pair_translated_lines(self):
        pairs = _pair_translated_lines("Hello\n\nGoodbye\nAgain", "Hola\nAdiós")
        assert pairs == [
            {"original": "Hello", "translated": "Hola"},
            {"original": "Goodbye", "translated": "Adiós"},
            {"original": "Again", "translated": ""},
        ]

    def test_decode_base64_audio(self):
        raw = b"\x1aE\xdf\xa3webm"
        encoded = base64.b64encode(raw).decode()
        assert _decode_base64_audio(encoded) == raw
        assert _decode_base64_audio("data:audio/webm;base64," + encoded) == raw
        assert _decode_base64_audio("") == b""


class TestConversions:
    def test_to_number(self):
        assert _to_number("2.5", "duration") == 2.5
        assert _to_number(3.9, "episode_number", int) == 3

    @pytest.mark.parametrize("value", ["one", None, [], float("inf"), float("nan")])
    def test_to_number_rejects(self, value):
        with pytest.raises(ValidationError, match="current_time"):
            _to_number(value, "current_time")

    def test_utcnow_iso_is_utc(self):
        stamp = _utcnow_iso()
        assert stamp.endswith("Z")
        assert "+00:00" not in stamp
        parsed = datetime.fromisoformat(stamp[:-1] + "+00:00")
        assert parsed.utcoffset() == timezone.utc.utcoffset(None)


class TestDailyChallenge:
    def test_public_questions_hide_answers(self):
        questions = _public_questions()
        assert len(questions) == len(DAILY_CHALLENGES)
        assert all("correct_answer" not in q for q in questions)

    def test_score_answers(self):
        answers = [q["correct_answer"] for q in DAILY_CHALLENGES[:3]] + ["Weak"]
        result = _score_answers(answers)
        assert result["score"] == 3
        assert result["total"] == 5
        assert result["percentage"] == 60
        assert [r["correct"] for r in result["results"]] == [True, True, True, False, False]
