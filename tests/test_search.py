"""Tests for query compilation."""

from __future__ import annotations

import pytest

from soundpad.search import compile_query, glob_to_regex


class TestBlankQuery:
    @pytest.mark.parametrize("query", ["", "   ", "\t"])
    def test_matches_everything(self, query):
        predicate = compile_query(query)
        assert predicate("anything.wav")
        assert predicate("")


class TestRegexQuery:
    def test_anchored_pattern_with_flag(self):
        predicate = compile_query("/^foo/i")
        assert predicate("FOOBAR")
        assert not predicate("barfoo")

    def test_no_flags_defaults_to_case_insensitive(self):
        predicate = compile_query("/kick/")
        assert predicate("KICK_01.wav")

    def test_explicit_flags_without_i_are_case_sensitive(self):
        predicate = compile_query("/kick/m")
        assert predicate("kick.wav")
        assert not predicate("KICK.wav")

    def test_invalid_pattern_falls_back_to_whole_query_substring(self):
        predicate = compile_query("/[unclosed/")
        assert predicate("x/[unclosed/y")
        assert not predicate("unclosed")

    def test_unterminated_literal_is_plain_substring(self):
        predicate = compile_query("/[unclosed")
        assert predicate("a/[UNCLOSED")
        assert not predicate("unclosed")

    def test_unknown_flag_falls_back_to_substring(self):
        predicate = compile_query("/snare/q")
        assert not predicate("snare.wav")
        assert predicate("my /snare/q take")


class TestGlobQuery:
    def test_star_matches_whole_name(self):
        predicate = compile_query("*.mp3")
        assert predicate("track.mp3")
        assert not predicate("track.wav")
        assert not predicate("mytrack.mp3x")

    def test_trailing_newline_is_not_ignored(self):
        assert not compile_query("*.mp3")("x.mp3\n")

    def test_question_mark_matches_one_character(self):
        predicate = compile_query("hit?.wav")
        assert predicate("hit1.wav")
        assert not predicate("hit10.wav")

    def test_case_insensitive(self):
        assert compile_query("*.WAV")("clap.wav")

    def test_regex_characters_are_literal(self):
        predicate = compile_query("take (1)*")
        assert predicate("take (1) final.wav")
        assert not predicate("take 1.wav")

    def test_glob_to_regex_escapes_specials(self):
        assert glob_to_regex("a.b*") == r"^a\.b.*$"


class TestSubstringQuery:
    def test_case_insensitive_containment(self):
        assert compile_query("report")("Report_final.wav")

    def test_no_match(self):
        assert not compile_query("snare")("kick.wav")
