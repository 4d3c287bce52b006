from __future__ import annotations

import pytest

from subtl import subtitle_io
from subtl.errors import SubtitleParseError
from subtl.models import CAPTION, META

from conftest import SAMPLE_SRT


def test_parse_srt() -> None:
    captions = subtitle_io.parse(SAMPLE_SRT, "srt")
    assert [c.index for c in captions] == [0, 1, 2]
    assert all(c.type == CAPTION for c in captions)
    assert captions[0].start == 1000
    assert captions[0].end == 2500
    assert captions[0].text == "こんにちは"
    assert captions[1].data["number"] == "2"


def test_srt_rebuild_is_stable() -> None:
    captions = subtitle_io.parse(SAMPLE_SRT, "srt")
    assert subtitle_io.build(captions, "srt") == SAMPLE_SRT


def test_srt_multiline_and_crlf() -> None:
    content = "1\r\n00:00:01,000 --> 00:00:02,000\r\nline one\r\nline two\r\n"
    captions = subtitle_io.parse(content, ".SRT")
    assert captions[0].text == "line one\nline two"


def test_srt_malformed_block_kept_as_meta() -> None:
    content = "garbage block\n\n1\n00:00:01,000 --> 00:00:02,000\nこんにちは\n"
    captions = subtitle_io.parse(content, "srt")
    assert captions[0].type == META
    assert captions[1].type == CAPTION
    assert subtitle_io.build(captions, "srt") == content


def test_vtt_round_trip_keeps_structure() -> None:
    content = (
        "WEBVTT - sample\n\n"
        "NOTE a comment\n\n"
        "intro\n00:01.000 --> 00:02.000 align:start\nこんにちは\n\n"
        "00:00:03.000 --> 00:00:04.000\nさようなら\n"
    )
    captions = subtitle_io.parse(content, "vtt")
    assert [c.type for c in captions] == [META, META, CAPTION, CAPTION]
    assert captions[2].data == {"id": "intro", "settings": " align:start"}
    assert captions[2].start == 1000

    captions[2].text = "Hello"
    rebuilt = subtitle_io.build(captions, "vtt")
    assert rebuilt.startswith("WEBVTT - sample\n\nNOTE a comment\n\n")
    assert "intro\n00:00:01.000 --> 00:00:02.000 align:start\nHello" in rebuilt
    assert "00:00:03.000 --> 00:00:04.000\nさようなら" in rebuilt


def test_vtt_requires_header() -> None:
    with pytest.raises(SubtitleParseError):
        subtitle_io.parse("00:01.000 --> 00:02.000\nhi\n", "vtt")


def test_lrc_parse_and_build() -> None:
    content = "[ar:Someone]\n[00:01.50]こんにちは\n[00:03.00][00:10.00]さようなら\n"
    captions = subtitle_io.parse(content, "lrc")
    assert [c.type for c in captions] == [META, CAPTION, CAPTION]
    assert captions[1].start == 1500
    assert captions[1].end == 3000
    assert captions[2].data["stamps"] == "[00:03.00][00:10.00]"
    assert subtitle_io.build(captions, "lrc") == content


def test_unsupported_format() -> None:
    with pytest.raises(SubtitleParseError):
        subtitle_io.parse("", "ass")


def test_timestamps() -> None:
    assert subtitle_io.format_timestamp(3_723_004) == "01:02:03,004"
    assert subtitle_io.format_timestamp(1500, ".") == "00:00:01.500"
    assert subtitle_io.parse_timestamp("01:02:03,004") == 3_723_004
    assert subtitle_io.parse_timestamp("02:03.5") == 123_500
