"""
Subtitle parse/build module for the subtl package.

Turns SRT, WebVTT and LRC text into an ordered list of :class:`Caption`
records and back. Structural entries (VTT header, NOTE/STYLE/REGION blocks,
LRC ID tags, unparseable blocks) are kept as ``meta`` captions so that a
sequence rebuilds to equivalent content.
"""
from typing import Callable, Dict, List, Tuple
import re

from rich.console import Console
from rich.markup import escape

from .errors import SubtitleParseError
from .models import CAPTION, META, Caption

console = Console()

SUPPORTED_FORMATS = ("srt", "vtt", "lrc")

# Regex pattern for parsing SRT/VTT timestamps (hours optional for VTT)
TIMESTAMP_PATTERN = re.compile(r"(?:(\d+):)?(\d{1,2}):(\d{1,2})[.,](\d{1,3})")
TIMING_LINE = re.compile(
    r"^\s*(?P<start>(?:\d+:)?\d{1,2}:\d{1,2}[.,]\d{1,3})\s*-->\s*"
    r"(?P<end>(?:\d+:)?\d{1,2}:\d{1,2}[.,]\d{1,3})(?P<settings>.*)$"
)
BLOCK_SPLIT = re.compile(r"\n[ \t]*\n")
LRC_TIME_TAG = re.compile(r"\[(\d+):(\d{1,2})(?:[.:](\d{1,3}))?\]")


def format_timestamp(ms: int, separator: str = ",") -> str:
    """Convert milliseconds to an SRT/VTT timestamp

    Args:
        ms: Time in milliseconds
        separator: Decimal separator ("," for SRT, "." for VTT)

    Returns:
        Formatted timestamp (HH:MM:SS,mmm)
    """
    ms = max(0, int(ms))
    hours, rem = divmod(ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    seconds, millis = divmod(rem, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}{separator}{millis:03d}"


def parse_timestamp(timestamp: str) -> int:
    """Convert an SRT/VTT timestamp to milliseconds

    Args:
        timestamp: Timestamp (HH:MM:SS,mmm or MM:SS.mmm)

    Returns:
        Time in milliseconds
    """
    match = TIMESTAMP_PATTERN.search(timestamp)
    if not match:
        raise SubtitleParseError(f"Invalid timestamp format: {timestamp}")

    hours, minutes, seconds, fraction = match.groups()
    millis = int(fraction.ljust(3, "0"))
    return ((int(hours or 0) * 60 + int(minutes)) * 60 + int(seconds)) * 1000 + millis


def format_lrc_timestamp(ms: int) -> str:
    ms = max(0, int(ms))
    minutes, rem = divmod(ms, 60_000)
    seconds, millis = divmod(rem, 1000)
    return f"[{minutes:02d}:{seconds:02d}.{millis // 10:02d}]"


def _normalise(content: str) -> str:
    return content.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")


def _blocks(content: str) -> List[str]:
    body = _normalise(content).strip("\n")
    if not body.strip():
        return []
    return [block.strip("\n") for block in BLOCK_SPLIT.split(body) if block.strip()]


def _meta(index: int, raw: str) -> Caption:
    return Caption(index=index, type=META, text="", data={"raw": raw})


def _parse_srt(content: str) -> List[Caption]:
    captions: List[Caption] = []
    for block in _blocks(content):
        lines = block.split("\n")
        # Cue number is optional in the wild
        number = None
        if lines and lines[0].strip().isdigit():
            number = lines[0].strip()
            lines = lines[1:]
        timing = TIMING_LINE.match(lines[0]) if lines else None
        if timing is None:
            console.print(f"[yellow]Warning: Could not parse entry: {escape(repr(block))}[/yellow]")
            captions.append(_meta(len(captions), block))
            continue
        captions.append(Caption(
            index=len(captions),
            type=CAPTION,
            start=parse_timestamp(timing.group("start")),
            end=parse_timestamp(timing.group("end")),
            text="\n".join(lines[1:]),
            data={"number": number, "settings": timing.group("settings").rstrip()},
        ))
    return captions


def _build_srt(captions: List[Caption]) -> str:
    out: List[str] = []
    for caption in captions:
        if not caption.is_dialogue:
            out.append(caption.data.get("raw", ""))
            continue
        lines = []
        number = caption.data.get("number")
        if number is not None:
            lines.append(str(number))
        start = format_timestamp(caption.start, ",")
        end = format_timestamp(caption.end, ",")
        lines.append(f"{start} --> {end}{caption.data.get('settings', '')}")
        lines.append(caption.text)
        out.append("\n".join(lines))
    return "\n\n".join(out) + "\n" if out else ""


def _parse_vtt(content: str) -> List[Caption]:
    blocks = _blocks(content)
    if not blocks or not blocks[0].startswith("WEBVTT"):
        raise SubtitleParseError("Missing WEBVTT header")

    captions: List[Caption] = [_meta(0, blocks[0])]
    for block in blocks[1:]:
        lines = block.split("\n")
        if lines[0].startswith(("NOTE", "STYLE", "REGION")):
            captions.append(_meta(len(captions), block))
            continue
        ident = None
        if not TIMING_LINE.match(lines[0]) and len(lines) > 1:
            ident = lines[0]
            lines = lines[1:]
        timing = TIMING_LINE.match(lines[0])
        if timing is None:
            console.print(f"[yellow]Warning: Could not parse entry: {escape(repr(block))}[/yellow]")
            captions.append(_meta(len(captions), block))
            continue
        captions.append(Caption(
            index=len(captions),
            type=CAPTION,
            start=parse_timestamp(timing.group("start")),
            end=parse_timestamp(timing.group("end")),
            text="\n".join(lines[1:]),
            data={"id": ident, "settings": timing.group("settings").rstrip()},
        ))
    return captions


def _build_vtt(captions: List[Caption]) -> str:
    out: List[str] = []
    for caption in captions:
        if not caption.is_dialogue:
            out.append(caption.data.get("raw", ""))
            continue
        lines = []
        if caption.data.get("id"):
            lines.append(caption.data["id"])
        start = format_timestamp(caption.start, ".")
        end = format_timestamp(caption.end, ".")
        lines.append(f"{start} --> {end}{caption.data.get('settings', '')}")
        lines.append(caption.text)
        out.append("\n".join(lines))
    if not out or not out[0].startswith("WEBVTT"):
        out.insert(0, "WEBVTT")
    return "\n\n".join(out) + "\n"


def _parse_lrc(content: str) -> List[Caption]:
    captions: List[Caption] = []
    for line in _normalise(content).split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        stamps = []
        pos = 0
        while True:
            match = LRC_TIME_TAG.match(stripped, pos)
            if not match:
                break
            stamps.append(match)
            pos = match.end()
        if not stamps:
            # ID tags ([ar:...], [ti:...]) and anything else unrecognised
            captions.append(_meta(len(captions), stripped))
            continue
        minutes, seconds, fraction = stamps[0].groups()
        start = (int(minutes) * 60 + int(seconds)) * 1000
        if fraction:
            start += int(fraction.ljust(3, "0"))
        captions.append(Caption(
            index=len(captions),
            type=CAPTION,
            start=start,
            end=start,
            text=stripped[pos:],
            data={"stamps": stripped[:pos]},
        ))

    # Each line lasts until the next one starts
    timed = [c for c in captions if c.is_dialogue]
    for current, following in zip(timed, timed[1:]):
        current.end = max(current.start, following.start)
    return captions


def _build_lrc(captions: List[Caption]) -> str:
    out: List[str] = []
    for caption in captions:
        if not caption.is_dialogue:
            out.append(caption.data.get("raw", ""))
            continue
        stamps = caption.data.get("stamps") or format_lrc_timestamp(caption.start)
        # LRC is one line per entry
        out.append(stamps + caption.text.replace("\n", " "))
    return "\n".join(out) + "\n" if out else ""


PARSERS: Dict[str, Tuple[Callable[[str], List[Caption]], Callable[[List[Caption]], str]]] = {
    "srt": (_parse_srt, _build_srt),
    "vtt": (_parse_vtt, _build_vtt),
    "lrc": (_parse_lrc, _build_lrc),
}


def _handlers(fmt: str):
    fmt = fmt.lower().lstrip(".")
    if fmt not in PARSERS:
        raise SubtitleParseError(f"Unsupported subtitle format: {fmt}")
    return PARSERS[fmt]


def parse(content: str, fmt: str) -> List[Caption]:
    """Parse subtitle content into captions

    Args:
        content: File contents
        fmt: Format name or extension ("srt", "vtt", "lrc")

    Returns:
        Captions in file order; ``index`` is the position in the list
    """
    parser, _ = _handlers(fmt)
    return parser(content)


def build(captions: List[Caption], fmt: str) -> str:
    """Serialize captions back to subtitle content

    Args:
        captions: Captions in file order
        fmt: Format name or extension

    Returns:
        File contents
    """
    _, builder = _handlers(fmt)
    return builder(captions)
