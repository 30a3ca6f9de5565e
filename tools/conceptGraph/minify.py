"""
Markdown to plain text: strips frontmatter, code and HTML blocks and inline
markup from markdown posts, leaving the flat text a reader would see.

The concept grapher calls load_text on each post found by gather_files.
"""

import html
import os
import re
import sys
from pathlib import Path

MARKDOWN_EXTENSIONS = {".md", ".markdown"}

# Leading metadata blocks: TOML (+++) and YAML (---)
FRONTMATTER_FENCES = ("+++", "---")

# Opening/closing fence of a fenced code block: ``` or ~~~ (3+), up to 3 spaces indent
RE_CODE_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")

# Indented code block line (4 spaces or a tab)
RE_INDENTED_CODE = re.compile(r"^(?: {4}|\t)")

# Inline code spans: `code`, ``code with ` inside``
RE_INLINE_CODE = re.compile(r"(`+)(?:(?!\1).)+?\1")

RE_HTML_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
RE_HTML_TAGS = re.compile(r"<[^>]+>")

# HTML blocks. Raw-text elements run to their closing tag; block-level tags
# and lone complete tags run to the next blank line.
RE_HTML_RAW_OPEN = re.compile(r"^ {0,3}<(script|pre|style|textarea)(?:[\s>]|$)", re.IGNORECASE)
RE_HTML_RAW_CLOSE = re.compile(r"</(?:script|pre|style|textarea)>", re.IGNORECASE)
HTML_BLOCK_TAGS = (
    "address|article|aside|blockquote|body|caption|center|details|dialog|dd|div|dl|dt|"
    "fieldset|figcaption|figure|footer|form|h[1-6]|head|header|hr|html|iframe|legend|li|"
    "main|menu|nav|ol|p|section|summary|table|tbody|td|tfoot|th|thead|title|tr|ul"
)
RE_HTML_BLOCK_OPEN = re.compile(rf"^ {{0,3}}</?(?:{HTML_BLOCK_TAGS})(?:\s|/?>|$)", re.IGNORECASE)
# A complete open or closing tag alone on its line; cannot interrupt a paragraph
RE_HTML_LONE_TAG = re.compile(r"^ {0,3}(?:<[A-Za-z][\w-]*(?:\s[^<>]*)?/?>|</[A-Za-z][\w-]*\s*>)\s*$")

# <https://example.com>: the URL itself is the link text
RE_AUTOLINK = re.compile(r"<((?:https?|ftp|mailto):[^>\s]+)>")

# ![alt](src "title") and [text](href "title")
RE_IMAGE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
RE_LINK = re.compile(r"\[([^\]]*)\]\([^)]*\)")
# [text][ref] and [text][]
RE_REF_LINK = re.compile(r"\[([^\]]*)\]\[[^\]]*\]")
# [ref]: https://example.com "title"
RE_REF_DEFINITION = re.compile(r"^ {0,3}\[[^\]^]+\]:\s+\S+.*$")

RE_FOOTNOTE_REF = re.compile(r"\[\^[^\]]+\]")
RE_FOOTNOTE_DEF = re.compile(r"^ {0,3}\[\^[^\]]+\]:\s*")

RE_HEADING = re.compile(r"^ {0,3}#{1,6}\s+|\s+#+\s*$")
RE_SETEXT_UNDERLINE = re.compile(r"^ {0,3}(?:=+|-+)\s*$")
RE_BLOCKQUOTE = re.compile(r"^ {0,3}(?:>\s?)+")
RE_LIST_MARKER = re.compile(r"^\s*(?:[-*+]|\d{1,9}[.)])\s+(?:\[[ xX]\]\s+)?")
RE_THEMATIC_BREAK = re.compile(r"^ {0,3}(?:(?:\*\s*){3,}|(?:-\s*){3,}|(?:_\s*){3,})$")
RE_TABLE_SEPARATOR = re.compile(r"^\s*\|?\s*:?-+:?\s*(?:\|\s*:?-+:?\s*)*\|?\s*$")
RE_EMPHASIS = re.compile(r"(?<!\\)(\*{1,3}|_{2,3}|~~)")
RE_ESCAPE = re.compile(r"\\([!-/:-@\[-`{-~])")


def detect_encoding(raw: bytes) -> str:
    """Detect encoding from BOM or fall back to utf-8."""
    if raw.startswith(b"\xef\xbb\xbf"):
        return "utf-8-sig"
    # The plain utf-16 codec reads the byte order from the BOM and drops it
    if raw.startswith((b"\xff\xfe", b"\xfe\xff")):
        return "utf-16"
    return "utf-8"


def read_file(path: Path) -> str:
    """Decode a post strictly; undecodable bytes raise UnicodeDecodeError."""
    raw = path.read_bytes()
    return raw.decode(detect_encoding(raw))


def strip_frontmatter(content: str) -> str:
    """Drop a leading +++ or --- metadata block.

    An unterminated block is left in place so the post still contributes text.
    """
    first_line = content.split("\n", 1)[0].rstrip()
    for fence in FRONTMATTER_FENCES:
        if first_line != fence:
            continue
        end = content.find(f"\n{fence}\n")
        if end == -1:
            return content
        return content[end + len(fence) + 2:]
    return content


def strip_code_blocks(lines: list[str]) -> list[str]:
    """Remove fenced and indented code blocks and HTML blocks, keeping every other line."""
    kept: list[str] = []
    fence: str | None = None
    html_end: str | None = None  # "close" (raw-text element) or "blank"
    prev_blank = True
    in_indented = False
    in_list = False
    for line in lines:
        blank = not line.strip()
        if html_end == "close":
            if RE_HTML_RAW_CLOSE.search(line):
                html_end = None
            prev_blank = False
            continue
        if html_end == "blank":
            if not blank:
                continue
            html_end = None

        match = RE_CODE_FENCE.match(line)
        if fence is not None:
            # A closing fence uses the same character, is at least as long
            # and carries no info string.
            if (
                match
                and match.group(1)[0] == fence[0]
                and len(match.group(1)) >= len(fence)
                and not match.group(2).strip()
            ):
                fence = None
            continue
        if match and not (match.group(1)[0] == "`" and "`" in match.group(2)):
            fence = match.group(1)
            continue

        if RE_HTML_RAW_OPEN.match(line):
            if not RE_HTML_RAW_CLOSE.search(line):
                html_end = "close"
            prev_blank = False
            continue
        if RE_HTML_BLOCK_OPEN.match(line) or (prev_blank and RE_HTML_LONE_TAG.match(line)):
            html_end = "blank"
            prev_blank = False
            continue

        indented = bool(RE_INDENTED_CODE.match(line))
        # Indented lines under a list item are continuation text, not code
        if not blank and indented and not in_list and (prev_blank or in_indented):
            in_indented = True
            continue
        if not blank:
            in_indented = False
            if not indented:
                in_list = bool(RE_LIST_MARKER.match(line))
        kept.append(line)
        prev_blank = blank
    return kept


def clean_inline(text: str) -> str:
    """Strip inline markup from a single line of markdown text."""
    text = RE_INLINE_CODE.sub(" ", text)
    text = RE_AUTOLINK.sub(r"\1", text)
    text = RE_HTML_TAGS.sub(" ", text)
    text = RE_IMAGE.sub(r"\1", text)
    text = RE_LINK.sub(r"\1", text)
    text = RE_REF_LINK.sub(r"\1", text)
    text = RE_FOOTNOTE_REF.sub("", text)
    text = RE_EMPHASIS.sub("", text)
    text = RE_ESCAPE.sub(r"\1", text)
    return html.unescape(text)


def minify_markdown(content: str) -> list[str]:
    """Extract flat text lines from markdown content (frontmatter already removed)."""
    content = RE_HTML_COMMENT.sub(" ", content)
    lines: list[str] = []
    for raw_line in strip_code_blocks(content.splitlines()):
        stripped = raw_line.strip()
        if not stripped:
            continue
        if RE_THEMATIC_BREAK.match(stripped) or RE_SETEXT_UNDERLINE.match(stripped):
            continue
        if RE_REF_DEFINITION.match(raw_line) or RE_TABLE_SEPARATOR.match(stripped):
            continue

        line = RE_FOOTNOTE_DEF.sub("", raw_line)
        line = RE_BLOCKQUOTE.sub("", line)
        line = RE_HEADING.sub(" ", line)
        line = RE_LIST_MARKER.sub("", line)
        if "|" in line and line.count("|") >= 2:
            line = line.replace("|", " ")

        cleaned = " ".join(clean_inline(line).split())
        if cleaned:
            lines.append(cleaned)
    return lines


def extract_lines(content: str) -> list[str]:
    """Frontmatter, code and markup removed; one visible block per line."""
    return minify_markdown(strip_frontmatter(content.replace("\r\n", "\n")))


def markdown_to_text(path: Path) -> str:
    """Read a markdown post and return its visible text as one flat string."""
    return " ".join(extract_lines(read_file(path)))


def load_text(path: Path) -> str:
    """markdown_to_text, treating an unreadable post as empty."""
    try:
        return markdown_to_text(path)
    except (OSError, UnicodeDecodeError) as e:
        print(f"  Warning: could not read {path}: {e}", file=sys.stderr)
        return ""


def gather_files(root: Path, extensions: set[str]) -> list[Path]:
    """Recursively collect markdown posts under root, in sorted order."""
    files: list[Path] = []
    for dirpath, _, filenames in os.walk(root):
        for fname in filenames:
            p = Path(dirpath) / fname
            if p.suffix.lower() in extensions:
                files.append(p)
    files.sort()
    return files
