"""Tests for markdown discovery and text extraction."""

from pathlib import Path

from minify import (
    MARKDOWN_EXTENSIONS,
    gather_files,
    load_text,
    markdown_to_text,
    minify_markdown,
    strip_code_blocks,
    strip_frontmatter,
)


class TestStripFrontmatter:
    def test_toml_block_removed(self):
        content = '+++\ntitle = "x"\n+++\nBody text\n'
        assert strip_frontmatter(content) == "Body text\n"

    def test_yaml_block_removed(self):
        content = "---\ntitle: x\n---\nBody\n"
        assert strip_frontmatter(content) == "Body\n"

    def test_unterminated_block_left_in_place(self):
        content = '+++\ntitle = "x"\nBody\n'
        assert strip_frontmatter(content) == content

    def test_no_frontmatter(self):
        content = "Just a post\n+++\n"
        assert strip_frontmatter(content) == content


class TestStripCodeBlocks:
    def test_fenced_block_removed(self):
        lines = ["Intro", "```python", "code_here = 1", "```", "Outro"]
        assert strip_code_blocks(lines) == ["Intro", "Outro"]

    def test_tilde_fence_needs_matching_close(self):
        lines = ["~~~~", "```", "still code", "~~~", "more code", "~~~~", "After"]
        assert strip_code_blocks(lines) == ["After"]

    def test_unterminated_fence_drops_rest(self):
        assert strip_code_blocks(["a", "```", "b", "c"]) == ["a"]

    def test_indented_block_after_blank_line(self):
        lines = ["Para", "", "    indented code", "    more", "", "After"]
        assert strip_code_blocks(lines) == ["Para", "", "", "After"]

    def test_list_continuation_is_not_code(self):
        lines = ["- item one", "", "    continued text"]
        assert strip_code_blocks(lines) == lines


class TestMinifyMarkdown:
    def test_inline_code_and_links(self):
        text = "Use `pip install` and [the docs](https://x.org) or ![alt text](img.png)"
        assert minify_markdown(text) == ["Use and the docs or alt text"]

    def test_html_comments_and_tags(self):
        text = "Hello <b>bold</b> <!-- hidden\nstuff --> world"
        assert minify_markdown(text) == ["Hello bold world"]

    def test_entities_and_escapes(self):
        assert minify_markdown(r"Fish &amp; chips \*not emphasis\*") == ["Fish & chips *not emphasis*"]

    def test_autolink_keeps_url(self):
        assert minify_markdown("See <https://example.com>") == ["See https://example.com"]

    def test_heading_quote_and_list_markers(self):
        text = "## Section title ##\n> quoted text\n1. first\n* second"
        assert minify_markdown(text) == ["Section title", "quoted text", "first", "second"]

    def test_table(self):
        text = "| a | b |\n|---|---|\n| c | d |"
        assert minify_markdown(text) == ["a b", "c d"]

    def test_emphasis_and_breaks(self):
        text = "**bold** and *it*\n\n---\n\n~~gone~~ marker"
        assert minify_markdown(text) == ["bold and it", "gone marker"]

    def test_reference_links_and_footnotes(self):
        text = "A [linked][ref] word[^1].\n\n[ref]: https://example.com\n[^1]: The note."
        assert minify_markdown(text) == ["A linked word.", "The note."]


class TestHtmlBlocks:
    def test_script_and_style_contents_dropped(self):
        text = (
            "Intro words\n\n<script>\nvar secretjs = 1;\n</script>\n\n"
            "<style>\n.secretcss { color: red; }\n</style>\n\nOutro"
        )
        assert minify_markdown(text) == ["Intro words", "Outro"]

    def test_single_line_raw_element(self):
        assert minify_markdown("<script>track('secret')</script>\nAfter") == ["After"]

    def test_block_tag_runs_to_blank_line(self):
        text = "<div class=\"note\">\nhidden markup text\n</div>\n\nVisible"
        assert minify_markdown(text) == ["Visible"]

    def test_lone_tag_does_not_interrupt_paragraph(self):
        assert minify_markdown("Some words\n<span>\nmore words") == ["Some words", "more words"]

    def test_inline_tags_keep_their_text(self):
        assert minify_markdown("Hello <em>there</em> friend") == ["Hello there friend"]


class TestMarkdownToText:
    def test_bom_crlf_and_frontmatter(self, tmp_path: Path):
        path = tmp_path / "post.md"
        path.write_bytes(b"\xef\xbb\xbf+++\r\ntitle = 'x'\r\n+++\r\nHello\r\nworld\r\n")
        assert markdown_to_text(path) == "Hello world"

    def test_utf16_frontmatter(self, tmp_path: Path):
        content = "+++\ntitle = 'secretfm'\n+++\nHello world\n"
        for encoding in ("utf-16", "utf-16-le", "utf-16-be"):
            path = tmp_path / f"{encoding}.md"
            bom = "\ufeff" if encoding != "utf-16" else ""
            path.write_bytes((bom + content).encode(encoding))
            assert markdown_to_text(path) == "Hello world"

    def test_corpus_post(self, corpus_dir: Path):
        text = markdown_to_text(corpus_dir / "graphs.md")
        assert text.startswith("Graph layout Force directed graph layout")
        assert "secretcode" not in text
        assert "secretfrontmatter" not in text


class TestLoadText:
    def test_undecodable_post_is_empty(self, broken_post: Path, capsys):
        assert load_text(broken_post) == ""
        assert "Warning: could not read" in capsys.readouterr().err

    def test_missing_post_is_empty(self, tmp_path: Path, capsys):
        assert load_text(tmp_path / "missing.md") == ""
        assert "missing.md" in capsys.readouterr().err


class TestGatherFiles:
    def test_recursive_sorted_markdown_only(self, corpus_dir: Path):
        files = gather_files(corpus_dir, MARKDOWN_EXTENSIONS)
        assert [f.relative_to(corpus_dir).as_posix() for f in files] == [
            "graphs.md",
            "nested/deeper/notes.markdown",
            "nested/terms.md",
        ]

    def test_uppercase_extension(self, tmp_path: Path):
        (tmp_path / "UPPER.MD").write_text("x", encoding="utf-8")
        assert gather_files(tmp_path, MARKDOWN_EXTENSIONS) == [tmp_path / "UPPER.MD"]

    def test_missing_root(self, tmp_path: Path):
        assert gather_files(tmp_path / "nope", MARKDOWN_EXTENSIONS) == []
