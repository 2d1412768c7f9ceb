"""Unit tests for core/parse.py"""

import pytest

from mdcat.core.models import BlockKind, FrontmatterBlock
from mdcat.core.parse import (
    build_blocks,
    discover_files,
    find_markdown_file,
    load_document,
    make_parser,
    split_frontmatter,
    tokenize,
)


@pytest.fixture(name="parser")
def parser_fixture():
    return make_parser("gfm-like")


def test_split_frontmatter_with_header():
    """split_frontmatter returns the inner text, the body, and the body's first line."""
    fm, body, start = split_frontmatter("---\nk: v\n---\n# H")
    assert fm == FrontmatterBlock(text="k: v", line_count=3)
    assert body == "# H"
    assert start == 4


def test_split_frontmatter_closing_at_end_of_input():
    """A closing delimiter directly followed by end of input still counts."""
    fm, body, start = split_frontmatter("---\nkey: val\n---")
    assert fm.text == "key: val"
    assert body == ""
    assert start == 4


def test_split_frontmatter_unterminated_is_body():
    """Without a closing delimiter the whole text is body."""
    text = "---\ntitle: x\nno closing"
    fm, body, start = split_frontmatter(text)
    assert fm is None
    assert body == text
    assert start == 1


def test_split_frontmatter_no_header():
    fm, body, start = split_frontmatter("# Title\n")
    assert fm is None
    assert body == "# Title\n"
    assert start == 1


def test_frontmatter_metadata_parses_yaml():
    assert FrontmatterBlock(text="title: Hello\ntags: [a, b]", line_count=4).metadata() == {
        "title": "Hello", "tags": ["a", "b"],
    }


@pytest.mark.parametrize("text", ["key: [unclosed", "just a string", ""])
def test_frontmatter_metadata_invalid_is_empty(text):
    """Invalid YAML or a non-mapping yields an empty dict instead of raising."""
    assert FrontmatterBlock(text=text, line_count=2).metadata() == {}


def test_build_blocks_kinds_in_order(parser):
    """Top-level tokens come out in document order with their kinds."""
    md = "> a\n\n- x\n- y\n\n```py\nz\n```\n\n---\n\n| a |\n|---|\n| 1 |\n\n<div>raw</div>\n"
    blocks = tokenize(md, parser)
    assert [b.kind for b in blocks] == [
        BlockKind.blockquote, BlockKind.list, BlockKind.code, BlockKind.hr, BlockKind.table, BlockKind.html,
    ]


def test_build_blocks_raw_is_exact_source(parser):
    md = "# Title\n\nSome paragraph.\n"
    blocks = tokenize(md, parser)
    assert blocks[0].raw == "# Title\n"
    assert blocks[1].raw == "Some paragraph.\n"
    assert blocks[0].depth == 1
    assert blocks[0].text == "Title"


def test_build_blocks_list_items(parser):
    """Lists nest list_item tokens whose tight paragraphs are hidden."""
    blocks = tokenize("- x\n- y\n", parser)
    items = blocks[0].children
    assert [i.kind for i in items] == [BlockKind.list_item, BlockKind.list_item]
    assert items[0].children[0].kind == BlockKind.paragraph
    assert items[0].children[0].hidden


def test_build_blocks_ordered_start(parser):
    block = tokenize("3. a\n4. b\n", parser)[0]
    assert block.ordered
    assert block.start == 3


def test_build_blocks_code_lang(parser):
    block = tokenize("```python extra\nprint(1)\n```\n", parser)[0]
    assert block.lang == "python"
    assert block.text == "print(1)\n"


def test_build_blocks_table_cells_and_alignment(parser):
    block = tokenize("| a | b |\n|:--|--:|\n| 1 | 2 |\n| 3 | 4 |\n", parser)[0]
    assert block.kind == BlockKind.table
    assert block.aligns == ["left", "right"]
    assert len(block.header) == 2
    assert len(block.rows) == 2


def test_build_blocks_skips_unknown_tokens():
    """Tokens with no block meaning are ignored."""
    assert build_blocks([], []) == []


def test_load_document_sets_base_dir(tmp_path):
    f = tmp_path / "doc.md"
    f.write_bytes(b"# Hi\r\n\r\nthere\r\n")
    doc = load_document(f)
    assert doc.source == "# Hi\n\nthere\n"
    assert doc.base_dir == tmp_path.resolve()


def test_discover_files_dir(tmp_path):
    """discover_files finds markdown files recursively and skips others."""
    (tmp_path / "a.md").write_text("a")
    (tmp_path / "notes.txt").write_text("text")
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "b.markdown").write_text("b")
    assert discover_files(tmp_path) == [tmp_path / "a.md", sub / "b.markdown"]


def test_find_markdown_file_prefers_readme(tmp_path):
    (tmp_path / "a.md").write_text("a")
    (tmp_path / "README.md").write_text("readme")
    assert find_markdown_file(tmp_path) == tmp_path / "README.md"


def test_find_markdown_file_first_file(tmp_path):
    (tmp_path / "b.md").write_text("b")
    (tmp_path / "a.md").write_text("a")
    assert find_markdown_file(tmp_path) == tmp_path / "a.md"


def test_find_markdown_file_nested_and_missing(tmp_path):
    assert find_markdown_file(tmp_path) is None
    sub = tmp_path / "docs"
    sub.mkdir()
    (sub / "guide.md").write_text("g")
    assert find_markdown_file(tmp_path) == sub / "guide.md"
