"""Unit tests for the content tree to Markdown walker."""

import pytest

from zohomigrator.core.nodes import ROOT_TAG, ElementNode, TextNode
from zohomigrator.core.walker import MAX_WALK_DEPTH, MarkdownWalker


ID_TO_TITLE = {'gsgjktest123': 'Resolved Target Note'}


@pytest.fixture
def render(make_note):
    """Render content HTML through the walker."""
    def _render(html: str, id_to_title=None) -> str:
        return MarkdownWalker(id_to_title).render(make_note(html).content)
    return _render


class TestBlocks:
    """Tests for paragraphs, breaks and block containers."""

    def test_inline_div_becomes_paragraph(self, render):
        assert render('<div>Hello <b>world</b></div>') == 'Hello **world**\n'

    def test_divs_are_separated_by_blank_line(self, render):
        assert render('<div>One</div><div>Two</div>') == 'One\n\nTwo\n'

    def test_break_only_div_emits_nothing(self, render):
        """Test that editor spacer divs do not add blank lines."""
        assert render('<div>One</div><div><br></div><div>Two</div>') == 'One\n\nTwo\n'

    def test_bold_break_spacer_emits_nothing(self, render):
        assert render('<div>One</div><div><b><br></b></div><div>Two</div>') == 'One\n\nTwo\n'

    def test_trailing_break_dropped(self, render):
        assert render('<div>Line one<br>Line two<br></div>') == 'Line one\nLine two\n'

    def test_double_break_is_paragraph_gap(self, render):
        assert render('<div>A<br><br>B</div>') == 'A\n\nB\n'

    def test_mixed_div_flushes_inline_text_around_blocks(self, render):
        result = render('<div>Intro<ul><li>x</li></ul>Outro</div>')
        assert result == 'Intro\n\n- x\n\nOutro\n'

    def test_empty_divs_collapse(self, render):
        assert render('<div>a</div><div></div><div> </div><div>b</div>') == 'a\n\nb\n'

    def test_headings(self, render):
        assert render('<h2>Title</h2><div>x</div>') == '## Title\n\nx\n'

    def test_blockquote(self, render):
        assert render('<blockquote>quoted<br>two</blockquote>') == '> quoted\n> two\n'

    def test_horizontal_rule(self, render):
        assert render('<div>a</div><hr><div>b</div>') == 'a\n\n---\n\nb\n'

    def test_preformatted_text_kept_verbatim(self, render):
        assert render('<pre>code  **here**</pre>') == '```\ncode  **here**\n```\n'

    def test_unknown_tags_keep_their_content(self, render):
        """Test that unknown elements recurse instead of dropping text."""
        assert render('<div><custom-tag>kept <em>text</em></custom-tag></div>') == 'kept *text*\n'

    def test_nonstandard_spaces_folded(self, render):
        assert render('<div>a\u00a0b\u202fc</div>') == 'a b c\n'

    def test_output_ends_with_single_newline(self, render):
        assert render('<div>text</div><div><br></div><div><br></div>') == 'text\n'


class TestInlineFormatting:
    """Tests for emphasis and other inline markup."""

    def test_markers(self, render):
        html = ('<div><u>u</u> <s>s</s> <strike>k</strike> <span class="highlight">h</span> '
                '<mark>m</mark> <code>c</code></div>')
        assert render(html) == '<u>u</u> ~~s~~ ~~k~~ ==h== ==m== `c`\n'

    def test_whitespace_only_emphasis_left_bare(self, render):
        """Test that empty bold does not produce ****."""
        result = render('<div>a<b> </b>b</div>')
        assert result == 'a b\n'
        assert '**' not in result

    def test_markers_hug_the_text(self, render):
        assert render('<div>say<b> loud </b>now</div>') == 'say **loud** now\n'

    def test_plain_spans_are_transparent(self, render):
        assert render('<div><span style="color:red">red</span> text</div>') == 'red text\n'


class TestLists:
    """Tests for lists, including Zoho's invalid nesting."""

    def test_nested_list_inside_item(self, render):
        html = '<ul><li>One</li><li>Two<ul><li>Nested</li></ul></li></ul>'
        assert render(html) == '- One\n- Two\n    - Nested\n'

    def test_list_directly_inside_list_is_indented(self, render):
        """Test that <ul><ul> is repaired into a deeper level."""
        html = '<ul><li>One</li><ul><li>Deeper</li><ul><li>Deepest</li></ul></ul><li>Two</li></ul>'
        assert render(html) == '- One\n    - Deeper\n        - Deepest\n- Two\n'

    def test_ordered_list_markers(self, render):
        assert render('<ol><li>a</li><li>b</li></ol>') == '1. a\n1. b\n'

    def test_mixed_list_kinds(self, render):
        html = '<ol><li>step<ul><li>detail</li></ul></li></ol>'
        assert render(html) == '1. step\n    - detail\n'

    def test_item_wrapper_block_unwrapped(self, render):
        assert render('<ul><li><div>Wrapped</div></li></ul>') == '- Wrapped\n'

    def test_whitespace_between_items_ignored(self, render):
        assert render('<ul>\n  <li>a</li>\n  <li>b</li>\n</ul>') == '- a\n- b\n'


class TestCheckboxes:
    """Tests for both checklist shapes."""

    def test_marker_with_label_span(self, render):
        html = ('<div><input type="checkbox" checked><span>Milk</span></div>'
                '<div><input type="checkbox"><span>Bread</span></div>')
        assert render(html) == '- [x] Milk\n- [ ] Bread\n'

    def test_marker_with_text_label(self, render):
        assert render('<div><input type="checkbox"> Butter</div>') == '- [ ] Butter\n'

    def test_label_is_not_rendered_twice(self, render):
        result = render('<div><input type="checkbox" checked><span>Only once</span></div>')
        assert result.count('Only once') == 1

    def test_consumed_label_scoped_to_its_container(self, render):
        """Test that a marker in one div cannot swallow a span in another."""
        html = ('<div><input type="checkbox"><span>Label</span></div>'
                '<div><span>Other</span></div>')
        result = render(html)
        assert result.count('Label') == 1
        assert 'Other' in result

    def test_marker_does_not_claim_block_sibling(self, render):
        result = render('<div><input type="checkbox"><div>Block</div></div>')
        assert result.count('Block') == 1
        assert '- [ ]' in result

    def test_checkbox_element_checked_states(self, render):
        html = ('<div class="checklist">'
                '<div><checkbox checked="true">Eggs</checkbox></div>'
                '<div><checkbox checked="false">Bread</checkbox></div>'
                '<div><checkbox>Jam</checkbox></div>'
                '</div>')
        assert render(html) == '- [x] Eggs\n- [ ] Bread\n- [ ] Jam\n'

    def test_self_closing_checkbox_expanded(self, render):
        result = render('<div><checkbox checked="true"/>after</div>')
        assert '- [x]' in result
        assert 'after' in result

    def test_rich_label_inside_checkbox(self, render):
        assert render('<div><checkbox><b>Important</b> task</checkbox></div>') == '- [ ] **Important** task\n'

    def test_checklist_lines_stay_tight(self, render):
        """Test that checklist lines are not separated by blank lines."""
        html = ''.join(f'<div><checkbox>item {i}</checkbox></div>' for i in range(3))
        assert render(html) == '- [ ] item 0\n- [ ] item 1\n- [ ] item 2\n'

    def test_marker_inside_list_item_not_doubled(self, render):
        html = ('<ul><li><input type="checkbox" checked><span>a</span></li>'
                '<li><input type="checkbox"><span>b</span></li></ul>')
        assert render(html) == '- [x] a\n- [ ] b\n'

    def test_checkbox_element_inside_list_items(self, render):
        html = ('<ul><li><checkbox checked="true">Eggs</checkbox></li>'
                '<li><div><checkbox>Jam</checkbox></div></li></ul>')
        assert render(html) == '- [x] Eggs\n- [ ] Jam\n'

    def test_checkbox_in_ordered_and_nested_items(self, render):
        html = ('<ol><li><input type="checkbox"><span>step</span>'
                '<ul><li><input type="checkbox" checked><span>sub</span></li></ul></li></ol>')
        assert render(html) == '1. [ ] step\n    - [x] sub\n'


class TestLinks:
    """Tests for external, local and internal links."""

    def test_external_link(self, render):
        assert render('<div><a href="https://example.com">Example</a></div>') == '[Example](https://example.com)\n'

    def test_bare_url_when_text_matches(self, render):
        assert render('<div><a href="https://example.com">https://example.com</a></div>') == 'https://example.com\n'

    def test_bare_url_when_text_empty(self, render):
        assert render('<div>x <a href="https://example.com"></a></div>') == 'x https://example.com\n'

    def test_mailto_is_a_normal_link(self, render):
        assert render('<div><a href="mailto:me@example.com">Mail</a></div>') == '[Mail](mailto:me@example.com)\n'

    def test_local_link_becomes_embed(self, render):
        assert render('<div>See <a href="files/report.pdf">report</a></div>') == 'See ![[attachments/files/report.pdf]]\n'

    def test_note_link_class_uses_text(self, render):
        assert render('<div><a class="rte-link" href="#">Other Note</a></div>') == '[[Other Note]]\n'
        assert render('<div><a class="editor-note-link" href="#">Named</a></div>') == '[[Named]]\n'

    def test_internal_link_resolved_with_placeholder_text(self, render):
        html = '<div><a href="zohonotebook://notes/gsgjktest123">link</a></div>'
        assert render(html, ID_TO_TITLE) == '[[Resolved Target Note]]\n'

    def test_internal_link_resolved_with_alias(self, render):
        html = '<div><a href="zohonotebook://notes/gsgjktest123">read this</a></div>'
        assert render(html, ID_TO_TITLE) == '[[Resolved Target Note|read this]]\n'

    def test_unresolved_internal_link_with_text(self, render):
        html = '<div><a href="zohonotebook://notes/missing999">Old Note</a></div>'
        assert render(html, ID_TO_TITLE) == '[[Old Note]]\n'

    def test_unresolved_placeholder_becomes_comment(self, render):
        html = '<div><a href="zohonotebook://notes/missing999">link</a></div>'
        assert render(html, ID_TO_TITLE) == '<!-- zoho internal link (unresolved): zohonotebook://notes/missing999 -->\n'

    def test_comment_cannot_be_closed_early(self, render):
        """Test that --> inside the URL cannot terminate the comment."""
        html = '<div><a href="zohonotebook://notes/abc--&gt;&lt;script&gt;">link</a></div>'
        result = render(html)
        assert result.count('-->') == 1
        assert result.rstrip().endswith('-->')
        assert '--\u200b>' in result


class TestImagesAndResources:
    """Tests for images and inline resource descriptors."""

    def test_network_image(self, render):
        assert render('<div>x <img src="https://cdn.example.com/a.png"></div>') == 'x ![](https://cdn.example.com/a.png)\n'

    def test_local_image_embed_with_folded_spaces(self, render):
        result = render('<div>x <img src="Screenshot\u202f2024.png"></div>')
        assert result == 'x ![[attachments/Screenshot 2024.png]]\n'

    def test_inline_resource_embed(self, render):
        html = '<div>See this image: <znresource relative-path="abc123/diagram.png" type="image/png"/> and continue reading.</div>'
        assert render(html) == 'See this image: ![[attachments/abc123/diagram.png]] and continue reading.\n'

    def test_inline_audio_resource_has_no_prefix(self, render):
        html = '<div>Listen <znresource relative-path="abc/rec" type="audio/m4a"/></div>'
        result = render(html)
        assert '![[attachments/abc/rec]]' in result
        assert 'Attached' not in result

    def test_custom_attachments_root(self, make_note):
        walker = MarkdownWalker(attachments_root='media/')
        note = make_note('<div>x <img src="a.png"></div>')
        assert walker.render(note.content) == 'x ![[media/a.png]]\n'


class TestTables:
    """Tests for table rendering."""

    def test_rows_padded_and_pipes_escaped(self, render):
        html = ('<table><tr><th>A</th><th>B</th></tr>'
                '<tr><td>1</td><td>x|y</td><td>extra</td></tr></table>')
        assert render(html) == '| A | B |  |\n| --- | --- | --- |\n| 1 | x\\|y | extra |\n'

    def test_row_groups(self, render):
        html = ('<table><thead><tr><th>H</th></tr></thead>'
                '<tbody><tr><td>v</td></tr></tbody></table>')
        assert render(html) == '| H |\n| --- |\n| v |\n'

    def test_nested_table_cells_stay_in_their_row(self, render):
        """Test that rows of a nested table are not collected as outer rows."""
        html = ('<table><tr><td>outer<table><tr><td>inner</td></tr></table></td></tr></table>')
        lines = render(html).splitlines()
        assert len(lines) == 2
        assert lines[0].startswith('| outer')
        assert lines[1] == '| --- |'

    def test_multiline_cell_flattened(self, render):
        assert render('<table><tr><td>a<br>b</td></tr></table>') == '| a b |\n| --- |\n'

    def test_empty_table(self, render):
        assert render('<div>x</div><table></table>') == 'x\n'


class TestDepthLimit:
    """Tests for pathologically deep trees."""

    @staticmethod
    def chain(tag: str, depth: int, leaf_text: str) -> ElementNode:
        root = ElementNode(ROOT_TAG)
        current = root
        for _ in range(depth):
            child = ElementNode(tag)
            current.children.append(child)
            current = child
        current.children.append(TextNode(leaf_text))
        return root

    @pytest.mark.parametrize("tag", ["div", "span", "b", "unknown", "blockquote"])
    def test_deep_tree_does_not_overflow(self, tag):
        """Test that a 5000-level tree renders without hitting the recursion limit."""
        root = self.chain(tag, 5000, 'deep leaf')
        assert 'deep leaf' in MarkdownWalker().render(root)

    def test_deep_list_nesting(self):
        root = self.chain('ul', 5000, 'bottom')
        assert 'bottom' in MarkdownWalker().render(root)

    def test_shallow_tree_unaffected(self):
        root = self.chain('span', MAX_WALK_DEPTH // 4, 'plain')
        assert MarkdownWalker().render(root) == 'plain\n'
