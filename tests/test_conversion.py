"""Tests for the conversion module."""

from datetime import datetime

from bs4 import BeautifulSoup

from webclipper.conversion import (
    ContentRule,
    HtmlSanitizer,
    HtmlToMarkdown,
    MainContentDetector,
    MetadataHeaderBuilder,
    clean_html,
    detect_main_content,
    markdown_to_plain_text,
    markdown_to_plain_text_preview,
    normalize_whitespace,
    to_markdown,
)
from webclipper.conversion.detector import (
    ContentStats,
    collect_content_stats,
    content_score,
    is_navigation_element,
)
from webclipper.models import PageMetadata


def words(count: int, word: str = "word") -> str:
    return " ".join([word] * count)


class TestHtmlSanitizer:
    """Tests for the regex sanitizer."""

    def test_strips_scripts_and_styles(self):
        """Test that script and style elements are removed with their content."""
        html = '<p>Keep</p><script type="text/javascript">alert("x")</script><STYLE>.a{}</STYLE>'

        result = clean_html(html)

        assert result == "<p>Keep</p>"

    def test_strips_comments(self):
        """Test that comments are removed."""
        result = clean_html("<p>A<!-- hidden\nnote -->B</p>")

        assert result == "<p>AB</p>"

    def test_strips_presentation_attributes(self):
        """Test that class/id/style/onclick/onload are removed."""
        html = """<p class="lead" id='intro' style="color:red" onclick="go()" onload="x()">Hi</p>"""

        result = clean_html(html)

        assert result == "<p>Hi</p>"

    def test_keeps_other_attributes(self):
        """Test that href, src and datetime survive."""
        html = '<a class="x" href="/page">Link</a><img src="a.png" alt="A"><time datetime="2024-01-01">Jan</time>'

        result = clean_html(html)

        assert 'href="/page"' in result
        assert 'src="a.png"' in result
        assert 'datetime="2024-01-01"' in result
        assert "class" not in result

    def test_does_not_cut_prefixed_attributes(self):
        """Test that data-id is not mistaken for id."""
        result = clean_html('<span data-id="7">x</span>')

        assert 'data-id="7"' in result

    def test_strips_attributes_without_separating_space(self):
        """Test that an attribute directly after a closing quote is removed whole."""
        assert clean_html('<p class="a"class="b">x</p>') == "<p>x</p>"
        assert clean_html("<p title='t'id=\"i\">x</p>") == "<p title='t'>x</p>"

    def test_strips_unquoted_attribute_values(self):
        """Test that unquoted handler and class values are removed."""
        result = clean_html('<a onclick=alert(1) href="/x" class=big>y</a>')

        assert result == '<a href="/x">y</a>'

    def test_attribute_like_text_kept(self):
        """Test that text outside tags is never treated as an attribute."""
        result = clean_html('<p>set id="main" and class=x</p>')

        assert result == '<p>set id="main" and class=x</p>'

    def test_removes_empty_elements(self):
        """Test that elements with only whitespace are removed."""
        result = clean_html("<p>Text</p><p>   </p><span></span>")

        assert result == "<p>Text</p>"

    def test_removes_nested_empty_elements(self):
        """Test that parents emptied by cleaning are removed too."""
        result = clean_html('<div><p class="x"> </p><span><!-- c --></span></div><p>Body</p>')

        assert result == "<p>Body</p>"

    def test_idempotent(self):
        """Test that cleaning twice equals cleaning once."""
        samples = [
            "<div><div><p></p></div></div>",
            '<!-<b></b>- sneaky --><p class="a">x</p>',
            '<a i class="x"d="y">z</a>',
            "<script>var a = '<p>';</script><p>ok</p>",
            "plain text",
            "",
        ]

        for html in samples:
            once = clean_html(html)
            assert clean_html(once) == once

    def test_empty_input(self):
        """Test that empty input gives empty output."""
        assert clean_html("") == ""


class TestRemoveUnwanted:
    """Tests for the DOM-based body cleanup."""

    def test_cleaned_body_removes_chrome(self):
        """Test that nav, header, footer and ads are dropped from the clone."""
        soup = BeautifulSoup(
            """<html><body>
                <header>Site header</header>
                <nav><ul><li>Home</li></ul></nav>
                <div class="ads">Buy now</div>
                <p>Real text</p>
                <div class="comments"><p>First!</p></div>
                <footer>Footer</footer>
            </body></html>""",
            "html.parser",
        )

        body = HtmlSanitizer().cleaned_body(soup)
        text = body.get_text()

        assert "Real text" in text
        for noise in ("Site header", "Home", "Buy now", "First!", "Footer"):
            assert noise not in text

    def test_cleaned_body_leaves_source_untouched(self):
        """Test that the original document is not modified."""
        soup = BeautifulSoup("<body><nav>Menu</nav><p>Text</p></body>", "html.parser")

        HtmlSanitizer().cleaned_body(soup)

        assert soup.find("nav") is not None

    def test_nested_unwanted_elements(self):
        """Test that unwanted elements inside removed ones are handled."""
        soup = BeautifulSoup(
            '<body><aside><div class="menu"><script>x()</script></div></aside><p>Kept</p></body>',
            "html.parser",
        )

        body = HtmlSanitizer().cleaned_body(soup)

        assert body.get_text().strip() == "Kept"

    def test_extra_selectors(self):
        """Test that custom selectors extend the defaults."""
        soup = BeautifulSoup('<body><div class="promo">Promo</div><p>Text</p></body>', "html.parser")

        body = HtmlSanitizer(unwanted_selectors=[".promo"]).cleaned_body(soup)

        assert "Promo" not in body.get_text()

    def test_document_without_body(self):
        """Test that fragments without <body> are cleaned whole."""
        soup = BeautifulSoup("<nav>Menu</nav><p>Text</p>", "html.parser")

        body = HtmlSanitizer().cleaned_body(soup)

        assert body.get_text() == "Text"


class TestMainContentDetector:
    """Tests for main content detection."""

    def test_prefers_article_over_larger_generic_div(self):
        """Test that selector order beats size."""
        html = f"""<html><body>
            <div class="wrapper"><p>{words(500, "filler")}</p></div>
            <article><p>{words(60, "story")}</p></article>
        </body></html>"""
        soup = BeautifulSoup(html, "html.parser")

        element = detect_main_content(soup)

        assert element is not None
        assert element.name == "article"

    def test_skips_thin_matches(self):
        """Test that a selector match with too few words is passed over."""
        html = f"""<body>
            <article>Short teaser</article>
            <main><p>{words(80)}</p></main>
        </body>"""

        element = detect_main_content(BeautifulSoup(html, "html.parser"))

        assert element is not None
        assert element.name == "main"

    def test_tries_later_matches_of_a_selector(self):
        """Test that every match of a selector is considered in document order."""
        html = f"""<body>
            <div class="post">tiny</div>
            <div class="post" id="second"><p>{words(70)}</p></div>
        </body>"""

        element = detect_main_content(BeautifulSoup(html, "html.parser"))

        assert element is not None
        assert element.get("id") == "second"

    def test_rejects_navigation_like_match(self):
        """Test that a content class on a navigation element is not accepted."""
        html = f"""<body>
            <div class="content sidebar"><p>{words(80)}</p></div>
            <div class="post-body"><p>{words(60)}</p></div>
        </body>"""

        element = detect_main_content(BeautifulSoup(html, "html.parser"))

        assert element is not None
        assert element.get("class") == ["post-body"]

    def test_fallback_scores_candidates(self):
        """Test the scoring fallback when no selector matches."""
        html = f"""<body>
            <div id="small"><p>{words(20)}</p></div>
            <section id="big"><h2>Heading</h2><p>{words(90)}</p><p>{words(30)}</p></section>
        </body>"""

        element = detect_main_content(BeautifulSoup(html, "html.parser"))

        assert element is not None
        assert element.get("id") == "big"

    def test_fallback_returns_none_below_threshold(self):
        """Test that nothing is returned when no candidate scores above 100."""
        html = f"<body><div><p>{words(30)}</p></div></body>"

        assert detect_main_content(BeautifulSoup(html, "html.parser")) is None

    def test_navigation_penalty(self):
        """Test that navigation-like elements score a tenth."""
        soup = BeautifulSoup(f'<div class="menu"><p>{words(200)}</p></div>', "html.parser")
        div = soup.find("div")

        assert is_navigation_element(div)
        assert content_score(div) == (200 + 10) * 0.1

    def test_stats_match_get_text_word_counts(self):
        """Test that words split across inline tags are counted once."""
        html = "<div><p>foo<b>bar</b> baz</p><section> a<i>b</i>c <em>d</em></section><p>  </p></div>"
        soup = BeautifulSoup(html, "html.parser")

        stats = collect_content_stats(soup)

        for element in soup.find_all(True):
            assert stats[id(element)].words == len(element.get_text().split())
        assert stats[id(soup.find("div"))].words == 4

    def test_stats_skip_comments_and_scripts(self):
        """Test that comment and script text is not counted."""
        soup = BeautifulSoup("<div>one<!-- two three --><script>four five</script> six</div>", "html.parser")

        stats = collect_content_stats(soup)

        assert stats[id(soup.find("div"))].words == 2

    def test_stats_count_descendant_paragraphs_and_headings(self):
        """Test paragraph and heading counts exclude the element itself."""
        soup = BeautifulSoup("<section><h2>T</h2> <div><p>a</p> <p>b</p></div></section>", "html.parser")

        stats = collect_content_stats(soup)

        assert stats[id(soup.find("section"))] == ContentStats(words=3, paragraphs=2, headings=1)
        assert stats[id(soup.find("p"))].paragraphs == 0

    def test_fallback_on_deep_nesting(self):
        """Test that scoring a 1000-level chain of divs does not raise."""
        depth = 1000
        html = "<div>" * depth + f"<p>{words(150)}</p>" + "</div>" * depth
        soup = BeautifulSoup(html, "html.parser")

        element = detect_main_content(soup)

        assert element is soup.find("div")

    def test_navigation_detection(self):
        """Test class, tag and role based navigation checks."""
        soup = BeautifulSoup(
            '<nav></nav><div role="navigation"></div><div role="nav"></div>'
            '<div class="site-footer"></div><div class="story"></div>',
            "html.parser",
        )
        nav, role_navigation, role_nav, footer, story = soup.find_all(["nav", "div"])

        assert is_navigation_element(nav)
        assert not is_navigation_element(role_navigation)
        assert is_navigation_element(role_nav)
        assert is_navigation_element(footer)
        assert not is_navigation_element(story)

    def test_custom_rules(self):
        """Test detector with custom rules."""
        html = '<body><div class="note">hello</div><article><p>text</p></article></body>'
        detector = MainContentDetector(rules=[ContentRule(".note", accept=lambda el: True)])

        element = detector.detect(BeautifulSoup(html, "html.parser"))

        assert element is not None
        assert element.get("class") == ["note"]


class TestHtmlToMarkdown:
    """Tests for HtmlToMarkdown converter."""

    def test_empty_paragraph_suppressed(self):
        """Test that an empty paragraph contributes nothing."""
        assert to_markdown("<p></p><h1>Title</h1>") == "# Title\n\n"

    def test_headings(self):
        """Test heading levels."""
        html = "".join(f"<h{level}> Level {level} </h{level}>" for level in range(1, 7))

        result = to_markdown(html)

        assert result == "".join(f"{'#' * level} Level {level}\n\n" for level in range(1, 7))

    def test_heading_keeps_inline_formatting(self):
        """Test that emphasis inside a heading is preserved."""
        assert to_markdown("<h2>Hello <b>World</b></h2>") == "## Hello **World**\n\n"

    def test_paragraph_with_inline_formatting(self):
        """Test inline emphasis, underline and strikethrough."""
        html = "<p><strong>B</strong> <em>I</em> <u>U</u> <del>D</del> <s>S</s> <i>i</i> <b>b</b></p>"

        result = to_markdown(html)

        assert result == "**B** *I* __U__ ~~D~~ ~~S~~ *i* **b**\n\n"

    def test_unordered_list(self):
        """Test bullet lists."""
        result = to_markdown("<ul><li> one </li><li>two</li></ul>")

        assert result == "- one\n- two\n\n"

    def test_ordered_list(self):
        """Test numbered lists."""
        result = to_markdown("<ol><li>first</li><li>second</li><li>third</li></ol>")

        assert result == "1. first\n2. second\n3. third\n\n"

    def test_list_skips_empty_items(self):
        """Test that empty items are dropped and numbering stays consecutive."""
        result = to_markdown("<ol><li>a</li><li> </li><li>b</li></ol>")

        assert result == "1. a\n2. b\n\n"

    def test_list_item_formatting(self):
        """Test inline formatting inside list items."""
        result = to_markdown('<ul><li><b>Bold</b> and <a href="/x">link</a></li></ul>')

        assert result == "- **Bold** and [link](/x)\n\n"

    def test_blockquote(self):
        """Test blockquote prefixing."""
        result = to_markdown("<blockquote>line one<br>line two</blockquote>")

        assert result == "> line one\n> line two\n\n"

    def test_blockquote_with_paragraph(self):
        """Test blockquote wrapping a paragraph."""
        assert to_markdown("<blockquote><p>Quoted</p></blockquote>") == "> Quoted\n\n"

    def test_empty_blockquote_omitted(self):
        """Test that an empty blockquote produces nothing."""
        assert to_markdown("<blockquote>  </blockquote>") == ""

    def test_code_block(self):
        """Test fenced code blocks keep raw text."""
        html = "<pre><code>def hello():\n    print('*hi*')</code></pre>"

        result = to_markdown(html)

        assert result == "```\ndef hello():\n    print('*hi*')\n```\n\n"

    def test_code_block_language(self):
        """Test that a language-* class becomes the fence info string."""
        html = '<pre><code class="language-python">x = 1</code></pre>'

        assert to_markdown(html) == "```python\nx = 1\n```\n\n"

    def test_empty_code_block_omitted(self):
        """Test that a blank pre produces nothing."""
        assert to_markdown("<pre>   </pre>") == ""

    def test_inline_code(self):
        """Test standalone code elements."""
        result = to_markdown("<p>Use <code>print()</code> here.</p>")

        assert result == "Use `print()` here.\n\n"

    def test_horizontal_rule_and_break(self):
        """Test hr and br."""
        assert to_markdown("a<br>b<hr>") == "a\nb---\n\n"

    def test_links(self):
        """Test link emission and degradation."""
        converter = HtmlToMarkdown()

        assert converter.convert('<a href="https://x.com">X</a>') == "[X](https://x.com)"
        assert converter.convert("<a>No href</a>") == "No href"
        assert converter.convert('<a href="https://x.com"></a>') == ""

    def test_links_flattened_when_not_preserved(self):
        """Test preserve_links=False."""
        converter = HtmlToMarkdown(preserve_links=False)

        assert converter.convert('<a href="https://x.com">X</a>') == "X"

    def test_images(self):
        """Test image handling with and without preservation."""
        html = '<img src="https://x.com/a.png" alt="Alt">'

        assert HtmlToMarkdown().convert(html) == "![Alt](https://x.com/a.png)"
        assert HtmlToMarkdown(preserve_images=False).convert(html) == ""
        assert HtmlToMarkdown().convert("<img alt='no src'>") == ""

    def test_unknown_tags_recurse(self):
        """Test that unknown tags emit only their children."""
        result = to_markdown("<custom-widget><span>Hello</span> <foo>world</foo></custom-widget>")

        assert result == "Hello world"

    def test_skips_scripts_and_comments(self):
        """Test that scripts, styles and comments never reach the output."""
        result = to_markdown("<p>A<!-- note -->B</p><script>x()</script><style>p{}</style>")

        assert result == "AB\n\n"

    def test_accepts_parsed_element(self):
        """Test converting a bs4 element directly."""
        soup = BeautifulSoup("<div><h1>Title</h1><p>Body</p></div>", "html.parser")

        assert to_markdown(soup.find("div")) == "# Title\n\nBody\n\n"
        assert to_markdown(soup.find("h1")) == "# Title\n\n"

    def test_empty_input(self):
        """Test empty and text-only input."""
        assert to_markdown("") == ""
        assert to_markdown("just text") == "just text"

    def test_deep_nesting_does_not_raise(self):
        """Test that 1000 levels of nesting convert without recursion errors."""
        depth = 1000
        html = "<div>" * depth + "<b>deep</b>" + "</div>" * depth

        assert to_markdown(html) == "**deep**"

    def test_deep_nested_blockquotes(self):
        """Test deeply nested formatting elements."""
        html = "<blockquote>" * 1200 + "x" + "</blockquote>" * 1200

        result = to_markdown(html)

        assert result.startswith("> > ")
        assert "x" in result

    def test_malformed_html(self):
        """Test that unclosed and stray tags do not raise."""
        result = to_markdown("<p>Open <b>bold <i>both</p></div><li>stray</ul>")

        assert "Open" in result
        assert "stray" in result

    def test_layout_whitespace_between_blocks_dropped(self):
        """Test that indentation and newlines between blocks leave no stray spaces."""
        html = "<h1>A</h1>\n<p>B</p>\n<ul>\n  <li>x</li>\n</ul>\n"

        assert to_markdown(html) == "# A\n\nB\n\n- x\n\n"

    def test_whitespace_between_inline_elements_kept(self):
        """Test that a space between inline siblings survives."""
        assert to_markdown("<p><b>a</b> <i>b</i></p>") == "**a** *b*\n\n"
        assert to_markdown("<p>\n  Hello <b>there</b>\n</p>") == "Hello **there**\n\n"

    def test_whitespace_next_to_break_dropped(self):
        """Test that a line break absorbs the spaces around it."""
        assert to_markdown("<blockquote>one <br> two</blockquote>") == "> one\n> two\n\n"

    def test_nested_list_flattened_into_item(self):
        """Test that a nested list is inlined after the item text with a space."""
        html = "<ul><li>a<ul><li>b</li><li>c</li></ul></li></ul>"

        assert to_markdown(html) == "- a - b - c\n\n"

    def test_nested_ordered_list_flattened(self):
        """Test that a nested ordered list keeps its numbering inline."""
        html = "<ol><li>a<ol><li>b</li></ol></li><li>c</li></ol>"

        assert to_markdown(html) == "1. a 1. b\n2. c\n\n"

    def test_link_around_blocks_folded_to_one_line(self):
        """Test that block content inside a link becomes single-line link text."""
        assert to_markdown('<a href="/x"><p>a</p><p>b</p></a>') == "[a b](/x)"


class TestNormalizeWhitespace:
    """Tests for whitespace normalization."""

    def test_collapses_blank_lines(self):
        """Test collapsing blank line runs and trailing spaces."""
        assert normalize_whitespace("\n\na  \n\n\n\nb\r\n") == "a\n\nb"


class TestMetadataHeaderBuilder:
    """Tests for the metadata header."""

    def test_full_header(self):
        """Test header with every optional field."""
        metadata = PageMetadata(
            title="Example",
            url="https://example.com/post",
            author="Jane",
            published_date="2024. 1. 15.",
            description="A post.",
            site_name="Example Site",
        )

        header = MetadataHeaderBuilder().build(metadata, datetime(2024, 1, 15, 15, 4, 5))

        assert header == (
            "# Example\n\n"
            "**작성자**: Jane\n"
            "**게시일**: 2024. 1. 15.\n"
            "**요약**: A post.\n"
            "**출처**: [Example Site](https://example.com/post)\n"
            "**스크랩 일시**: 2024. 1. 15. 오후 3:04:05\n"
        )

    def test_minimal_header(self):
        """Test header without optional fields."""
        metadata = PageMetadata(title="Untitled", url="https://example.com", site_name="example.com")

        header = MetadataHeaderBuilder().build(metadata, datetime(2024, 3, 2, 0, 5, 9))

        assert header.startswith("# Untitled\n\n**출처**: [example.com](https://example.com)\n")
        assert header.endswith("**스크랩 일시**: 2024. 3. 2. 오전 12:05:09\n")


class TestPlainTextPreview:
    """Tests for Markdown plain-text previews."""

    def test_strips_markdown(self):
        """Test that syntax is removed."""
        markdown = "# Title\n\n**Bold** and *italic* with [a link](https://x.com)\n\n- item\n1. first\n> quote\n`code`"

        result = markdown_to_plain_text(markdown)

        assert result == "Title Bold and italic with a link item first quote code"

    def test_drops_code_blocks_and_images(self):
        """Test that fenced code and images disappear."""
        markdown = "Before\n```\nsecret()\n```\n![alt](a.png) After"

        assert markdown_to_plain_text(markdown) == "Before After"

    def test_truncates_at_word_boundary(self):
        """Test truncation prefers the last space near the limit."""
        text = "word " * 40

        result = markdown_to_plain_text_preview(text, max_length=22)

        assert result == "word word word word..."

    def test_truncates_mid_word_without_nearby_space(self):
        """Test hard truncation when no space is close to the limit."""
        result = markdown_to_plain_text_preview("a " + "b" * 50, max_length=10)

        assert result == "a bbbbbbbb..."

    def test_short_and_empty(self):
        """Test inputs that need no truncation."""
        assert markdown_to_plain_text_preview("Short") == "Short"
        assert markdown_to_plain_text_preview("") == ""
