from bs4 import BeautifulSoup
from bs4.element import Comment

from srbtranslit.app.translit import (
    Direction, transliterate_document, transliterate_html, transliterate_nodes,
)
from srbtranslit.app.translit.dom import is_eligible, iter_text_nodes

PAGE = """<html><head><title>Вести</title>
<style>p { content: "Ђ"; }</style>
<script>var poruka = "Ћао";</script>
</head><body>
<h1 id="title" class="big">Добар дан</h1>
<p>Први <b>део</b> и други део</p>
<noscript>Укључите JavaScript</noscript>
<textarea>Унос корисника</textarea>
<div contenteditable="true"><span>Уређивање</span></div>
<div contenteditable="false">Закључано</div>
<!-- Коментар -->
<p>   </p>
</body></html>"""


def parse(markup: str = PAGE) -> BeautifulSoup:
    return BeautifulSoup(markup, "html.parser")


class TestDocumentTraversal:
    def test_visible_text_is_transliterated(self):
        soup = parse()
        transliterate_document(soup, Direction.CYRILLIC_TO_LATIN)

        assert soup.title.string == "Vesti"
        assert soup.find(id="title").string == "Dobar dan"
        assert soup.find("b").string == "deo"
        assert soup.find_all("p")[0].get_text() == "Prvi deo i drugi deo"

    def test_ineligible_containers_are_skipped(self):
        soup = parse()
        transliterate_document(soup, Direction.CYRILLIC_TO_LATIN)

        assert 'content: "Ђ"' in soup.style.string
        assert '"Ћао"' in soup.script.string
        assert soup.noscript.string == "Укључите JavaScript"
        assert soup.textarea.string == "Унос корисника"

    def test_live_editable_content_is_skipped(self):
        soup = parse()
        transliterate_document(soup, Direction.CYRILLIC_TO_LATIN)

        assert soup.find("span").string == "Уређивање"
        assert soup.find("div", contenteditable="false").string == "Zaključano"

    def test_comments_are_left_alone(self):
        soup = parse()
        transliterate_document(soup, Direction.CYRILLIC_TO_LATIN)

        comments = soup.find_all(string=lambda s: isinstance(s, Comment))
        assert [str(c) for c in comments] == [" Коментар "]

    def test_elements_keep_their_identity(self):
        soup = parse()
        heading = soup.find(id="title")
        paragraph = soup.find_all("p")[0]
        bold = paragraph.find("b")

        transliterate_document(soup, Direction.CYRILLIC_TO_LATIN)

        assert soup.find(id="title") is heading
        assert heading.attrs == {"id": "title", "class": ["big"]}
        assert paragraph.find("b") is bold
        assert bold.parent is paragraph
        assert len(paragraph.contents) == 3

    def test_whitespace_only_nodes_are_not_visited(self):
        soup = parse()
        visited = list(iter_text_nodes([soup]))

        assert all(str(node).strip() for node in visited)
        assert soup.find_all("p")[1].string == "   "

    def test_document_order(self):
        soup = parse("<div>Један<p>Два</p>Три</div>")
        assert [str(n) for n in iter_text_nodes([soup])] == ["Један", "Два", "Три"]


class TestNodeCollections:
    def test_only_supplied_nodes_change(self):
        soup = parse("<ul><li>Један</li><li>Два</li></ul>")
        first, second = soup.find_all("li")

        transliterate_nodes([first], Direction.CYRILLIC_TO_LATIN)

        assert first.string == "Jedan"
        assert second.string == "Два"

    def test_text_nodes_can_be_supplied_directly(self):
        soup = parse("<p>Nebo</p><p>Zemlja</p>")
        node = soup.find_all("p")[1].string

        transliterate_nodes([node], Direction.LATIN_TO_CYRILLIC)

        assert [p.string for p in soup.find_all("p")] == ["Nebo", "Земља"]

    def test_overlapping_collections_convert_once(self):
        soup = parse("<div><p>Njiva</p></div>")
        div = soup.div

        transliterate_nodes([div, div.p, div.p.string], Direction.LATIN_TO_CYRILLIC)

        assert div.p.string == "Њива"


class TestEligibility:
    def test_nearest_contenteditable_wins(self):
        soup = parse('<div contenteditable="true"><p contenteditable="false">Текст</p></div>')
        assert is_eligible(soup.p.string)

    def test_inherited_contenteditable_blocks(self):
        soup = parse('<div contenteditable><section><p>Текст</p></section></div>')
        assert not is_eligible(soup.p.string)

    def test_comment_is_not_eligible(self):
        soup = parse("<p><!-- Текст --></p>")
        assert not is_eligible(soup.p.contents[0])


def test_transliterate_html_returns_markup():
    result = transliterate_html('<p class="x">Ћао <i>свете</i></p>', Direction.CYRILLIC_TO_LATIN)
    assert result == '<p class="x">Ćao <i>svete</i></p>'


class TestContentEditableValues:
    def test_plaintext_only_is_editable(self):
        soup = parse('<div contenteditable="plaintext-only"><p>Текст</p></div>')
        assert not is_eligible(soup.p.string)

    def test_invalid_value_inherits_from_parent(self):
        soup = parse('<div contenteditable="true"><p contenteditable="maybe">Текст</p></div>')
        assert not is_eligible(soup.p.string)

    def test_invalid_value_without_editable_ancestor(self):
        soup = parse('<div><p contenteditable="inherit">Текст</p></div>')
        assert is_eligible(soup.p.string)
