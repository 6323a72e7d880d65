"""
Tests for the LaTeX -> HTML preview renderer.
"""

import pytest
from bs4 import BeautifulSoup

from resumechat.utils.latex_preview import render_latex_preview, strip_preamble
from resumechat.utils.latex_template import LATEX_TEMPLATE


def _soup(latex):
    return BeautifulSoup(render_latex_preview(latex), "html.parser")


def test_empty_input_renders_nothing():
    assert render_latex_preview("") == ""
    assert render_latex_preview("   \n") == ""
    assert render_latex_preview(None) == ""


def test_inline_formatting():
    html = render_latex_preview(r"\textbf{Bold} and \textit{slanted}")
    assert html == "<p><strong>Bold</strong> and <em>slanted</em></p>"


def test_preamble_is_dropped(sample_latex):
    html = render_latex_preview(sample_latex)
    assert "documentclass" not in html
    assert "geometry" not in html
    assert "margin" not in html
    assert '<h1 class="resume-name">Jane Smith</h1>' in html
    assert '<h2 class="resume-section">Experience</h2>' in html


def test_preamble_commands_removed_without_document_environment():
    assert render_latex_preview("\\usepackage{hyperref}\nHello") == "<p>Hello</p>"


def test_strip_preamble_removes_definitions():
    body = strip_preamble(
        "\\newcommand{\\resumeheader}[1]{{\\Huge\\bfseries #1}}\n"
        "\\renewcommand\\bullets[1]{\\begin{itemize}#1\\end{itemize}}\n"
        "Body text"
    )
    assert body.strip() == "Body text"


def test_latex_escapes_become_characters():
    html = render_latex_preview(r"R\&D grew 50\% in C\# for \$5 -- fast")
    assert html == "<p>R&amp;D grew 50% in C# for $5 \u2013 fast</p>"


def test_raw_html_is_escaped():
    html = render_latex_preview("<script>alert(1)</script> \\textbf{ok}")
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "<strong>ok</strong>" in html


def test_comments_are_removed():
    html = render_latex_preview("Visible % hidden remark\n50\\% done")
    assert "hidden" not in html
    assert "50% done" in html


def test_code_fences_are_removed():
    assert render_latex_preview("```latex\n\\textbf{X}\n```") == "<p><strong>X</strong></p>"


def test_href_and_unsafe_urls():
    soup = _soup(r"\href{https://github.com/jane}{GitHub} \href{javascript:alert(1)}{click}")
    links = soup.find_all("a")
    assert links[0]["href"] == "https://github.com/jane"
    assert links[0].text == "GitHub"
    assert links[1]["href"] == "#"


@pytest.mark.parametrize("latex", [
    r"\href{java{}script:alert(1)}{click}",
    r"\href{jav\textbf{}ascript:alert(1)}{click}",
    r"\href{ java script:alert(1)}{click}",
    "\\href{java\tscript:alert(1)}{click}",
    r"\href{JAVASCRIPT:alert(1)}{click}",
    r"\href{java&#115;cript:alert(1)}{click}",
    r"\href{vbscript:msgbox(1)}{click}",
    r"\href{data:text/html,<script>alert(1)</script>}{click}",
    r"\url{javascript{}:alert(document.cookie)}",
])
def test_hidden_script_urls_are_neutralised(latex):
    links = _soup(latex).find_all("a")
    assert len(links) == 1
    assert links[0]["href"] == "#"


def test_links_nested_in_labels_are_checked():
    soup = _soup(r"\href{https://a.example}{\href{java{}script:alert(1)}{y}}")
    assert [a["href"] for a in soup.find_all("a")] == ["https://a.example", "#"]


def test_mailto_and_relative_links_are_kept():
    links = _soup(r"\href{mailto:jane@example.com}{Email} \href{/portfolio}{Work}").find_all("a")
    assert links[0]["href"] == "mailto:jane@example.com"
    assert links[1]["href"] == "/portfolio"


def test_link_targets_skip_character_replacements():
    soup = _soup(r"\url{https://cs.example.edu/~jane/my--site} \href{https://example.com/a\_b---c}{Site}")
    links = soup.find_all("a")
    assert links[0]["href"] == "https://cs.example.edu/~jane/my--site"
    assert links[0].text == "https://cs.example.edu/~jane/my--site"
    assert links[1]["href"] == "https://example.com/a_b---c"
    assert links[1].text == "Site"


def test_itemize_becomes_balanced_list():
    soup = _soup("\\begin{itemize}\n  \\item First\n  \\item Second\n\\end{itemize}")
    items = [li.text.strip() for li in soup.find("ul").find_all("li")]
    assert items == ["First", "Second"]


def test_enumerate_becomes_ordered_list():
    soup = _soup("\\begin{enumerate}\\item One\\item Two\\end{enumerate}")
    assert [li.text.strip() for li in soup.find("ol").find_all("li")] == ["One", "Two"]


def test_entry_macro():
    soup = _soup(r"\entry{Acme Corp}{2019 -- 2023}{Backend engineer}{2pt}")
    entry = soup.find("div", class_="entry")
    assert entry.find("strong").text == "Acme Corp"
    assert entry.find("span", class_="entry-right").text == "2019 \u2013 2023"
    assert entry.find("div", class_="entry-body").text == "Backend engineer"
    # a length in the last argument is layout, not content
    assert entry.find("div", class_="entry-meta") is None


def test_entry_with_nested_bullets():
    soup = _soup(r"\entry{\textbf{Acme}}{NYC}{\bullets{\item Built APIs \item Led team}}{}")
    body = soup.find("div", class_="entry-body")
    bullets = body.find("ul", class_="bullets")
    assert [li.text.strip() for li in bullets.find_all("li")] == ["Built APIs", "Led team"]


def test_singlelineentry_and_desc():
    soup = _soup(r"\singlelineentry{My Project}{github.com/me/project} \desc{GPA: 3.9/4.0}")
    assert soup.find("div", class_="entry").find("strong").text == "My Project"
    assert soup.find("ul", class_="desc").find("li").text == "GPA: 3.9/4.0"


def test_switch_groups():
    assert render_latex_preview(r"{\Large\bfseries Jane}") == "<p><strong>Jane</strong></p>"


def test_line_breaks_and_spacing_commands():
    soup = _soup(r"Line one\\Line two\vspace{4pt} end\hfill right")
    assert soup.find("br") is not None
    text = soup.get_text()
    assert "vspace" not in text
    assert "4pt" not in text
    assert "hfill" not in text


def test_unknown_commands_keep_their_text():
    assert render_latex_preview(r"\customthing{Keep me}") == "<p>Keep me</p>"


def test_blank_lines_split_paragraphs():
    soup = _soup("First paragraph\n\nSecond paragraph")
    assert [p.text for p in soup.find_all("p")] == ["First paragraph", "Second paragraph"]


def test_malformed_input_does_not_raise():
    html = render_latex_preview("\\textbf{unclosed \\begin{itemize} \\item a }}} {{")
    assert "unclosed" in html
    assert "\\" not in html


def test_bundled_template_renders():
    soup = _soup(LATEX_TEMPLATE)
    html = str(soup)
    assert soup.find("h1", class_="resume-name").text == "YOUR NAME"
    assert [h.text for h in soup.find_all("h2")] == ["Summary", "Experience", "Education", "Projects"]
    assert "75%" in html
    assert "\\" not in html
    metas = [m.text for m in soup.find_all("div", class_="entry-meta")]
    assert metas == ["Sept 2000 \u2013 May 2005"]
