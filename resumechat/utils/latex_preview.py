"""
LaTeX -> HTML preview renderer.

This is not a TeX engine. It approximates the layout of the resume template
with an ordered cascade of substitutions:

1. drop comments, code fences and the preamble, then set link targets aside
   so later passes cannot rewrite them
2. HTML-escape the text, then turn LaTeX escapes and ligatures into characters
3. expand the template macros (``\\entry``, ``\\bullets``...) and inline
   formatting, reading brace-delimited arguments with a small balanced-brace
   reader so nested bodies survive
4. map list / alignment environments to HTML
5. strip whatever commands are left, keep their text
6. wrap loose text in paragraphs and let BeautifulSoup balance the tags

Anything it does not recognise degrades to plain text. It never raises.
"""

import html
import re
from typing import Callable, List, Optional, Tuple

from bs4 import BeautifulSoup

from .logger import get_logger

logger = get_logger(__name__)


# ─────────────────────────────────────────── patterns ──

_FENCE_RE = re.compile(r"^```(?:latex|tex)?\s*$", re.MULTILINE)
_COMMENT_RE = re.compile(r"(?<!\\)%.*$", re.MULTILINE)
_BEGIN_DOCUMENT_RE = re.compile(r"\\begin\{document\}")
_END_DOCUMENT_RE = re.compile(r"\\end\{document\}")

# Preamble commands removed together with their bracket / brace arguments.
# The number is the maximum count of brace groups they take.
_PREAMBLE_COMMANDS = {
    "documentclass": 1,
    "usepackage": 1,
    "RequirePackage": 1,
    "hypersetup": 1,
    "setlength": 2,
    "addtolength": 2,
    "newlist": 3,
    "setlist": 1,
    "newcounter": 1,
    "setcounter": 2,
    "urlstyle": 1,
    "pagestyle": 1,
    "thispagestyle": 1,
    "geometry": 1,
    "titleformat": 5,
    "titlespacing": 5,
    "definecolor": 3,
    "setmainfont": 1,
    "input": 1,
}
_DEFINITION_COMMANDS = ("newcommand", "renewcommand", "providecommand", "DeclareRobustCommand")
_BARE_PREAMBLE_RE = re.compile(r"\\(?:raggedbottom|raggedright|maketitle|flushbottom)(?![a-zA-Z])")

# Applied in order, after html escaping.
_CHARACTER_REPLACEMENTS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\\\\\*?(?:\s*\[[^\]]*\])?"), "<br>"),
    (re.compile(r"\$\|\$"), "|"),
    (re.compile(r"\\&amp;"), "&#38;"),
    (re.compile(r"&amp;"), " "),
    (re.compile(r"\\%"), "%"),
    (re.compile(r"\\\$"), "&#36;"),
    (re.compile(r"\\#"), "#"),
    (re.compile(r"\\_"), "_"),
    (re.compile(r"\\\{"), "&#123;"),
    (re.compile(r"\\\}"), "&#125;"),
    (re.compile(r"\\(?:textbullet|bullet)(?![a-zA-Z])\s?"), "\u2022 "),
    (re.compile(r"\\(?:ldots|dots)(?![a-zA-Z])"), "\u2026"),
    (re.compile(r"\\textbar(?![a-zA-Z])"), "|"),
    (re.compile(r"\\LaTeX(?![a-zA-Z])"), "LaTeX"),
    (re.compile(r"\\TeX(?![a-zA-Z])"), "TeX"),
    (re.compile(r"\\texttwosuperior(?![a-zA-Z])"), "\u00b2"),
    (re.compile(r"\$([^$]*)\$"), r"\1"),
    (re.compile(r"---"), "\u2014"),
    (re.compile(r"--"), "\u2013"),
    (re.compile(r"(?<!\\)~"), "&nbsp;"),
]

_SWITCHES = {
    "bfseries": "strong", "bf": "strong",
    "itshape": "em", "it": "em", "em": "em", "slshape": "em",
    "ttfamily": "code",
    "scshape": None, "rmfamily": None, "sffamily": None, "normalfont": None,
    "Huge": None, "huge": None, "LARGE": None, "Large": None, "large": None,
    "normalsize": None, "small": None, "footnotesize": None, "scriptsize": None, "tiny": None,
    "centering": None,
}
_SWITCH_GROUP_RE = re.compile(r"\{\s*\\(" + "|".join(sorted(_SWITCHES, key=len, reverse=True)) + r")(?![a-zA-Z])")
_SWITCH_RE = re.compile(r"\\(" + "|".join(sorted(_SWITCHES, key=len, reverse=True)) + r")(?![a-zA-Z])\s*")

_ENVIRONMENTS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\\begin\{(?:itemize|innerlist|description)\}(?:\s*\[[^\]]*\])?"), '<ul>'),
    (re.compile(r"\\end\{(?:itemize|innerlist|description)\}"), '</ul>'),
    (re.compile(r"\\begin\{enumerate\}(?:\s*\[[^\]]*\])?"), '<ol>'),
    (re.compile(r"\\end\{enumerate\}"), '</ol>'),
    (re.compile(r"\\begin\{center\}"), '<div class="center">'),
    (re.compile(r"\\end\{center\}"), '</div>'),
    (re.compile(r"\\begin\{flushright\}"), '<div class="right">'),
    (re.compile(r"\\end\{flushright\}"), '</div>'),
    (re.compile(r"\\item(?![a-zA-Z])\s*\[([^\]]*)\]"), r'<li><strong>\1</strong> '),
    (re.compile(r"\\item(?![a-zA-Z])\s*"), '<li>'),
    (re.compile(r"\\begin\{[^}]*\}(?:\s*\[[^\]]*\])?"), ''),
    (re.compile(r"\\end\{[^}]*\}"), ''),
]
_TABULAR_BEGIN_RE = re.compile(r"\\begin\{tabular[x*]?\}")

_SPACING_RE = re.compile(
    r"\\(?:vspace|hspace|vskip|hskip)\*?\s*(?:\{[^}]*\})?"
    r"|\\(?:hfill|vfill|par|noindent|newpage|clearpage|pagebreak|linebreak|newline|"
    r"medskip|smallskip|bigskip|quad|qquad|refstepcounter|indent|null|strut)(?![a-zA-Z])(?:\{[^}]*\})?"
)
_HRULE_RE = re.compile(r"\\(?:hrule|hline|toprule|midrule|bottomrule)(?![a-zA-Z])")
_LEFTOVER_COMMAND_RE = re.compile(r"\\[a-zA-Z@]+\*?(?:\s*\[[^\]]*\])?")
_LEFTOVER_SYMBOL_RE = re.compile(r"\\[,;:!> ]")
_BRACES_RE = re.compile(r"[{}]")
_LENGTH_RE = re.compile(r"^\s*-?[\d.]+\s*(?:pt|em|ex|in|cm|mm|bp|sp)?\s*$")
_BLANK_LINES_RE = re.compile(r"\n\s*\n")
_BLOCK_START_RE = re.compile(r"^<(?:h\d|ul|ol|li|div|hr|p|br)\b")
_BLOCK_CLOSE_RE = re.compile(r"</(?:h\d|ul|ol|li|div|p)>")
_LIST_TOKEN_RE = re.compile(r"<(/?)(ul|ol|li)\b[^>]*>")
_LINK_COMMAND_RE = re.compile(r"\\(href|url)(?![a-zA-Z])")
_LINK_TOKEN_RE = re.compile(r"RCLINK(\d+)REF")
_URL_ESCAPE_RE = re.compile(r"\\([%#_&~$])")
_URL_COMMAND_RE = re.compile(r"\\[a-zA-Z@]+|\\")
_URL_JUNK_RE = re.compile(r"[{}\s\x00-\x1f\x7f]")
_URL_SCHEME_RE = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")
_SAFE_SCHEMES = ("http", "https", "mailto")


# ───────────────────────────────────── brace reading ──

def _read_group(text: str, pos: int) -> Optional[Tuple[str, int]]:
    """Return ``(content, end)`` for the balanced ``{...}`` group at ``pos``."""
    if pos >= len(text) or text[pos] != "{":
        return None
    depth = 0
    i = pos
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[pos + 1:i], i + 1
        i += 1
    return None


def _skip_optional(text: str, pos: int) -> int:
    """Skip whitespace and any ``[...]`` optional arguments."""
    while True:
        while pos < len(text) and text[pos] in " \t\n":
            pos += 1
        if pos < len(text) and text[pos] == "[":
            close = text.find("]", pos)
            if close == -1:
                return pos
            pos = close + 1
            continue
        return pos


def _read_args(text: str, pos: int, count: int) -> Tuple[List[str], int]:
    """Read up to ``count`` brace groups, stopping at the first non-group."""
    args: List[str] = []
    pos = _skip_optional(text, pos)
    while len(args) < count:
        cursor = pos
        while cursor < len(text) and text[cursor] in " \t\n":
            cursor += 1
        group = _read_group(text, cursor)
        if group is None:
            break
        args.append(group[0])
        pos = group[1]
    return args, pos


def _expand(text: str, name: str, nargs: int, render: Callable[..., str], required: int = None) -> str:
    """
    Replace every ``\\name{..}...`` with ``render(*args)``.

    Arguments are expanded recursively, so the same macro nested in its own
    argument is handled too. Calls with fewer than ``required`` groups are
    left untouched for the leftover-command pass.
    """
    required = nargs if required is None else required
    pattern = re.compile(r"\\" + name + r"(?![a-zA-Z])\*?")
    out = []
    pos = 0
    for match in pattern.finditer(text):
        if match.start() < pos:
            continue
        args, end = _read_args(text, match.end(), nargs)
        if len(args) < required:
            continue
        args = [_expand(arg, name, nargs, render, required) for arg in args]
        args += [""] * (nargs - len(args))
        out.append(text[pos:match.start()])
        out.append(render(*args))
        pos = end
    out.append(text[pos:])
    return "".join(out)


def _remove_command(text: str, name: str, max_groups: int) -> str:
    """Delete ``\\name[..]{..}...`` including up to ``max_groups`` brace groups."""
    pattern = re.compile(r"\\" + name + r"(?![a-zA-Z])\*?")
    out = []
    pos = 0
    for match in pattern.finditer(text):
        if match.start() < pos:
            continue
        _, end = _read_args(text, match.end(), max_groups)
        out.append(text[pos:match.start()])
        pos = end
    out.append(text[pos:])
    return "".join(out)


def _remove_definitions(text: str) -> str:
    """Delete ``\\newcommand{\\name}[n][default]{body}`` style definitions."""
    for name in _DEFINITION_COMMANDS:
        pattern = re.compile(r"\\" + name + r"\*?(?![a-zA-Z])")
        out = []
        pos = 0
        for match in pattern.finditer(text):
            if match.start() < pos:
                continue
            cursor = match.end()
            while cursor < len(text) and text[cursor] in " \t\n":
                cursor += 1
            target = _read_group(text, cursor)
            if target is not None:
                cursor = target[1]
            else:
                command = re.match(r"\\[a-zA-Z@]+", text[cursor:])
                if command is None:
                    continue
                cursor += command.end()
            _, end = _read_args(text, cursor, 1)
            out.append(text[pos:match.start()])
            pos = end
        out.append(text[pos:])
        text = "".join(out)
    return text


def _strip_tabular(text: str) -> str:
    """Drop ``\\begin{tabular}`` openers and their width / column-spec groups."""
    out = []
    pos = 0
    for match in _TABULAR_BEGIN_RE.finditer(text):
        if match.start() < pos:
            continue
        groups = 1 if match.group(0).endswith("{tabular}") else 2
        _, end = _read_args(text, match.end(), groups)
        out.append(text[pos:match.start()])
        pos = end
    out.append(text[pos:])
    return "".join(out)


# ─────────────────────────────────────────── renderers ──

def _entry(left: str, right: str, body: str = "", extra: str = "") -> str:
    parts = [
        '<div class="entry">',
        f'<div class="entry-header"><strong>{left.strip()}</strong>'
        f'<span class="entry-right">{right.strip()}</span></div>',
    ]
    if body.strip():
        parts.append(f'<div class="entry-body">{body.strip()}</div>')
    # The template's fourth argument is a length; models sometimes put dates there.
    if extra.strip() and not _LENGTH_RE.match(extra):
        parts.append(f'<div class="entry-meta">{extra.strip()}</div>')
    parts.append("</div>")
    return "".join(parts)


def _href(url: str, label: str) -> str:
    url = url.strip()
    # links set aside by _protect_links arrive as tokens
    if not _LINK_TOKEN_RE.fullmatch(url):
        url = _safe_href(_clean_url(url))
    return f'<a href="{url}">{label.strip() or url}</a>'


# ─────────────────────────────────────────────── links ──

def _clean_url(raw: str) -> str:
    """Reduce a link argument to the URL LaTeX would produce."""
    url = _URL_ESCAPE_RE.sub(r"\1", raw)
    url = _URL_COMMAND_RE.sub("", url)
    return _URL_JUNK_RE.sub("", url)


def _safe_href(url: str) -> str:
    """Return ``url`` if it is relative or http(s)/mailto, otherwise ``#``."""
    scheme = _URL_SCHEME_RE.match(_URL_JUNK_RE.sub("", html.unescape(url)))
    if scheme and scheme.group(1).lower() not in _SAFE_SCHEMES:
        return "#"
    return url or "#"


def _protect_links(text: str, links: Optional[List[str]] = None) -> Tuple[str, List[str]]:
    """
    Pull ``\\href`` / ``\\url`` targets out of the text before any other pass.

    Targets are cleaned, checked and escaped here, then replaced by
    ``RCLINK<n>REF`` tokens that the later passes leave alone. ``\\href``
    keeps its label in the text, protected the same way; ``\\url`` becomes a
    finished anchor.
    """
    if links is None:
        links = []

    def token(value: str) -> str:
        links.append(value)
        return f"RCLINK{len(links) - 1}REF"

    out = []
    pos = 0
    for match in _LINK_COMMAND_RE.finditer(text):
        if match.start() < pos:
            continue
        name = match.group(1)
        args, end = _read_args(text, match.end(), 2 if name == "href" else 1)
        if len(args) < (2 if name == "href" else 1):
            continue
        url = _clean_url(args[0])
        target = html.escape(_safe_href(url), quote=True)
        out.append(text[pos:match.start()])
        if name == "href":
            label, _ = _protect_links(args[1], links)
            out.append(f"\\href{{{token(target)}}}{{{label}}}")
        else:
            out.append(token(f'<a href="{target}">{html.escape(url)}</a>'))
        pos = end
    out.append(text[pos:])
    return "".join(out), links


def _restore_links(text: str, links: List[str]) -> str:
    def restore(match: re.Match) -> str:
        index = int(match.group(1))
        return links[index] if index < len(links) else match.group(0)

    return _LINK_TOKEN_RE.sub(restore, text)


_MACROS: List[Tuple[str, int, Callable[..., str], int]] = [
    ("resumeheader", 1, lambda name: f'<h1 class="resume-name">{name.strip()}</h1>', 1),
    ("resumecontact", 1, lambda info: f'<p class="resume-contact">{info.strip()}</p>', 1),
    ("section", 1, lambda title: f'<h2 class="resume-section">{title.strip()}</h2>', 1),
    ("subsection", 1, lambda title: f'<h3 class="resume-subsection">{title.strip()}</h3>', 1),
    ("entry", 4, _entry, 2),
    ("singlelineentry", 2, lambda left, right: _entry(left, right), 2),
    ("desc", 1, lambda text: f'<ul class="desc"><li>{text.strip()}</ul>', 1),
    ("bullets", 1, lambda items: f'<ul class="bullets">{items}</ul>', 1),
    ("parbox", 2, lambda width, content: content, 2),
    ("makebox", 1, lambda content: content, 1),
    ("href", 2, _href, 2),
    ("textbf", 1, lambda text: f"<strong>{text}</strong>", 1),
    ("textit", 1, lambda text: f"<em>{text}</em>", 1),
    ("emph", 1, lambda text: f"<em>{text}</em>", 1),
    ("textsl", 1, lambda text: f"<em>{text}</em>", 1),
    ("underline", 1, lambda text: f"<u>{text}</u>", 1),
    ("texttt", 1, lambda text: f"<code>{text}</code>", 1),
    ("textsc", 1, lambda text: f'<span class="smallcaps">{text}</span>', 1),
    ("textcolor", 2, lambda color, text: text, 2),
    ("fbox", 1, lambda text: text, 1),
    ("mbox", 1, lambda text: text, 1),
    ("textrm", 1, lambda text: text, 1),
    ("textsf", 1, lambda text: text, 1),
    ("textnormal", 1, lambda text: text, 1),
    ("textup", 1, lambda text: text, 1),
    ("textmd", 1, lambda text: text, 1),
]


def _expand_switch_groups(text: str) -> str:
    """Turn ``{\\Large\\bfseries Title}`` style groups into tags."""
    out = []
    pos = 0
    match = _SWITCH_GROUP_RE.search(text, pos)
    while match:
        group = _read_group(text, match.start())
        if group is None:
            break
        content, end = group
        tags = []
        for switch in _SWITCH_RE.findall(content):
            tag = _SWITCHES[switch]
            if tag and tag not in tags:
                tags.append(tag)
        inner = _expand_switch_groups(_SWITCH_RE.sub("", content))
        for tag in reversed(tags):
            inner = f"<{tag}>{inner}</{tag}>"
        out.append(text[pos:match.start()])
        out.append(inner)
        pos = end
        match = _SWITCH_GROUP_RE.search(text, pos)
    out.append(text[pos:])
    return _SWITCH_RE.sub("", "".join(out))


def _close_list_items(text: str) -> str:
    """Insert the ``</li>`` tags that LaTeX's ``\\item`` never spells out."""
    out = []
    pos = 0
    # One flag per open list: does it currently have an unclosed <li>?
    open_items: List[bool] = []
    for match in _LIST_TOKEN_RE.finditer(text):
        closing, tag = match.group(1), match.group(2)
        out.append(text[pos:match.start()])
        if tag == "li" and not closing:
            if open_items and open_items[-1]:
                out.append("</li>")
            if open_items:
                open_items[-1] = True
            out.append(match.group(0))
        elif tag == "li":
            if open_items and open_items[-1]:
                open_items[-1] = False
                out.append(match.group(0))
        elif not closing:
            open_items.append(False)
            out.append(match.group(0))
        else:
            if open_items and open_items.pop():
                out.append("</li>")
            out.append(match.group(0))
        pos = match.end()
    out.append(text[pos:])
    return "".join(out)


def _wrap_paragraphs(text: str) -> str:
    chunks = []
    for chunk in _BLANK_LINES_RE.split(text):
        chunk = chunk.strip()
        if not chunk:
            continue
        if _BLOCK_START_RE.match(chunk) or _BLOCK_CLOSE_RE.search(chunk):
            chunks.append(chunk)
        else:
            chunks.append(f"<p>{chunk}</p>")
    return "\n".join(chunks)


# ──────────────────────────────────────────── pipeline ──

def strip_preamble(latex: str) -> str:
    """Return the document body, dropping preamble commands and definitions."""
    begin = _BEGIN_DOCUMENT_RE.search(latex)
    if begin:
        latex = latex[begin.end():]
    end = _END_DOCUMENT_RE.search(latex)
    if end:
        latex = latex[:end.start()]

    latex = _remove_definitions(latex)
    for name, groups in _PREAMBLE_COMMANDS.items():
        latex = _remove_command(latex, name, groups)
    return _BARE_PREAMBLE_RE.sub("", latex)


def render_latex_preview(latex: str) -> str:
    """
    Render LaTeX source as an HTML fragment approximating the resume layout.

    Args:
        latex: LaTeX source, complete or partial

    Returns:
        Well-formed HTML fragment (empty string for empty input)
    """
    if not latex or not latex.strip():
        return ""

    text = _FENCE_RE.sub("", latex)
    text = _COMMENT_RE.sub("", text)
    text = strip_preamble(text)
    text, links = _protect_links(text)
    text = text.replace("``", "\u201c").replace("''", "\u201d")
    text = html.escape(text, quote=True)

    for pattern, replacement in _CHARACTER_REPLACEMENTS:
        text = pattern.sub(replacement, text)

    for name, nargs, render, required in _MACROS:
        text = _expand(text, name, nargs, render, required)
    text = _expand_switch_groups(text)

    text = _strip_tabular(text)
    for pattern, replacement in _ENVIRONMENTS:
        text = pattern.sub(replacement, text)
    text = _close_list_items(text)

    text = _HRULE_RE.sub("<hr>", text)
    text = _SPACING_RE.sub(" ", text)
    leftovers = _LEFTOVER_COMMAND_RE.findall(text)
    if leftovers:
        logger.debug(f"Preview dropped {len(leftovers)} unrecognised commands: {sorted(set(leftovers))[:10]}")
    text = _LEFTOVER_COMMAND_RE.sub("", text)
    text = _LEFTOVER_SYMBOL_RE.sub(" ", text).replace("\\", "")
    text = _BRACES_RE.sub("", text)
    text = _restore_links(text, links)

    text = _wrap_paragraphs(text)
    return str(BeautifulSoup(text, "html.parser")).strip()
