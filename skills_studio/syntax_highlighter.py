"""
Syntax Highlighter - QSyntaxHighlighter for artifact documents (YAML frontmatter + Markdown body)

Only a `---` on the very first line opens frontmatter; later `---` lines in the
body are horizontal rules.
"""

import re
from PyQt6.QtGui import QSyntaxHighlighter, QTextCharFormat, QColor, QFont

from skills_studio.theme import ACCENT, ACCENT_GREEN, ACCENT_ORANGE, BG_LIGHT, FG_PRIMARY

# ── Colour palette ────────────────────────────────────────────────────────────
_C = {
    "delimiter":   ACCENT,
    "fm_key":      "#9cdcfe",
    "fm_value":    ACCENT_ORANGE,
    "fm_literal":  "#b5cea8",   # true / false / numbers
    "fm_block":    "#c586c0",   # > >- | indicators and list dashes
    "fm_comment":  "#6a9955",
    "md_heading":  ACCENT_GREEN,
    "md_code_bg":  BG_LIGHT,
    "md_code_fg":  ACCENT_ORANGE,
    "md_bold":     "#dcdcaa",
    "md_italic":   "#c586c0",
    "md_link":     ACCENT,
    "md_bullet":   ACCENT,
    "md_fence_fg": FG_PRIMARY,
    "md_hr":       "#5a5a5a",
    "md_var":      "#4fc1ff",   # $ARGUMENTS placeholders
}

STATE_BODY        = 0
STATE_FRONTMATTER = 1
STATE_FENCED_CODE = 2
STATE_FM_BLOCK    = 3   # continuation lines of a > or | scalar


def _fmt(fg=None, bg=None, bold=False, italic=False) -> QTextCharFormat:
    f = QTextCharFormat()
    if fg:
        f.setForeground(QColor(fg))
    if bg:
        f.setBackground(QColor(bg))
    if bold:
        f.setFontWeight(QFont.Weight.Bold)
    if italic:
        f.setFontItalic(True)
    return f


class ArtifactHighlighter(QSyntaxHighlighter):

    def __init__(self, document):
        super().__init__(document)
        self.fmt = {
            "delimiter":  _fmt(_C["delimiter"], bold=True),
            "fm_key":     _fmt(_C["fm_key"]),
            "fm_value":   _fmt(_C["fm_value"]),
            "fm_literal": _fmt(_C["fm_literal"]),
            "fm_block":   _fmt(_C["fm_block"], bold=True),
            "fm_comment": _fmt(_C["fm_comment"], italic=True),
            "md_heading": _fmt(_C["md_heading"], bold=True),
            "md_bold":    _fmt(_C["md_bold"], bold=True),
            "md_italic":  _fmt(_C["md_italic"], italic=True),
            "md_link":    _fmt(_C["md_link"]),
            "md_bullet":  _fmt(_C["md_bullet"], bold=True),
            "md_code":    _fmt(_C["md_code_fg"], bg=_C["md_code_bg"]),
            "md_fence":   _fmt(_C["md_fence_fg"], bg=_C["md_code_bg"]),
            "md_hr":      _fmt(_C["md_hr"]),
            "md_var":     _fmt(_C["md_var"], bold=True),
        }
        self.md_patterns = [
            (re.compile(r'^#{1,6}\s.*$'),         "md_heading"),
            (re.compile(r'\*\*[^*]+\*\*'),        "md_bold"),
            (re.compile(r'(?<!\*)\*[^*\s][^*]*\*(?!\*)'), "md_italic"),
            (re.compile(r'\[[^\]]*\]\([^)]*\)'),  "md_link"),
            (re.compile(r'^\s*(?:[-*+]|\d+\.)\s'), "md_bullet"),
            (re.compile(r'`[^`]+`'),              "md_code"),
            (re.compile(r'\$(?:ARGUMENTS|\d+)\b'), "md_var"),
            (re.compile(r'^(?:-{3,}|\*{3,})\s*$'), "md_hr"),
        ]
        self.fm_key_re   = re.compile(r'^(\s*[\w.-]+)\s*:(?:\s+|$)(.*)$')
        self.fm_item_re  = re.compile(r'^(\s*-)\s+(.*)$')
        self.literal_re  = re.compile(r'^(?:true|false|null|~|-?\d+(?:\.\d+)?)$', re.IGNORECASE)
        self.block_re    = re.compile(r'^[>|][+-]?$')

    # ── Core ──────────────────────────────────────────────────────────────────

    def highlightBlock(self, text: str):
        prev = self.previousBlockState()
        block_number = self.currentBlock().blockNumber()

        if text.strip() == "---" and (block_number == 0 or prev in (STATE_FRONTMATTER, STATE_FM_BLOCK)):
            self.setCurrentBlockState(STATE_FRONTMATTER if block_number == 0 else STATE_BODY)
            self.setFormat(0, len(text), self.fmt["delimiter"])
            return

        if prev == STATE_FM_BLOCK and (not text.strip() or text.startswith((" ", "\t"))):
            self.setCurrentBlockState(STATE_FM_BLOCK)
            self.setFormat(0, len(text), self.fmt["fm_value"])
            return

        if prev in (STATE_FRONTMATTER, STATE_FM_BLOCK):
            self.setCurrentBlockState(self._highlight_yaml(text))
            return

        if prev == STATE_FENCED_CODE:
            closing = text.strip().startswith("```")
            self.setCurrentBlockState(STATE_BODY if closing else STATE_FENCED_CODE)
            self.setFormat(0, len(text), self.fmt["md_fence"])
            return

        if text.strip().startswith("```"):
            self.setCurrentBlockState(STATE_FENCED_CODE)
            self.setFormat(0, len(text), self.fmt["md_fence"])
            return

        self.setCurrentBlockState(STATE_BODY)
        for pattern, key in self.md_patterns:
            for m in pattern.finditer(text):
                self.setFormat(m.start(), m.end() - m.start(), self.fmt[key])

    def _highlight_yaml(self, text: str) -> int:
        stripped = text.strip()
        if stripped.startswith("#"):
            self.setFormat(0, len(text), self.fmt["fm_comment"])
            return STATE_FRONTMATTER

        m = self.fm_item_re.match(text)
        if m:
            self.setFormat(m.start(1), m.end(1) - m.start(1), self.fmt["fm_block"])
            self._value(m.start(2), m.group(2))
            return STATE_FRONTMATTER

        m = self.fm_key_re.match(text)
        if not m:
            if stripped:
                self.setFormat(0, len(text), self.fmt["fm_value"])
            return STATE_FRONTMATTER

        self.setFormat(m.start(1), m.end(1) - m.start(1), self.fmt["fm_key"])
        value = m.group(2)
        if self.block_re.match(value.strip()):
            self.setFormat(m.start(2), len(value), self.fmt["fm_block"])
            return STATE_FM_BLOCK
        self._value(m.start(2), value)
        return STATE_FRONTMATTER

    def _value(self, start: int, value: str):
        if not value:
            return
        key = "fm_literal" if self.literal_re.match(value.strip()) else "fm_value"
        self.setFormat(start, len(value), self.fmt[key])
