"""
Metadata Codec - structured metadata record <-> YAML frontmatter block (pure logic, no Qt)

The encoder is hand-written rather than yaml.safe_dump so the output keeps the
record's key order and the house style (bare strings, `>-` folded descriptions,
indented lists). Decoding goes through PyYAML.
"""

import logging
import math
import re

import yaml

from skills_studio.form_state import FormState

logger = logging.getLogger(__name__)

WRAP_WIDTH      = 78
LONG_TEXT_KEY   = "description"
LONG_TEXT_LIMIT = 80
QUOTE_TRIGGERS  = (":", "#", '"')

FRONTMATTER_RE = re.compile(
    r"\A\ufeff?---[ \t]*\r?\n(.*?)^---[ \t]*\r?$\n?",
    re.DOTALL | re.MULTILINE,
)


# ── Collect ───────────────────────────────────────────────────────────────────

def collect(form: FormState, artifact_type: str | None = None) -> dict:
    """
    Build the metadata record for an artifact type from form values.
    Empty or default-valued fields are left out; unmanaged keys follow.
    """
    kind = artifact_type or form.artifact_type
    record: dict = {}

    if kind in ("skill", "agent") and form.name:
        record["name"] = form.name
    if form.description:
        record["description"] = form.description

    if kind == "skill":
        if form.argument_hint:
            record["argument-hint"] = form.argument_hint
        if form.allowed_tools:
            record["allowed-tools"] = list(form.allowed_tools)
        if not form.user_invocable:
            record["user-invocable"] = False
        if form.disable_model_invocation:
            record["disable-model-invocation"] = True
    elif kind == "agent":
        if form.model:
            record["model"] = form.model
        if form.tools:
            record["tools"] = form.tools
        if form.max_turns:
            record["maxTurns"] = form.max_turns
        if form.color:
            record["color"] = form.color

    for key, value in form.extra.items():
        if key not in record and value is not None:
            record[key] = value
    return record


# ── Encode ────────────────────────────────────────────────────────────────────

def encode(record: dict) -> str:
    """
    Render a record as a `---` delimited YAML block ending in a newline.
    Returns "" when nothing is renderable, meaning there is no change to apply.
    """
    lines: list[str] = []
    for key, value in record.items():
        lines.extend(_render_entry(str(key), value, ""))
    if not lines:
        return ""
    return "---\n" + "\n".join(lines) + "\n---\n"


def _render_entry(key: str, value, indent: str) -> list[str]:
    label = f"{indent}{_inline_string(key)}"
    if value is None:
        return []
    if isinstance(value, str):
        if not value:
            return []
        return _render_string(label, key, value, indent)
    if isinstance(value, (bool, int, float)):
        return [f"{label}: {_scalar(value)}"]
    if isinstance(value, (list, tuple)):
        if not value:
            return []
        if all(_is_scalar(item) for item in value):
            return [f"{label}:"] + [f"{indent}  - {_scalar(item)}" for item in value]
        return [f"{label}: {_flow(list(value))}"]
    if isinstance(value, dict):
        nested: list[str] = []
        for k, v in value.items():
            nested.extend(_render_entry(str(k), v, indent + "  "))
        return [f"{label}:"] + nested if nested else []
    return [f"{label}: {_flow(value)}"]


def _render_string(label: str, key: str, value: str, indent: str) -> list[str]:
    wants_block = "\n" in value or (key == LONG_TEXT_KEY and len(value) > LONG_TEXT_LIMIT)
    if wants_block and _foldable(value):
        return _block_lines(label, value, indent)
    return [f"{label}: {_inline_string(value)}"]


def _is_scalar(value) -> bool:
    return isinstance(value, (str, bool, int, float))


def _scalar(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return ".nan"
        if math.isinf(value):
            return ".inf" if value > 0 else "-.inf"
        text = repr(value)
        # YAML 1.1 floats need a dot before the exponent
        if "e" in text and "." not in text:
            text = text.replace("e", ".0e", 1)
        return text
    return _inline_string(str(value))


def _inline_string(text: str) -> str:
    if not text:
        return '""'
    if any(ch in text for ch in QUOTE_TRIGGERS) or not _reads_back_plain(text):
        return _quote(text)
    return text


def _reads_back_plain(text: str) -> bool:
    """True when `text` written bare loads back as the very same string."""
    if not text.isprintable():
        return False
    try:
        return yaml.safe_load(text) == text
    except yaml.YAMLError:
        return False


def _quote(text: str) -> str:
    out = []
    for ch in text:
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\t":
            out.append("\\t")
        elif ch == "\r":
            out.append("\\r")
        elif not ch.isprintable():
            code = ord(ch)
            if code < 0x100:
                out.append(f"\\x{code:02x}")
            elif code < 0x10000:
                out.append(f"\\u{code:04x}")
            else:
                out.append(f"\\U{code:08x}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def _flow(value) -> str:
    dumped = yaml.safe_dump(value, default_flow_style=True, width=4096, allow_unicode=True)
    dumped = dumped.strip()
    if dumped.endswith("\n..."):
        dumped = dumped[:-4].rstrip()
    return dumped


# ── Folded block scalars ──────────────────────────────────────────────────────

def _foldable(text: str) -> bool:
    """Folded style carries the text exactly only without edge whitespace or control chars."""
    if text != text.strip():
        return False
    for line in text.split("\n"):
        if not line:
            continue
        if line != line.strip():
            return False
        if not line.replace("\t", "").isprintable():
            return False
    return True


def _block_lines(label: str, text: str, indent: str) -> list[str]:
    pad = indent + "  "
    width = max(WRAP_WIDTH - len(pad), 20)
    lines = [f"{label}: >-"]
    for chunk in re.split(r"(\n+)", text):
        if not chunk:
            continue
        if chunk[0] == "\n":
            # n newlines between paragraphs fold back from n empty lines
            lines.extend([""] * len(chunk))
        else:
            lines.extend(pad + part for part in _wrap(chunk, width))
    return lines


def _wrap(text: str, width: int) -> list[str]:
    """Soft-wrap at single spaces only, so folding restores the exact text."""
    def breakable(i: int) -> bool:
        return text[i] == " " and text[i - 1] != " " and text[i + 1] != " "

    parts = []
    while len(text) > width:
        cut = -1
        for i in range(min(width, len(text) - 2), 0, -1):
            if breakable(i):
                cut = i
                break
        if cut < 0:
            for i in range(width + 1, len(text) - 1):
                if breakable(i):
                    cut = i
                    break
        if cut < 0:
            break
        parts.append(text[:cut])
        text = text[cut + 1:]
    parts.append(text)
    return parts


# ── Decode ────────────────────────────────────────────────────────────────────

def split_frontmatter(raw: str) -> tuple[str | None, str]:
    """(frontmatter YAML text or None, body) for a document."""
    m = FRONTMATTER_RE.match(raw)
    if not m:
        return None, raw
    return m.group(1), raw[m.end():]


def strip_frontmatter(raw: str) -> str:
    return split_frontmatter(raw)[1]


def parse_frontmatter(raw: str) -> dict | None:
    """
    Parse the leading frontmatter of a document.
    Returns the mapping, {} for an empty block, None if absent or invalid YAML.
    """
    fm_text, _ = split_frontmatter(raw)
    if fm_text is None:
        return None
    try:
        result = yaml.safe_load(fm_text)
    except yaml.YAMLError as e:
        logger.debug("YAML parse error in frontmatter: %s", e)
        return None
    return result if isinstance(result, dict) else {}


def decode(text: str) -> dict:
    """Inverse of encode: the mapping carried by a frontmatter block."""
    return parse_frontmatter(text) or {}


# ── Merge ─────────────────────────────────────────────────────────────────────

def merge(raw: str, record: dict) -> str:
    """
    Replace the leading frontmatter of `raw` with `record`, keeping the body.
    Idempotent: merge(merge(raw, r), r) == merge(raw, r).
    """
    block = encode(record)
    if not block:
        return raw
    fm_text, body = split_frontmatter(raw)
    if fm_text is not None:
        # one blank line separates block and body; it is re-added below
        body = body[2:] if body.startswith("\r\n") else body.removeprefix("\n")
    if not body:
        return block
    return block + "\n" + body
