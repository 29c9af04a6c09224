"""
Form State - structured metadata fields edited in the form panel (pure logic, no Qt)
"""

import re
from dataclasses import dataclass, field

SKILL_TOOLS = [
    "Read", "Write", "Edit", "Bash",
    "Grep", "Glob", "WebFetch", "WebSearch",
    "Task", "NotebookEdit",
]

AGENT_MODELS = ("", "sonnet", "haiku", "opus")   # "" = inherit

MANAGED_FIELDS = {
    "skill": (
        "name", "description", "argument-hint", "allowed-tools",
        "user-invocable", "disable-model-invocation",
    ),
    "agent":   ("name", "description", "model", "tools", "maxTurns", "color"),
    "command": ("description",),
}

_TOOL_SPLIT_RE = re.compile(r"[,\s]+")


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value).strip()


def _tool_list(value) -> list[str]:
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(v).strip() for v in value]
    else:
        items = _TOOL_SPLIT_RE.split(str(value))
    result = []
    for item in items:
        if item and item not in result:
            result.append(item)
    return result


def _turns(value) -> int | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        turns = int(value)
    except (TypeError, ValueError):
        return None
    return turns if turns > 0 else None


@dataclass
class FormState:
    """
    Values of the metadata form for one artifact.

    Every setter returns True when the value actually changed and flips
    `modified`, which tells the synchronizer there is something to merge.
    """
    artifact_type: str = "skill"
    name: str = ""
    description: str = ""
    argument_hint: str = ""
    allowed_tools: list[str] = field(default_factory=list)
    user_invocable: bool = True
    disable_model_invocation: bool = False
    model: str = ""
    tools: str = ""
    max_turns: int | None = None
    color: str = ""
    extra: dict = field(default_factory=dict)
    modified: bool = False

    # ── Construction ─────────────────────────────────────────────────────────

    @classmethod
    def from_frontmatter(cls, frontmatter: dict | None, artifact_type: str) -> "FormState":
        fm = frontmatter if isinstance(frontmatter, dict) else {}
        managed = MANAGED_FIELDS.get(artifact_type, ())
        state = cls(artifact_type=artifact_type)
        state.name          = _text(fm.get("name"))
        state.description   = _text(fm.get("description"))
        state.argument_hint = _text(fm.get("argument-hint"))
        state.allowed_tools = _tool_list(fm.get("allowed-tools"))
        state.user_invocable = fm.get("user-invocable") is not False
        state.disable_model_invocation = bool(fm.get("disable-model-invocation", False))
        model = _text(fm.get("model"))
        state.model     = model if model in AGENT_MODELS else ""
        state.tools     = _text(fm.get("tools"))
        state.max_turns = _turns(fm.get("maxTurns"))
        state.color     = _text(fm.get("color"))
        state.extra = {
            str(k): v for k, v in fm.items()
            if str(k) not in managed and v is not None
        }
        return state

    # ── Setters ──────────────────────────────────────────────────────────────

    def _assign(self, attr: str, value) -> bool:
        if getattr(self, attr) == value:
            return False
        setattr(self, attr, value)
        self.modified = True
        return True

    def set_name(self, value: str) -> bool:
        return self._assign("name", _text(value))

    def set_description(self, value: str) -> bool:
        return self._assign("description", _text(value))

    def set_argument_hint(self, value: str) -> bool:
        return self._assign("argument_hint", _text(value))

    def set_allowed_tools(self, tools) -> bool:
        return self._assign("allowed_tools", _tool_list(tools))

    def add_tool(self, tool: str) -> bool:
        tool = tool.strip()
        if not tool or tool in self.allowed_tools:
            return False
        return self._assign("allowed_tools", self.allowed_tools + [tool])

    def remove_tool(self, tool: str) -> bool:
        if tool not in self.allowed_tools:
            return False
        return self._assign("allowed_tools", [t for t in self.allowed_tools if t != tool])

    def set_user_invocable(self, value: bool) -> bool:
        return self._assign("user_invocable", bool(value))

    def set_disable_model_invocation(self, value: bool) -> bool:
        return self._assign("disable_model_invocation", bool(value))

    def set_model(self, value: str) -> bool:
        value = _text(value)
        if value not in AGENT_MODELS:
            raise ValueError(f"Unknown model '{value}'. Expected one of: {', '.join(AGENT_MODELS[1:])}")
        return self._assign("model", value)

    def set_tools(self, value: str) -> bool:
        return self._assign("tools", _text(value))

    def set_max_turns(self, value) -> bool:
        return self._assign("max_turns", _turns(value))

    def set_color(self, value: str) -> bool:
        return self._assign("color", _text(value))

    def mark_applied(self) -> None:
        """The current values are now part of the document text."""
        self.modified = False

    @property
    def available_tools(self) -> list[str]:
        return [t for t in SKILL_TOOLS if t not in self.allowed_tools]
