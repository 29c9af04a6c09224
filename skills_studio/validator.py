"""
Validator - local metadata checks per artifact type (pure logic, no Qt)
"""

import re
import logging
from dataclasses import dataclass, field

from skills_studio import metadata_codec
from skills_studio.form_state import AGENT_MODELS, _tool_list

logger = logging.getLogger(__name__)

VALID_NAME_RE  = re.compile(r'^[a-z0-9]([a-z0-9-]*[a-z0-9])?$')
RESERVED_WORDS = ("anthropic", "claude")
NAME_MAX        = 64
DESCRIPTION_MAX = 1024
BODY_MAX_LINES  = 500

KNOWN_TOOLS = {
    "Read", "Write", "Edit", "MultiEdit",
    "Grep", "Glob", "Bash",
    "WebFetch", "WebSearch",
    "Task", "TodoWrite", "NotebookEdit",
    "AskUserQuestion", "Skill",
}
PATTERN_TOOL_RE = re.compile(r'^(Bash\(.+\)|mcp__\S+)$')

AGENT_COLORS = {"red", "blue", "green", "yellow", "purple", "orange", "pink", "cyan"}

TRIGGER_HINTS = ("use when", "use for", "when the user", "when user", "triggers on", "use this")


@dataclass
class ValidationResult:
    valid: bool = True
    errors: list = field(default_factory=list)
    warnings: list = field(default_factory=list)

    def add_error(self, msg: str):
        self.errors.append(msg)
        self.valid = False

    def add_warning(self, msg: str):
        self.warnings.append(msg)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        if not other.valid:
            self.valid = False
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    @classmethod
    def from_report(cls, report: dict) -> "ValidationResult":
        """Build a result from the service's validation report."""
        r = cls()
        for msg in report.get("errors") or []:
            r.add_error(str(msg))
        for msg in report.get("warnings") or []:
            r.add_warning(str(msg))
        if report.get("valid") is False and not r.errors:
            r.valid = False
        return r


class ArtifactValidator:

    # ── Name ─────────────────────────────────────────────────────────────────

    def validate_name(self, name) -> ValidationResult:
        r = ValidationResult()
        name = "" if name is None else str(name)
        if not name:
            r.add_error("Name is required.")
            return r
        if len(name) > NAME_MAX:
            r.add_error(f"Name too long: {len(name)} chars (max {NAME_MAX}).")
        if not VALID_NAME_RE.match(name):
            r.add_error("Name may only use lowercase letters, digits and hyphens, "
                        "and must not start or end with a hyphen.")
        if "--" in name:
            r.add_error("Name must not contain consecutive hyphens (--).")
        for word in RESERVED_WORDS:
            if word in name:
                r.add_error(f"Name must not contain reserved word '{word}'.")
        return r

    # ── Description ──────────────────────────────────────────────────────────

    def validate_description(self, description, required: bool = True) -> ValidationResult:
        r = ValidationResult()
        desc = "" if description is None else str(description).strip()
        if not desc:
            if required:
                r.add_error("Description is required.")
            else:
                r.add_warning("No description: the command list will show nothing for it.")
            return r
        if len(desc) > DESCRIPTION_MAX:
            r.add_error(f"Description too long: {len(desc)} chars (max {DESCRIPTION_MAX}).")
        if len(desc) < 20:
            r.add_warning("Description is very short. Say what it does and when to use it.")
        if required and not any(hint in desc.lower() for hint in TRIGGER_HINTS):
            r.add_warning("Consider saying when it should be used (e.g. 'Use when the user asks about...').")
        return r

    # ── Tools ────────────────────────────────────────────────────────────────

    def validate_tools(self, value, key: str) -> ValidationResult:
        r = ValidationResult()
        if value is None or value == "" or value == []:
            return r
        if not isinstance(value, (str, list)):
            r.add_error(f"'{key}' must be a list or a comma separated string.")
            return r
        for tool in _tool_list(value):
            if tool in KNOWN_TOOLS or PATTERN_TOOL_RE.match(tool):
                continue
            r.add_warning(f"Unknown tool '{tool}' in '{key}'.")
        return r

    # ── Agent fields ─────────────────────────────────────────────────────────

    def validate_agent_fields(self, record: dict) -> ValidationResult:
        r = ValidationResult()
        model = record.get("model")
        if model is not None and str(model) not in AGENT_MODELS and str(model) != "inherit":
            r.add_error(f"Unknown model '{model}'. Use one of: "
                        f"{', '.join(m for m in AGENT_MODELS if m)} or inherit.")
        turns = record.get("maxTurns")
        if turns is not None:
            if isinstance(turns, bool) or not isinstance(turns, int):
                r.add_error("'maxTurns' must be a whole number.")
            elif turns < 0:
                r.add_error("'maxTurns' must not be negative.")
        color = record.get("color")
        if color is not None and str(color) not in AGENT_COLORS:
            r.add_warning(f"Unusual color '{color}'.")
        return r

    # ── Skill flags ──────────────────────────────────────────────────────────

    def validate_skill_flags(self, record: dict) -> ValidationResult:
        r = ValidationResult()
        for key in ("user-invocable", "disable-model-invocation"):
            if key in record and not isinstance(record[key], bool):
                r.add_error(f"'{key}' must be true or false.")
        if record.get("user-invocable") is False and record.get("disable-model-invocation") is True:
            r.add_warning("Skill can be invoked neither by the user nor by the model.")
        return r

    # ── Full record ──────────────────────────────────────────────────────────

    def validate_record(self, record: dict, artifact_type: str) -> ValidationResult:
        r = ValidationResult()
        if artifact_type in ("skill", "agent"):
            r.merge(self.validate_name(record.get("name")))
        r.merge(self.validate_description(record.get("description"),
                                          required=artifact_type != "command"))
        if artifact_type == "skill":
            r.merge(self.validate_tools(record.get("allowed-tools"), "allowed-tools"))
            r.merge(self.validate_skill_flags(record))
        elif artifact_type == "agent":
            r.merge(self.validate_tools(record.get("tools"), "tools"))
            r.merge(self.validate_agent_fields(record))
        return r

    # ── Body ─────────────────────────────────────────────────────────────────

    def validate_body(self, body: str) -> ValidationResult:
        r = ValidationResult()
        if not body or not body.strip():
            r.add_warning("Body is empty. Add the instructions to follow when invoked.")
            return r
        lines = body.splitlines()
        if len(lines) > BODY_MAX_LINES:
            r.add_warning(f"Body is {len(lines)} lines. Consider moving detail into "
                          f"reference files (keep it under {BODY_MAX_LINES} lines).")
        return r

    # ── Raw document ─────────────────────────────────────────────────────────

    def validate_document(self, raw: str, artifact_type: str) -> ValidationResult:
        r = ValidationResult()
        block, body = metadata_codec.split_frontmatter(raw)
        if block is None:
            if artifact_type == "command":
                return r.merge(self.validate_body(raw))
            r.add_error("Missing frontmatter: the document must start with a '---' block.")
            return r
        record = metadata_codec.parse_frontmatter(raw)
        if record is None:
            r.add_error("Frontmatter is not valid YAML.")
            return r
        r.merge(self.validate_record(record, artifact_type))
        r.merge(self.validate_body(body))
        logger.debug("Validated %s: %d error(s), %d warning(s)",
                     artifact_type, len(r.errors), len(r.warnings))
        return r
