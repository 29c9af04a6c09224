"""
Models - artifact snapshots as returned by the Skills Studio service
"""

from dataclasses import dataclass, field
from typing import Iterator

ARTIFACT_TYPES = ("skill", "command", "agent")
SCOPES         = ("global", "project", "bundled")

TYPE_LABELS  = {"skill": "Skill", "command": "Command", "agent": "Agent"}
SCOPE_LABELS = {"global": "Global", "project": "Project", "bundled": "Bundled"}


@dataclass(frozen=True)
class Artifact:
    id: str
    type: str
    scope: str
    name: str
    description: str = ""
    has_icon: bool = False
    bundled_source: bool = False
    scope_label: str = ""
    installed: bool = True
    dir_name: str = ""

    @property
    def read_only(self) -> bool:
        return self.scope == "bundled"

    @property
    def can_install(self) -> bool:
        return self.read_only and not self.installed and bool(self.dir_name)

    @property
    def can_uninstall(self) -> bool:
        return self.read_only and self.installed and bool(self.dir_name)

    @property
    def display_scope(self) -> str:
        return self.scope_label or SCOPE_LABELS.get(self.scope, self.scope)

    @classmethod
    def from_api(cls, data: dict) -> "Artifact":
        return cls(
            id             = str(data.get("id", "")),
            type           = data.get("type") or "skill",
            scope          = data.get("scope") or "global",
            name           = data.get("name") or "",
            description    = data.get("description") or "",
            has_icon       = bool(data.get("hasIcon", False)),
            bundled_source = bool(data.get("bundledSource", False)),
            scope_label    = data.get("scopeLabel") or "",
            installed      = bool(data.get("installed", True)),
            dir_name       = data.get("dirName") or "",
        )


@dataclass
class SubFile:
    name: str
    path: str
    size: int = 0
    type: str = "file"
    children: list["SubFile"] = field(default_factory=list)

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"

    def iter_files(self) -> Iterator["SubFile"]:
        if not self.is_dir:
            yield self
            return
        for child in self.children:
            yield from child.iter_files()

    @property
    def size_label(self) -> str:
        if self.size > 1024:
            return f"{round(self.size / 1024)}K"
        return f"{self.size}B"

    @classmethod
    def from_api(cls, data: dict) -> "SubFile":
        path = data.get("path") or data.get("name") or ""
        return cls(
            name     = data.get("name") or path.rsplit("/", 1)[-1],
            path     = path,
            size     = int(data.get("size") or 0),
            type     = data.get("type") or "file",
            children = [cls.from_api(c) for c in data.get("children") or []],
        )


@dataclass
class ArtifactContent:
    raw_content: str = ""
    frontmatter: dict = field(default_factory=dict)
    sub_files: list[SubFile] = field(default_factory=list)

    def file_paths(self) -> list[str]:
        return [f.path for sub in self.sub_files for f in sub.iter_files()]

    @classmethod
    def from_api(cls, data: dict) -> "ArtifactContent":
        fm = data.get("frontmatter")
        return cls(
            raw_content = data.get("rawContent") or "",
            frontmatter = fm if isinstance(fm, dict) else {},
            sub_files   = [SubFile.from_api(s) for s in data.get("subFiles") or []],
        )


@dataclass(frozen=True)
class Project:
    path: str
    label: str = ""

    @classmethod
    def from_api(cls, data) -> "Project":
        if isinstance(data, str):
            return cls(path=data, label=data.rstrip("/").rsplit("/", 1)[-1])
        path = data.get("path") or ""
        return cls(path=path, label=data.get("label") or data.get("name") or path)


@dataclass
class Library:
    artifacts: list[Artifact] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)

    def find(self, artifact_id: str) -> Artifact | None:
        for a in self.artifacts:
            if a.id == artifact_id:
                return a
        return None

    @classmethod
    def from_api(cls, data: dict) -> "Library":
        return cls(
            artifacts = [Artifact.from_api(a) for a in data.get("artifacts") or []],
            projects  = [Project.from_api(p) for p in data.get("projects") or []],
        )
