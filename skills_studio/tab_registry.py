"""
Tab Registry - ordered open buffers, the active index and the tab-reuse policy
"""

import logging
from dataclasses import dataclass

from skills_studio.models import Artifact, ArtifactContent

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Tab:
    """
    One open buffer. Identity is (artifact_id, path); path None is the
    artifact's primary document (the main tab).
    """
    artifact: Artifact
    artifact_content: ArtifactContent
    path: str | None
    label: str
    content: str
    original_content: str
    dirty: bool = False
    saving: bool = False

    @property
    def artifact_id(self) -> str:
        return self.artifact.id

    @property
    def is_main(self) -> bool:
        return self.path is None

    @property
    def key(self) -> tuple[str, str | None]:
        return self.artifact.id, self.path

    @classmethod
    def main(cls, artifact: Artifact, content: ArtifactContent) -> "Tab":
        text = content.raw_content or ""
        return cls(
            artifact=artifact, artifact_content=content, path=None,
            label=artifact.name, content=text, original_content=text,
        )

    @classmethod
    def sub_file(cls, artifact: Artifact, content: ArtifactContent,
                 path: str, text: str) -> "Tab":
        label = path.rsplit("/", 1)[-1] if "/" in path else path
        return cls(
            artifact=artifact, artifact_content=content, path=path,
            label=label, content=text, original_content=text,
        )


@dataclass(frozen=True)
class TabView:
    """What the tab bar needs to draw one tab."""
    label: str
    dirty: bool
    active: bool
    is_main: bool
    artifact_type: str
    saving: bool = False


class TabRegistry:
    """
    Owns the tab list. At most one main tab exists per artifact id, and
    active_index is a valid index whenever the registry is not empty.
    """

    def __init__(self, reuse_clean_tabs: bool = True):
        self._tabs: list[Tab] = []
        self._active = 0
        self.reuse_clean_tabs = reuse_clean_tabs

    # ── Queries ──────────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._tabs)

    def __iter__(self):
        return iter(list(self._tabs))

    def __getitem__(self, index: int) -> Tab:
        return self._tabs[index]

    @property
    def is_empty(self) -> bool:
        return not self._tabs

    @property
    def active_index(self) -> int:
        return self._active

    @property
    def active_tab(self) -> Tab | None:
        if not self._tabs:
            return None
        return self._tabs[self._active]

    def index_of(self, artifact_id: str, path: str | None = None) -> int:
        for i, tab in enumerate(self._tabs):
            if tab.artifact_id == artifact_id and tab.path == path:
                return i
        return -1

    def find_main(self, artifact_id: str) -> Tab | None:
        i = self.index_of(artifact_id, None)
        return self._tabs[i] if i >= 0 else None

    def tabs_for(self, artifact_id: str) -> list[Tab]:
        return [t for t in self._tabs if t.artifact_id == artifact_id]

    def any_dirty(self) -> bool:
        return any(t.dirty for t in self._tabs)

    def views(self) -> list[TabView]:
        return [
            TabView(
                label=t.label, dirty=t.dirty, active=(i == self._active),
                is_main=t.is_main, artifact_type=t.artifact.type, saving=t.saving,
            )
            for i, t in enumerate(self._tabs)
        ]

    # ── Opening ──────────────────────────────────────────────────────────────

    def activate(self, index: int) -> Tab:
        if not 0 <= index < len(self._tabs):
            raise IndexError(f"No tab at index {index}")
        self._active = index
        return self._tabs[index]

    def open(self, artifact_id: str, path: str | None = None) -> int | None:
        """Focus the tab with this identity if it is already open."""
        i = self.index_of(artifact_id, path)
        if i < 0:
            return None
        self._active = i
        return i

    def add(self, tab: Tab) -> int:
        """Append and focus a new tab. Identities must stay unique."""
        if self.index_of(tab.artifact_id, tab.path) >= 0:
            raise ValueError(f"Tab already open: {tab.key}")
        self._tabs.append(tab)
        self._active = len(self._tabs) - 1
        return self._active

    def open_main(self, artifact: Artifact, content: ArtifactContent) -> tuple[int, bool]:
        """
        Show an artifact's main document. Returns (index, replaced).

        An existing main tab for the artifact is focused. Otherwise a clean
        main tab of a different artifact under focus is replaced in place,
        which keeps the tab list bounded while browsing; anything else appends.
        """
        existing = self.open(artifact.id, None)
        if existing is not None:
            return existing, False

        tab = Tab.main(artifact, content)
        active = self.active_tab
        if (self.reuse_clean_tabs and active is not None and active.is_main
                and not active.dirty and not active.saving
                and active.artifact_id != artifact.id):
            logger.debug("Replacing clean tab '%s' with '%s'", active.label, artifact.name)
            self._tabs[self._active] = tab
            return self._active, True
        return self.add(tab), False

    # ── Closing ──────────────────────────────────────────────────────────────

    def remove(self, index: int) -> Tab:
        if not 0 <= index < len(self._tabs):
            raise IndexError(f"No tab at index {index}")
        tab = self._tabs.pop(index)
        if index <= self._active:
            self._active -= 1
        self._clamp()
        return tab

    def close_all_for_artifact(self, artifact_id: str) -> list[Tab]:
        """Drop every tab of an artifact; the focused tab stays focused if it survives."""
        active = self.active_tab
        removed = [t for t in self._tabs if t.artifact_id == artifact_id]
        if not removed:
            return []
        before = sum(1 for i, t in enumerate(self._tabs)
                     if t.artifact_id == artifact_id and i < self._active)
        self._tabs = [t for t in self._tabs if t.artifact_id != artifact_id]
        if active is not None and active.artifact_id != artifact_id:
            self._active = self._tabs.index(active)
        else:
            self._active -= before
            self._clamp()
        return removed

    def _clamp(self) -> None:
        if not self._tabs:
            self._active = 0
        else:
            self._active = min(max(self._active, 0), len(self._tabs) - 1)
