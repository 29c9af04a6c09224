"""
Editor Session - one independent multi-document editor (pure logic, no Qt)

Owns the tab registry, dirty tracking, the content synchronizer and the
metadata form of the artifact under focus. The UI talks to it through method
calls and hears back through a StudioListener.
"""

import enum
import logging
from typing import Callable

from skills_studio import metadata_codec
from skills_studio.content_sync import ContentSynchronizer, EditingSurface, TextSurface
from skills_studio.dirty_tracker import DirtyTracker
from skills_studio.errors import ConfirmationDeclined
from skills_studio.form_state import FormState
from skills_studio.models import Artifact, ArtifactContent
from skills_studio.tab_registry import Tab, TabRegistry, TabView

logger = logging.getLogger(__name__)


class SwitchResult(enum.Enum):
    NONE    = "none"      # nothing happened
    REFRESH = "refresh"   # same artifact: surface and tab bar only
    REBUILD = "rebuild"   # different artifact: metadata form changes too


class StudioListener:
    """Callbacks from the session to the UI shell. All no-ops by default."""

    def tabs_changed(self, session: "EditorSession") -> None:
        pass

    def editor_rebuilt(self, session: "EditorSession") -> None:
        pass

    def document_closed(self, session: "EditorSession") -> None:
        pass

    def loading(self, session: "EditorSession", artifact: Artifact | None) -> None:
        pass

    def notify(self, message: str, level: str = "info") -> None:
        pass

    def library_changed(self, library) -> None:
        pass

    def validation_finished(self, result) -> None:
        pass


def _decline(_message: str) -> bool:
    return False


class EditorSession:

    def __init__(self, surface: EditingSurface | None = None,
                 listener: StudioListener | None = None,
                 confirm: Callable[[str], bool] | None = None,
                 reuse_clean_tabs: bool = True):
        self.registry = TabRegistry(reuse_clean_tabs=reuse_clean_tabs)
        self.tracker  = DirtyTracker(self.registry)
        self.surface  = surface if surface is not None else TextSurface()
        self.sync     = ContentSynchronizer(self.registry, self.surface, self.tracker)
        self.listener = listener or StudioListener()
        self.confirm  = confirm or _decline
        self.form: FormState | None = None
        self.loading_artifact: Artifact | None = None

    # ── State ────────────────────────────────────────────────────────────────

    @property
    def active_tab(self) -> Tab | None:
        return self.registry.active_tab

    @property
    def current_artifact(self) -> Artifact | None:
        tab = self.registry.active_tab
        return tab.artifact if tab else None

    @property
    def has_document(self) -> bool:
        return not self.registry.is_empty

    def tab_views(self) -> list[TabView]:
        return self.registry.views()

    def can_save(self) -> bool:
        return self.tracker.can_save(self.active_tab)

    def can_discard(self) -> bool:
        return self.tracker.can_discard(self.active_tab)

    def any_dirty(self) -> bool:
        return self.tracker.any_dirty()

    def notify(self, message: str, level: str = "info") -> None:
        self.listener.notify(message, level)

    def set_loading(self, artifact: Artifact | None) -> None:
        self.loading_artifact = artifact
        self.listener.loading(self, artifact)

    # ── Checkpoints ──────────────────────────────────────────────────────────

    def checkpoint(self) -> None:
        """Capture the surface, then pending form edits, into the focused tab."""
        self.sync.capture_from_surface()
        self.sync.capture_metadata_into_content(self.form)

    def text_edited(self) -> None:
        """The user typed in the surface."""
        if self.sync.capture_from_surface():
            self.listener.tabs_changed(self)

    def edit_form(self, change: Callable[[FormState], bool]) -> bool:
        """
        Apply a form setter, e.g. ``session.edit_form(lambda f: f.add_tool("Bash"))``.
        A real change dirties the artifact's main tab and is merged into its text.
        """
        tab = self.active_tab
        if tab is None or self.form is None:
            return False
        if not change(self.form):
            return False
        main = self.registry.find_main(tab.artifact_id)
        if main is not None:
            self.tracker.mark(main)
        self.checkpoint()
        self.listener.tabs_changed(self)
        return True

    def refresh_form_from_surface(self) -> bool:
        """Re-read the form from frontmatter typed into the main tab's surface."""
        tab = self.active_tab
        if tab is None or not tab.is_main or (self.form and self.form.modified):
            return False
        fm = metadata_codec.parse_frontmatter(self.surface.text())
        if fm is None:
            return False
        self.form = FormState.from_frontmatter(fm, tab.artifact.type)
        return True

    # ── Navigation ───────────────────────────────────────────────────────────

    def switch(self, index: int) -> SwitchResult:
        if index == self.registry.active_index or not 0 <= index < len(self.registry):
            return SwitchResult.NONE
        self.checkpoint()
        previous = self.active_tab
        current = self.registry.activate(index)
        if previous is None or previous.artifact_id != current.artifact_id:
            self._rebuild()
            return SwitchResult.REBUILD
        self._refresh()
        return SwitchResult.REFRESH

    def focus(self, artifact_id: str, path: str | None = None) -> bool:
        """Switch to an already open tab. Returns False if it is not open."""
        index = self.registry.index_of(artifact_id, path)
        if index < 0:
            return False
        self.switch(index)
        return True

    def open_main(self, artifact: Artifact, content: ArtifactContent) -> int:
        self.checkpoint()
        index, replaced = self.registry.open_main(artifact, content)
        logger.info("%s '%s' at tab %d", "Replaced with" if replaced else "Opened",
                    artifact.name, index)
        self._rebuild()
        return index

    def open_sub_file(self, artifact: Artifact, content: ArtifactContent,
                      path: str, text: str) -> int:
        if self.focus(artifact.id, path):
            return self.registry.active_index
        self.checkpoint()
        previous = self.active_tab
        index = self.registry.add(Tab.sub_file(artifact, content, path, text))
        if previous is None or previous.artifact_id != artifact.id:
            self._rebuild()
        else:
            self._refresh()
        return index

    # ── Closing ──────────────────────────────────────────────────────────────

    def close(self, index: int) -> Tab:
        """
        Close a tab, asking before unsaved changes are thrown away.
        Raises ConfirmationDeclined if the user keeps them.
        """
        if not 0 <= index < len(self.registry):
            raise IndexError(f"No tab at index {index}")
        self.checkpoint()
        tab = self.registry[index]
        if tab.dirty and not self.confirm(f'Discard changes to "{tab.label}"?'):
            raise ConfirmationDeclined(tab.label)
        previous = self.active_tab
        self.registry.remove(index)
        self._after_removal(previous)
        return tab

    def close_all_for_artifact(self, artifact_id: str) -> list[Tab]:
        """Close every tab of a deleted artifact without asking."""
        self.sync.capture_from_surface()
        previous = self.active_tab
        removed = self.registry.close_all_for_artifact(artifact_id)
        if removed:
            self._after_removal(previous)
        return removed

    def close_sub_file(self, artifact_id: str, path: str) -> Tab | None:
        """Close a sub-file tab whose file no longer exists, without asking."""
        index = self.registry.index_of(artifact_id, path)
        if index < 0:
            return None
        self.sync.capture_from_surface()
        previous = self.active_tab
        tab = self.registry.remove(index)
        self._after_removal(previous)
        return tab

    def confirm_close_all(self) -> bool:
        dirty = self.tracker.dirty_tabs()
        if not dirty:
            return True
        return self.confirm(f"{len(dirty)} tab(s) have unsaved changes. Close anyway?")

    def _after_removal(self, previous: Tab | None) -> None:
        current = self.active_tab
        if current is None:
            self.form = None
            self.listener.document_closed(self)
        elif previous is None or previous.artifact_id != current.artifact_id:
            self._rebuild()
        else:
            self._refresh()

    # ── Save / discard bookkeeping ───────────────────────────────────────────

    def discard(self, index: int | None = None) -> bool:
        tab = self.active_tab if index is None else self.registry[index]
        if tab is None or not tab.dirty:
            return False
        if tab is self.active_tab:
            self.sync.capture_from_surface()
        if not self.confirm(f'Discard changes to "{tab.label}"?'):
            raise ConfirmationDeclined(tab.label)
        self.tracker.discard(tab)
        if tab is not self.active_tab:
            self.listener.tabs_changed(self)
        elif tab.is_main:
            self._rebuild()
        else:
            self._refresh()
        return True

    def begin_save(self, tab: Tab) -> None:
        tab.saving = True
        self.listener.tabs_changed(self)

    def mark_saved(self, tab: Tab, snapshot: str) -> None:
        tab.saving = False
        if tab is self.active_tab:
            self.sync.capture_from_surface()
        self.tracker.mark_saved(tab, snapshot)
        self.listener.tabs_changed(self)

    def mark_save_failed(self, tab: Tab) -> None:
        tab.saving = False
        self.listener.tabs_changed(self)

    def propagate_content(self, artifact_id: str, content: ArtifactContent,
                          artifact: Artifact | None = None) -> int:
        """Hand a fresh ArtifactContent (and snapshot) to every tab of an artifact."""
        tabs = self.registry.tabs_for(artifact_id)
        for tab in tabs:
            tab.artifact_content = content
            if artifact is not None:
                tab.artifact = artifact
        if tabs and self.current_artifact and self.current_artifact.id == artifact_id:
            self.listener.editor_rebuilt(self)
        return len(tabs)

    def replace_artifacts(self, artifacts: list[Artifact]) -> None:
        """Swap in fresh library snapshots for open tabs; labels of main tabs follow."""
        by_id = {a.id: a for a in artifacts}
        for tab in self.registry:
            fresh = by_id.get(tab.artifact_id)
            if fresh is None:
                continue
            tab.artifact = fresh
            if tab.is_main:
                tab.label = fresh.name
        if not self.registry.is_empty:
            self.listener.tabs_changed(self)

    def show_fallback(self) -> None:
        """After a failed load: redisplay the focused tab, or nothing."""
        if self.registry.is_empty:
            self.form = None
            self.listener.document_closed(self)
        else:
            self.listener.editor_rebuilt(self)

    # ── Rendering ────────────────────────────────────────────────────────────

    def _rebuild(self) -> None:
        tab = self.active_tab
        main = self.registry.find_main(tab.artifact_id)
        source = main.content if main is not None else tab.artifact_content.raw_content
        fm = metadata_codec.parse_frontmatter(source)
        if fm is None:
            fm = tab.artifact_content.frontmatter
        self.form = FormState.from_frontmatter(fm, tab.artifact.type)
        self.sync.load(tab)
        self.listener.editor_rebuilt(self)

    def _refresh(self) -> None:
        self.sync.load(self.active_tab)
        self.listener.tabs_changed(self)
