"""
Content Synchronizer - keeps tab text and the live editing surface consistent
"""

import logging

from skills_studio import metadata_codec
from skills_studio.dirty_tracker import DirtyTracker
from skills_studio.form_state import FormState
from skills_studio.tab_registry import Tab, TabRegistry

logger = logging.getLogger(__name__)


class EditingSurface:
    """The text editor the session reads from and pushes into."""

    def text(self) -> str:
        raise NotImplementedError

    def set_text(self, text: str) -> None:
        raise NotImplementedError

    def reset_preview(self) -> None:
        pass

    def show_toolbar(self) -> None:
        pass


class TextSurface(EditingSurface):
    """In-memory surface for headless use."""

    def __init__(self, text: str = ""):
        self.value = text
        self.preview_visible = False
        self.toolbar_visible = True

    def text(self) -> str:
        return self.value

    def set_text(self, text: str) -> None:
        self.value = text

    def reset_preview(self) -> None:
        self.preview_visible = False

    def show_toolbar(self) -> None:
        self.toolbar_visible = True


class ContentSynchronizer:

    def __init__(self, registry: TabRegistry, surface: EditingSurface,
                 tracker: DirtyTracker):
        self._registry = registry
        self._surface  = surface
        self._tracker  = tracker

    @property
    def surface(self) -> EditingSurface:
        return self._surface

    def capture_from_surface(self) -> bool:
        """Copy the surface into the active tab. Returns True if it became dirty."""
        tab = self._registry.active_tab
        if tab is None:
            return False
        return self._tracker.note_content(tab, self._surface.text())

    def capture_metadata_into_content(self, form: FormState | None) -> bool:
        """
        Merge pending form edits into the artifact's main document.

        With the main tab focused the merge runs over the surface text and is
        written back to it. With a sub-file focused the main tab's stored text
        is updated instead. Returns True if the document text changed.
        """
        active = self._registry.active_tab
        if active is None or form is None or not form.modified:
            return False
        target = active if active.is_main else self._registry.find_main(active.artifact_id)
        if target is None:
            return False

        base = self._surface.text() if target is active else target.content
        merged = metadata_codec.merge(base, metadata_codec.collect(form, target.artifact.type))
        form.mark_applied()
        if merged == base:
            return False

        self._tracker.note_content(target, merged)
        self._tracker.mark(target)
        if target is active:
            self._surface.set_text(merged)
        logger.debug("Merged form metadata into '%s'", target.label)
        return True

    def load(self, tab: Tab) -> None:
        self._surface.set_text(tab.content)
        self._surface.reset_preview()
        self._surface.show_toolbar()
