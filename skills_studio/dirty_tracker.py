"""
Dirty Tracker - per-tab and aggregate unsaved-change state

Dirty is monotonic: editing sets it, and only save or discard clears it,
even if the text happens to match the baseline again.
"""

from skills_studio.tab_registry import Tab, TabRegistry


class DirtyTracker:

    def __init__(self, registry: TabRegistry):
        self._registry = registry

    @staticmethod
    def note_content(tab: Tab, content: str) -> bool:
        """Store new text for a tab. Returns True if this made the tab dirty."""
        tab.content = content
        if not tab.dirty and content != tab.original_content:
            tab.dirty = True
            return True
        return False

    @staticmethod
    def mark(tab: Tab) -> bool:
        if tab.dirty:
            return False
        tab.dirty = True
        return True

    @staticmethod
    def mark_saved(tab: Tab, snapshot: str) -> None:
        """`snapshot` reached the server; it becomes the baseline."""
        tab.original_content = snapshot
        if tab.content == snapshot:
            tab.dirty = False

    @staticmethod
    def discard(tab: Tab) -> None:
        tab.content = tab.original_content
        tab.dirty = False

    @staticmethod
    def can_save(tab: Tab | None) -> bool:
        return tab is not None and tab.dirty and not tab.saving

    @staticmethod
    def can_discard(tab: Tab | None) -> bool:
        return tab is not None and tab.dirty and not tab.saving

    def any_dirty(self) -> bool:
        return self._registry.any_dirty()

    def dirty_tabs(self) -> list[Tab]:
        return [t for t in self._registry if t.dirty]
