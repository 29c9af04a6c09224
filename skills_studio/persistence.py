"""
Persistence Gateway - routes saves to the right endpoint and reconciles the result

A tab has at most one save in flight; asking again raises SaveInProgress.
On failure the tab keeps its edits and stays dirty so the user can retry.
"""

import logging
from typing import Callable

from skills_studio.editor_session import EditorSession
from skills_studio.errors import SaveInProgress
from skills_studio.models import ArtifactContent
from skills_studio.tab_registry import Tab
from skills_studio.tasks import TaskRunner

logger = logging.getLogger(__name__)


class PersistenceGateway:

    def __init__(self, session: EditorSession, client, runner: TaskRunner,
                 on_main_saved: Callable[[Tab], None] | None = None):
        self._session = session
        self._client  = client
        self._runner  = runner
        self._on_main_saved = on_main_saved

    def save(self, tab: Tab | None = None) -> Tab | None:
        """Save a tab (the focused one by default). Returns the tab being saved."""
        self._session.checkpoint()
        tab = tab or self._session.active_tab
        if tab is None:
            return None
        if tab.saving:
            raise SaveInProgress(tab.label)

        snapshot = tab.content
        artifact_id, path = tab.artifact_id, tab.path
        if tab.is_main:
            job = lambda: self._client.save_artifact_content(artifact_id, snapshot)
        else:
            job = lambda: self._client.save_sub_file(artifact_id, path, snapshot)

        self._session.begin_save(tab)
        logger.debug("Saving '%s' (%d chars)", tab.label, len(snapshot))
        self._runner.submit(
            job,
            lambda _ack: self._on_saved(tab, snapshot),
            lambda exc: self._on_failed(tab, exc),
        )
        return tab

    def _on_saved(self, tab: Tab, snapshot: str) -> None:
        self._session.mark_saved(tab, snapshot)
        logger.info("Saved '%s'", tab.label)
        self._session.notify("Saved" if tab.is_main else f"Saved {tab.label}")
        if tab.is_main:
            self._refresh(tab)
            if self._on_main_saved:
                self._on_main_saved(tab)

    def _on_failed(self, tab: Tab, exc: Exception) -> None:
        self._session.mark_save_failed(tab)
        logger.error("Save of '%s' failed: %s", tab.label, exc)
        self._session.notify(f"Save failed: {exc}", "error")

    def _refresh(self, tab: Tab) -> None:
        """Re-read derived metadata after a main save. Failure only leaves it stale."""
        artifact_id = tab.artifact_id

        def apply(content: ArtifactContent) -> None:
            self._session.propagate_content(artifact_id, content)

        def ignore(exc: Exception) -> None:
            logger.warning("Refresh after save of '%s' failed: %s", tab.label, exc)

        self._runner.submit(
            lambda: self._client.fetch_artifact_content(artifact_id), apply, ignore,
        )
