"""
Artifact Loader - fetches artifact and sub-file content with a stale-response guard

Every navigation takes a number from a monotonically increasing sequence.
When a fetch completes, its number is compared with the sequence's current
value; a mismatch means a newer navigation started meanwhile and the result
is dropped without touching any state. Requests are never cancelled, only
their effect is suppressed.
"""

import logging

from skills_studio.editor_session import EditorSession
from skills_studio.errors import StaleResponse
from skills_studio.models import Artifact, ArtifactContent
from skills_studio.tasks import TaskRunner

logger = logging.getLogger(__name__)


class FetchSequence:

    def __init__(self):
        self._value = 0

    @property
    def current(self) -> int:
        return self._value

    def next(self) -> int:
        self._value += 1
        return self._value

    def check(self, seq: int) -> None:
        """Raise StaleResponse unless `seq` is the newest navigation."""
        if seq != self._value:
            raise StaleResponse(seq, self._value)


class ArtifactLoader:

    def __init__(self, session: EditorSession, client, runner: TaskRunner,
                 sequence: FetchSequence | None = None):
        self._session  = session
        self._client   = client
        self._runner   = runner
        self._sequence = sequence or FetchSequence()

    @property
    def sequence(self) -> FetchSequence:
        return self._sequence

    # ── Artifacts ────────────────────────────────────────────────────────────

    def navigate(self, artifact: Artifact) -> int:
        """Show an artifact's main document, fetching it unless a tab is open."""
        seq = self._sequence.next()
        if self._session.focus(artifact.id, None):
            self._session.set_loading(None)
            return seq

        self._session.checkpoint()
        self._session.set_loading(artifact)
        logger.debug("Navigation #%d: loading '%s'", seq, artifact.name)
        self._runner.submit(
            lambda: self._client.fetch_artifact_content(artifact.id),
            lambda content: self._on_artifact_loaded(seq, artifact, content),
            lambda exc: self._on_artifact_failed(seq, artifact, exc),
        )
        return seq

    def _on_artifact_loaded(self, seq: int, artifact: Artifact,
                            content: ArtifactContent) -> None:
        try:
            self._sequence.check(seq)
        except StaleResponse as e:
            logger.debug("Dropping load of '%s': %s", artifact.name, e)
            return
        self._session.set_loading(None)
        self._session.open_main(artifact, content)

    def _on_artifact_failed(self, seq: int, artifact: Artifact, exc: Exception) -> None:
        try:
            self._sequence.check(seq)
        except StaleResponse as e:
            logger.debug("Dropping failed load of '%s': %s", artifact.name, e)
            return
        logger.error("Failed to load artifact '%s': %s", artifact.name, exc)
        self._session.set_loading(None)
        self._session.notify(f"Failed to load {artifact.name}: {exc}", "error")
        self._session.show_fallback()

    # ── Tab bar ──────────────────────────────────────────────────────────────

    def switch(self, index: int):
        """A tab picked by the user supersedes any load still in flight."""
        self._supersede()
        return self._session.switch(index)

    def close(self, index: int):
        """Close a tab; raises ConfirmationDeclined and keeps pending loads if refused."""
        tab = self._session.close(index)
        self._supersede()
        return tab

    def _supersede(self) -> None:
        seq = self._sequence.next()
        if self._session.loading_artifact is not None:
            logger.debug("Navigation #%d: pending load of '%s' superseded",
                         seq, self._session.loading_artifact.name)
            self._session.set_loading(None)

    # ── Sub-files ────────────────────────────────────────────────────────────

    def open_sub_file(self, path: str) -> int | None:
        """Open a sub-file of the artifact under focus in its own tab."""
        tab = self._session.active_tab
        if tab is None:
            return None
        artifact, content = tab.artifact, tab.artifact_content
        seq = self._sequence.next()
        if self._session.focus(artifact.id, path):
            return seq

        self._session.checkpoint()
        self._runner.submit(
            lambda: self._client.fetch_sub_file(artifact.id, path),
            lambda text: self._on_sub_file_loaded(seq, artifact, content, path, text),
            lambda exc: self._on_sub_file_failed(seq, path, exc),
        )
        return seq

    def _on_sub_file_loaded(self, seq: int, artifact: Artifact, content: ArtifactContent,
                            path: str, text: str) -> None:
        try:
            self._sequence.check(seq)
        except StaleResponse as e:
            logger.debug("Dropping sub-file '%s': %s", path, e)
            return
        self._session.open_sub_file(artifact, content, path, text)

    def _on_sub_file_failed(self, seq: int, path: str, exc: Exception) -> None:
        try:
            self._sequence.check(seq)
        except StaleResponse:
            return
        logger.error("Failed to load file '%s': %s", path, exc)
        self._session.notify(f"Failed to load file: {exc}", "error")
