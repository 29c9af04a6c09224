"""
Skills Studio - controller wiring the REST client, task runner and editor session

Every operation the UI triggers goes through here. Network work is handed to
the task runner; results come back as session mutations and listener calls.
"""

import logging
from pathlib import Path
from typing import Callable

from skills_studio.artifact_loader import ArtifactLoader
from skills_studio.content_sync import EditingSurface
from skills_studio.editor_session import EditorSession, StudioListener
from skills_studio.errors import ConfirmationDeclined, StudioError
from skills_studio.models import Artifact, Library
from skills_studio.persistence import PersistenceGateway
from skills_studio.tab_registry import Tab
from skills_studio.tasks import TaskRunner
from skills_studio.validator import ArtifactValidator, ValidationResult

logger = logging.getLogger(__name__)


class SkillsStudio:

    def __init__(self, client, runner: TaskRunner,
                 surface: EditingSurface | None = None,
                 listener: StudioListener | None = None,
                 confirm: Callable[[str], bool] | None = None,
                 reuse_clean_tabs: bool = True):
        self.client  = client
        self.runner  = runner
        self.session = EditorSession(surface=surface, listener=listener, confirm=confirm,
                                     reuse_clean_tabs=reuse_clean_tabs)
        self.loader  = ArtifactLoader(self.session, client, runner)
        self.gateway = PersistenceGateway(self.session, client, runner,
                                          on_main_saved=lambda _tab: self.refresh_library())
        self.validator = ArtifactValidator()
        self.library = Library()

    @property
    def listener(self) -> StudioListener:
        return self.session.listener

    # ── Library ──────────────────────────────────────────────────────────────

    def refresh_library(self) -> None:
        self.runner.submit(self.client.fetch_library, self._on_library, self._on_library_failed)

    def _on_library(self, library: Library) -> None:
        self.library = library
        logger.info("Library loaded: %d artifact(s), %d project(s)",
                    len(library.artifacts), len(library.projects))
        self.session.replace_artifacts(library.artifacts)
        self.listener.library_changed(library)

    def _on_library_failed(self, exc: Exception) -> None:
        logger.error("Failed to load library: %s", exc)
        self.session.notify(f"Failed to load library: {exc}", "error")

    # ── Documents ────────────────────────────────────────────────────────────

    def navigate(self, artifact: Artifact) -> int:
        return self.loader.navigate(artifact)

    def open_sub_file(self, path: str) -> int | None:
        return self.loader.open_sub_file(path)

    def switch_tab(self, index: int):
        return self.loader.switch(index)

    def close_tab(self, index: int) -> Tab:
        return self.loader.close(index)

    def save_active(self) -> Tab | None:
        """Save the focused tab. Raises SaveInProgress if it is already saving."""
        tab = self.session.active_tab
        if tab is None:
            return None
        if tab.artifact.read_only:
            self.session.notify(f"{tab.artifact.name} is bundled and read-only", "warning")
            return None
        return self.gateway.save(tab)

    def discard_active(self) -> bool:
        """Revert the focused tab. Raises ConfirmationDeclined if the user says no."""
        return self.session.discard()

    def can_close_panel(self) -> bool:
        self.session.checkpoint()
        return self.session.confirm_close_all()

    # ── Artifact deletion ────────────────────────────────────────────────────

    def delete_artifact(self, artifact: Artifact, confirmed: bool = False) -> None:
        """
        Delete an artifact on the server, then close all of its tabs without
        further confirmation and reload the library.
        """
        if artifact.read_only:
            raise StudioError(f"{artifact.name} is bundled and cannot be deleted")
        if not confirmed:
            message = f'Delete {artifact.type} "{artifact.name}"? This cannot be undone.'
            if any(t.artifact_id == artifact.id for t in self.session.tracker.dirty_tabs()):
                message += " Unsaved changes will be lost."
            if not self.session.confirm(message):
                raise ConfirmationDeclined(artifact.name)

        def deleted(_ack) -> None:
            removed = self.session.close_all_for_artifact(artifact.id)
            logger.info("Deleted '%s' (%d tab(s) closed)", artifact.name, len(removed))
            self.session.notify(f"Deleted {artifact.name}")
            self.refresh_library()

        def failed(exc: Exception) -> None:
            logger.error("Delete of '%s' failed: %s", artifact.name, exc)
            self.session.notify(f"Delete failed: {exc}", "error")

        self.runner.submit(lambda: self.client.delete_artifact(artifact.id), deleted, failed)

    # ── Bundled skills ───────────────────────────────────────────────────────

    def install_bundled(self, artifact: Artifact) -> None:
        """Copy a bundled skill into the user's skills; the copy is editable."""
        if not artifact.can_install:
            raise StudioError(f"{artifact.name} is not an uninstalled bundled skill")
        self._bundled_request(artifact, "install", self.client.install_bundled,
                              f"Installed {artifact.name}.")

    def uninstall_bundled(self, artifact: Artifact, confirmed: bool = False) -> None:
        if not artifact.can_uninstall:
            raise StudioError(f"{artifact.name} is not an installed bundled skill")
        if not confirmed and not self.session.confirm(
                f'Uninstall "{artifact.name}"? The installed copy is removed.'):
            raise ConfirmationDeclined(artifact.name)
        self._bundled_request(artifact, "uninstall", self.client.uninstall_bundled,
                              f"Uninstalled {artifact.name}.")

    def _bundled_request(self, artifact: Artifact, verb: str, call, default_message: str) -> None:
        def done(reply) -> None:
            logger.info("%s of bundled '%s' finished", verb.capitalize(), artifact.dir_name)
            message = reply.get("message") if isinstance(reply, dict) else None
            self.session.notify(message or default_message)
            self.refresh_library()

        def failed(exc: Exception) -> None:
            logger.error("%s of '%s' failed: %s", verb.capitalize(), artifact.dir_name, exc)
            self.session.notify(f"{verb.capitalize()} failed: {exc}", "error")

        self.runner.submit(lambda: call(artifact.dir_name), done, failed)

    # ── Export ───────────────────────────────────────────────────────────────

    def export_artifact(self, artifact: Artifact, destination) -> None:
        """
        Download an artifact's export archive to `destination`. A directory
        receives the file under the name the server suggests.
        """
        destination = Path(destination)

        def download() -> Path:
            filename, data = self.client.export_artifact(artifact.id)
            target = destination
            if target.is_dir():
                target = target / Path(filename or f"{artifact.name}.zip").name
            target.write_bytes(data)
            return target

        def exported(target: Path) -> None:
            logger.info("Exported '%s' to %s", artifact.name, target)
            self.session.notify(f"Exported {artifact.name} to {target}")

        def failed(exc: Exception) -> None:
            logger.error("Export of '%s' failed: %s", artifact.name, exc)
            self.session.notify(f"Export failed: {exc}", "error")

        self.runner.submit(download, exported, failed)

    # ── Sub-file management ──────────────────────────────────────────────────

    def create_sub_file(self, path: str, content: str = "", is_dir: bool = False) -> None:
        artifact = self._editable_artifact()
        path = path.strip().strip("/")
        if not path:
            raise StudioError("File name is required")

        def created(_ack) -> None:
            logger.info("Created %s '%s' in '%s'", "folder" if is_dir else "file",
                        path, artifact.name)
            self.session.notify(f"Created {path}")
            self._reload_content(artifact)

        def failed(exc: Exception) -> None:
            logger.error("Create of '%s' failed: %s", path, exc)
            self.session.notify(f"Create failed: {exc}", "error")

        self.runner.submit(
            lambda: self.client.create_sub_file(artifact.id, path, content, is_dir),
            created, failed,
        )

    def delete_sub_file(self, path: str, confirmed: bool = False) -> None:
        artifact = self._editable_artifact()
        if not confirmed and not self.session.confirm(f'Delete "{path}"?'):
            raise ConfirmationDeclined(path)

        def deleted(_ack) -> None:
            self.session.close_sub_file(artifact.id, path)
            self.session.notify(f"Deleted {path}")
            self._reload_content(artifact)

        def failed(exc: Exception) -> None:
            logger.error("Delete of '%s' failed: %s", path, exc)
            self.session.notify(f"Delete failed: {exc}", "error")

        self.runner.submit(
            lambda: self.client.delete_sub_file(artifact.id, path), deleted, failed,
        )

    def _editable_artifact(self) -> Artifact:
        artifact = self.session.current_artifact
        if artifact is None:
            raise StudioError("No artifact is open")
        if artifact.read_only:
            raise StudioError(f"{artifact.name} is bundled and read-only")
        return artifact

    def _reload_content(self, artifact: Artifact) -> None:
        """Re-fetch an artifact so every tab of it sees the new sub-file tree."""
        self.runner.submit(
            lambda: self.client.fetch_artifact_content(artifact.id),
            lambda content: self.session.propagate_content(artifact.id, content),
            lambda exc: logger.warning("Refresh of '%s' failed: %s", artifact.name, exc),
        )

    # ── Validation ───────────────────────────────────────────────────────────

    def validate_local(self) -> ValidationResult | None:
        self.session.checkpoint()
        main = self._active_main()
        if main is None:
            return None
        return self.validator.validate_document(main.content, main.artifact.type)

    def validate_active(self) -> None:
        """Validate the focused artifact locally, then against the server."""
        local = self.validate_local()
        if local is None:
            return
        main = self._active_main()
        content, kind = main.content, main.artifact.type

        def checked(report: dict) -> None:
            result = ValidationResult().merge(local)
            result.merge(ValidationResult.from_report(report or {}))
            self.listener.validation_finished(result)

        def unavailable(exc: Exception) -> None:
            logger.warning("Server validation unavailable: %s", exc)
            local.add_warning(f"Server validation unavailable: {exc}")
            self.listener.validation_finished(local)

        self.runner.submit(
            lambda: self.client.validate_artifact(content, kind), checked, unavailable,
        )

    def _active_main(self) -> Tab | None:
        tab = self.session.active_tab
        if tab is None:
            return None
        return self.session.registry.find_main(tab.artifact_id)
