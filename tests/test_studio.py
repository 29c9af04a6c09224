import pytest

from fakes import make_artifact
from skills_studio.errors import ConfirmationDeclined, NetworkError, StudioError


# ── Library ──────────────────────────────────────────────────────────────────

def test_refresh_library(studio, listener):
    studio.refresh_library()
    assert {a.name for a in listener.library.artifacts} == {"foo", "bar", "reviewer"}
    assert studio.library is listener.library


def test_refresh_library_failure(studio, listener, client):
    client.fail["fetch_library"] = NetworkError("Connection refused")
    studio.refresh_library()
    assert listener.errors() == ["Failed to load library: Connection refused"]


# ── Artifact deletion ────────────────────────────────────────────────────────

def test_delete_artifact_closes_all_its_tabs(studio, answers, confirm, listener, client, foo):
    studio.navigate(foo)
    studio.open_sub_file("ref.md")
    answers.append(True)
    studio.delete_artifact(foo)

    assert confirm.asked == ['Delete skill "foo"? This cannot be undone.']
    assert not studio.session.has_document
    assert foo.id not in client.artifacts
    assert ("Deleted foo", "info") in listener.messages
    assert foo.id not in {a.id for a in listener.library.artifacts}


def test_delete_keeps_other_artifacts_open(studio, surface, foo, bar):
    studio.navigate(foo)
    surface.set_text(surface.text() + "x")
    studio.session.text_edited()
    studio.navigate(bar)
    studio.delete_artifact(bar, confirmed=True)
    assert [t.artifact_id for t in studio.session.registry] == [foo.id]
    assert studio.session.active_tab.dirty


def test_delete_warns_about_unsaved_changes(studio, surface, confirm, client, foo):
    studio.navigate(foo)
    surface.set_text(surface.text() + "x")
    studio.session.text_edited()
    with pytest.raises(ConfirmationDeclined):
        studio.delete_artifact(foo)
    assert confirm.asked[-1].endswith("Unsaved changes will be lost.")
    assert "delete_artifact" not in client.call_names()
    assert studio.session.active_tab.dirty


def test_delete_confirmed_upstream_does_not_ask(studio, confirm, client, bar):
    studio.delete_artifact(bar, confirmed=True)
    assert confirm.asked == []
    assert bar.id not in client.artifacts


def test_bundled_artifact_cannot_be_deleted(studio, client):
    builtin = client.add(make_artifact("builtin", scope="bundled"))
    with pytest.raises(StudioError):
        studio.delete_artifact(builtin, confirmed=True)
    assert builtin.id in client.artifacts


def test_failed_delete_leaves_tabs(studio, listener, client, foo):
    studio.navigate(foo)
    client.fail["delete_artifact"] = NetworkError("HTTP 403", status=403)
    studio.delete_artifact(foo, confirmed=True)
    assert listener.errors() == ["Delete failed: HTTP 403"]
    assert studio.session.has_document


# ── Bundled skills and export ────────────────────────────────────────────────

@pytest.fixture
def pdf(client):
    return client.add(make_artifact("pdf", scope="bundled", id="bundled/pdf",
                                    installed=False, dir_name="pdf"))


def test_install_bundled_refreshes_library(studio, listener, client, pdf):
    studio.install_bundled(pdf)
    assert ("install_bundled", "pdf") in client.calls
    assert ('Skill "pdf" installed.', "info") in listener.messages
    by_id = {a.id: a for a in listener.library.artifacts}
    assert by_id["bundled/pdf"].installed
    assert not by_id["/home/u/.claude/skills/pdf"].read_only


def test_install_needs_an_uninstalled_bundled_skill(studio, client, foo, pdf):
    with pytest.raises(StudioError):
        studio.install_bundled(foo)
    studio.install_bundled(pdf)
    with pytest.raises(StudioError):
        studio.install_bundled(client.artifacts[pdf.id])
    assert client.call_names().count("install_bundled") == 1


def test_install_failure_is_reported(studio, listener, client, pdf):
    client.fail["install_bundled"] = NetworkError("Bundled skill not found", status=404)
    studio.install_bundled(pdf)
    assert listener.errors() == ["Install failed: Bundled skill not found"]
    assert listener.library is None


def test_uninstall_asks_first(studio, answers, confirm, listener, client, pdf):
    studio.install_bundled(pdf)
    installed = client.artifacts[pdf.id]
    with pytest.raises(ConfirmationDeclined):
        studio.uninstall_bundled(installed)
    assert "uninstall_bundled" not in client.call_names()

    answers.append(True)
    studio.uninstall_bundled(installed)
    assert confirm.asked[-1] == 'Uninstall "pdf"? The installed copy is removed.'
    assert ("Uninstalled pdf.", "info") in listener.messages
    assert not client.artifacts[pdf.id].installed


def test_export_into_folder_uses_server_file_name(studio, listener, tmp_path, foo):
    studio.export_artifact(foo, tmp_path)
    target = tmp_path / "foo.zip"
    assert target.read_bytes() == b"archive of foo"
    assert (f"Exported foo to {target}", "info") in listener.messages


def test_export_to_named_file(studio, tmp_path, bar):
    target = tmp_path / "mine.zip"
    studio.export_artifact(bar, str(target))
    assert target.read_bytes() == b"archive of bar"


def test_export_failure_writes_nothing(studio, listener, client, tmp_path, foo):
    client.fail["export_artifact"] = NetworkError("HTTP 500", status=500)
    studio.export_artifact(foo, tmp_path)
    assert listener.errors() == ["Export failed: HTTP 500"]
    assert list(tmp_path.iterdir()) == []


# ── Sub-files ────────────────────────────────────────────────────────────────

def test_create_sub_file_refreshes_tree(studio, listener, client, foo):
    studio.navigate(foo)
    studio.create_sub_file("  docs/notes.md  ", "hello")
    assert client.files[foo.id]["docs/notes.md"] == "hello"
    assert "docs/notes.md" in studio.session.active_tab.artifact_content.file_paths()
    assert ("Created docs/notes.md", "info") in listener.messages


def test_create_folder(studio, client, foo):
    studio.navigate(foo)
    studio.create_sub_file("scripts/", is_dir=True)
    assert client.calls[-2] == ("create_sub_file", foo.id, "scripts", True)


def test_create_sub_file_needs_a_name(studio, foo):
    studio.navigate(foo)
    with pytest.raises(StudioError):
        studio.create_sub_file("   ")


def test_sub_file_operations_need_an_open_artifact(studio):
    with pytest.raises(StudioError):
        studio.create_sub_file("a.md")
    with pytest.raises(StudioError):
        studio.delete_sub_file("a.md", confirmed=True)


def test_sub_files_of_bundled_artifact_are_read_only(studio, client):
    builtin = client.add(make_artifact("builtin", scope="bundled"))
    studio.navigate(builtin)
    with pytest.raises(StudioError):
        studio.create_sub_file("a.md")


def test_delete_sub_file_closes_its_tab(studio, answers, client, foo):
    studio.navigate(foo)
    studio.open_sub_file("ref.md")
    answers.append(True)
    studio.delete_sub_file("ref.md")

    reg = studio.session.registry
    assert [t.path for t in reg] == [None]
    assert "ref.md" not in client.files[foo.id]
    assert reg.active_tab.artifact_content.file_paths() == []


def test_delete_sub_file_declined(studio, client, foo):
    studio.navigate(foo)
    with pytest.raises(ConfirmationDeclined):
        studio.delete_sub_file("ref.md")
    assert "ref.md" in client.files[foo.id]


# ── Validation ───────────────────────────────────────────────────────────────

def test_validate_active_clean_skill(studio, listener, foo):
    studio.navigate(foo)
    studio.validate_active()
    result = listener.validation
    assert result.valid
    assert result.errors == [] and result.warnings == []


def test_validate_active_merges_server_report(studio, listener, client, foo):
    client.validate_artifact = lambda content, kind: {
        "valid": False, "errors": ["Directory name does not match"], "warnings": ["w"]}
    studio.navigate(foo)
    studio.validate_active()
    result = listener.validation
    assert not result.valid
    assert result.errors == ["Directory name does not match"]
    assert result.warnings == ["w"]


def test_validate_active_without_server(studio, listener, client, foo):
    client.fail["validate_artifact"] = NetworkError("HTTP 502", status=502)
    studio.navigate(foo)
    studio.validate_active()
    assert listener.validation.valid
    assert listener.validation.warnings == ["Server validation unavailable: HTTP 502"]


def test_validate_uses_pending_form_edits(studio, listener, foo):
    studio.navigate(foo)
    studio.session.edit_form(lambda f: f.set_name("Bad Name"))
    result = studio.validate_local()
    assert not result.valid
    assert any("lowercase" in e for e in result.errors)


def test_validate_from_sub_file_checks_main_document(studio, client, reviewer):
    studio.navigate(reviewer)
    client.files[reviewer.id]["notes.md"] = "just text"
    studio.open_sub_file("notes.md")
    result = studio.validate_local()
    assert result.valid


def test_validate_without_document(studio, listener):
    assert studio.validate_local() is None
    studio.validate_active()
    assert listener.validation is None
