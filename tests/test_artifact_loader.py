import pytest

from skills_studio.artifact_loader import FetchSequence
from skills_studio.errors import ConfirmationDeclined, NetworkError, StaleResponse


def _open(studio, runner, artifact):
    studio.navigate(artifact)
    runner.run_all()


def test_sequence_check():
    seq = FetchSequence()
    first = seq.next()
    seq.check(first)
    second = seq.next()
    assert second == first + 1 == seq.current
    with pytest.raises(StaleResponse):
        seq.check(first)


# ── Races ────────────────────────────────────────────────────────────────────

def test_later_navigation_wins_when_it_finishes_first(manual_studio, runner, surface,
                                                      client, foo, bar):
    manual_studio.navigate(foo)
    manual_studio.navigate(bar)
    runner.run(1)
    runner.run(0)
    reg = manual_studio.session.registry
    assert [t.artifact_id for t in reg] == [bar.id]
    assert surface.text() == client.documents[bar.id]


def test_later_navigation_wins_when_it_finishes_last(manual_studio, runner, surface,
                                                     client, listener, foo, bar):
    manual_studio.navigate(foo)
    manual_studio.navigate(bar)
    runner.run(0)
    assert manual_studio.session.registry.is_empty
    assert "editor_rebuilt" not in listener.events
    runner.run(0)
    assert [t.artifact_id for t in manual_studio.session.registry] == [bar.id]
    assert surface.text() == client.documents[bar.id]


def test_stale_failure_is_swallowed(manual_studio, runner, listener, foo, bar):
    manual_studio.navigate(foo)
    manual_studio.navigate(bar)
    runner.fail(0)
    assert listener.errors() == []
    runner.run(0)
    assert manual_studio.session.active_tab.artifact_id == bar.id


def test_focusing_an_open_tab_supersedes_pending_load(manual_studio, runner, surface, foo, bar):
    _open(manual_studio, runner, foo)
    surface.set_text(surface.text() + "edit\n")
    manual_studio.session.text_edited()

    manual_studio.navigate(bar)
    manual_studio.navigate(foo)
    assert manual_studio.session.loading_artifact is None
    runner.run_all()
    reg = manual_studio.session.registry
    assert [t.artifact_id for t in reg] == [foo.id]
    assert surface.text().endswith("edit\n")


def test_loading_state_follows_navigation(manual_studio, runner, foo):
    manual_studio.navigate(foo)
    assert manual_studio.session.loading_artifact == foo
    runner.run(0)
    assert manual_studio.session.loading_artifact is None


def _two_tabs_with_load_pending(studio, runner, surface, foo, bar, reviewer):
    """foo (dirty) and bar open, foo focused, reviewer still loading."""
    _open(studio, runner, foo)
    surface.set_text(surface.text() + "edit\n")
    studio.session.text_edited()
    _open(studio, runner, bar)
    studio.switch_tab(0)
    studio.navigate(reviewer)
    assert studio.session.loading_artifact == reviewer


def test_picking_a_tab_supersedes_pending_load(manual_studio, runner, surface,
                                               foo, bar, reviewer):
    _two_tabs_with_load_pending(manual_studio, runner, surface, foo, bar, reviewer)
    manual_studio.switch_tab(1)
    assert manual_studio.session.loading_artifact is None
    runner.run_all()
    reg = manual_studio.session.registry
    assert [t.artifact_id for t in reg] == [foo.id, bar.id]
    assert manual_studio.session.active_tab.artifact_id == bar.id


def test_closing_a_tab_supersedes_pending_load(manual_studio, runner, surface,
                                               foo, bar, reviewer):
    _two_tabs_with_load_pending(manual_studio, runner, surface, foo, bar, reviewer)
    manual_studio.close_tab(1)
    runner.run_all()
    reg = manual_studio.session.registry
    assert [t.artifact_id for t in reg] == [foo.id]
    assert manual_studio.session.loading_artifact is None


def test_refused_close_keeps_pending_load(manual_studio, runner, surface, confirm,
                                          foo, bar, reviewer):
    _two_tabs_with_load_pending(manual_studio, runner, surface, foo, bar, reviewer)
    with pytest.raises(ConfirmationDeclined):
        manual_studio.close_tab(0)
    assert confirm.asked == ['Discard changes to "foo"?']
    runner.run_all()
    reg = manual_studio.session.registry
    assert [t.artifact_id for t in reg] == [foo.id, bar.id, reviewer.id]
    assert manual_studio.session.active_tab.artifact_id == reviewer.id


# ── Failures ─────────────────────────────────────────────────────────────────

def test_failed_first_load_returns_to_no_document(manual_studio, runner, listener, foo):
    manual_studio.navigate(foo)
    runner.fail(0, NetworkError("HTTP 500", status=500))
    assert listener.errors() == ["Failed to load foo: HTTP 500"]
    assert listener.events[-1] == "document_closed"
    assert manual_studio.session.loading_artifact is None


def test_failed_load_falls_back_to_open_tab(manual_studio, runner, listener, foo, bar):
    _open(manual_studio, runner, foo)
    manual_studio.navigate(bar)
    runner.fail(0)
    assert manual_studio.session.active_tab.artifact_id == foo.id
    assert listener.events[-1] == "editor_rebuilt"
    assert listener.errors() == ["Failed to load bar: connection reset"]


def test_missing_artifact_reports_client_error(studio, listener, client, foo):
    client.documents.pop(foo.id)
    studio.navigate(foo)
    assert listener.errors() == ["Failed to load foo: Artifact not found"]


# ── Sub-files ────────────────────────────────────────────────────────────────

def test_sub_file_opens_in_its_own_tab(manual_studio, runner, surface, foo):
    _open(manual_studio, runner, foo)
    manual_studio.open_sub_file("ref.md")
    runner.run(0)
    tab = manual_studio.session.active_tab
    assert tab.path == "ref.md" and tab.label == "ref.md"
    assert surface.text() == "# Reference\n"
    assert len(manual_studio.session.registry) == 2


def test_reopening_sub_file_focuses_existing_tab(manual_studio, runner, client, foo):
    _open(manual_studio, runner, foo)
    manual_studio.open_sub_file("ref.md")
    runner.run(0)
    manual_studio.switch_tab(0)
    manual_studio.open_sub_file("ref.md")
    assert runner.pending == []
    assert manual_studio.session.registry.active_index == 1


def test_sub_file_superseded_by_navigation_is_dropped(manual_studio, runner, foo, bar):
    _open(manual_studio, runner, foo)
    manual_studio.open_sub_file("ref.md")
    manual_studio.navigate(bar)
    runner.run(0)
    assert all(t.path is None for t in manual_studio.session.registry)
    runner.run(0)
    assert manual_studio.session.active_tab.artifact_id == bar.id


def test_sub_file_failure_notifies(studio, listener, client, foo):
    studio.navigate(foo)
    client.fail["fetch_sub_file"] = NetworkError("gone", status=404)
    studio.open_sub_file("ref.md")
    assert listener.errors() == ["Failed to load file: gone"]
    assert len(studio.session.registry) == 1


def test_sub_file_without_document_is_noop(manual_studio, runner):
    assert manual_studio.open_sub_file("ref.md") is None
    assert runner.pending == []
