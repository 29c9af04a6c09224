from fakes import make_artifact
from skills_studio.library import count_by_type, filter_artifacts, group_by_scope
from skills_studio.models import Artifact, Library, SubFile

ARTIFACTS = [
    make_artifact("zeta", description="Formats PDF files"),
    make_artifact("Alpha"),
    make_artifact("review", type="agent", description="Reviews pull requests"),
    make_artifact("deploy", type="command", scope="project", scope_label="webapp",
                  id="/work/webapp/.claude/commands/deploy"),
    make_artifact("lint", scope="project", scope_label="api",
                  id="/work/api/.claude/skills/lint"),
    make_artifact("pdf", scope="bundled", id="bundled/pdf"),
]


def _names(items):
    return [a.name for a in items]


def test_filter_by_type_and_scope():
    assert _names(filter_artifacts(ARTIFACTS, type="agent")) == ["review"]
    assert _names(filter_artifacts(ARTIFACTS, scope="project")) == ["deploy", "lint"]
    assert _names(filter_artifacts(ARTIFACTS, type="skill", scope="global")) == ["zeta", "Alpha"]


def test_filter_query_matches_name_or_description_case_insensitively():
    assert _names(filter_artifacts(ARTIFACTS, query="  PDF ")) == ["zeta", "pdf"]
    assert _names(filter_artifacts(ARTIFACTS, query="pull")) == ["review"]
    assert filter_artifacts(ARTIFACTS, query="nothing-like-this") == []


def test_group_order_and_sorting():
    groups = group_by_scope(ARTIFACTS)
    assert [label for label, _ in groups] == ["Bundled", "Global", "webapp", "api"]
    assert _names(groups[1][1]) == ["Alpha", "review", "zeta"]


def test_empty_groups_are_left_out():
    groups = group_by_scope([make_artifact("x")])
    assert groups == [("Global", [make_artifact("x")])]


def test_count_by_type_covers_every_type():
    assert count_by_type(ARTIFACTS) == {"skill": 4, "command": 1, "agent": 1}
    assert count_by_type([]) == {"skill": 0, "command": 0, "agent": 0}


# ── Models ───────────────────────────────────────────────────────────────────

def test_artifact_from_api_tolerates_missing_keys():
    a = Artifact.from_api({"id": "x"})
    assert (a.type, a.scope, a.name) == ("skill", "global", "")
    assert not a.read_only
    assert Artifact.from_api({"id": "y", "scope": "bundled"}).read_only


def test_sub_file_tree_flattens():
    tree = SubFile.from_api({"name": "docs", "type": "dir", "children": [
        {"path": "docs/a.md", "size": 10},
        {"name": "deep", "path": "docs/deep", "type": "dir",
         "children": [{"path": "docs/deep/b.md"}]},
    ]})
    assert [f.path for f in tree.iter_files()] == ["docs/a.md", "docs/deep/b.md"]
    assert tree.children[0].name == "a.md"
    assert tree.children[0].size_label == "10B"


def test_library_find():
    lib = Library(artifacts=list(ARTIFACTS))
    assert lib.find("bundled/pdf").name == "pdf"
    assert lib.find("missing") is None


def test_install_state_of_bundled_skills():
    fresh = make_artifact("pdf", scope="bundled", installed=False, dir_name="pdf")
    assert fresh.can_install and not fresh.can_uninstall
    installed = make_artifact("pdf", scope="bundled", dir_name="pdf")
    assert installed.can_uninstall and not installed.can_install
    assert not make_artifact("pdf", scope="bundled", installed=False).can_install
    assert not make_artifact("foo", installed=False, dir_name="foo").can_install
