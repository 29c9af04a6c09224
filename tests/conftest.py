import pytest

from fakes import FakeClient, ManualRunner, RecordingListener, make_artifact
from skills_studio.content_sync import TextSurface
from skills_studio.studio import SkillsStudio
from skills_studio.tasks import InlineRunner


@pytest.fixture
def client():
    c = FakeClient()
    c.add(make_artifact("foo"), files={"ref.md": "# Reference\n"})
    c.add(make_artifact("bar"))
    c.add(make_artifact("reviewer", type="agent"),
          text="---\nname: reviewer\ndescription: Reviews code.\ntools: Read, Grep\n---\n\nReview.\n")
    return c


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def surface():
    return TextSurface()


@pytest.fixture
def answers():
    """Replies handed to the confirm callback, consumed in order. Empty = decline."""
    return []


@pytest.fixture
def confirm(answers):
    asked = []

    def _confirm(message):
        asked.append(message)
        return answers.pop(0) if answers else False

    _confirm.asked = asked
    return _confirm


@pytest.fixture
def studio(client, surface, listener, confirm):
    return SkillsStudio(client, InlineRunner(), surface=surface, listener=listener, confirm=confirm)


@pytest.fixture
def runner():
    return ManualRunner()


@pytest.fixture
def manual_studio(client, runner, surface, listener, confirm):
    return SkillsStudio(client, runner, surface=surface, listener=listener, confirm=confirm)


@pytest.fixture
def foo(client):
    return client.artifacts["/home/u/.claude/skills/foo"]


@pytest.fixture
def bar(client):
    return client.artifacts["/home/u/.claude/skills/bar"]


@pytest.fixture
def reviewer(client):
    return client.artifacts["/home/u/.claude/agents/reviewer"]
