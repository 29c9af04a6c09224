import pytest
import requests

from skills_studio import api_client
from skills_studio.api_client import StudioClient, decode_id, encode_id
from skills_studio.config_manager import ConfigManager
from skills_studio.errors import NetworkError


class FakeResponse:

    def __init__(self, status=200, body=None, text=None, content=b"", headers=None):
        self.status_code = status
        self.ok = 200 <= status < 300
        self._body = body
        self._text = text
        self.content = content
        self.headers = headers or {}

    def json(self):
        if self._text is not None:
            raise ValueError("not json")
        return self._body


@pytest.fixture
def sent(monkeypatch):
    """Requests made through requests.request; set sent.reply to control the response."""
    calls = []

    def fake_request(method, url, **kw):
        calls.append({"method": method, "url": url, **kw})
        reply = fake_request.reply
        if isinstance(reply, Exception):
            raise reply
        return reply

    fake_request.reply = FakeResponse(body={"ok": True})
    fake_request.calls = calls
    monkeypatch.setattr(api_client.requests, "request", fake_request)
    return fake_request


@pytest.fixture
def client():
    return StudioClient("http://studio:3344/", load_timeout=3, save_timeout=7)


ART_ID = "/home/u/.claude/skills/foo"
PREFIX = "http://studio:3344/api/skills-studio"


# ── Id encoding ──────────────────────────────────────────────────────────────

@pytest.mark.parametrize("raw, token", [("a", "YQ"), ("??>", "Pz8-"), ("???", "Pz8_")])
def test_encode_id_is_url_safe_base64(raw, token):
    assert encode_id(raw) == token
    assert decode_id(token) == raw


@pytest.mark.parametrize("raw", [ART_ID, "C:\\Users\\me\\skills\\ünï", "x" * 31])
def test_decode_id_restores_padding(raw):
    token = encode_id(raw)
    assert not set(token) & set("+/=")
    assert decode_id(token) == raw


# ── Requests ─────────────────────────────────────────────────────────────────

def test_fetch_library(client, sent):
    sent.reply = FakeResponse(body={
        "artifacts": [{"id": ART_ID, "type": "skill", "scope": "project",
                       "name": "foo", "scopeLabel": "webapp"}],
        "projects": ["/work/webapp"],
    })
    library = client.fetch_library()
    call = sent.calls[0]
    assert (call["method"], call["url"]) == ("GET", f"{PREFIX}/library")
    assert call["timeout"] == 3
    assert library.artifacts[0].display_scope == "webapp"
    assert library.projects[0].label == "webapp"


def test_fetch_artifact_content(client, sent):
    sent.reply = FakeResponse(body={
        "rawContent": "---\nname: foo\n---\n",
        "frontmatter": {"name": "foo"},
        "subFiles": [{"name": "docs", "path": "docs", "type": "dir",
                      "children": [{"name": "a.md", "path": "docs/a.md", "size": 2048}]}],
    })
    content = client.fetch_artifact_content(ART_ID)
    assert sent.calls[0]["url"] == f"{PREFIX}/artifact/{encode_id(ART_ID)}"
    assert content.raw_content.startswith("---")
    assert content.file_paths() == ["docs/a.md"]
    assert content.sub_files[0].children[0].size_label == "2K"


def test_save_uses_save_timeout_and_body(client, sent):
    client.save_artifact_content(ART_ID, "text")
    call = sent.calls[0]
    assert call["method"] == "PUT"
    assert call["json"] == {"rawContent": "text"}
    assert call["timeout"] == 7


def test_sub_file_endpoints(client, sent):
    sent.reply = FakeResponse(body={"content": "# Ref"})
    assert client.fetch_sub_file(ART_ID, "ref.md") == "# Ref"
    sent.reply = FakeResponse(body={"ok": True})
    client.save_sub_file(ART_ID, "ref.md", "new")
    client.create_sub_file(ART_ID, "scripts", is_dir=True)
    client.delete_sub_file(ART_ID, "ref.md")

    get, put, post, delete = sent.calls
    file_url = f"{PREFIX}/artifact/{encode_id(ART_ID)}/file"
    assert get["params"] == {"path": "ref.md"} and get["url"] == file_url
    assert put["json"] == {"path": "ref.md", "content": "new"}
    assert post["json"] == {"path": "scripts", "content": "", "isDir": True}
    assert (delete["method"], delete["json"]) == ("DELETE", {"path": "ref.md"})


def test_validate_posts_type(client, sent):
    sent.reply = FakeResponse(body={"valid": True, "errors": [], "warnings": []})
    assert client.validate_artifact("raw", "agent")["valid"]
    assert sent.calls[0]["json"] == {"rawContent": "raw", "type": "agent"}


def test_bundled_install_endpoints(client, sent):
    client.install_bundled("pdf")
    client.uninstall_bundled("pdf")
    install, uninstall = sent.calls
    assert (install["method"], install["url"]) == ("POST", f"{PREFIX}/install")
    assert (uninstall["method"], uninstall["url"]) == ("DELETE", f"{PREFIX}/install")
    assert install["json"] == uninstall["json"] == {"dirName": "pdf"}
    assert install["timeout"] == 7


def test_export_returns_file_name_and_bytes(client, sent):
    sent.reply = FakeResponse(content=b"PK\x03\x04", headers={
        "Content-Disposition": 'attachment; filename="foo.zip"',
    })
    assert client.export_artifact(ART_ID) == ("foo.zip", b"PK\x03\x04")
    assert sent.calls[0]["url"] == f"{PREFIX}/export/{encode_id(ART_ID)}"


def test_export_without_file_name(client, sent):
    sent.reply = FakeResponse(content=b"data")
    assert client.export_artifact(ART_ID) == (None, b"data")


def test_export_error_is_network_error(client, sent):
    sent.reply = FakeResponse(status=404, body={"error": "Artifact not found"})
    with pytest.raises(NetworkError, match="Artifact not found"):
        client.export_artifact(ART_ID)


# ── Failures ─────────────────────────────────────────────────────────────────

def test_error_message_from_body(client, sent):
    sent.reply = FakeResponse(status=409, body={"error": "File already exists"})
    with pytest.raises(NetworkError) as info:
        client.create_sub_file(ART_ID, "ref.md")
    assert str(info.value) == "File already exists"
    assert info.value.status == 409


def test_error_without_json_body(client, sent):
    sent.reply = FakeResponse(status=502, text="<html>bad gateway</html>")
    with pytest.raises(NetworkError, match="HTTP 502"):
        client.fetch_library()


def test_timeout_becomes_network_error(client, sent):
    sent.reply = requests.Timeout("read timed out")
    with pytest.raises(NetworkError, match="timed out after 3s"):
        client.fetch_artifact_content(ART_ID)


def test_connection_error_becomes_network_error(client, sent):
    sent.reply = requests.ConnectionError("refused")
    with pytest.raises(NetworkError, match="Cannot reach server"):
        client.delete_artifact(ART_ID)


def test_invalid_json_on_success(client, sent):
    sent.reply = FakeResponse(status=200, text="oops")
    with pytest.raises(NetworkError, match="Invalid JSON"):
        client.fetch_library()


def test_from_config(tmp_path):
    config = ConfigManager(tmp_path / "config.json")
    config.set("server.base_url", "http://remote:9000/")
    config.set("server.save_timeout", 30)
    c = StudioClient.from_config(config)
    assert c.base_url == "http://remote:9000"
    assert c._save_timeout == 30
