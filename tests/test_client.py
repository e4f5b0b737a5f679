import xmlrpc.client
from datetime import datetime
from unittest.mock import Mock, patch

import pytest
import requests

from press_sync.config import Config
from press_sync.core.client import WordPressClient, _parse_iso8601
from press_sync.sync.models import MediaItem, PostItem


def _string_response(value: str) -> str:
    return f"""<?xml version="1.0"?>
<methodResponse>
  <params>
    <param><value><string>{value}</string></value></param>
  </params>
</methodResponse>"""


POST_INFO = """<?xml version="1.0"?>
<methodResponse>
  <params>
    <param>
      <value>
        <struct>
          <member><name>post_id</name><value><string>123</string></value></member>
          <member><name>link</name><value><string>https://blog.example.com/hello/</string></value></member>
          <member><name>post_date</name><value><dateTime.iso8601>20210301T10:00:00</dateTime.iso8601></value></member>
          <member><name>post_modified</name><value><dateTime.iso8601>20210302T08:30:00</dateTime.iso8601></value></member>
        </struct>
      </value>
    </param>
  </params>
</methodResponse>"""

BOOLEAN_TRUE = """<?xml version="1.0"?>
<methodResponse>
  <params><param><value><boolean>1</boolean></value></param></params>
</methodResponse>"""

UPLOAD_RESPONSE = """<?xml version="1.0"?>
<methodResponse>
  <params>
    <param>
      <value>
        <struct>
          <member><name>attachment_id</name><value><string>77</string></value></member>
          <member><name>url</name><value><string>https://blog.example.com/wp-content/uploads/cat.jpg</string></value></member>
          <member><name>type</name><value><string>image/jpeg</string></value></member>
        </struct>
      </value>
    </param>
  </params>
</methodResponse>"""

FAULT_RESPONSE = """<?xml version="1.0"?>
<methodResponse>
  <fault>
    <value>
      <struct>
        <member><name>faultCode</name><value><int>403</int></value></member>
        <member><name>faultString</name><value><string>Incorrect username or password.</string></value></member>
      </struct>
    </value>
  </fault>
</methodResponse>"""


def _sent(mock_post, index=0):
    """Decode the XML-RPC request body of the *index*-th call."""
    data = mock_post.call_args_list[index].kwargs["data"]
    params, method = xmlrpc.client.loads(data)
    return method, params


def _post(**kw) -> PostItem:
    defaults = dict(
        local_file="hello.md",
        title="Hello",
        body_html="<p>Body</p>\n",
        modified_at=datetime(2021, 3, 1),
        category="notes",
        tags="python, sync",
    )
    defaults.update(kw)
    return PostItem(**defaults)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def test_rpc_url_construction(mock_config):
    client = WordPressClient(mock_config)
    assert client.rpc_url == "https://blog.example.com/xmlrpc.php"


def test_rpc_url_with_trailing_slash():
    config = Config(
        wp_url="https://blog.example.com/wp/", username="u", password="p"
    )
    assert WordPressClient(config).rpc_url == "https://blog.example.com/wp/xmlrpc.php"


def test_session_creation_secure(mock_config):
    client = WordPressClient(mock_config)
    assert client.session.verify
    assert client.session.headers["User-Agent"] == "press-sync"


def test_session_creation_insecure():
    config = Config(
        wp_url="https://blog.example.com",
        username="u",
        password="p",
        insecure=True,
    )
    assert not WordPressClient(config).session.verify


def test_session_reused_within_thread(mock_config):
    client = WordPressClient(mock_config)
    assert client.session is client.session


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


@patch("press_sync.core.client.requests.Session.post")
def test_publish_post(mock_post, mock_config, mock_xml_response):
    mock_post.side_effect = [
        mock_xml_response(_string_response("123")),
        mock_xml_response(POST_INFO),
    ]
    client = WordPressClient(mock_config)

    remote = client.publish_post(_post())

    assert remote.remote_id == "123"
    assert remote.remote_url == "https://blog.example.com/hello/"
    assert remote.remote_date == datetime(2021, 3, 1, 10, 0, 0)

    method, params = _sent(mock_post, 0)
    assert method == "wp.newPost"
    blog_id, username, password, content = params
    assert (blog_id, username, password) == (1, "testuser", "testpass")
    assert content["post_title"] == "Hello"
    assert content["post_content"] == "<p>Body</p>\n"
    assert content["post_status"] == "publish"
    assert content["post_type"] == "post"
    assert str(content["post_date"]) == "20210301T00:00:00"
    assert content["terms_names"] == {
        "category": ["notes"],
        "post_tag": ["python", "sync"],
    }

    method, params = _sent(mock_post, 1)
    assert method == "wp.getPost"
    assert params[3] == "123"


@patch("press_sync.core.client.requests.Session.post")
def test_publish_post_without_terms(mock_post, mock_config, mock_xml_response):
    mock_post.side_effect = [
        mock_xml_response(_string_response("5")),
        mock_xml_response(POST_INFO),
    ]
    client = WordPressClient(mock_config)

    client.publish_post(_post(category="", tags="", status="draft"))

    _, params = _sent(mock_post, 0)
    content = params[3]
    assert "terms_names" not in content
    assert content["post_status"] == "draft"


@patch("press_sync.core.client.requests.Session.post")
def test_request_headers_and_timeout(mock_post, mock_config, mock_xml_response):
    mock_post.return_value = mock_xml_response(BOOLEAN_TRUE)
    client = WordPressClient(mock_config)

    client._rpc_request("demo.sayHello")

    args, kwargs = mock_post.call_args
    assert args[0] == "https://blog.example.com/xmlrpc.php"
    assert kwargs["headers"] == {"Content-Type": "text/xml"}
    assert kwargs["timeout"] == (10, 60)


@patch("press_sync.core.client.requests.Session.post")
def test_update_post(mock_post, mock_config, mock_xml_response):
    mock_post.side_effect = [
        mock_xml_response(BOOLEAN_TRUE),
        mock_xml_response(POST_INFO),
    ]
    client = WordPressClient(mock_config)

    remote_date = client.update_post(_post(remote_id="123"))

    assert remote_date == datetime(2021, 3, 1, 10, 0, 0)
    method, params = _sent(mock_post, 0)
    assert method == "wp.editPost"
    assert params[3] == "123"
    assert params[4]["post_title"] == "Hello"


@patch("press_sync.core.client.requests.Session.post")
def test_publish_post_keeps_id_when_read_back_fails(
    mock_post, mock_config, mock_xml_response, caplog
):
    mock_post.side_effect = [
        mock_xml_response(_string_response("42")),
        requests.ConnectionError("connection reset"),
    ]
    client = WordPressClient(mock_config)

    remote = client.publish_post(_post())

    assert remote.remote_id == "42"
    assert remote.remote_url is None
    assert remote.remote_date == datetime(2021, 3, 1)
    assert "saved as id 42 but reading it back failed" in caplog.text


@patch("press_sync.core.client.requests.Session.post")
def test_update_post_survives_read_back_fault(
    mock_post, mock_config, mock_xml_response
):
    mock_post.side_effect = [
        mock_xml_response(BOOLEAN_TRUE),
        mock_xml_response(FAULT_RESPONSE),
    ]
    client = WordPressClient(mock_config)

    remote_date = client.update_post(_post(remote_id="123"))

    assert remote_date == datetime(2021, 3, 1)


@patch("press_sync.core.client.requests.Session.post")
def test_read_back_failure_does_not_republish(
    mock_post, mock_config, mock_xml_response, content_root
):
    from press_sync.sync.engine import SyncEngine

    (content_root / "posts" / "a.md").write_text(
        "---\ntitle: A\ndate: 2021-03-01\n---\nbody\n", encoding="utf-8"
    )
    mock_post.side_effect = [
        mock_xml_response(_string_response("42")),
        requests.ConnectionError("connection reset"),
    ]
    engine = SyncEngine(WordPressClient(mock_config), root=content_root)

    first = engine.run()
    second = engine.run()

    methods = [
        xmlrpc.client.loads(c.kwargs["data"])[1]
        for c in mock_post.call_args_list
    ]
    assert methods.count("wp.newPost") == 1
    assert [r.remote_id for r in first.created] == ["42"]
    assert len(second.skipped) == 1

def test_update_post_requires_remote_id(mock_config):
    client = WordPressClient(mock_config)
    with pytest.raises(ValueError, match="no remote id"):
        client.update_post(_post())


@patch("press_sync.core.client.requests.Session.post")
def test_fault_raised(mock_post, mock_config, mock_xml_response):
    mock_post.return_value = mock_xml_response(FAULT_RESPONSE)
    client = WordPressClient(mock_config)

    with pytest.raises(xmlrpc.client.Fault) as excinfo:
        client.publish_post(_post())

    assert excinfo.value.faultCode == 403
    assert "Incorrect username" in excinfo.value.faultString


@patch("press_sync.core.client.requests.Session.post")
def test_http_error_raised(mock_post, mock_config):
    response = Mock()
    response.raise_for_status.side_effect = requests.HTTPError("500")
    mock_post.return_value = response
    client = WordPressClient(mock_config)

    with pytest.raises(requests.HTTPError):
        client.validate_connection()


# ---------------------------------------------------------------------------
# Media
# ---------------------------------------------------------------------------


@patch("press_sync.core.client.requests.Session.post")
def test_upload_media(mock_post, mock_config, mock_xml_response, tmp_path):
    path = tmp_path / "cat.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0jpeg")
    mock_post.return_value = mock_xml_response(UPLOAD_RESPONSE)
    client = WordPressClient(mock_config)

    remote = client.upload_media(MediaItem(local_file="cat.jpg"), path)

    assert remote.remote_id == "77"
    assert remote.remote_url == "https://blog.example.com/wp-content/uploads/cat.jpg"
    method, params = _sent(mock_post)
    assert method == "wp.uploadFile"
    data = params[3]
    assert data["name"] == "cat.jpg"
    assert data["type"] == "image/jpeg"
    assert data["bits"].data == b"\xff\xd8\xff\xe0jpeg"
    assert data["overwrite"] is False


@patch("press_sync.core.client.requests.Session.post")
def test_upload_media_without_id(mock_post, mock_config, mock_xml_response, tmp_path):
    path = tmp_path / "cat.jpg"
    path.write_bytes(b"x")
    mock_post.return_value = mock_xml_response(BOOLEAN_TRUE)
    client = WordPressClient(mock_config)

    with pytest.raises(ValueError, match="Invalid upload response"):
        client.upload_media(MediaItem(local_file="cat.jpg"), path)


def test_upload_missing_file(mock_config, tmp_path):
    client = WordPressClient(mock_config)
    with pytest.raises(OSError):
        client.upload_media(
            MediaItem(local_file="gone.jpg"), tmp_path / "gone.jpg"
        )


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------


@patch("press_sync.core.client.requests.Session.post")
def test_validate_connection_parses_array(mock_post, mock_config, mock_xml_response):
    mock_post.return_value = mock_xml_response(
        """<?xml version="1.0"?>
<methodResponse>
  <params><param><value><array><data>
    <value><struct>
      <member><name>blogid</name><value><string>1</string></value></member>
      <member><name>isAdmin</name><value><boolean>1</boolean></value></member>
      <member><name>blogName</name><value>My Blog</value></member>
    </struct></value>
  </data></array></value></param></params>
</methodResponse>"""
    )
    client = WordPressClient(mock_config)

    blogs = client.validate_connection()

    assert blogs == [{"blogid": "1", "isAdmin": True, "blogName": "My Blog"}]
    method, params = _sent(mock_post)
    assert method == "wp.getUsersBlogs"
    assert params == ("testuser", "testpass")


@pytest.mark.parametrize(
    "text",
    [
        "20210301T10:00:00",
        "2021-03-01T10:00:00",
        "20210301T100000",
        "20210301T10:00:00Z",
        "2021-03-01T10:00:00+02:00",
    ],
)
def test_parse_iso8601_formats(text):
    assert _parse_iso8601(text) == datetime(2021, 3, 1, 10, 0, 0)


def test_parse_iso8601_rejects_garbage():
    with pytest.raises(ValueError, match="Unrecognised"):
        _parse_iso8601("yesterday")


@pytest.mark.live
def test_live_connection():
    """Requires WP_URL, WP_USERNAME and WP_PASSWORD for a real site."""
    from press_sync.config import load_config

    client = WordPressClient(load_config())
    assert isinstance(client.validate_connection(), list)
