import logging
import mimetypes
import threading
import xmlrpc.client
from datetime import datetime
from pathlib import Path
from typing import Any
from xml.etree import ElementTree

import requests

from ..config import Config
from ..sync.models import MediaItem, PostItem, RemoteMedia, RemotePost

logger = logging.getLogger(__name__)

# Fields requested from wp.getPost after a create or update.
_POST_FIELDS = ["post_id", "link", "post_date", "post_modified"]

_DATETIME_FORMATS = ("%Y%m%dT%H:%M:%S", "%Y-%m-%dT%H:%M:%S", "%Y%m%dT%H%M%S")


def _parse_iso8601(text: str) -> datetime:
    """Parse an XML-RPC ``dateTime.iso8601`` value.

    WordPress emits ``YYYYMMDDTHH:MM:SS``, optionally followed by a zone
    designator which is dropped (post dates are site-local).
    """
    value = text.strip()
    if value.endswith("Z"):
        value = value[:-1]
    elif len(value) > 17 and value[-6] in "+-":
        value = value[:-6]
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise ValueError(f"Unrecognised XML-RPC date: {text!r}")


class WordPressClient:
    """Publish posts and media to a WordPress site over XML-RPC.

    Requests are encoded with ``xmlrpc.client.dumps`` and sent through a
    ``requests.Session`` so authentication, TLS verification and timeouts
    follow the configuration.
    """

    def __init__(self, config: Config):
        self.config = config
        self._thread_local = threading.local()
        self.rpc_url = self._get_rpc_url()

    @property
    def session(self) -> requests.Session:
        """Accessor for the current thread's session."""
        return self._get_session()

    def _get_rpc_url(self) -> str:
        return f"{self.config.wp_url.rstrip('/')}/xmlrpc.php"

    def _get_session(self) -> requests.Session:
        """Get or create a thread-local requests.Session."""
        if not hasattr(self._thread_local, "session"):
            self._thread_local.session = self._create_session()
        return self._thread_local.session

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.verify = not self.config.insecure
        session.headers["User-Agent"] = "press-sync"
        return session

    def _auth_params(self) -> tuple:
        return (
            self.config.blog_id,
            self.config.username,
            self.config.password,
        )

    def _rpc_request(self, method: str, *params):
        """
        Make an XML-RPC request to the WordPress site.

        Raises:
            requests.HTTPError: On a non-2xx HTTP status.
            xmlrpc.client.Fault: When the site returns a fault response.
        """
        payload = xmlrpc.client.dumps(
            params, methodname=method, allow_none=True
        )

        headers = {"Content-Type": "text/xml"}
        session = self._get_session()
        response = session.post(
            self.rpc_url,
            data=payload,
            headers=headers,
            timeout=(10, self.config.timeout),
        )
        response.raise_for_status()

        tree = ElementTree.fromstring(response.content)
        fault = tree.find(".//fault")
        if fault is not None:
            fault_value = fault.find("value")
            details = (
                self._parse_xmlrpc_value(fault_value)
                if fault_value is not None
                else {}
            )
            if not isinstance(details, dict):
                details = {}
            raise xmlrpc.client.Fault(
                int(details.get("faultCode") or 0),
                details.get("faultString") or "Unknown error",
            )

        value_element = tree.find(".//param/value")
        if value_element is None:
            return None
        return self._parse_xmlrpc_value(value_element)

    def _parse_xmlrpc_value(self, element):
        """
        Recursively parse an XML-RPC value element.

        A ``<value>`` with no type element is a string.
        """
        if len(element) == 0:
            return element.text or ""

        data_type = element[0].tag
        data_value = element[0].text

        match data_type:
            case "array":
                data_element = element.find("./array/data")
                if data_element is not None:
                    return [
                        self._parse_xmlrpc_value(v)
                        for v in data_element.findall("value")
                    ]
                return []
            case "struct":
                result = {}
                for member in element[0].findall("member"):
                    name = member.find("name").text
                    result[name] = self._parse_xmlrpc_value(
                        member.find("value")
                    )
                return result
            case "int" | "i4" | "i8":
                return int(data_value)
            case "boolean":
                return data_value == "1"
            case "string":
                return data_value or ""
            case "double":
                return float(data_value)
            case "dateTime.iso8601":
                return _parse_iso8601(data_value or "")
            case "nil":
                return None
            case _:
                return data_value

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    def validate_connection(self) -> list[dict[str, Any]]:
        """
        Validate credentials by calling wp.getUsersBlogs().
        Returns the list of blogs the user belongs to.
        """
        result = self._rpc_request(
            "wp.getUsersBlogs", self.config.username, self.config.password
        )
        return result or []

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def _post_content(self, post: PostItem) -> dict[str, Any]:
        content: dict[str, Any] = {
            "post_type": "post",
            "post_status": post.status or "publish",
            "post_title": post.title,
            "post_content": post.body_html,
        }
        if post.modified_at is not None:
            content["post_date"] = xmlrpc.client.DateTime(
                post.modified_at.replace(tzinfo=None, microsecond=0)
            )
        terms: dict[str, list[str]] = {}
        if post.category:
            terms["category"] = [post.category]
        if post.tag_list:
            terms["post_tag"] = post.tag_list
        if terms:
            content["terms_names"] = terms
        return content

    def get_post(self, post_id: str) -> dict[str, Any]:
        """
        Fetch link and date fields of a post by id.
        """
        result = self._rpc_request(
            "wp.getPost", *self._auth_params(), str(post_id), _POST_FIELDS
        )
        return result if isinstance(result, dict) else {}

    def _read_back(self, post_id: str, local_file: str) -> dict[str, Any]:
        """
        Fetch a post after a successful write, or {} if the fetch fails.

        The write already happened on the site, so a failed read must not
        lose the post id.
        """
        try:
            return self.get_post(post_id)
        except (
            requests.RequestException,
            xmlrpc.client.Fault,
            ElementTree.ParseError,
            ValueError,
        ) as exc:
            logger.warning(
                "Post %s saved as id %s but reading it back failed: %s",
                local_file,
                post_id,
                exc,
            )
            return {}

    def publish_post(self, post: PostItem) -> RemotePost:
        """
        Create a new post and return its remote id, permalink and date.

        Raises:
            xmlrpc.client.Fault: If the site rejects the post.
        """
        post_id = self._rpc_request(
            "wp.newPost", *self._auth_params(), self._post_content(post)
        )
        post_id = str(post_id)
        info = self._read_back(post_id, post.local_file)
        return RemotePost(
            remote_id=post_id,
            remote_url=info.get("link") or None,
            remote_date=info.get("post_date") or post.modified_at,
        )

    def update_post(self, post: PostItem) -> datetime | None:
        """
        Overwrite an existing post with the local content.

        Returns:
            The post date recorded by the site after the edit.

        Raises:
            ValueError: If the post has no remote id.
            xmlrpc.client.Fault: If the site rejects the edit.
        """
        if not post.remote_id:
            raise ValueError(
                f"Cannot update {post.local_file}: no remote id"
            )
        self._rpc_request(
            "wp.editPost",
            *self._auth_params(),
            str(post.remote_id),
            self._post_content(post),
        )
        info = self._read_back(str(post.remote_id), post.local_file)
        return info.get("post_date") or post.modified_at

    # ------------------------------------------------------------------
    # Media
    # ------------------------------------------------------------------

    def upload_media(self, item: MediaItem, path: Path) -> RemoteMedia:
        """
        Upload a media file and return its attachment id and URL.

        Raises:
            OSError: If the file cannot be read.
            xmlrpc.client.Fault: If the site rejects the upload.
        """
        mime_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
        data = {
            "name": item.local_file,
            "type": mime_type,
            "bits": xmlrpc.client.Binary(path.read_bytes()),
            "overwrite": False,
        }
        result = self._rpc_request(
            "wp.uploadFile", *self._auth_params(), data
        )
        if not isinstance(result, dict):
            raise ValueError(
                f"Invalid upload response for {item.local_file}"
            )
        remote_id = result.get("attachment_id") or result.get("id")
        if remote_id is None:
            raise ValueError(
                f"Upload response for {item.local_file} has no id"
            )
        return RemoteMedia(
            remote_id=str(remote_id), remote_url=result.get("url")
        )
