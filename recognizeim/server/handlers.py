"""
Request handlers for the sample server.

Each handler calls the recognize.im client held in the app config and
renders a small HTML or plain text response.
"""

import logging
from pprint import pformat
from typing import Any, Dict, Optional, Tuple

from flask import current_app, request
from markupsafe import escape

from ..api.client import RecognizeClient

logger = logging.getLogger(__name__)

HTML = {"Content-Type": "text/html; charset=utf-8"}
TEXT = {"Content-Type": "text/plain; charset=utf-8"}

START_PAGE = """<html>
<head>
<meta http-equiv="Content-Type" content="text/html; charset=UTF-8" />
</head>
<body>
<form action="/recognize" enctype="multipart/form-data" method="post">
<input type="file" name="upload">
<label>Multi mode<input type="checkbox" name="multi"></label>
<label>Show all results<input type="checkbox" name="allResults"></label>
<input type="submit" value="Recognize" />
</form>
<br/>
<form action="/imageInsert" enctype="multipart/form-data" method="post">
<input type="text" name="id">
<input type="text" name="name">
<input type="file" name="upload">
<input type="submit" value="Add image" />
</form>
<br/><a href="/build">Build index</a>
<br/><a href="/list">Image list</a>
<br/><a href="/status">Index status</a>
</body>
</html>"""


def _client() -> RecognizeClient:
    return current_app.config["RECOGNIZE_CLIENT"]


def _uploaded_file() -> Optional[bytes]:
    upload = request.files.get("upload")
    if upload is None or upload.filename == "":
        return None
    return upload.read()


def _checked(name: str) -> bool:
    return request.form.get(name, "").lower() in ("on", "true", "1")


def _error_page(message: Optional[str]) -> Tuple[str, int, Dict[str, str]]:
    return str(escape(message or "")), 500, HTML


def start():
    logger.info("Request handler 'start' was called.")
    return START_PAGE, 200, HTML


def recognize():
    """Recognize an uploaded query image and report the recognized id(s)."""
    logger.info("Request handler 'recognize' was called.")

    data = _uploaded_file()
    if data is None:
        return "No file uploaded\n", 400, TEXT

    result, error = _client().recognize(data, multi=_checked("multi"), get_all=_checked("allResults"))
    if error:
        return error + "\n", 200, TEXT
    return format_recognition(result) + "\n", 200, TEXT


def format_recognition(result: Any) -> str:
    """Render a recognition result as the recognized id(s) or the service message."""
    if not isinstance(result, dict):
        return str(result)

    if str(result.get("status")) != "0":
        return str(result.get("message", "Recognition failed"))

    objects = result.get("objects")
    if isinstance(objects, list):
        ids = [str(obj.get("id")) if isinstance(obj, dict) else str(obj) for obj in objects]
        return ", ".join(ids) or "No objects recognized"
    return str(result.get("id"))


def image_insert():
    logger.info("Request handler 'imageInsert' was called.")

    data = _uploaded_file()
    if data is None:
        return "No file uploaded\n", 400, TEXT

    outcome = _client().image_insert(request.form.get("id", ""), request.form.get("name", ""), data)
    if not outcome.ok:
        return _error_page(outcome.message)
    return "Image uploaded!", 200, HTML


def status():
    logger.info("Request handler 'status' was called.")

    outcome = _client().index_status()
    if not outcome.ok:
        return _error_page(outcome.message)
    return f"<pre>{escape(pformat(outcome.data))}</pre>", 200, HTML


def build():
    logger.info("Request handler 'build' was called.")

    outcome = _client().index_build()
    if not outcome.ok:
        return _error_page(outcome.message)
    body = f"<pre>{escape(pformat(outcome.data))}</pre>" + '<a href="/status">Status</a>'
    return body, 200, HTML


def image_list():
    """Render the user's reference images as a table with thumbnails."""
    logger.info("Request handler 'list' was called.")

    outcome = _client().image_list()
    if not outcome.ok:
        return _error_page(outcome.message)

    images = outcome.data.values() if isinstance(outcome.data, dict) else []
    rows = ["<table><tr><th>ID</th><th>Name</th><th>Image</th></tr>"]
    for img in images:
        if not isinstance(img, dict):
            continue
        rows.append(
            f"<tr><td>{escape(img.get('id', ''))}</td>"
            f"<td>{escape(img.get('name', ''))}</td>"
            f"<td><img src=\"{escape(img.get('href', ''))}?w=100&h=100\"/></td></tr>"
        )
    rows.append("</table>")
    return "".join(rows), 200, HTML
