"""
Shared fixtures for the recognize.im test suite.

HTTP traffic is served by FakeHTTP, which records every POST and replays
queued requests.Response objects (or raises queued exceptions).
"""

import io
import json
import struct
import threading
import zlib
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

import pytest
import requests
from PIL import Image

from recognizeim.api.client import RecognizeClient

SOAP_TEMPLATE = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    '<SOAP-ENV:Envelope xmlns:SOAP-ENV="http://schemas.xmlsoap.org/soap/envelope/" '
    'xmlns:ns1="http://clapi.itraff.pl" xmlns:xsd="http://www.w3.org/2001/XMLSchema" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
    'xmlns:ns2="http://xml.apache.org/xml-soap" '
    'xmlns:SOAP-ENC="http://schemas.xmlsoap.org/soap/encoding/">'
    '<SOAP-ENV:Body>{body}</SOAP-ENV:Body></SOAP-ENV:Envelope>'
)


def map_xml(entries: Dict[str, Any]) -> str:
    """Render a dict as Apache map <item> elements, recursing into dicts and lists."""
    parts = []
    for key, value in entries.items():
        parts.append(f'<item><key xsi:type="xsd:string">{escape(str(key))}</key>{value_xml(value)}</item>')
    return "".join(parts)


def value_xml(value: Any) -> str:
    if isinstance(value, dict):
        return f'<value xsi:type="ns2:Map">{map_xml(value)}</value>'
    if isinstance(value, list):
        members = "".join(f'<item xsi:type="ns2:Map">{map_xml(v)}</item>' for v in value)
        return f'<value SOAP-ENC:arrayType="ns2:Map[{len(value)}]" xsi:type="SOAP-ENC:Array">{members}</value>'
    if isinstance(value, bool):
        return f'<value xsi:type="xsd:boolean">{"true" if value else "false"}</value>'
    if isinstance(value, int):
        return f'<value xsi:type="xsd:int">{value}</value>'
    return f'<value xsi:type="xsd:string">{escape(str(value))}</value>'


def soap_result(method: str, result: Dict[str, Any]) -> str:
    body = f'<ns1:{method}Response><return xsi:type="ns2:Map">{map_xml(result)}</return></ns1:{method}Response>'
    return SOAP_TEMPLATE.format(body=body)


def soap_fault(faultstring: str) -> str:
    body = ('<SOAP-ENV:Fault><faultcode>SOAP-ENV:Server</faultcode>'
            f'<faultstring>{faultstring}</faultstring></SOAP-ENV:Fault>')
    return SOAP_TEMPLATE.format(body=body)


def make_response(content: str, status_code: int = 200, cookies: Optional[Dict[str, str]] = None,
                  headers: Optional[Dict[str, str]] = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response._content = content.encode("utf-8")
    response.encoding = "utf-8"
    for name, value in (headers or {}).items():
        response.headers[name] = value
    for name, value in (cookies or {}).items():
        response.cookies.set(name, value)
    return response


def json_response(payload: Dict[str, Any], status_code: int = 200) -> requests.Response:
    response = make_response(json.dumps(payload), status_code)
    response.headers["Content-Type"] = "application/json"
    return response


def make_image(width: int, height: int, size_kb: Optional[float] = None, fmt: str = "JPEG") -> bytes:
    """Encode a solid image, padded with trailing bytes up to size_kb."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color=(120, 30, 200)).save(buffer, format=fmt)
    data = buffer.getvalue()
    if size_kb is not None:
        target = int(size_kb * 1024)
        assert len(data) <= target, "encoded image larger than requested size"
        data += b"\0" * (target - len(data))
    return data


def _png_chunk(kind: bytes, payload: bytes) -> bytes:
    return struct.pack(">I", len(payload)) + kind + payload + struct.pack(">I", zlib.crc32(kind + payload))


def make_png_header(width: int, height: int) -> bytes:
    """A PNG that declares the given size but carries no real pixel data."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (b"\x89PNG\r\n\x1a\n" + _png_chunk(b"IHDR", ihdr)
            + _png_chunk(b"IDAT", b"") + _png_chunk(b"IEND", b""))


class FakeHTTP:
    """Stand-in for requests.Session recording posts and replaying responses."""

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self.queue: List[Any] = []
        self.closed = False
        self._lock = threading.Lock()

    def queue_response(self, response) -> None:
        self.queue.append(response)

    def post(self, url, headers=None, data=None, timeout=None):
        with self._lock:
            self.requests.append({"url": url, "headers": dict(headers or {}), "data": data, "timeout": timeout})
            if not self.queue:
                raise AssertionError(f"Unexpected request to {url}")
            item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True

    @property
    def paths(self) -> List[str]:
        return [r["url"].split("clapi.itraff.pl", 1)[-1] for r in self.requests]


@pytest.fixture
def http():
    return FakeHTTP()


@pytest.fixture
def client(http):
    client = RecognizeClient(http=http)
    client.set_credentials(64, "6d97d28451", "4430d3822ff5d8c640de55a4f35218d8")
    yield client
    client.close()


@pytest.fixture
def auth_ok():
    return make_response(soap_result("auth", {"status": 0}), cookies={"PHPSESSID": "abc123"})


@pytest.fixture
def authenticated_client(client):
    client.session_cookie = "PHPSESSID=abc123"
    return client
