"""
SOAP envelope builder and response decoder for the recognize.im CLAPI service.

Requests are plain document-style envelopes:

    <soap:Envelope><soap:Body>
      <method xmlns="http://clapi.itraff.pl"><param>value</param>...</method>
    </soap:Body></soap:Envelope>

Responses wrap an Apache-style map in ``<return>``:

    <return><item><key>status</key><value xsi:type="xsd:int">0</value></item>
            <item><key>data</key><value><item>...</item></value></item></return>
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, Iterable, List, Optional

from .models import CallOutcome

logger = logging.getLogger(__name__)

SOAP_ENV_NS = 'http://schemas.xmlsoap.org/soap/envelope/'
XSI_NS = 'http://www.w3.org/2001/XMLSchema-instance'
CLAPI_NS = 'http://clapi.itraff.pl'

GENERIC_ERROR_MESSAGE = 'An Error Occured!'

ET.register_namespace('soap', SOAP_ENV_NS)

_XSI_TYPE = f'{{{XSI_NS}}}type'
_INT_TYPES = {'int', 'integer', 'long', 'short', 'byte'}
_FLOAT_TYPES = {'float', 'double', 'decimal'}


class ResponseParseError(Exception):
    """Raised when a SOAP response cannot be decoded"""
    pass


def _format_param(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, bytes):
        return value.decode('ascii')
    return str(value)


def build_envelope(method: str, params: Optional[Dict[str, Any]] = None) -> bytes:
    """
    Build a SOAP document calling ``method`` with the given parameters.

    Args:
        method: SOAP method name, for example 'indexStatus'
        params: Ordered mapping of parameter element name to value

    Returns:
        UTF-8 encoded XML document
    """
    envelope = ET.Element(f'{{{SOAP_ENV_NS}}}Envelope')
    body = ET.SubElement(envelope, f'{{{SOAP_ENV_NS}}}Body')
    call = ET.SubElement(body, f'{{{CLAPI_NS}}}{method}')
    for name, value in (params or {}).items():
        ET.SubElement(call, f'{{{CLAPI_NS}}}{name}').text = _format_param(value)

    return ET.tostring(envelope, encoding='utf-8', xml_declaration=True,
                       default_namespace=CLAPI_NS)


def _local(tag: str) -> str:
    """Strip the namespace from an element tag."""
    return tag.rsplit('}', 1)[-1]


def _find(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local(child.tag) == name:
            return child
    return None


def _find_all(element: ET.Element, name: str) -> List[ET.Element]:
    return [child for child in element if _local(child.tag) == name]


def _coerce(value: ET.Element) -> Any:
    """Convert a terminal ``<value>`` to a Python scalar using its xsi:type."""
    text = value.text
    xsi_type = value.get(_XSI_TYPE, '').split(':')[-1].lower()
    try:
        if xsi_type in _INT_TYPES:
            return int(text)
        if xsi_type in _FLOAT_TYPES:
            return float(text)
    except ValueError:
        logger.debug(f"Keeping {xsi_type} value as text: {text!r}")
        return text
    if xsi_type == 'boolean':
        return text.strip().lower() in ('true', '1')
    return text


def normalize_items(items: Iterable[ET.Element]) -> Dict[str, Any]:
    """
    Convert a list of map ``<item>`` elements to a dictionary.

    Each entry is either a key/value pair, where the value is a terminal
    scalar or a nested map, or a keyless array member holding a nested map,
    which is stored under its position. Entries of any other shape are
    skipped.

    Args:
        items: ``<item>`` elements of a ``<return>`` or ``<value>`` node

    Returns:
        Mapping of key to scalar or nested mapping
    """
    result: Dict[str, Any] = {}
    for position, item in enumerate(items):
        key = _find(item, 'key')
        value = _find(item, 'value')

        if key is not None and value is not None:
            name = key.text or ''
            nested = _find_all(value, 'item')
            if nested:
                result[name] = normalize_items(nested)
            elif value.text is not None:
                result[name] = _coerce(value)
            continue

        nested = _find_all(item, 'item')
        if nested:
            result[str(position)] = normalize_items(nested)

    return result


def _is_success_status(status: Any) -> bool:
    try:
        return int(status) == 0
    except (TypeError, ValueError):
        return False


def parse_response(method: str, content: bytes) -> CallOutcome:
    """
    Decode a SOAP response into a success or error outcome.

    Args:
        method: SOAP method the response belongs to
        content: Raw response body

    Returns:
        CallOutcome carrying the ``data`` payload or an error message

    Raises:
        ResponseParseError: If the body is not a SOAP envelope with a result
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ResponseParseError(f"Malformed XML in {method} response: {e}")

    body = _find(root, 'Body')
    if body is None:
        raise ResponseParseError(f"No SOAP Body in {method} response")

    fault = _find(body, 'Fault')
    if fault is not None:
        faultstring = _find(fault, 'faultstring')
        message = faultstring.text if faultstring is not None and faultstring.text else GENERIC_ERROR_MESSAGE
        logger.warning(f"SOAP fault from {method}: {message}")
        return CallOutcome.error(method, message)

    if len(body) == 0:
        raise ResponseParseError(f"Empty SOAP Body in {method} response")

    returned = _find(body[0], 'return')
    if returned is None:
        raise ResponseParseError(f"No return value in {method} response")

    obj = normalize_items(_find_all(returned, 'item'))
    if _is_success_status(obj.get('status')):
        return CallOutcome.success(method, obj.get('data', ''))

    message = obj.get('message')
    return CallOutcome.error(method, str(message) if message is not None else GENERIC_ERROR_MESSAGE)
