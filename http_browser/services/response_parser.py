"""
Response parser for raw HTTP/1.x byte streams.

Tolerates malformed servers that separate header and body with \\n\\n or
\\r\\r instead of \\r\\n\\r\\n, and skips an interim `100 Continue` block.
"""

import re

from ..exceptions import ResponseParseError
from ..schemas.response import HTTPResponse


# Separator between the header block and the body
HEADER_BODY_SEPARATOR = re.compile(rb"\r\n\r\n|\n\n|\r\r")

# Separator between header lines
LINE_SEPARATOR = re.compile(r"\r\n|\n|\r")

# Header text is decoded byte for byte
HEADER_ENCODING = "iso-8859-1"

STATUS_MESSAGES = {
    100: "Continue",
    101: "Switching Protocols",
    200: "OK",
    201: "Created",
    202: "Accepted",
    203: "Non-Authoritative Information",
    204: "No Content",
    205: "Reset Content",
    206: "Partial Content",
    300: "Multiple Choices",
    301: "Moved Permanently",
    302: "Found",
    303: "See Other",
    304: "Not Modified",
    305: "Use Proxy",
    307: "Temporary Redirect",
    400: "Bad Request",
    401: "Unauthorized",
    402: "Payment Required",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    406: "Not Acceptable",
    407: "Proxy Authentication Required",
    408: "Request Time-out",
    409: "Conflict",
    410: "Gone",
    411: "Length Required",
    412: "Precondition Failed",
    413: "Request Entity Too Large",
    414: "Request-URI Too Large",
    415: "Unsupported Media Type",
    416: "Requested range not satisfiable",
    417: "Expectation Failed",
    500: "Internal Server Error",
    501: "Not Implemented",
    502: "Bad Gateway",
    503: "Service Unavailable",
    504: "Gateway Time-out",
    505: "HTTP Version not supported",
}


def normalize_status_code(code: int) -> int:
    """
    Map unknown status codes to the base code of their class.

    Example:
        >>> normalize_status_code(404)
        404
        >>> normalize_status_code(299)
        200
    """
    if code in STATUS_MESSAGES:
        return code
    return code // 100 * 100


def split_message(raw: bytes) -> tuple[bytes, bytes]:
    """
    Split a raw response into header block and body.

    Without any separator the whole input is the header block and the
    body is empty.
    """
    parts = HEADER_BODY_SEPARATOR.split(raw, maxsplit=1)
    if len(parts) < 2:
        return raw, b""
    header, body = parts
    # An interim response (100 Continue) precedes the final header block.
    if body.startswith(b"HTTP"):
        parts = HEADER_BODY_SEPARATOR.split(body, maxsplit=1)
        if len(parts) < 2:
            return body, b""
        header, body = parts
    return header, body


def fold_headers(lines: list[str]) -> dict[str, str | list[str]]:
    """
    Build the header map from `Name: value` lines.

    Names are lowercased. A repeated name turns its value into a list
    holding every value in order.
    """
    headers: dict[str, str | list[str]] = {}
    for line in lines:
        if not line.strip():
            continue
        name, separator, value = line.partition(":")
        if not separator:
            continue
        name = name.strip().lower()
        value = value.strip()
        if name not in headers:
            headers[name] = value
        elif isinstance(headers[name], list):
            headers[name].append(value)
        else:
            headers[name] = [headers[name], value]
    return headers


def parse_response(raw: bytes) -> HTTPResponse:
    """
    Parse a raw HTTP response.

    Args:
        raw: Bytes read from the connection

    Returns:
        HTTPResponse with protocol, code, message, headers and body

    Raises:
        ResponseParseError: When the status line is missing or has no
            numeric status code
    """
    header, body = split_message(raw)
    lines = LINE_SEPARATOR.split(header.decode(HEADER_ENCODING))

    status_line = lines[0].strip()
    fields = status_line.split(None, 2)
    if len(fields) < 2:
        raise ResponseParseError(f"malformed status line: {status_line!r}")
    protocol, code = fields[0], fields[1]
    if not (code.isascii() and code.isdigit()):
        raise ResponseParseError(f"malformed status code: {code!r}")

    headers_raw = [line for line in lines[1:] if line.strip()]
    return HTTPResponse(
        protocol=protocol,
        code=normalize_status_code(int(code)),
        status_message=fields[2] if len(fields) > 2 else "",
        headers=fold_headers(headers_raw),
        headers_raw=headers_raw,
        body=body,
    )


class ResponseParser:
    """Parser object for callers that inject the parsing step."""

    def parse(self, raw: bytes) -> HTTPResponse:
        return parse_response(raw)
