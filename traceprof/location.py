"""
Location Parser

Parses raw stack-frame location strings into structured symbol info.

Grammar handled:
    "fn (http://host:1234/path/file.js:10:5)"    scripted frame, parenthesized resource
    "http://host/path/file.js:12"                scripted frame, bare resource
    "js::RunScript"                              platform frame, no resource

Scanning rules:
    - The first "(" marks the end of the function name.
    - The first ":<digits>" is the line, the second is the column.
    - ":<digits>/" is a port number and is discarded.
    - Inlined or rewritten sources chain URLs with " -> "; the last URL wins.

A location whose resource is not a recognised script URL is a platform frame:
the whole raw string becomes the function name and the URL fields stay None.

Examples:
    >>> loc = parse_location("fn (http://host:1234/path/file.js:10:5)")
    >>> loc.function_name, loc.line, loc.column
    ('fn', 10, 5)
    >>> loc.host_name, loc.port
    ('host', 1234)
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from urllib.parse import urlsplit


CONTENT_SCHEMES = ("http://", "https://", "file://", "app://")
CHROME_SCHEMES = ("chrome://", "resource://", "jar:file://")

URL_CHAIN_SEPARATOR = " -> "

_DIGITS = frozenset("0123456789")


@dataclass(frozen=True)
class Location:
    """
    Parsed symbol reference for one raw location string.

    Immutable. `original` keeps the raw string verbatim.
    """
    original: str
    function_name: str
    file_name: Optional[str] = None
    host_name: Optional[str] = None
    port: Optional[int] = None
    url: Optional[str] = None
    line: int = 0
    column: int = -1

    @property
    def host(self) -> Optional[str]:
        """Host name with the port appended when one is present."""
        if not self.host_name:
            return None
        if self.port is not None:
            return f"{self.host_name}:{self.port}"
        return self.host_name

    @property
    def is_scripted(self) -> bool:
        return self.url is not None

    @property
    def is_content(self) -> bool:
        """True for web content script URLs (http, https, file, app)."""
        return self.url is not None and self.url.startswith(CONTENT_SCHEMES)

    @property
    def is_chrome(self) -> bool:
        """True for privileged browser script URLs (chrome, resource, jar:file)."""
        return self.url is not None and self.url.startswith(CHROME_SCHEMES)

    def __str__(self) -> str:
        return f"{self.function_name}:{self.line}"


def _scan_line_and_column(raw: str) -> Tuple[int, int, Optional[int], Optional[int]]:
    """
    Single pass over the raw string.

    Returns:
        (first_paren_index, line_marker_index, line, column); indices are -1
        and numbers None when not found.
    """
    first_paren = -1
    marker = -1
    line = None
    column = None
    n = len(raw)
    i = 0
    while i < n:
        c = raw[i]
        if c == '(':
            if first_paren < 0:
                first_paren = i
            i += 1
            continue

        if c == ':' and i + 1 < n and raw[i + 1] in _DIGITS:
            if marker < 0:
                marker = i
            start = i + 1
            end = start
            while end < n and raw[end] in _DIGITS:
                end += 1

            # Port number, not a line
            if end < n and raw[end] == '/':
                marker = -1
                i = end
                continue

            if line is None:
                line = int(raw[start:end])
                i = end
                continue

            column = int(raw[start:end])
            break

        i += 1

    return first_paren, marker, line, column


def _is_script_url(url: str) -> bool:
    return url.startswith(CONTENT_SCHEMES) or url.startswith(CHROME_SCHEMES)


def parse_location(raw: str, fallback_line: int = 0, fallback_column: int = -1) -> Location:
    """
    Parse a raw location string.

    Args:
        raw: Location string as stored in the capture's string table
        fallback_line: Line used when the string carries none
        fallback_column: Column used when the string carries none

    Returns:
        Location (platform frames have function_name == raw and no URL fields)
    """
    first_paren, marker, line, column = _scan_line_and_column(raw)

    url = None
    if marker > 0:
        resource = raw[first_paren + 1:marker]
        url = resource.split(URL_CHAIN_SEPARATOR)[-1] or None

    if line is None:
        line = fallback_line
    if column is None:
        column = fallback_column

    if url is None or not _is_script_url(url):
        return Location(original=raw, function_name=raw, line=line, column=column)

    parts = urlsplit(url)
    file_name = parts.path.rsplit('/', 1)[-1] or '/'

    host_name = None
    port = None
    if not url.startswith(CHROME_SCHEMES):
        host_name = parts.hostname
        if host_name:
            try:
                port = parts.port
            except ValueError:
                port = None

    function_name = raw[:first_paren].rstrip() if first_paren >= 0 else ''

    return Location(
        original=raw,
        function_name=function_name,
        file_name=file_name,
        host_name=host_name,
        port=port,
        url=url,
        line=line,
        column=column,
    )


class LocationCache:
    """
    Memoizes parsed locations by exact raw string.

    No normalisation: two raw strings describing the same logical location
    are cached separately. The fallbacks given on the first lookup of a
    string are the ones baked into its Location.

    Lifecycle is owned by the caller: by default a decoded File creates one
    cache per capture; pass the same cache to several decodes to share
    Location objects across captures.
    """

    def __init__(self):
        self._locations: Dict[str, Location] = {}

    def get(self, raw: str, fallback_line: int = 0, fallback_column: int = -1) -> Location:
        location = self._locations.get(raw)
        if location is None:
            location = parse_location(raw, fallback_line, fallback_column)
            self._locations[raw] = location
        return location

    def clear(self) -> None:
        self._locations.clear()

    def __contains__(self, raw: str) -> bool:
        return raw in self._locations

    def __len__(self) -> int:
        return len(self._locations)
