"""Turn link and image targets into absolute, markdown-safe URLs."""

from __future__ import annotations

import contextlib
import dataclasses
import enum
import logging
import string

_log = logging.getLogger(__name__)

_PERCENT_ENCODING = str.maketrans(
    {" ": "%20", "[": "%5B", "]": "%5D", "(": "%28", ")": "%29", "<": "%3C", ">": "%3E"}
)


class _URLError(ValueError):
    """A URL could not be parsed."""


class _Mode(enum.Enum):
    PATH = enum.auto()
    HOST = enum.auto()
    ZONE = enum.auto()
    USER_PASSWORD = enum.auto()
    QUERY_COMPONENT = enum.auto()
    FRAGMENT = enum.auto()


_ALNUM = frozenset((string.ascii_letters + string.digits).encode())
_HOST_SAFE = frozenset(b"!$&'()*+,;=:[]<>\"")
_UNRESERVED_MARKS = frozenset(b"-_.~")
_RESERVED = frozenset(b"$&+,/:;=?@")
_HEX = frozenset(b"0123456789abcdefABCDEF")
_USERINFO_CHARS = frozenset(string.ascii_letters + string.digits + "-._:~!$&'()*+,;=%@")


def _should_escape(c: int, mode: _Mode) -> bool:
    if c in _ALNUM:
        return False
    if mode in (_Mode.HOST, _Mode.ZONE) and c in _HOST_SAFE:
        return False
    if c in _UNRESERVED_MARKS:
        return False
    if c in _RESERVED:
        if mode is _Mode.PATH:
            return c == ord("?")
        if mode is _Mode.USER_PASSWORD:
            return c in b"@/?:"
        if mode is _Mode.QUERY_COMPONENT:
            return True
        if mode is _Mode.FRAGMENT:
            return False
    if mode is _Mode.FRAGMENT and c in b"!()*":
        return False
    return True


def _escape(text: str, mode: _Mode) -> str:
    out = []
    for c in text.encode("utf-8", "surrogateescape"):
        if c == 0x20 and mode is _Mode.QUERY_COMPONENT:
            out.append("+")
        elif _should_escape(c, mode):
            out.append(f"%{c:02X}")
        else:
            out.append(chr(c))
    return "".join(out)


def _unescape(text: str, mode: _Mode) -> str:
    data = text.encode("utf-8", "surrogateescape")
    out = bytearray()
    i = 0
    while i < len(data):
        c = data[i]
        if c == 0x25:
            chunk = data[i : i + 3]
            if len(chunk) < 3 or not all(h in _HEX for h in chunk[1:]):
                raise _URLError(f"invalid URL escape {chunk.decode('latin-1')!r}")
            value = int(chunk[1:], 16)
            if mode is _Mode.HOST and value >> 4 < 8 and chunk != b"%25":
                raise _URLError(f"invalid URL escape {chunk.decode('latin-1')!r}")
            if (
                mode is _Mode.ZONE
                and chunk != b"%25"
                and value != 0x20
                and _should_escape(value, _Mode.HOST)
            ):
                raise _URLError(f"invalid URL escape {chunk.decode('latin-1')!r}")
            out.append(value)
            i += 3
        elif c == 0x2B:
            out.append(0x20 if mode is _Mode.QUERY_COMPONENT else c)
            i += 1
        else:
            if mode in (_Mode.HOST, _Mode.ZONE) and c < 0x80 and _should_escape(c, mode):
                raise _URLError(f"invalid character {chr(c)!r} in host name")
            out.append(c)
            i += 1
    return out.decode("utf-8", "surrogateescape")


def _valid_encoded(text: str, mode: _Mode) -> bool:
    for c in text.encode("utf-8", "surrogateescape"):
        if c in b"!$&'()*+,;=:@[]%":
            continue
        if _should_escape(c, mode):
            return False
    return True


def _valid_optional_port(port: str) -> bool:
    if not port:
        return True
    return port[0] == ":" and all("0" <= ch <= "9" for ch in port[1:])


def _resolve_path(base: str, ref: str) -> str:
    if not ref:
        full = base
    elif not ref.startswith("/"):
        full = base[: base.rfind("/") + 1] + ref
    else:
        full = ref
    if not full:
        return ""

    dst = "/"
    first = True
    elem = ""
    for elem in full.split("/"):
        if elem == ".":
            first = False
            continue
        if elem == "..":
            body = dst[1:]
            index = body.rfind("/")
            if index == -1:
                dst = "/"
                first = True
            else:
                dst = "/" + body[:index]
        else:
            if not first:
                dst += "/"
            dst += elem
            first = False

    if elem in (".", ".."):
        dst += "/"
    if len(dst) > 1 and dst[1] == "/":
        dst = dst[1:]
    return dst


@dataclasses.dataclass
class _Userinfo:
    username: str
    pass_text: str | None = None

    def __str__(self) -> str:
        text = _escape(self.username, _Mode.USER_PASSWORD)
        if self.pass_text is not None:
            text += ":" + _escape(self.pass_text, _Mode.USER_PASSWORD)
        return text


@dataclasses.dataclass
class _URL:
    scheme: str = ""
    opaque: str = ""
    user: _Userinfo | None = None
    host: str = ""
    path: str = ""
    raw_path: str = ""
    omit_host: bool = False
    force_query: bool = False
    raw_query: str = ""
    fragment: str = ""
    raw_fragment: str = ""

    def set_path(self, escaped: str) -> None:
        path = _unescape(escaped, _Mode.PATH)
        self.path = path
        self.raw_path = "" if _escape(path, _Mode.PATH) == escaped else escaped

    def set_fragment(self, escaped: str) -> None:
        fragment = _unescape(escaped, _Mode.FRAGMENT)
        self.fragment = fragment
        self.raw_fragment = "" if _escape(fragment, _Mode.FRAGMENT) == escaped else escaped

    def escaped_path(self) -> str:
        if self.raw_path and _valid_encoded(self.raw_path, _Mode.PATH):
            with contextlib.suppress(_URLError):
                if _unescape(self.raw_path, _Mode.PATH) == self.path:
                    return self.raw_path
        if self.path == "*":
            return "*"
        return _escape(self.path, _Mode.PATH)

    def escaped_fragment(self) -> str:
        if self.raw_fragment and _valid_encoded(self.raw_fragment, _Mode.FRAGMENT):
            with contextlib.suppress(_URLError):
                if _unescape(self.raw_fragment, _Mode.FRAGMENT) == self.fragment:
                    return self.raw_fragment
        return _escape(self.fragment, _Mode.FRAGMENT)

    def __str__(self) -> str:
        parts: list[str] = []
        if self.scheme:
            parts += [self.scheme, ":"]
        if self.opaque:
            parts.append(self.opaque)
        else:
            if self.scheme or self.host or self.user is not None:
                if not (self.omit_host and not self.host and self.user is None):
                    if self.host or self.path or self.user is not None:
                        parts.append("//")
                    if self.user is not None:
                        parts += [str(self.user), "@"]
                    if self.host:
                        parts.append(_escape(self.host, _Mode.HOST))
            path = self.escaped_path()
            if path and not path.startswith("/") and self.host:
                parts.append("/")
            if not parts and ":" in path.partition("/")[0]:
                parts.append("./")
            parts.append(path)
        if self.force_query or self.raw_query:
            parts += ["?", self.raw_query]
        if self.fragment:
            parts += ["#", self.escaped_fragment()]
        return "".join(parts)

    def resolve_reference(self, ref: _URL) -> _URL:
        url = dataclasses.replace(ref)
        if not ref.scheme:
            url.scheme = self.scheme
        if ref.scheme or ref.host or ref.user is not None:
            with contextlib.suppress(_URLError):
                url.set_path(_resolve_path(ref.escaped_path(), ""))
            return url
        if ref.opaque:
            url.user, url.host, url.path = None, "", ""
            return url
        if not ref.path and not ref.force_query and not ref.raw_query:
            url.raw_query = self.raw_query
            if not ref.fragment:
                url.fragment = self.fragment
                url.raw_fragment = self.raw_fragment
        if not ref.path and self.opaque:
            url.opaque = self.opaque
            url.user, url.host, url.path = None, "", ""
            return url
        url.host = self.host
        url.user = self.user
        with contextlib.suppress(_URLError):
            url.set_path(_resolve_path(self.escaped_path(), ref.escaped_path()))
        return url


def _get_scheme(raw: str) -> tuple[str, str]:
    for i, ch in enumerate(raw):
        if ch.isascii() and ch.isalpha():
            continue
        if ch.isascii() and (ch.isdigit() or ch in "+-."):
            if i == 0:
                return "", raw
            continue
        if ch == ":":
            if i == 0:
                raise _URLError("missing protocol scheme")
            return raw[:i], raw[i + 1 :]
        return "", raw
    return "", raw


def _parse_host(host: str) -> str:
    if host.startswith("["):
        close = host.rfind("]")
        if close < 0:
            raise _URLError("missing ']' in host")
        colon_port = host[close + 1 :]
        if not _valid_optional_port(colon_port):
            raise _URLError(f"invalid port {colon_port!r} after host")
        zone = host.find("%25", 0, close)
        if zone >= 0:
            return (
                _unescape(host[:zone], _Mode.HOST)
                + _unescape(host[zone:close], _Mode.ZONE)
                + _unescape(host[close:], _Mode.HOST)
            )
    else:
        colon = host.rfind(":")
        if colon != -1 and not _valid_optional_port(host[colon:]):
            raise _URLError(f"invalid port {host[colon:]!r} after host")
    return _unescape(host, _Mode.HOST)


def _parse_authority(authority: str) -> tuple[_Userinfo | None, str]:
    userinfo, at, host_part = authority.rpartition("@")
    host = _parse_host(host_part)
    if not at:
        return None, host
    if not all(ch in _USERINFO_CHARS for ch in userinfo):
        raise _URLError("invalid userinfo")
    if ":" not in userinfo:
        return _Userinfo(_unescape(userinfo, _Mode.USER_PASSWORD)), host
    name, _, after_colon = userinfo.partition(":")
    return (
        _Userinfo(
            _unescape(name, _Mode.USER_PASSWORD),
            _unescape(after_colon, _Mode.USER_PASSWORD),
        ),
        host,
    )


def _parse_without_fragment(raw: str) -> _URL:
    if any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in raw):
        raise _URLError("invalid control character in URL")
    url = _URL()
    if raw == "*":
        url.path = "*"
        return url

    scheme, rest = _get_scheme(raw)
    url.scheme = scheme.lower()

    if rest.endswith("?") and rest.count("?") == 1:
        url.force_query = True
        rest = rest[:-1]
    else:
        rest, _, url.raw_query = rest.partition("?")

    if not rest.startswith("/"):
        if url.scheme:
            url.opaque = rest
            return url
        if ":" in rest.partition("/")[0]:
            raise _URLError("first path segment in URL cannot contain colon")

    if rest.startswith("//") and (url.scheme or not rest.startswith("///")):
        authority, slash, tail = rest[2:].partition("/")
        rest = slash + tail
        url.user, url.host = _parse_authority(authority)
    elif url.scheme and rest.startswith("/"):
        url.omit_host = True

    url.set_path(rest)
    return url


def _parse(raw: str) -> _URL:
    rest, _, fragment = raw.partition("#")
    url = _parse_without_fragment(rest)
    if fragment:
        url.set_fragment(fragment)
    return url


def parse_base_domain(raw_domain: str) -> _URL | None:
    """Parse a base domain, assuming ``http`` when it has no scheme; None if unusable."""
    if not raw_domain:
        return None
    for candidate in (raw_domain, "http://" + raw_domain):
        try:
            url = _parse(candidate)
        except _URLError:
            continue
        if url.host:
            return url
    return None


def _decode_and_encode(original: str) -> str:
    try:
        return _escape(_unescape(original, _Mode.QUERY_COMPONENT), _Mode.QUERY_COMPONENT)
    except _URLError:
        return original


def parse_and_encode_query(raw_query: str) -> str:
    """Normalise the encoding of a query string, keeping the order of its parameters."""
    if not raw_query:
        return ""
    encoded = []
    for part in raw_query.split("&"):
        key, separator, value = part.partition("=")
        if not separator:
            encoded.append(_decode_and_encode(key))
        elif not value:
            encoded.append(_decode_and_encode(key) + "=")
        else:
            encoded.append(_decode_and_encode(key) + "=" + _decode_and_encode(value))
    return "&".join(encoded)


def default_assemble_absolute_url(tag_name: str, raw_url: str, domain: str) -> str:
    """Clean up a URL and, when a domain is given, make relative URLs absolute."""
    raw_url = raw_url.strip()
    if raw_url == "#":
        return raw_url

    raw_url = raw_url.replace("\n", "%0A").replace("\t", "%09")

    try:
        url = _parse(raw_url)
    except _URLError as err:
        _log.warning("invalid url %r: %s", raw_url, err)
        return raw_url.translate(_PERCENT_ENCODING)

    if url.scheme == "data":
        return raw_url.translate(_PERCENT_ENCODING)

    # Spaces become %20 rather than "+" so that e.g. mailto subjects read correctly.
    url.raw_query = parse_and_encode_query(url.raw_query).replace("+", "%20")

    base = parse_base_domain(domain)
    if base is not None:
        url = base.resolve_reference(url)

    return str(url).translate(_PERCENT_ENCODING)