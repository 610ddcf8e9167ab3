"""
Stateless canonicalization and crypto helpers used by the SigV4 verifier.
"""

from collections import namedtuple
from hashlib import sha256
import hmac
from logging import getLogger
from re import compile as re_compile
from string import ascii_letters, digits

from pytz import UTC
from .dateutil import parse_timestamp
from .exc import InvalidDateError, MissingDateError

# pylint: disable=C0103

# Algorithm for AWS SigV4
AWS4_HMAC_SHA256 = "AWS4-HMAC-SHA256"

# SHA-256 digest of an empty string. Chunk strings-to-sign carry this in
# place of a header hash.
EMPTY_SHA256 = sha256(b"").hexdigest()

# Transport prefix applied to header names by WSGI/CGI servers.
DEFAULT_HEADER_PREFIX = "HTTP_"

# Bytes uri_encode() never encodes. '%' is kept as-is so that paths and
# query strings already encoded by the client are not encoded twice; '/' is
# handled separately.
_never_encode = frozenset((ascii_letters + digits + "-._~%").encode("ascii"))

# ASCII code for '/'
_ascii_slash = ord(b"/")

# Header keys
_content_encoding = "content-encoding"
_date = "date"
_x_amz_date = "x-amz-date"

# Token in Content-Encoding marking an aws-chunked streaming upload
_aws_chunked = "aws-chunked"

_authorization_regex = re_compile(
    r"\AAWS4-HMAC-SHA256 +"
    r"Credential=(?P<access_key>[^/]+)/(?P<date>[0-9]{8})/"
    r"(?P<region>[^/]+)/(?P<service>[^/]+)/aws4_request, *"
    r"SignedHeaders=(?P<signed_headers>[^,]+), *"
    r"Signature=(?P<signature>[0-9a-fA-F]{64})\Z")

_chunk_header_regex = re_compile(
    br"\A(?P<length>[0-9a-fA-F]+);chunk-signature=(?P<signature>[0-9a-fA-F]+)"
    br"\r\n")

# Logging instance
log = getLogger("sigv4verify.util")

Credentials = namedtuple(
    "Credentials",
    ["access_key", "date", "region", "service", "signed_headers", "signature"])
Credentials.__doc__ = """
The parts of a SigV4 Authorization header, in header order. signed_headers
is the raw semicolon-joined list.
"""

def normalize_headers(headers, prefix=DEFAULT_HEADER_PREFIX):
    """
    normalize_headers(headers, prefix="HTTP_") -> dict

    Convert header names to SignedHeaders form: strip a leading prefix (once,
    case-sensitively), lower-case, and convert underscores to dashes. This
    makes it possible to pass a WSGI environ straight in:
        HTTP_HOST -> host
        CONTENT_LENGTH -> content-length

    Values are left untouched. If two keys normalize to the same name, the
    later one wins.
    """
    result = {}
    for key, value in headers.items():
        if not isinstance(key, str):
            raise TypeError("Header must be a string: %r" % (key,))

        if prefix and key.startswith(prefix):
            key = key[len(prefix):]

        result[key.lower().replace("_", "-")] = value

    return result

def resolve_date(headers):
    """
    resolve_date(headers) -> str

    Return the request timestamp in the SigV4 YYYYMMDDTHHMMSSZ form, taken
    from the x-amz-date header if present or the date header otherwise.
    headers must already be normalized.

    MissingDateError is raised if neither header is present, and
    InvalidDateError if the value is not a recognized timestamp.
    """
    value = headers.get(_x_amz_date)
    if value is None:
        value = headers.get(_date)
        if value is None:
            raise MissingDateError("Date was not passed in the request")

    timestamp = parse_timestamp(value)
    if timestamp is None:
        raise InvalidDateError(
            "Date is not a valid ISO 8601 or RFC 2822 string: %r" % (value,))

    return timestamp.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")

def parse_authorization(header):
    """
    parse_authorization(header) -> Credentials or None

    Split a SigV4 Authorization header into its component parts. None is
    returned if the header does not match the SigV4 grammar exactly.
    """
    m = _authorization_regex.match(header)
    if not m:
        return None

    return Credentials(**m.groupdict())

def parse_chunk_header(chunk):
    """
    parse_chunk_header(chunk) -> (signature, data) or None

    Parse an aws-chunked chunk of the form:
        <hex-length>;chunk-signature=<hex-signature>\\r\\n<data>

    Returns the signature as a str and exactly hex-length bytes of data.
    Anything after the data (usually the trailing \\r\\n) is ignored. None is
    returned if the header line is malformed or the data is short.
    """
    m = _chunk_header_regex.match(chunk)
    if not m:
        return None

    length = int(m.group("length"), 16)
    start = m.end()
    data = chunk[start:start + length]
    if len(data) != length:
        log.debug("Chunk declares %d bytes but carries %d", length, len(data))
        return None

    return m.group("signature").decode("ascii"), data

def is_chunked(headers):
    """
    is_chunked(headers) -> bool

    Indicates whether the (normalized) headers describe an aws-chunked
    streaming upload.
    """
    content_encoding = headers.get(_content_encoding) or ""
    return _aws_chunked in [
        token.strip() for token in content_encoding.split(",")]

def _to_bytes(value):
    if isinstance(value, str):
        return value.encode("utf-8")
    return value

def hmac_sha256(key, data):
    """
    Raw HMAC-SHA256 digest of data. str arguments are UTF-8 encoded.
    """
    return hmac.new(_to_bytes(key), _to_bytes(data), sha256).digest()

def hmac_sha256_hex(key, data):
    """
    Hex HMAC-SHA256 digest of data. str arguments are UTF-8 encoded.
    """
    return hmac.new(_to_bytes(key), _to_bytes(data), sha256).hexdigest()

def sha256_hex(data):
    """
    Hex SHA-256 digest of data. str arguments are UTF-8 encoded.
    """
    return sha256(_to_bytes(data)).hexdigest()

def uri_encode(text, encode_slash=True):
    """
    uri_encode(text, encode_slash=True) -> str

    Percent-encode text the way AWS expects:
    * ASCII letters, digits, '-', '.', '_' and '~' are left alone.
    * '%' is left alone; text is assumed not to contain a bare '%'.
    * '/' becomes %2F, unless encode_slash is False.
    * Every other byte of the UTF-8 encoding becomes an upper-case %XX.
    """
    result = []
    for c in text.encode("utf-8"):
        if c in _never_encode or (c == _ascii_slash and not encode_slash):
            result.append(chr(c))
        else:
            result.append("%%%02X" % c)

    return "".join(result)

# Local variables:
# mode: Python
# tab-width: 8
# indent-tabs-mode: nil
# End:
# vi: set expandtab tabstop=8
