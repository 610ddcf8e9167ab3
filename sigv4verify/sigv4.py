"""
SigV4 signature verification, including aws-chunked streaming uploads.
"""

from collections.abc import Mapping
import hmac
from logging import getLogger
from posixpath import normpath
from re import compile as re_compile
from urllib.parse import SplitResult, urlsplit

from .dateutil import parse_timestamp
from .exc import (
    AlgorithmError, AuthorizationError, ChunkFramingError, ChunkSequenceError,
    MissingAuthorizationError, UnsupportedAuthError)
from .util import (
    AWS4_HMAC_SHA256, DEFAULT_HEADER_PREFIX, EMPTY_SHA256, hmac_sha256,
    hmac_sha256_hex, is_chunked, normalize_headers, parse_authorization,
    parse_chunk_header, resolve_date, sha256_hex, uri_encode)

# pylint: disable=C0103

# Algorithm tag for chunk strings-to-sign
AWS4_HMAC_SHA256_PAYLOAD = "AWS4-HMAC-SHA256-PAYLOAD"

# Header keys
_authorization = "authorization"
_aws4_request = "aws4_request"
_date = "date"
_x_amz_content_sha256 = "x-amz-content-sha256"

# Headers whose values may contain commas that are not list separators.
_unsorted_headers = frozenset([_authorization, _date])

# Scheme prefix of SigV2 Authorization headers
_sigv2_prefix = "AWS "

# Prefix shared by every SigV4 algorithm name
_sigv4_algorithm_prefix = "AWS4-"

# Match for multiple slashes
_multislash = re_compile(r"//+")

# Logging instance
log = getLogger("sigv4verify.sigv4")

def _split_uri(uri):
    """
    Split a request URI into its components. A bare path is split by hand:
    urlsplit() would read a leading "//segment" as a network location.
    """
    if not uri.startswith("/"):
        return urlsplit(uri)

    uri, _, fragment = uri.partition("#")
    path, _, query = uri.partition("?")
    return SplitResult("", "", path, query, fragment)

class AWSSigV4Verifier(object):
    # pylint: disable=R0902,R0904
    """
    Verify that a request matches the expectations of AWS SigV4.

    A verifier handles a single request. For aws-chunked uploads, call
    verify() on the request first and then verify_chunk() once per chunk,
    in the order the chunks were sent, including the final empty chunk.
    Each chunk signature is chained from the one before it, so the instance
    must not be shared between threads without external serialization.
    """

    def __init__(self, secret_key, method, uri, headers, body=None,
                 header_prefix=DEFAULT_HEADER_PREFIX):
        """
        AWSSigV4Verifier(
            secret_key: str,
            method: str,
            uri: str,
            headers: Mapping[str, str],
            body: Optional[bytes]=None,
            header_prefix: str="HTTP_")

        secret_key: The shared secret for the access key in the request.
        method: The HTTP request method (GET, PUT, POST, etc.).
        uri: The request URI, either absolute or just the path and query.
        headers: The request headers. Keys are normalized, so a WSGI environ
            can be passed as-is.
        body: The request body (if any), undecoded. Omit this for chunked
            uploads.
        header_prefix: The transport prefix stripped from header names.

        The Authorization and date headers are parsed here; a request that
        cannot possibly be verified raises a SignatureVerificationError
        subclass. No signatures are computed until verify() is called.
        """
        super(AWSSigV4Verifier, self).__init__()

        if not isinstance(secret_key, str):
            raise TypeError("Expected secret_key to be a string.")
        if not isinstance(method, str):
            raise TypeError("Expected method to be a string.")
        if not isinstance(uri, str):
            raise TypeError("Expected uri to be a string.")
        if not isinstance(headers, Mapping):
            raise TypeError("Expected headers to be a mapping.")
        if body is not None and not isinstance(body, bytes):
            raise TypeError("Expected body to be a byte array.")
        if not isinstance(header_prefix, str):
            raise TypeError("Expected header_prefix to be a string.")

        self._secret_key = secret_key
        self._method = method.upper()
        self._uri = _split_uri(uri)
        self._body = body
        self._headers = normalize_headers(headers, header_prefix)
        self._previous_signature = None

        authorization = self._headers.get(_authorization)
        if authorization is None:
            raise MissingAuthorizationError(
                "Authorization header is not present")

        if not isinstance(authorization, str):
            raise TypeError("Header 'authorization' value must be a string.")

        if authorization.startswith(_sigv2_prefix):
            raise UnsupportedAuthError(
                "SigV2 Authorization headers are not supported")

        algorithm = authorization.split(" ", 1)[0]
        if (algorithm.startswith(_sigv4_algorithm_prefix) and
                algorithm != AWS4_HMAC_SHA256):
            raise AlgorithmError("Unsupported algorithm: %r" % (algorithm,))

        self._credentials = parse_authorization(authorization)
        if self._credentials is None:
            raise AuthorizationError(
                "Authorization header is not a valid SigV4 header")

        # Client order is kept; it determines the canonical header order.
        self._signed_headers = self._credentials.signed_headers.split(";")

        self._request_date = resolve_date(self._headers)

        for header in self._signed_headers:
            value = self._headers.get(header)
            if value is None:
                raise AuthorizationError(
                    "Signed header %r is not present in the request" %
                    (header,))
            if not isinstance(value, str):
                raise TypeError(
                    "Header %r value must be a string: %r" %
                    (header, type(value).__name__))
        return

    @property
    def method(self):
        """
        The upper-cased HTTP method.
        """
        return self._method

    @property
    def uri(self):
        """
        The request URI as a urllib.parse.SplitResult.
        """
        return self._uri

    @property
    def body(self):
        """
        The request body, or None if none was supplied.
        """
        return self._body

    @property
    def headers(self):
        """
        The normalized request headers.
        """
        return self._headers

    @property
    def credentials(self):
        """
        The Credentials parsed from the Authorization header.
        """
        return self._credentials

    @property
    def access_key(self):
        """
        The access key id the client signed with.
        """
        return self._credentials.access_key

    @property
    def region(self):
        """
        The region from the credential scope.
        """
        return self._credentials.region

    @property
    def service(self):
        """
        The service from the credential scope.
        """
        return self._credentials.service

    @property
    def signed_headers(self):
        """
        The signed header names, in the order the client listed them.
        """
        return list(self._signed_headers)

    @property
    def request_date(self):
        """
        The request timestamp in YYYYMMDDTHHMMSSZ form.
        """
        return self._request_date

    @property
    def request_timestamp(self):
        """
        The request timestamp as a UTC datetime.
        """
        return parse_timestamp(self._request_date)

    @property
    def chunked(self):
        """
        Whether the request is an aws-chunked streaming upload.
        """
        return is_chunked(self._headers)

    @property
    def previous_signature(self):
        """
        The signature computed by the last verify() or verify_chunk() call,
        or None if neither has been called yet.
        """
        return self._previous_signature

    @property
    def canonical_uri(self):
        """
        The canonicalized URI path: relative segments and redundant slashes
        removed, a trailing slash kept, and each segment percent-encoded.
        """
        path = self._uri.path
        if not path:
            return "/"

        cleaned = normpath(path)
        if len(path) > 1 and path.endswith("/") and not cleaned.endswith("/"):
            cleaned += "/"

        # normpath keeps a leading "//".
        cleaned = _multislash.sub("/", cleaned)
        return uri_encode(cleaned, encode_slash=False)

    @property
    def canonical_query_string(self):
        """
        The canonical query string.

        Keys and values are encoded first and the key=value pairs sorted
        afterwards; encoding changes how characters order.
        """
        results = []
        for component in self._uri.query.split("&"):
            if component == "":
                continue

            key, _, value = component.partition("=")
            results.append(uri_encode(key) + "=" + uri_encode(value))

        return "&".join(sorted(results))

    @property
    def canonical_headers(self):
        """
        The canonical headers block, one "name:value\\n" line per signed
        header. Comma-separated values are sorted, except for Authorization
        and Date whose commas are not list separators.
        """
        lines = []
        for header in self._signed_headers:
            value = self._headers[header]
            if header not in _unsorted_headers:
                value = ",".join(sorted(value.split(",")))
            lines.append("%s:%s\n" % (header, value.strip()))

        return "".join(lines)

    @property
    def payload_hash(self):
        """
        The hashed payload line of the canonical request: the
        x-amz-content-sha256 header if sent, otherwise the SHA-256 of the
        body.
        """
        content_sha256 = self._headers.get(_x_amz_content_sha256)
        if content_sha256 is not None:
            return content_sha256

        return sha256_hex(self._body or b"")

    @property
    def canonical_request(self):
        """
        The AWS SigV4 canonical request. This process is outlined here:
        http://docs.aws.amazon.com/general/latest/gr/sigv4-create-canonical-request.html

        The canonical request is:
            method + '\\n' +
            canonical_uri + '\\n' +
            canonical_query_string + '\\n' +
            canonical_headers + '\\n' +
            signed_headers + '\\n' +
            payload_hash
        """
        return "\n".join([
            self._method,
            self.canonical_uri,
            self.canonical_query_string,
            self.canonical_headers,
            ";".join(self._signed_headers),
            self.payload_hash])

    @property
    def credential_scope(self):
        """
        The scope of the credentials: date/region/service/aws4_request.
        """
        return "/".join([
            self._request_date[:8], self.region, self.service, _aws4_request])

    @property
    def string_to_sign(self):
        """
        The AWS SigV4 string being signed.
        """
        return "\n".join([
            AWS4_HMAC_SHA256,
            self._request_date,
            self.credential_scope,
            sha256_hex(self.canonical_request)])

    def chunked_string_to_sign(self, chunk_data):
        """
        chunked_string_to_sign(chunk_data) -> str

        The string signed for one aws-chunked chunk. It embeds the previous
        signature, so ChunkSequenceError is raised if verify() has not been
        called yet.
        """
        if self._previous_signature is None:
            raise ChunkSequenceError(
                "verify() must be called before chunks are verified")

        return "\n".join([
            AWS4_HMAC_SHA256_PAYLOAD,
            self._request_date,
            self.credential_scope,
            self._previous_signature,
            EMPTY_SHA256,
            sha256_hex(chunk_data)])

    @property
    def signing_key(self):
        """
        The signing key derived from the secret key and credential scope.
        """
        k_date = hmac_sha256("AWS4" + self._secret_key, self._request_date[:8])
        k_region = hmac_sha256(k_date, self.region)
        k_service = hmac_sha256(k_region, self.service)
        return hmac_sha256(k_service, _aws4_request)

    def verify(self):
        """
        verify() -> bool

        Check the request signature. The computed signature is kept, even if
        it does not match, as the seed for verify_chunk(). A False result
        must be treated as fatal; chunks of a rejected request mean nothing.
        """
        signature = hmac_sha256_hex(self.signing_key, self.string_to_sign)
        self._previous_signature = signature

        if hmac.compare_digest(signature, self._credentials.signature):
            return True

        log.debug(
            "Signature mismatch for access key %s\n"
            "Canonical request:\n%s\nString to sign:\n%s",
            self.access_key, self.canonical_request, self.string_to_sign)
        return False

    def verify_chunk(self, chunk):
        """
        verify_chunk(chunk) -> bool

        Check the signature of one raw aws-chunked chunk,
            <hex-length>;chunk-signature=<signature>\\r\\n<data>\\r\\n
        and remember it for the next chunk. Chunks must be passed in the
        order they were sent; out of order they simply fail to match.

        ChunkFramingError is raised if the chunk cannot be parsed, and
        ChunkSequenceError if verify() has not been called yet.
        """
        if not isinstance(chunk, bytes):
            raise TypeError("Expected chunk to be a byte array.")

        if self._previous_signature is None:
            raise ChunkSequenceError(
                "verify() must be called before chunks are verified")

        parsed = parse_chunk_header(chunk)
        if parsed is None:
            raise ChunkFramingError("Malformed aws-chunked chunk: %r" %
                                    (chunk[:80],))

        expected_signature, data = parsed
        signature = hmac_sha256_hex(
            self.signing_key, self.chunked_string_to_sign(data))
        self._previous_signature = signature

        return hmac.compare_digest(signature, expected_signature)

    def verify_chunks(self, chunks):
        """
        verify_chunks(chunks) -> bool

        Verify an iterable of raw chunks in order, stopping at the first one
        whose signature does not match.
        """
        for index, chunk in enumerate(chunks):
            if not self.verify_chunk(chunk):
                log.debug("Signature mismatch on chunk %d (%d bytes)",
                          index, len(chunk))
                return False

        return True

# Local variables:
# mode: Python
# tab-width: 8
# indent-tabs-mode: nil
# End:
# vi: set expandtab tabstop=8
