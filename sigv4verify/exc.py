#!/usr/bin/env python
"""
AWS SigV4 verification exceptions.
"""

class SignatureVerificationError(Exception):
    """
    Base class for requests that cannot be checked for a valid signature.
    A signature that is merely wrong is not an error; verify() returns False.
    """
    pass

class MissingAuthorizationError(SignatureVerificationError):
    """
    The request has no Authorization header.
    """
    pass

class UnsupportedAuthError(SignatureVerificationError):
    """
    The Authorization header uses the legacy SigV2 ("AWS ") scheme.
    """
    pass

class AuthorizationError(SignatureVerificationError):
    """
    The Authorization header does not follow the SigV4 grammar, or it names
    a signed header the request does not carry.
    """
    pass

class AlgorithmError(AuthorizationError):
    """
    The Authorization header names a SigV4 algorithm other than
    AWS4-HMAC-SHA256.
    """
    pass

class MissingDateError(SignatureVerificationError):
    """
    Neither an X-Amz-Date nor a Date header was sent.
    """
    pass

class InvalidDateError(MissingDateError):
    """
    The request date header is not a valid ISO 8601 or RFC 2822 timestamp.
    """
    pass

class ChunkFramingError(SignatureVerificationError):
    """
    An aws-chunked chunk does not start with a valid
    "<hex-length>;chunk-signature=<hex>\\r\\n" line, or is shorter than the
    length it declares.
    """
    pass

class ChunkSequenceError(SignatureVerificationError):
    """
    A chunk was submitted before the seed request signature was computed.
    """
    pass

# Local variables:
# mode: Python
# tab-width: 8
# indent-tabs-mode: nil
# End:
# vi: set expandtab tabstop=8
