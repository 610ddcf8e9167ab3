#!/usr/bin/env python
"""
AWS SigV4 signature verification, including aws-chunked streaming uploads.
"""

from .exc import (
    AlgorithmError, AuthorizationError, ChunkFramingError, ChunkSequenceError,
    InvalidDateError, MissingAuthorizationError, MissingDateError,
    SignatureVerificationError, UnsupportedAuthError)
from .sigv4 import AWSSigV4Verifier
from .util import Credentials

# Local variables:
# mode: Python
# tab-width: 8
# indent-tabs-mode: nil
# End:
# vi: set expandtab tabstop=8
