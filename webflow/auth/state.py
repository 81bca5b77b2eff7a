"""Anti-forgery state values for the authorization request."""

import string
from authlib.common.security import generate_token

STATE_ALPHABET = string.ascii_letters + string.digits
DEFAULT_STATE_LENGTH = 10


def generate_state(length: int = DEFAULT_STATE_LENGTH) -> str:
    """Return a fresh alphanumeric state value; empty when length is not positive."""
    if length <= 0:
        return ''
    return generate_token(length, chars=STATE_ALPHABET)
