"""Splitting raw commit messages into subject and body."""
import re

from ..errors import MessageParseError
from ..models import ParsedMessage


def split_message(message: str, pattern: re.Pattern, sha: str = "unknown") -> ParsedMessage:
    """Split a raw commit message with the configured split pattern.

    Group 1 is the subject and group 2 the body. A body group that did not
    take part in the match leaves the body absent (None), which is different
    from an empty body ("").

    Raises:
        MessageParseError: If the pattern does not match the message or
            captures no subject.
    """
    match = pattern.search(message)
    if match is None or match.group(1) is None:
        raise MessageParseError(sha, pattern.pattern)
    return ParsedMessage(subject=match.group(1), body=match.group(2))
