"""Code detection and extraction for captured message content."""

import re

CODE_FENCE = "```"
INLINE_CODE_TAG = "<code>"

# Shortest match between a pair of fences; fences do not nest
FENCED_CODE_PATTERN = re.compile(r"```[\s\S]*?```")


def has_code(content: str | None) -> bool:
    """
    Check whether message content contains code.

    Args:
        content: Message text (markdown or HTML fragments)

    Returns:
        True if the content has a code fence or an inline ``<code>`` tag
    """
    if not content:
        return False
    return CODE_FENCE in content or INLINE_CODE_TAG in content


def extract_code_blocks(content: str | None) -> list[str]:
    """
    Extract fenced code regions from message content.

    Each region is returned verbatim, including its opening fence (and any
    language tag) and closing fence. An unterminated fence yields nothing.

    Args:
        content: Message text

    Returns:
        Code regions in order of appearance
    """
    if not content:
        return []
    return FENCED_CODE_PATTERN.findall(content)
