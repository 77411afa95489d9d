"""Comment filtering and whitespace tokenization for trace lines."""

from __future__ import annotations


def is_comment_line(line: str, comment_prefix: str) -> bool:
    """Return whether a line starts with the comment prefix."""
    return line.startswith(comment_prefix)


def split_record(line: str, expected_column_count: int) -> tuple[str, ...] | None:
    """Split a non-comment line on whitespace runs.

    Returns:
        Ordered tokens, or ``None`` when the token count differs from the
        expected column count.
    """
    tokens = tuple(line.split())
    if len(tokens) != expected_column_count:
        return None
    return tokens


def tokenize_line(
    line: str,
    comment_prefix: str,
    expected_column_count: int,
) -> tuple[str, ...] | None:
    """Split a data line into whitespace-delimited tokens.

    Args:
        line: One trace line.
        comment_prefix: Prefix marking comment lines.
        expected_column_count: Token count a data record must have.

    Returns:
        Ordered tokens, or ``None`` for comments and lines whose token
        count differs from the expected column count.
    """
    if is_comment_line(line, comment_prefix):
        return None
    return split_record(line, expected_column_count)
