"""Message formatting for Slack.

Converts message bodies written in one of several dialects into Slack's
``mrkdwn``.  Conversion is table driven: each dialect owns an ordered tuple
of ``(pattern, replacement)`` pairs applied with ``re.sub``.  Formatting
never fails; text that does not match a rule passes through unchanged.
"""

from __future__ import annotations

import re
from enum import Enum


class Dialect(str, Enum):
    MRKDWN = "mrkdwn"
    PLAIN = "plain"
    MARKDOWN = "markdown"
    HTML = "html"


# The three delimiters are distinct, so no two rules can claim the same span
# and application order does not change the result.
MARKDOWN_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\*\*(.+?)\*\*"), r"*\1*"),  # bold
    (re.compile(r"__(.+?)__"), r"_\1_"),  # italic
    (re.compile(r"~~(.+?)~~"), r"~\1~"),  # strikethrough
)

# Order matters: block tags, then recognised inline tags, then the catch-all
# strip, which must run last so it only removes tags without a mapping.
HTML_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"<br\s*/?>"), "\n"),
    (re.compile(r"</?p>"), "\n"),
    (re.compile(r"<strong>(.*?)</strong>"), r"*\1*"),
    (re.compile(r"<b>(.*?)</b>"), r"*\1*"),
    (re.compile(r"<em>(.*?)</em>"), r"_\1_"),
    (re.compile(r"<i>(.*?)</i>"), r"_\1_"),
    (re.compile(r"<code>(.*?)</code>"), r"`\1`"),
    (re.compile(r"<del>(.*?)</del>"), r"~\1~"),
    (re.compile(r"<[^>]+>"), ""),
)

_RULES: dict[str, tuple[tuple[re.Pattern[str], str], ...]] = {
    Dialect.MARKDOWN.value: MARKDOWN_RULES,
    Dialect.HTML.value: HTML_RULES,
}


def _dialect_value(dialect: Dialect | str | None) -> str | None:
    if isinstance(dialect, Dialect):
        return dialect.value
    return dialect


def format_message(body: str, dialect: Dialect | str | None = None) -> str:
    """Convert ``body`` from ``dialect`` to Slack mrkdwn.

    ``mrkdwn``/``native``/``None`` and ``plain`` return the body unchanged,
    as does any dialect this module does not know about.
    """
    value = _dialect_value(dialect)
    rules = _RULES.get(value)
    if rules is None:
        return body

    text = body
    for pattern, replacement in rules:
        text = pattern.sub(replacement, text)
    return text


def markdown_enabled(dialect: Dialect | str | None = None) -> bool:
    """Whether Slack should render mrkdwn for a message in ``dialect``."""
    return _dialect_value(dialect) != Dialect.PLAIN.value
