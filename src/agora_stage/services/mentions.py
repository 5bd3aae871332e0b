"""Parser for extracting user mentions from rich-text content.

Mention encodings:
- Inline token: ``@[userId:Display Name]`` - e.g. ``@[u2:Bob]``
- Attribute: ``data-mention-id="userId"`` as emitted by the rich-text editor,
  e.g. ``<span data-mention-id="u2">@Bob</span>``
"""

import re

INLINE_PATTERN = re.compile(r"@\[([^:\]]+):[^\]]+\]")
ATTRIBUTE_PATTERN = re.compile(r"""data-mention-id=(?:"([^"]+)"|'([^']+)')""")

# Single alternation so matches come back in document order.
MENTION_PATTERN = re.compile(f"{INLINE_PATTERN.pattern}|{ATTRIBUTE_PATTERN.pattern}")


def extract_mentioned_user_ids(content: str | None) -> list[str]:
    """Return mentioned user ids, deduplicated, in order of first occurrence."""
    if not content:
        return []

    seen: dict[str, None] = {}
    for match in MENTION_PATTERN.finditer(content):
        user_id = next(group for group in match.groups() if group is not None).strip()
        if user_id:
            seen.setdefault(user_id, None)
    return list(seen)
