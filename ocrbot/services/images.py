
"""
Find image embeds (`![alt](url)`) in post/comment markdown.
"""

import re
from typing import List, Optional

# ![alt](url "optional title")
# - alt text runs to the first "](" and may hold any brackets: ![a [b [c]] d](...)
# - url stops at the first unescaped ")" or whitespace
_IMAGE = re.compile(
    r"!\[(?:\\.|[^\\])*?\]"
    r"\(\s*(?P<url>(?:\\\)|[^)\s])+)"
    r"(?:\s+(?:\"[^\"]*\"|'[^']*'))?\s*\)"
)


def get_image_urls(markdown: Optional[str]) -> List[str]:
    """
    Return every embedded image url in first-seen order (duplicates kept).
    Missing or empty markdown gives an empty list.
    """
    if not markdown:
        return []
    return [m.group("url").replace("\\)", ")") for m in _IMAGE.finditer(markdown)]
