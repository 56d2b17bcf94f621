# Copyright 2025 VERITAS Contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Citation extraction for markdown answers.

Answers cite evidence with inline markdown links (``[title](url)``) and
occasionally with bare URLs. These helpers collect them in order of
appearance and drop duplicates that differ only cosmetically.
"""

from __future__ import annotations

import re
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict

_MARKDOWN_LINK = re.compile(r"\[([^\]]+)\]\((https?://[^\s)]+)\)")
_BARE_URL = re.compile(r"(?<![(\[])\bhttps?://[^\s)\]>]+")
_TRAILING_PUNCTUATION = ".,;:!?'\""


class Citation(BaseModel):
    """A source referenced by an answer."""

    title: str
    url: str

    model_config = ConfigDict(frozen=True)


def extract_citations(markdown: str) -> list[Citation]:
    """Extract citations from a markdown answer.

    Args:
        markdown: Answer text

    Returns:
        Citations in order of appearance. Bare URLs use the URL as title.

    Example:
        >>> extract_citations("See [report](https://example.org/r).")
        [Citation(title='report', url='https://example.org/r')]
    """
    found: list[tuple[int, Citation]] = []
    link_spans: list[tuple[int, int]] = []

    for match in _MARKDOWN_LINK.finditer(markdown):
        link_spans.append(match.span())
        found.append((match.start(), Citation(title=match.group(1).strip(), url=match.group(2))))

    for match in _BARE_URL.finditer(markdown):
        start = match.start()
        if any(s <= start < e for s, e in link_spans):
            continue
        url = match.group(0).rstrip(_TRAILING_PUNCTUATION)
        found.append((start, Citation(title=url, url=url)))

    found.sort(key=lambda item: item[0])
    return [citation for _, citation in found]


def _normalize_url(url: str) -> str:
    parts = urlsplit(url)
    path = parts.path.rstrip("/")
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, ""))


def deduplicate_citations(citations: list[Citation]) -> list[Citation]:
    """Drop citations pointing at the same source, keeping the first one.

    URLs are compared with scheme and host lower-cased, trailing slash and
    fragment removed.
    """
    seen: set[str] = set()
    unique: list[Citation] = []
    for citation in citations:
        key = _normalize_url(citation.url)
        if key in seen:
            continue
        seen.add(key)
        unique.append(citation)
    return unique
