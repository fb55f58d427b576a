"""Terminal page -> ranked ``CandidateLink`` list.

Policy:
- buttons matching an exclusion pattern never become candidates;
- duplicate URLs keep their first occurrence;
- blacklisted candidates are dropped, unless the page yields only one
  candidate in total, in which case it is returned as-is;
- elevated (preferred/trusted) candidates come first, then the rest, both
  in order of first appearance.
"""

from __future__ import annotations

import re

import structlog
from bs4 import Tag

from linkhop.domain.entities.links import CandidateLink, HostTier
from linkhop.infrastructure.classification.host_rules import (
    compile_host_rules,
    compile_patterns,
    known_server_name,
    match_host_rule,
    matches_any,
)
from linkhop.infrastructure.common.html_selectors import (
    absolute_url,
    element_text,
    is_usable_href,
    parse_html,
)
from linkhop.infrastructure.common.parsers import find_quality, find_size
from linkhop.infrastructure.config.schema import ClassifierConfig

log = structlog.get_logger(__name__)

_BRACKET_RE = re.compile(r"\[(.*?)\]")
_SECTION_HEADINGS = ["h2", "h3", "h4", "h5"]


def derive_label(text: str) -> str:
    """Trimmed ``[...]`` contents, else the whitespace-normalized text."""
    match = _BRACKET_RE.search(text)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return " ".join(text.split())


def _section_heading(anchor: Tag) -> str:
    heading = anchor.find_previous(_SECTION_HEADINGS)
    return element_text(heading) if isinstance(heading, Tag) else ""


class LinkClassifier:
    """Classifies action buttons of a terminal page."""

    def __init__(self, config: ClassifierConfig | None = None) -> None:
        config = config or ClassifierConfig()
        self._selector = config.button_selector
        self._exclusions = compile_patterns(config.exclusion_patterns)
        self._rules = compile_host_rules(config.host_rules)
        self._blacklist = compile_patterns(config.blacklist_patterns)

    def classify(self, html: str, *, base_url: str = "") -> list[CandidateLink]:
        soup = parse_html(html)
        candidates: list[CandidateLink] = []
        seen: set[str] = set()
        excluded = 0

        for anchor in soup.select(self._selector):
            text = element_text(anchor)
            if matches_any(self._exclusions, text):
                excluded += 1
                continue

            href = anchor.get("href")
            if not isinstance(href, str) or not is_usable_href(href):
                continue
            url = absolute_url(href, base_url)
            if url is None or url in seen:
                continue
            seen.add(url)

            candidates.append(self._build_candidate(anchor, text, url))

        blacklisted = [c for c in candidates if c.host_tier is HostTier.BLACKLISTED]
        if len(candidates) > 1:
            candidates = [c for c in candidates if c not in blacklisted]

        ordered = sorted(candidates, key=lambda c: not c.host_tier.is_elevated)
        log.debug(
            "links_classified",
            total=len(ordered),
            elevated=sum(1 for c in ordered if c.host_tier.is_elevated),
            excluded=excluded,
            blacklisted=len(blacklisted),
        )
        return ordered

    def _build_candidate(self, anchor: Tag, text: str, url: str) -> CandidateLink:
        label = derive_label(text)
        section = _section_heading(anchor)

        rule = match_host_rule(url, self._rules)
        tier = rule.tier if rule else HostTier.OTHER
        if matches_any(self._blacklist, label, url):
            tier = HostTier.BLACKLISTED

        if rule:
            server = rule.name
        else:
            server = known_server_name(text) or label

        return CandidateLink(
            label=label,
            raw_text=text,
            url=url,
            host_tier=tier,
            server=server,
            section=section,
            size=find_size(text) or find_size(section),
            quality=find_quality(text) or find_quality(section),
        )
