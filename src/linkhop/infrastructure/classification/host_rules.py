"""Compiled host tier rules and server-name detection."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from linkhop.domain.entities.links import HostTier
from linkhop.infrastructure.config.schema import HostRuleConfig

# Server names recognised in button text, in priority order.
_KNOWN_SERVERS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("Hub-Cloud", re.compile(r"hub[\s-]?cloud", re.IGNORECASE)),
    ("V-Cloud", re.compile(r"\bv[\s-]?cloud", re.IGNORECASE)),
    ("GDToT", re.compile(r"gdtot", re.IGNORECASE)),
    ("GDFlix", re.compile(r"gdflix", re.IGNORECASE)),
    ("G-Direct", re.compile(r"g[\s-]?direct|instant", re.IGNORECASE)),
    ("Filepress", re.compile(r"file[\s-]?press", re.IGNORECASE)),
    ("DropGalaxy", re.compile(r"drop[\s-]?galaxy", re.IGNORECASE)),
    ("G-Drive", re.compile(r"g[\s-]?drive", re.IGNORECASE)),
)


@dataclass(frozen=True)
class HostRule:
    name: str
    pattern: re.Pattern[str]
    tier: HostTier


def compile_host_rules(rules: Iterable[HostRuleConfig]) -> tuple[HostRule, ...]:
    return tuple(
        HostRule(
            name=rule.name,
            pattern=re.compile(rule.pattern, re.IGNORECASE),
            tier=HostTier(rule.tier),
        )
        for rule in rules
    )


def compile_patterns(patterns: Iterable[str]) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


def match_host_rule(url: str, rules: Sequence[HostRule]) -> HostRule | None:
    """First rule whose pattern matches *url*."""
    for rule in rules:
        if rule.pattern.search(url):
            return rule
    return None


def matches_any(patterns: Sequence[re.Pattern[str]], *texts: str) -> bool:
    return any(p.search(text) for p in patterns for text in texts if text)


def known_server_name(text: str) -> str | None:
    """Well-known server name mentioned in *text*, if any."""
    for name, pattern in _KNOWN_SERVERS:
        if pattern.search(text):
            return name
    return None
