# site_purge/purge/whitelist.py
"""
Selectors that always survive purging, whatever the crawled markup contains.

The ``wordpress`` base list carries the body/post classes WordPress adds at
render time (``logged-in``, ``page-template-*``, ``postid-42`` …), which a
crawl of a handful of pages rarely exercises.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, Pattern, Tuple, Union

from site_purge.config import PurgeConfig

PatternLike = Union[str, Pattern[str]]


def _compile(pattern: PatternLike) -> Pattern[str]:
    return pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)


@dataclass(frozen=True)
class Whitelist:
    """Literal selector names plus ordered regular-expression rules."""

    literal_selectors: FrozenSet[str] = frozenset()
    pattern_rules: Tuple[Pattern[str], ...] = field(default_factory=tuple)

    @classmethod
    def of(cls, literals: Iterable[str] = (), patterns: Iterable[PatternLike] = ()) -> Whitelist:
        return cls().merge(literals, patterns)

    def merge(self, literals: Iterable[str] = (), patterns: Iterable[PatternLike] = ()) -> Whitelist:
        """New whitelist with *literals* and *patterns* added; ``self`` is left untouched."""
        merged_literals = self.literal_selectors | {s.strip() for s in literals if s.strip()}
        rules = list(self.pattern_rules)
        known = {rule.pattern for rule in rules}
        for pattern in patterns:
            rule = _compile(pattern)
            if rule.pattern not in known:
                known.add(rule.pattern)
                rules.append(rule)
        return Whitelist(frozenset(merged_literals), tuple(rules))

    def allows(self, name: str) -> bool:
        """True if a class, id or element *name* is whitelisted."""
        if name in self.literal_selectors:
            return True
        return any(rule.search(name) for rule in self.pattern_rules)

    def as_dict(self) -> Dict[str, list]:
        return {
            "literal_selectors": sorted(self.literal_selectors),
            "pattern_rules": [rule.pattern for rule in self.pattern_rules],
        }


WORDPRESS_WHITELIST = Whitelist.of(
    literals=(
        "rtl",
        "home",
        "blog",
        "archive",
        "date",
        "error404",
        "logged-in",
        "admin-bar",
        "no-customize-support",
        "custom-background",
        "wp-custom-logo",
        "alignnone",
        "alignright",
        "alignleft",
        "wp-caption",
        "wp-caption-text",
        "screen-reader-text",
        "comment-list",
        "wp-social-link",
    ),
    patterns=(
        r"^search(-.*)?$",
        r"^(.*)-template(-.*)?$",
        r"^(.*)?-?single(-.*)?$",
        r"^postid-(.*)?$",
        r"^attachmentid-(.*)?$",
        r"^attachment(-.*)?$",
        r"^page(-.*)?$",
        r"^(post-type-)?archive(-.*)?$",
        r"^author(-.*)?$",
        r"^category(-.*)?$",
        r"^tag(-.*)?$",
        r"^tax-(.*)?$",
        r"^term-(.*)?$",
        r"^(.*)?-?paged(-.*)?$",
    ),
)

BASE_WHITELISTS: Dict[str, Whitelist] = {
    "wordpress": WORDPRESS_WHITELIST,
    "none": Whitelist(),
}


def get_base_whitelist(name: str) -> Whitelist:
    try:
        return BASE_WHITELISTS[name]
    except KeyError:
        raise ValueError(f"unknown base whitelist: {name!r}") from None


def build_whitelist(config: PurgeConfig) -> Whitelist:
    """Base whitelist merged with the run's own literals and patterns."""
    base = get_base_whitelist(config.base_whitelist)
    return base.merge(config.whitelist, config.whitelist_patterns)


__all__ = ["Whitelist", "WORDPRESS_WHITELIST", "BASE_WHITELISTS", "get_base_whitelist", "build_whitelist"]
