# File: tests/test_whitelist.py
import re

import pytest

from site_purge.config import PurgeConfig
from site_purge.purge.whitelist import WORDPRESS_WHITELIST, Whitelist, build_whitelist, get_base_whitelist


def test_merge_does_not_mutate_base():
    before = (WORDPRESS_WHITELIST.literal_selectors, WORDPRESS_WHITELIST.pattern_rules)
    merged = WORDPRESS_WHITELIST.merge(["menu-toggle"], [r"^js-"])

    assert (WORDPRESS_WHITELIST.literal_selectors, WORDPRESS_WHITELIST.pattern_rules) == before
    assert "menu-toggle" in merged.literal_selectors
    assert "menu-toggle" not in WORDPRESS_WHITELIST.literal_selectors


def test_merge_deduplicates_and_keeps_pattern_order():
    wl = Whitelist.of(["a", "a", " b "], [r"^x", re.compile(r"^y"), r"^x"])

    assert wl.literal_selectors == frozenset({"a", "b"})
    assert [p.pattern for p in wl.pattern_rules] == [r"^x", r"^y"]


def test_build_whitelist_defaults():
    wl = build_whitelist(PurgeConfig())

    assert {"menu-toggle", "open", "screen-reader-text"} <= wl.literal_selectors
    assert wl.allows("postid-42")
    assert wl.allows("page-template-default")
    assert not wl.allows("unused")


def test_build_whitelist_without_base():
    wl = build_whitelist(PurgeConfig(base_whitelist="none", whitelist=["x"], whitelist_patterns=["^y-"]))

    assert wl.literal_selectors == frozenset({"x"})
    assert wl.allows("y-1")
    assert not wl.allows("postid-42")


def test_unknown_base_whitelist():
    with pytest.raises(ValueError):
        get_base_whitelist("drupal")
