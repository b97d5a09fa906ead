# File: tests/test_purger.py
from pathlib import Path

import pytest

from site_purge.config import PurgeConfig
from site_purge.errors import PurgeEngineError
from site_purge.purge.models import ContentEntry, PurgeRequest
from site_purge.purge.purger import CssPurger, matchable, selector_names, split_at_rules
from site_purge.purge.whitelist import Whitelist, build_whitelist

CORPUS = (
    ContentEntry('<html><body><div class="used"><a href="/x" id="cta">Go</a></div></body></html>'),
    ContentEntry('<html><body><ul class="nav"><li class="item">One</li></ul></body></html>'),
)


def write_css(tmp_path: Path, css: str, name: str = "style.css") -> Path:
    path = tmp_path / name
    path.write_text(css, encoding="utf-8")
    return path


def purge(path: Path, whitelist: Whitelist = Whitelist(), corpus=CORPUS):
    return CssPurger().purge(PurgeRequest(path, tuple(corpus), whitelist))


def test_used_unused_and_whitelisted(stylesheet):
    whitelist = build_whitelist(PurgeConfig())
    result = purge(stylesheet, whitelist)

    assert ".used" in result.css
    assert ".menu-toggle" in result.css
    assert ".unused" not in result.css
    assert result.selectors_kept == 2
    assert result.selectors_removed == 1


def test_purge_is_idempotent(tmp_path, stylesheet):
    whitelist = build_whitelist(PurgeConfig())
    first = purge(stylesheet, whitelist)
    second = purge(write_css(tmp_path, first.css, "style.min.css"), whitelist)

    assert second.css == first.css
    assert second.selectors_removed == 0


def test_whitelisted_selectors_survive_without_usage(tmp_path):
    path = write_css(
        tmp_path,
        ".js-modal { display: none }\n"
        "#keep-me { color: red }\n"
        ".page-template-full .content { width: 100% }\n"
        ".absent { color: blue }\n",
    )
    whitelist = Whitelist.of(literals=["keep-me"], patterns=[r"^js-"]).merge(patterns=[r"^page(-.*)?$"])
    css = purge(path, whitelist).css

    assert ".js-modal" in css
    assert "#keep-me" in css
    assert ".page-template-full .content" in css
    assert ".absent" not in css


def test_selector_list_is_trimmed(tmp_path):
    path = write_css(tmp_path, ".used, .gone, ul.nav > li.item { margin: 0 }\n")
    result = purge(path)

    assert ".used" in result.css
    assert "ul.nav > li.item" in result.css
    assert ".gone" not in result.css
    assert result.selectors_removed == 1


def test_pseudo_classes_and_elements(tmp_path):
    path = write_css(
        tmp_path,
        ".used:hover { color: red }\n"
        ".used::before { content: '' }\n"
        "a#cta:focus-visible { outline: 0 }\n"
        ".gone:hover { color: blue }\n",
    )
    css = purge(path).css

    assert ".used:hover" in css
    assert ".used::before" in css
    assert "a#cta:focus-visible" in css
    assert ".gone" not in css


def test_media_rules_and_other_at_rules(tmp_path):
    path = write_css(
        tmp_path,
        "@font-face { font-family: Demo; src: url(demo.woff2) }\n"
        "@media (max-width: 600px) { .gone { display: none } }\n"
        "@media print { .used { color: black } .gone { color: white } }\n",
    )
    css = purge(path).css

    assert "@font-face" in css
    assert "max-width: 600px" not in css
    assert "@media print" in css
    assert ".used" in css
    assert ".gone" not in css


def test_missing_stylesheet_raises(tmp_path):
    with pytest.raises(PurgeEngineError):
        purge(tmp_path / "nope.css")


def test_undecodable_stylesheet_raises(tmp_path):
    path = tmp_path / "latin.css"
    path.write_bytes(b".caf\xe9 { color: red }")
    with pytest.raises(PurgeEngineError):
        purge(path)


def test_selector_names():
    assert selector_names("ul.nav > li#first.item:hover") == {"ul", "nav", "li", "first", "item"}
    assert selector_names(r".md\:flex") == {"md:flex"}


@pytest.mark.parametrize(
    "selector,expected",
    [
        (".a:hover", ".a"),
        (".a::after", ".a"),
        ("::selection", "*"),
        (".a > :focus", ".a > *"),
        ("input:checked", "input:checked"),
    ],
)
def test_matchable(selector, expected):
    assert matchable(selector) == expected


def test_supports_and_nested_media_are_purged(tmp_path):
    path = write_css(
        tmp_path,
        "@supports (display:grid){.gone{display:grid}.used{display:grid}}\n"
        "@supports (display: flex) { @media screen { .gone { display: flex } } }\n"
        "@media screen { @supports (gap: 1px) { #cta { gap: 1px } .gone { gap: 2px } } }\n",
    )
    result = purge(path)
    css = result.css

    assert "@supports (display:grid) {" in css
    assert ".used {" in css
    assert ". used" not in css
    assert ".gone" not in css
    assert "display: flex" not in css
    assert "@media screen {\n    @supports (gap: 1px) {" in css
    assert "#cta" in css
    assert result.selectors_removed == 3


def test_unknown_at_rules_are_copied_verbatim(tmp_path):
    keyframes = "@keyframes spin { from { transform: rotate(0deg) } to { transform: rotate(360deg) } }"
    path = write_css(tmp_path, f"@layer base, theme;\n{keyframes}\n.used {{ animation: spin 1s }}\n.gone {{ color: red }}\n")
    css = purge(path).css

    assert "@layer base, theme;" in css
    assert keyframes in css
    assert ".used" in css
    assert ".gone" not in css


def test_purge_with_group_rules_is_idempotent(tmp_path):
    path = write_css(tmp_path, "@supports (display: grid) { @media print { .used { color: black } } }\n")
    first = purge(path)
    second = purge(write_css(tmp_path, first.css, "style.min.css"))

    assert second.css == first.css


def test_split_at_rules():
    text = '.a { content: "@media" }\n@media print { .b { x: 1 } }\n@import url(x.css);\n@layer a;\n.c {}'
    kinds = [(kind, source.strip()) for kind, source, _ in split_at_rules(text)]

    assert kinds == [
        ("css", '.a { content: "@media" }'),
        ("group", "@media print"),
        ("css", "@import url(x.css);"),
        ("raw", "@layer a;"),
        ("css", ".c {}"),
    ]


def test_serializer_preferences_are_restored(tmp_path):
    import cssutils

    path = write_css(tmp_path, ".used {}\n")
    before = cssutils.ser.prefs.keepEmptyRules

    assert ".used" in purge(path).css
    assert cssutils.ser.prefs.keepEmptyRules == before


def test_negated_names_do_not_protect_a_selector(tmp_path):
    path = write_css(tmp_path, ".unused:not(.open) { color: red }\n.menu-toggle:not(.x) { color: blue }\n")
    css = purge(path, build_whitelist(PurgeConfig())).css

    assert ".unused" not in css
    assert ".menu-toggle:not(.x)" in css
    assert selector_names(".unused:not(.open)") == {"unused"}
    assert selector_names("li:not(:is(.a, .b)).item") == {"li", "item"}
