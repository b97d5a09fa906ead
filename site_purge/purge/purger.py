# site_purge/purge/purger.py
"""
Purger: keeps the CSS rules whose selectors are used by a corpus of HTML
documents or protected by a :class:`Whitelist`.

The stylesheet is parsed with cssutils; whether a selector matches the
corpus is decided by soupsieve through ``BeautifulSoup.select_one``.

cssutils only understands a fixed set of at-rules, so the source is first
split at top-level at-rules. Conditional group rules (``@media``,
``@supports``, ``@container``...) are purged recursively and rebuilt from
their original prelude; any other unknown at-rule is copied through as is.
"""
from __future__ import annotations

import re
import textwrap
import xml.dom
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Sequence, Set, Tuple

import cssutils
from bs4 import BeautifulSoup
from cssutils.css import CSSRule
from soupsieve import SelectorSyntaxError

from site_purge.errors import PurgeEngineError
from site_purge.logger import get_logger
from site_purge.purge.models import ContentEntry, PurgeRequest, PurgeResult
from site_purge.purge.whitelist import Whitelist

logger = get_logger("purger")

GROUP_RULES = frozenset(
    {"media", "supports", "container", "layer", "scope", "document", "-moz-document", "starting-style"}
)
PARSED_RULES = frozenset({"charset", "import", "namespace", "font-face", "page"})

_AT_KEYWORD_RE = re.compile(r"@(-?[a-zA-Z_][\w-]*)")
_NAME_RE = re.compile(r"[.#]((?:[\w-]|\\.)+)")
_ELEMENT_RE = re.compile(r"(?:^|[\s>+~(,])([a-zA-Z][\w-]*)")
_ESCAPE_RE = re.compile(r"\\(.)")
_PSEUDO_ELEMENT_RE = re.compile(r"::[\w-]+(?:\([^)]*\))?")
_DYNAMIC_PSEUDO_RE = re.compile(
    r":(?:hover|focus(?:-within|-visible)?|active|visited|target|before|after|"
    r"first-line|first-letter|selection|placeholder(?:-shown)?|autofill|"
    r"-(?:webkit|moz|ms|o)-[\w-]+)(?![\w-])(?:\([^)]*\))?"
)
_COMBINATORS = (">", "+", "~")
_INDENT = "    "

Segment = Tuple[str, str, str]


# --------------------------------------------------------------------------- #
# Selectors                                                                   #
# --------------------------------------------------------------------------- #


def _without_negations(selector: str) -> str:
    parts: List[str] = []
    position = 0
    lowered = selector.lower()
    while True:
        start = lowered.find(":not(", position)
        if start < 0:
            parts.append(selector[position:])
            return "".join(parts)
        parts.append(selector[position:start])
        depth, index = 0, start + 4
        for index in range(start + 4, len(selector)):
            if selector[index] == "(":
                depth += 1
            elif selector[index] == ")":
                depth -= 1
                if depth == 0:
                    break
        position = index + 1


def selector_names(selector: str) -> Set[str]:
    """Class, id and element names a selector requires, unescaped. ``:not()`` arguments are skipped."""
    positive = _without_negations(selector)
    names = {_ESCAPE_RE.sub(r"\1", m) for m in _NAME_RE.findall(positive)}
    names.update(m.lower() for m in _ELEMENT_RE.findall(positive))
    return names


def matchable(selector: str) -> str:
    """Drop pseudo-elements and state pseudo-classes a static document can't match."""
    stripped = _DYNAMIC_PSEUDO_RE.sub("", _PSEUDO_ELEMENT_RE.sub("", selector)).strip()
    if not stripped:
        return "*"
    if stripped.endswith(_COMBINATORS):
        stripped += " *"
    if stripped.startswith(_COMBINATORS):
        stripped = "* " + stripped
    return stripped


# --------------------------------------------------------------------------- #
# Source splitting                                                            #
# --------------------------------------------------------------------------- #


def _significant(text: str, start: int = 0) -> Iterator[Tuple[int, str]]:
    """Characters outside comments, strings and escapes, with their index."""
    index, size = start, len(text)
    while index < size:
        char = text[index]
        if char == "/" and text.startswith("/*", index):
            end = text.find("*/", index + 2)
            index = size if end < 0 else end + 2
        elif char in "\"'":
            index += 1
            while index < size and text[index] != char:
                index += 2 if text[index] == "\\" else 1
            index += 1
        elif char == "\\":
            index += 2
        else:
            yield index, char
            index += 1


def _find_stop(text: str, start: int, stops: str) -> int:
    for index, char in _significant(text, start):
        if char in stops:
            return index
    return len(text)


def _block_end(text: str, open_index: int) -> int:
    depth = 0
    for index, char in _significant(text, open_index):
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index
    return len(text)


def _next_at_rule(text: str, start: int):
    depth = 0
    for index, char in _significant(text, start):
        if char == "{":
            depth += 1
        elif char == "}":
            depth = max(depth - 1, 0)
        elif char == "@" and depth == 0:
            match = _AT_KEYWORD_RE.match(text, index)
            if match and match.group(1).lower() not in PARSED_RULES:
                return match
    return None


def split_at_rules(text: str) -> List[Segment]:
    """
    Split stylesheet source at its top-level at-rules.

    Returns ``("css", source, "")`` for runs cssutils can parse,
    ``("group", prelude, body)`` for conditional group rules and
    ``("raw", source, "")`` for at-rules that are copied unchanged.
    """
    segments: List[Segment] = []
    position = 0
    while True:
        match = _next_at_rule(text, position)
        if match is None:
            break
        if text[position:match.start()].strip():
            segments.append(("css", text[position:match.start()], ""))

        stop = _find_stop(text, match.end(), "{;}")
        if stop < len(text) and text[stop] == "{":
            close = _block_end(text, stop)
            end = min(close + 1, len(text))
            if match.group(1).lower() in GROUP_RULES:
                segments.append(("group", text[match.start():stop].strip(), text[stop + 1:close]))
            else:
                segments.append(("raw", text[match.start():end], ""))
        else:
            end = stop + 1 if stop < len(text) and text[stop] == ";" else stop
            segments.append(("raw", text[match.start():end], ""))
        position = end

    if text[position:].strip():
        segments.append(("css", text[position:], ""))
    return segments


@contextmanager
def _keeping_empty_rules() -> Iterator[None]:
    prefs = cssutils.ser.prefs
    previous = prefs.keepEmptyRules
    prefs.keepEmptyRules = True
    try:
        yield
    finally:
        prefs.keepEmptyRules = previous


# --------------------------------------------------------------------------- #
# Purger                                                                      #
# --------------------------------------------------------------------------- #


class _Corpus:
    """Parsed documents with a per-selector usage cache."""

    def __init__(self, content: Sequence[ContentEntry]) -> None:
        self._documents = [BeautifulSoup(entry.raw, "html.parser") for entry in content]
        self._cache: Dict[str, bool] = {}

    def uses(self, selector: str) -> bool:
        candidate = matchable(selector)
        if candidate not in self._cache:
            self._cache[candidate] = self._match(candidate)
        return self._cache[candidate]

    def _match(self, candidate: str) -> bool:
        try:
            return any(doc.select_one(candidate) is not None for doc in self._documents)
        except (SelectorSyntaxError, NotImplementedError, ValueError) as exc:
            # unknown to the selector engine: keep the rule
            logger.debug("Keeping unevaluable selector %r: %s", candidate, exc)
            return True


class CssPurger:
    """Removes unused selectors from one stylesheet per :meth:`purge` call."""

    def __init__(self) -> None:
        self._parser = cssutils.CSSParser(raiseExceptions=False, validate=False)

    def purge(self, request: PurgeRequest) -> PurgeResult:
        path = Path(request.stylesheet_path)
        text = self._read(path)
        corpus = _Corpus(request.content)
        counts = [0, 0]
        css = self._purge_text(text, path.resolve().as_uri(), corpus, request.whitelist, counts)
        logger.debug("Kept %d selectors, removed %d", counts[0], counts[1])
        return PurgeResult(css=css, selectors_kept=counts[0], selectors_removed=counts[1])

    @staticmethod
    def _read(path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise PurgeEngineError(f"cannot read stylesheet {path}: {exc}") from exc
        except UnicodeDecodeError as exc:
            raise PurgeEngineError(f"stylesheet {path} is not valid UTF-8: {exc.reason}") from exc

    def _purge_text(self, text: str, href: str, corpus: _Corpus, whitelist: Whitelist, counts: List[int]) -> str:
        parts: List[str] = []
        for kind, source, body in split_at_rules(text):
            if kind == "group":
                inner = self._purge_text(body, href, corpus, whitelist, counts).strip()
                if inner:
                    parts.append(f"{source} {{\n{textwrap.indent(inner, _INDENT)}\n}}")
            elif kind == "raw":
                parts.append(source.strip())
            else:
                css = self._purge_sheet(source, href, corpus, whitelist, counts)
                if css.strip():
                    parts.append(css)
        return "\n".join(parts)

    def _purge_sheet(self, source: str, href: str, corpus: _Corpus, whitelist: Whitelist, counts: List[int]) -> str:
        try:
            sheet = self._parser.parseString(source, href=href)
        except (xml.dom.DOMException, ValueError) as exc:
            raise PurgeEngineError(f"cannot parse stylesheet {href}: {exc}") from exc
        self._purge_rules(sheet, corpus, whitelist, counts)
        with _keeping_empty_rules():
            return sheet.cssText.decode(sheet.encoding or "utf-8")

    def _purge_rules(self, sheet, corpus: _Corpus, whitelist: Whitelist, counts: List[int]) -> None:
        rules = sheet.cssRules
        for index in reversed(range(len(rules))):
            rule = rules[index]
            if rule.type != CSSRule.STYLE_RULE:
                continue
            selectors = [s.selectorText for s in rule.selectorList]
            kept = [s for s in selectors if self._keep(s, corpus, whitelist)]
            counts[0] += len(kept)
            counts[1] += len(selectors) - len(kept)
            if not kept:
                sheet.deleteRule(index)
            elif len(kept) < len(selectors):
                rule.selectorText = ", ".join(kept)

    @staticmethod
    def _keep(selector: str, corpus: _Corpus, whitelist: Whitelist) -> bool:
        if any(whitelist.allows(name) for name in selector_names(selector)):
            return True
        return corpus.uses(selector)


__all__ = ["CssPurger", "selector_names", "matchable", "split_at_rules"]
