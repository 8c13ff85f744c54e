"""Blocklist matching engine.

Pure Python, no database access. The service layer resolves which entries
are effective for a scope and hands them over as ``MatchRule`` objects in
the order they should be applied.

Matching rules:
  * keyword  - literal text, case-insensitive
  * wildcard - ``*`` matches any run of characters, ``?`` exactly one
  * regex    - Python ``re`` syntax, case-insensitive
  * positions are code-point offsets into the original text (end exclusive)
  * zero-length matches are ignored
  * action precedence: allow < replace < flag < reject
"""

from __future__ import annotations

import html
import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Iterable

from scopeguard.core.exceptions import InvalidPatternError
from scopeguard.domain.enums import Action, PatternType

logger = logging.getLogger(__name__)

DEFAULT_REPLACEMENT = "***"
DEFAULT_CATEGORY = "general"


# ---------------------------------------------------------------------------
# Pattern compilation
# ---------------------------------------------------------------------------

# A group with no nested groups, whose body contains an unbounded or ranged
# quantifier, itself followed by such a quantifier: (a+)+, (?:\w*)*, (x{1,3}){2,}
_GROUP_TOKEN = r"(?:\\.|\[(?:\\.|[^\]\\])*\]|[^()\\\[])"
_QUANTIFIER = r"(?:[+*]|\{\d*,\d*\})"
_NESTED_QUANTIFIER = re.compile(
    r"\(" + _GROUP_TOKEN + r"*" + _QUANTIFIER + _GROUP_TOKEN + r"*\)" + _QUANTIFIER
)


def _to_regex(pattern: str, pattern_type: str) -> str:
    if pattern_type == PatternType.REGEX.value:
        return pattern
    escaped = re.escape(pattern)
    if pattern_type == PatternType.WILDCARD.value:
        return escaped.replace(r"\*", ".*").replace(r"\?", ".")
    return escaped


@lru_cache(maxsize=2048)
def compile_pattern(pattern: str, pattern_type: str = PatternType.KEYWORD.value) -> re.Pattern:
    """Compile a stored pattern.

    Raises InvalidPatternError for bad regex, and for regex with nested
    quantifiers that can backtrack catastrophically.
    """
    if not pattern:
        raise InvalidPatternError(pattern, "pattern must not be empty")
    try:
        compiled = re.compile(_to_regex(pattern, pattern_type), re.IGNORECASE)
    except re.error as exc:
        raise InvalidPatternError(pattern, str(exc)) from exc
    if pattern_type == PatternType.REGEX.value and _NESTED_QUANTIFIER.search(pattern):
        raise InvalidPatternError(pattern, "nested quantifiers are not allowed")
    return compiled


def validate_pattern(pattern: str, pattern_type: str) -> None:
    compile_pattern(pattern, pattern_type)


def escalate_action(current: str | Action, incoming: str | Action) -> Action:
    """Return whichever action is stricter."""
    current, incoming = Action(current), Action(incoming)
    return incoming if incoming.priority > current.priority else current


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MatchRule:
    entry_id: str
    pattern: str
    pattern_type: str = PatternType.KEYWORD.value
    severity: str = "medium"
    action: str = Action.REJECT.value
    replacement: str = DEFAULT_REPLACEMENT
    category: str | None = None
    # Usage scopes; with a usage filter, only listed usages match
    scope: tuple[str, ...] = ()
    owner_type: str = "tenant"
    owner_name: str | None = None

    @classmethod
    def from_entry(cls, entry: Any, owner_name: str | None = None) -> "MatchRule":
        """Build a rule from a BlocklistEntry row (or anything shaped like one)."""
        return cls(
            entry_id=entry.id,
            pattern=entry.pattern,
            pattern_type=entry.pattern_type,
            severity=entry.severity,
            action=entry.action,
            replacement=entry.replacement if entry.replacement is not None else DEFAULT_REPLACEMENT,
            category=entry.category or DEFAULT_CATEGORY,
            scope=tuple(entry.scope or ()),
            owner_type=entry.owner_type,
            owner_name=owner_name,
        )

    def applies_to(self, usage: str | None) -> bool:
        return not usage or usage in self.scope


@dataclass(frozen=True)
class MatchSpan:
    start: int
    end: int


@dataclass(frozen=True)
class BlocklistMatch:
    entry_id: str
    pattern: str
    matched_text: str
    position: MatchSpan
    severity: str
    action: str
    category: str | None = None
    owner_type: str | None = None
    owner_name: str | None = None


@dataclass
class ScanResult:
    original_text: str
    is_blocked: bool
    action: Action
    matches: list[BlocklistMatch] = field(default_factory=list)
    filtered_text: str = ""

    @property
    def matched(self) -> bool:
        return bool(self.matches)

    @property
    def matched_entry_ids(self) -> list[str]:
        return list(dict.fromkeys(m.entry_id for m in self.matches))


@dataclass
class PatternTestResult:
    matched: bool
    positions: list[int]
    highlighted_content: str


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def _spans(compiled: re.Pattern, text: str) -> list[re.Match]:
    return [m for m in compiled.finditer(text) if m.end() > m.start()]


class BlocklistMatcher:
    """Applies an ordered list of rules to text."""

    def __init__(self, rules: Iterable[MatchRule]):
        self._rules = list(rules)

    def scan(self, text: str, usage: str | None = None) -> ScanResult:
        matches: list[BlocklistMatch] = []
        action = Action.ALLOW
        replacements: list[tuple[re.Pattern, str]] = []

        for rule in self._rules:
            if not rule.applies_to(usage):
                continue
            try:
                compiled = compile_pattern(rule.pattern, rule.pattern_type)
            except InvalidPatternError as exc:
                logger.warning("Skipping blocklist entry %s: %s", rule.entry_id, exc.message)
                continue

            found = _spans(compiled, text)
            if not found:
                continue

            for m in found:
                matches.append(
                    BlocklistMatch(
                        entry_id=rule.entry_id,
                        pattern=rule.pattern,
                        matched_text=m.group(0),
                        position=MatchSpan(start=m.start(), end=m.end()),
                        severity=rule.severity,
                        action=rule.action,
                        category=rule.category,
                        owner_type=rule.owner_type,
                        owner_name=rule.owner_name,
                    )
                )
            action = escalate_action(action, rule.action)
            if rule.action == Action.REPLACE.value:
                replacements.append((compiled, rule.replacement))

        is_blocked = action is Action.REJECT
        filtered = text
        if not is_blocked:
            for compiled, replacement in replacements:
                # callable keeps the replacement literal (no \1 expansion)
                filtered = compiled.sub(
                    lambda m, r=replacement: r if m.end() > m.start() else "", filtered
                )

        return ScanResult(
            original_text=text,
            is_blocked=is_blocked,
            action=action,
            matches=matches,
            filtered_text=filtered,
        )


def preview_pattern(content: str, pattern: str, pattern_type: str) -> PatternTestResult:
    """Run one pattern against sample text and mark every hit with <mark> tags."""
    compiled = compile_pattern(pattern, pattern_type)
    found = _spans(compiled, content)

    parts: list[str] = []
    cursor = 0
    for m in found:
        parts.append(html.escape(content[cursor:m.start()]))
        parts.append(f"<mark>{html.escape(m.group(0))}</mark>")
        cursor = m.end()
    parts.append(html.escape(content[cursor:]))

    return PatternTestResult(
        matched=bool(found),
        positions=[m.start() for m in found],
        highlighted_content="".join(parts),
    )

