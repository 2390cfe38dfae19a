"""
Ordered pattern rules for pulling one field out of raw OCR text.

A FieldExtractor owns an immutable, ordered tuple of PatternRules and returns
the value of the first rule that matches. Order encodes priority: labelled
rules (所在地：…) come before structural ones (bare ward names) because the
structural ones misfire more often on noisy OCR.

Each rule carries a CaptureKind tag that says how its match becomes a value,
so nothing downstream has to inspect the regex source to decide which group
to use.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

import structlog

logger = structlog.get_logger()


class CaptureKind(str, Enum):
    """How a rule turns a regex match into a field value."""

    GROUP = "group"  # a single capture group
    WHOLE = "whole"  # the entire match
    PREFIXED = "prefixed"  # prefix + a capture group (or the whole match when group == 0)
    JOINED = "joined"  # prefix + every capture group concatenated


@dataclass(frozen=True)
class PatternRule:
    """One regex plus an explicit description of how to read its match."""

    name: str
    pattern: re.Pattern
    kind: CaptureKind = CaptureKind.GROUP
    group: int = 1
    prefix: str = ""
    suffix: str = ""
    japanese: bool = True

    def apply(self, text: str) -> str | None:
        match = self.pattern.search(text)
        if match is None:
            return None

        if self.kind is CaptureKind.WHOLE:
            value = match.group(0)
        elif self.kind is CaptureKind.JOINED:
            value = self.prefix + "".join(g for g in match.groups() if g)
        elif self.kind is CaptureKind.PREFIXED:
            captured = match.group(self.group)
            if captured is None:
                return None
            value = captured if captured.startswith(self.prefix) else self.prefix + captured.strip()
        else:
            value = match.group(self.group)

        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        if self.suffix and not value.endswith(self.suffix):
            value += self.suffix
        return value


def rule(
    name: str,
    pattern: str,
    kind: CaptureKind = CaptureKind.GROUP,
    *,
    group: int = 1,
    prefix: str = "",
    suffix: str = "",
    flags: int = 0,
    japanese: bool = True,
) -> PatternRule:
    """Compile a PatternRule."""
    return PatternRule(
        name=name,
        pattern=re.compile(pattern, flags),
        kind=kind,
        group=group,
        prefix=prefix,
        suffix=suffix,
        japanese=japanese,
    )


@dataclass(frozen=True)
class FieldMatch:
    """The value a FieldExtractor produced and the rule that produced it."""

    value: str
    rule: PatternRule

    @property
    def japanese(self) -> bool:
        return self.rule.japanese


@dataclass(frozen=True)
class FieldExtractor:
    """Try each rule in order; the first non-empty value wins."""

    field: str
    rules: tuple[PatternRule, ...]
    normalize: Callable[[str], str] | None = None

    def match(self, text: str | None) -> FieldMatch | None:
        if not text:
            return None
        for pattern_rule in self.rules:
            value = pattern_rule.apply(text)
            if value is None:
                continue
            if self.normalize is not None:
                value = self.normalize(value)
            logger.debug("Field matched", field=self.field, rule=pattern_rule.name, value=value[:50])
            return FieldMatch(value=value, rule=pattern_rule)
        return None

    def extract(self, text: str | None) -> str | None:
        found = self.match(text)
        return found.value if found else None
