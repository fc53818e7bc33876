"""Type-specific checks run before a value is confirmed.

Validation never raises. Format and constraint problems come back as advisory
issues the user may override; only missing required input (no value, no
language for monolingual text) is blocking.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, assert_never

from lodmapper.domain.analysis.identifiers import IDENTIFIER_RULES
from lodmapper.domain.analysis.values import is_url
from lodmapper.domain.model import ValueKind
from lodmapper.domain.transform.blocks import is_language_code

from .timevalues import parse_time

if TYPE_CHECKING:
    from lodmapper.config import ReconciliationConfig
    from lodmapper.domain.model import PropertyRef, TimePrecision
    from lodmapper.domain.ports import UrlProbe

log = getLogger(__name__)

UNSUPPORTED_DATATYPE = "unsupported_datatype"
UNREACHABLE_URL = "unreachable_url"
_ENTITY_ID_RE = re.compile(r"^Q\d+$")

# Bare identifier shapes per external-id property, used when the property
# itself declares no format constraint
BUILTIN_ID_PATTERNS: dict[str, re.Pattern[str]] = {
    "P8091": re.compile(r"ark:/?\d+/\S+", re.IGNORECASE),
    "P214": re.compile(r"[1-9]\d{1,21}"),
    "P1566": re.compile(r"[1-9]\d{0,8}"),
    "P244": re.compile(r"[a-z]{1,2}\d{8,10}"),
    "P496": re.compile(r"\d{4}-\d{4}-\d{4}-\d{3}[\dX]"),
    "P356": re.compile(r"10\.\d{4,9}/\S+", re.IGNORECASE),
    "P243": re.compile(r"[1-9]\d*"),
    "P212": re.compile(r"97[89](?:[- ]?\d){10}"),
    "P957": re.compile(r"(?:\d[- ]?){9}[\dX]", re.IGNORECASE),
    "P236": re.compile(r"\d{4}-\d{3}[\dX]", re.IGNORECASE),
    "P213": re.compile(r"\d{4} ?\d{4} ?\d{4} ?\d{3}[\dX]", re.IGNORECASE),
    "P1184": re.compile(r"\d+(?:\.\d+)*/\S+"),
}


@dataclass(slots=True, frozen=True)
class ValidationIssue:
    code: str
    message: str
    blocking: bool = False


@dataclass(slots=True, kw_only=True, frozen=True)
class FormatCheck:
    violations: tuple[str, ...] = ()
    passed: tuple[str, ...] = ()
    mandatory_violated: bool = False

    @property
    def valid(self) -> bool:
        return not self.violations


@dataclass(slots=True, kw_only=True, frozen=True)
class ValidationReport:
    issues: tuple[ValidationIssue, ...] = ()
    canonical_url: str | None = None
    precision: TimePrecision | None = None
    normalized_value: str | None = None

    @property
    def blocking(self) -> tuple[ValidationIssue, ...]:
        return tuple(issue for issue in self.issues if issue.blocking)

    @property
    def advisory(self) -> tuple[ValidationIssue, ...]:
        return tuple(issue for issue in self.issues if not issue.blocking)

    @property
    def can_confirm(self) -> bool:
        return not self.blocking

    def warning_codes(self) -> tuple[str, ...]:
        return tuple(dict.fromkeys(issue.code for issue in self.advisory))


def check_format(value: str, prop: PropertyRef) -> FormatCheck:
    """Match ``value`` against the property's format constraints.

    Patterns are matched against the whole value. A pattern that does not
    compile is logged and skipped.
    """

    violations: list[str] = []
    passed: list[str] = []
    mandatory_violated = False
    for constraint in prop.constraints.format:
        try:
            matched = re.fullmatch(constraint.pattern, value) is not None
        except re.error as exc:
            log.warning("Invalid format pattern for %s %r: %s", prop.id, constraint.pattern, exc)
            continue
        if matched:
            passed.append(constraint.pattern)
            continue
        violations.append(constraint.description or constraint.pattern)
        mandatory_violated = mandatory_violated or constraint.mandatory
    return FormatCheck(
        violations=tuple(violations),
        passed=tuple(passed),
        mandatory_violated=mandatory_violated,
    )


def _format_issues(
    value: str,
    prop: PropertyRef,
    config: ReconciliationConfig | None,
) -> list[ValidationIssue]:
    check = check_format(value, prop)
    if check.valid:
        return []
    blocking = bool(config and config.block_on_mandatory_format and check.mandatory_violated)
    return [
        ValidationIssue(
            code="format_violation",
            message=f"Value does not match the expected format: {'; '.join(check.violations)}",
            blocking=blocking,
        )
    ]


def _empty_issue(value: str) -> list[ValidationIssue]:
    if value.strip():
        return []
    return [ValidationIssue(code="empty_value", message="A value is required", blocking=True)]


def _identifier_family_issues(value: str, prop: PropertyRef) -> list[ValidationIssue]:
    pattern = BUILTIN_ID_PATTERNS.get(prop.id)
    if pattern is None:
        return []
    text = value.strip()
    if pattern.fullmatch(text):
        return []
    # URL forms (https://viaf.org/viaf/123) are accepted as well
    rule = next((rule for rule in IDENTIFIER_RULES if rule.property_id == prop.id), None)
    if rule is not None and rule.match(text) is not None:
        return []
    return [
        ValidationIssue(
            code="identifier_pattern",
            message=f"Value does not look like a {prop.label or prop.id}",
        )
    ]


def validate(
    kind: ValueKind,
    value: str,
    prop: PropertyRef,
    *,
    language: str | None = None,
    config: ReconciliationConfig | None = None,
) -> ValidationReport:
    """Check ``value`` for the reconciliation path ``kind``."""

    issues = _empty_issue(value)
    match kind:
        case ValueKind.ENTITY:
            if value.strip() and not _ENTITY_ID_RE.match(value.strip()):
                issues.append(
                    ValidationIssue(code="invalid_entity_id", message=f"Not an entity id: {value}")
                )
            return ValidationReport(issues=tuple(issues))
        case ValueKind.STRING:
            if value.strip():
                issues.extend(_format_issues(value, prop, config))
            return ValidationReport(issues=tuple(issues))
        case ValueKind.MONOLINGUAL_TEXT:
            if not language:
                issues.append(
                    ValidationIssue(
                        code="missing_language",
                        message="Select a language for this text",
                        blocking=True,
                    )
                )
            elif not is_language_code(language):
                issues.append(
                    ValidationIssue(
                        code="invalid_language",
                        message=f"Not a language code: {language}",
                        blocking=True,
                    )
                )
            if value.strip():
                issues.extend(_format_issues(value, prop, config))
            return ValidationReport(issues=tuple(issues))
        case ValueKind.EXTERNAL_ID:
            if not value.strip():
                return ValidationReport(issues=tuple(issues))
            issues.extend(_format_issues(value, prop, config))
            if not prop.constraints.format:
                issues.extend(_identifier_family_issues(value, prop))
            return ValidationReport(
                issues=tuple(issues),
                canonical_url=prop.canonical_url(value),
            )
        case ValueKind.URL:
            if value.strip() and not is_url(value.strip()):
                issues.append(
                    ValidationIssue(code="invalid_url", message="Value is not an http(s) URL")
                )
            if value.strip():
                issues.extend(_format_issues(value, prop, config))
            return ValidationReport(issues=tuple(issues))
        case ValueKind.TIME:
            if not value.strip():
                return ValidationReport(issues=tuple(issues))
            parsed = parse_time(value)
            if parsed is None:
                issues.append(
                    ValidationIssue(
                        code="unrecognized_date",
                        message="Date format not recognized; it will be stored as entered",
                    )
                )
                return ValidationReport(issues=tuple(issues))
            if parsed.circa:
                issues.append(
                    ValidationIssue(code="circa_date", message="Approximate date, precision kept")
                )
            return ValidationReport(
                issues=tuple(issues),
                precision=parsed.precision,
                normalized_value=parsed.value,
            )
        case ValueKind.UNSUPPORTED:
            issues.append(
                ValidationIssue(
                    code=UNSUPPORTED_DATATYPE,
                    message=f"Datatype {prop.datatype} is not validated; the raw value is kept",
                )
            )
            return ValidationReport(issues=tuple(issues))
        case _:
            assert_never(kind)


async def probe_url(probe: UrlProbe, url: str) -> ValidationIssue | None:
    """Advisory reachability check; probe failures count as unreachable."""

    if not is_url(url):
        return None
    if await probe.is_reachable(url):
        return None
    return ValidationIssue(code=UNREACHABLE_URL, message=f"Could not reach {url}")
