"""
Validation of springs already in the database.

Stored springs are checked with the same rules scraped drafts pass through
on ingest (SpringDraftIn), plus checks that only make sense for stored rows:
a slug is present, coordinates fall inside the US, and the description is
long enough to publish. Some issues have a safe automatic fix (regenerate
the slug, clear an unrecognised enum value); issues on the name, the state
or the location make a spring unusable and can be deleted instead.
"""

import re
from dataclasses import asdict, dataclass, field
from typing import Any

from loguru import logger
from pydantic import ValidationError

from soakmap.config import settings
from soakmap.deduplication.types import SpringRecord
from soakmap.ingest import ENUM_FIELDS, SpringDraftIn
from soakmap.utils.geo import is_within_us
from soakmap.utils.text import slugify

MIN_NAME_LENGTH = 2
MIN_DESCRIPTION_LENGTH = 10

# Issues on these fields mean the spring cannot be published at all
BLOCKING_FIELDS = {"name", "state", "coordinates"}

# Fields whose bad values are cleared rather than guessed
CLEARABLE_FIELDS = set(ENUM_FIELDS) | {"temp_f"}


@dataclass
class ValidationIssue:
    """One problem with one stored spring."""
    spring_id: str | None
    name: str
    field: str
    issue: str
    current_value: Any = None
    fixable: bool = False
    suggested_fix: Any = None

    @property
    def blocking(self) -> bool:
        return self.field in BLOCKING_FIELDS and not self.fixable


@dataclass
class ValidationReport:
    """Issues found across a set of springs."""
    checked: int = 0
    issues: list[ValidationIssue] = field(default_factory=list)

    def by_field(self) -> dict[str, list[ValidationIssue]]:
        """Issues grouped by field, in first-seen field order."""
        grouped: dict[str, list[ValidationIssue]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.field, []).append(issue)
        return grouped

    @property
    def invalid_ids(self) -> list[str]:
        """Ids of springs with at least one blocking issue, in first-seen order."""
        return list(dict.fromkeys(i.spring_id for i in self.issues if i.blocking))

    def fixes(self) -> dict[str, dict[str, Any]]:
        """Suggested column values per spring id."""
        fixes: dict[str, dict[str, Any]] = {}
        for issue in self.issues:
            if issue.fixable:
                fixes.setdefault(issue.spring_id, {})[issue.field] = issue.suggested_fix
        return fixes


def _draft_issues(spring: SpringRecord) -> list[ValidationIssue]:
    """Run the ingest model over a stored spring."""
    values = asdict(spring)
    values.pop("id")

    try:
        SpringDraftIn.model_validate(values)
    except ValidationError as e:
        issues = []
        for err in e.errors():
            field_name = str(err["loc"][0]) if err["loc"] else "coordinates"
            clearable = field_name in CLEARABLE_FIELDS
            issues.append(ValidationIssue(
                spring_id=spring.id,
                name=spring.name,
                field=field_name,
                issue=err["msg"],
                current_value=values.get(field_name),
                fixable=clearable,
                suggested_fix=None,
            ))
        return issues

    return []


def validate_spring(spring: SpringRecord) -> list[ValidationIssue]:
    """
    Check one stored spring.

    Args:
        spring: Spring as read from the repository

    Returns:
        Issues found, empty if the spring is valid
    """
    issues = _draft_issues(spring)
    flagged = {i.field for i in issues}

    def add(field_name: str, message: str, value: Any = None, **fix):
        issues.append(ValidationIssue(spring.id, spring.name, field_name, message, value, **fix))

    if "name" not in flagged and len((spring.name or "").strip()) < MIN_NAME_LENGTH:
        add("name", f"Name must be at least {MIN_NAME_LENGTH} characters", spring.name)

    if not spring.slug:
        can_fix = bool(spring.name) and "state" not in flagged
        add(
            "slug", "Slug is required", spring.slug,
            fixable=can_fix,
            suggested_fix=slugify(spring.name, spring.state) if can_fix else None,
        )

    if not spring.has_coordinates:
        # Allowed; the spring is matched by name only and not shown on the map
        add("location", "Coordinates missing or out of range")
    elif not is_within_us(spring.lat, spring.lng):
        add("coordinates", "Coordinates appear to be outside US bounds", {"lat": spring.lat, "lng": spring.lng})

    if len(spring.description or "") < MIN_DESCRIPTION_LENGTH:
        add(
            "description",
            f"Description should be at least {MIN_DESCRIPTION_LENGTH} characters",
            len(spring.description or ""),
        )

    return issues


def validate_springs(springs: list[SpringRecord]) -> ValidationReport:
    """Check every spring and collect the issues."""
    report = ValidationReport(checked=len(springs))
    for spring in springs:
        report.issues.extend(validate_spring(spring))

    logger.info(
        f"Validated {report.checked} springs: {len(report.issues)} issues, "
        f"{len(report.invalid_ids)} unusable springs"
    )
    return report


def apply_fixes(report: ValidationReport, repository) -> int:
    """
    Write the suggested fixes back to the store.

    Returns:
        Number of springs updated
    """
    fixed = 0
    for spring_id, values in report.fixes().items():
        if repository.update_fields(spring_id, values):
            fixed += 1
        else:
            logger.warning(f"Spring {spring_id} no longer exists, fix not applied")

    logger.info(f"Applied fixes to {fixed} springs")
    return fixed


def delete_invalid(report: ValidationReport, repository, id_pattern: str | None = None) -> int:
    """
    Delete springs with blocking issues.

    Ids that do not look like persisted ids are left alone and logged.

    Returns:
        Number of springs deleted
    """
    id_re = re.compile(id_pattern or settings.dedup.id_pattern)

    ids = []
    for spring_id in report.invalid_ids:
        if isinstance(spring_id, str) and id_re.fullmatch(spring_id):
            ids.append(spring_id)
        else:
            logger.warning(f"Not deleting spring with malformed id: {spring_id!r}")

    deleted = repository.delete_by_ids(ids) if ids else 0
    logger.info(f"Deleted {deleted} invalid springs")
    return deleted
