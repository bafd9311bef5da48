"""Data normalization: upstream payloads into an AggregatedProfile."""

from datetime import datetime, timezone
from typing import Any

from rbxprofile.core.aggregator import EnrichmentFields
from rbxprofile.core.endpoints import PROFILE_LINK_TEMPLATE
from rbxprofile.core.resolver import ResolvedUser
from rbxprofile.models.profile import AggregatedProfile

NOT_AVAILABLE = "N/A"
SECONDS_PER_DAY = 86400


def parse_created(value: Any) -> datetime | None:
    """
    Parse a Roblox creation timestamp.

    Examples:
        "2006-02-27T21:06:40.3Z" -> datetime(2006, 2, 27, 21, 6, 40, 300000, tzinfo=UTC)
        "2019-05-01T10:00:00+00:00" -> datetime(2019, 5, 1, 10, 0, tzinfo=UTC)
        "2019-05-01" -> datetime(2019, 5, 1, tzinfo=UTC)
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z") or text.endswith("z"):
            text = text[:-1] + "+00:00"
        text = _trim_fraction(text)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _trim_fraction(text: str) -> str:
    """Pad or cut fractional seconds to 6 digits; Roblox sends 1 to 7."""
    if "." not in text:
        return text
    head, _, rest = text.partition(".")
    digits = ""
    for ch in rest:
        if not ch.isdigit():
            break
        digits += ch
    suffix = rest[len(digits):]
    if not digits:
        return head + suffix
    return f"{head}.{digits[:6].ljust(6, '0')}{suffix}"


def account_age_days(created: datetime | None, now: datetime | None = None) -> int:
    """Whole days between creation and now, 0 when creation is unknown."""
    if created is None:
        return 0
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    seconds = (now - created).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // SECONDS_PER_DAY)


def format_account_age(age_days: int) -> str:
    """
    Human readable account age.

    Years are 365 days and months 30 days; this is an approximation, not
    calendar arithmetic.

    Examples:
        400 -> "1 years, 1 months, 5 days"
        45 -> "1 months, 15 days"
        12 -> "12 days"
    """
    years = age_days // 365
    months = (age_days % 365) // 30
    days = (age_days % 365) % 30

    if years > 0:
        return f"{years} years, {months} months, {days} days"
    if months > 0:
        return f"{months} months, {days} days"
    return f"{days} days"


def _text_or_na(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return NOT_AVAILABLE


def normalize_profile(
    resolved: ResolvedUser,
    details: dict[str, Any] | None,
    enrichment: EnrichmentFields,
    now: datetime | None = None,
) -> AggregatedProfile:
    """
    Build the consolidated profile.

    Args:
        resolved: Identity from the username lookup
        details: Payload of the user details call
        enrichment: Best-effort enrichment fields
        now: Reference time for age fields and freshness stamp

    Returns:
        Fully populated AggregatedProfile
    """
    details = details if isinstance(details, dict) else {}
    now = now or datetime.now(timezone.utc)

    created = parse_created(details.get("created") or details.get("createdAt"))
    age_days = account_age_days(created, now)

    return AggregatedProfile(
        user_id=resolved.user_id,
        username=resolved.username or details.get("name") or NOT_AVAILABLE,
        display_name=_text_or_na(resolved.display_name or details.get("displayName")),
        estimated_creation_date=created.date().isoformat() if created else NOT_AVAILABLE,
        account_age=format_account_age(age_days) if created else NOT_AVAILABLE,
        age_days=age_days,
        followers=enrichment.followers,
        followings=enrichment.followings,
        friends=enrichment.friends,
        groups_count=enrichment.groups_count,
        verified=bool(details.get("hasVerifiedBadge", False)),
        description=_text_or_na(details.get("description")),
        avatar=enrichment.avatar,
        previous_usernames=list(enrichment.previous_usernames),
        active_status="Banned" if details.get("isBanned") else "Active",
        online_status=enrichment.online_status,
        profile_link=PROFILE_LINK_TEMPLATE.format(user_id=resolved.user_id),
        last_updated=now,
    )
