"""Read-only projections over fetched documents.

Nothing here touches the store; callers pass in the collections they read.
"""

from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from yamlrg.models.user import STATUS_FLAGS, UserAccount
from yamlrg.models.workshop import Workshop


def display_name_key(account: UserAccount) -> str:
    return (account.display_name or account.email or "").lower()


def sort_accounts(accounts: Iterable[UserAccount], sort_by: str) -> List[UserAccount]:
    """Order accounts for the admin overview.

    ``name`` sorts by display name, ``approval`` puts unapproved accounts
    first and ``date`` puts the most recently approved first.
    """
    accounts = list(accounts)
    if sort_by == "name":
        return sorted(accounts, key=display_name_key)
    if sort_by == "approval":
        return sorted(accounts, key=lambda a: (a.is_approved, display_name_key(a)))

    approved = sorted(
        (a for a in accounts if a.approved_at),
        key=lambda a: a.approved_at,
        reverse=True,
    )
    return approved + [a for a in accounts if not a.approved_at]


def filter_members(
    members: Iterable[UserAccount],
    search: Optional[str] = None,
    flags: Optional[Iterable[str]] = None,
) -> List[UserAccount]:
    """Case-insensitive search on name or email, then required status flags"""
    needle = (search or "").strip().lower()
    required = [f for f in (flags or []) if f in STATUS_FLAGS]

    result = []
    for member in members:
        if needle:
            haystack = f"{member.display_name or ''} {member.email or ''}".lower()
            if needle not in haystack:
                continue
        status = member.status.to_document()
        if all(status.get(flag) for flag in required):
            result.append(member)
    return result


def membership_growth(members: Iterable[UserAccount]) -> List[Dict]:
    """Cumulative member count per calendar date.

    One point per date, carrying the total at the end of that date. Members
    without joinedAt or approvedAt are left out.
    """
    stamps = sorted(
        stamp for stamp in (m.joined_at or m.approved_at for m in members) if stamp
    )

    points: Dict[str, int] = {}
    for count, stamp in enumerate(stamps, start=1):
        points[stamp[:10]] = count
    return [{"date": day, "count": count} for day, count in points.items()]


def flatten_jobs(users: Iterable[UserAccount]) -> List[Dict]:
    """All job listings with their poster, newest first"""
    jobs = []
    for user in users:
        poster = user.public_summary()
        for index, job in enumerate(user.job_listings):
            jobs.append({**job.to_document(), "index": index, "postedBy": poster})
    jobs.sort(key=lambda j: j["postedAt"] or "", reverse=True)
    return jobs


def split_workshops(
    workshops: Iterable[Workshop], today: Optional[date] = None
) -> Tuple[List[Workshop], List[Workshop]]:
    """Upcoming (soonest first) and past (most recent first) workshops"""
    today_str = (today or date.today()).isoformat()
    workshops = list(workshops)
    upcoming = sorted((w for w in workshops if w.date[:10] >= today_str), key=lambda w: w.date)
    past = sorted(
        (w for w in workshops if w.date[:10] < today_str), key=lambda w: w.date, reverse=True
    )
    return upcoming, past
