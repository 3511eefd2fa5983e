# 📄 File: sproutsync/shared/utils/health_score.py

# 🧭 Purpose (Layman Explanation):
# Gives each plant a 0-100 health score, a care streak and a fun badge,
# based on how late its care tasks are.

# 🧪 Purpose (Technical Summary):
# Pure date-only scoring over task due/completion dates: overdue-day penalty score,
# a streak heuristic and streak-to-badge tier mapping.

# 🔗 Dependencies:
# - datetime (stdlib)

# 🔄 Connected Modules / Calls From:
# community_social public service (plant pages, garden listing)

from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, Optional, Protocol


class TaskLike(Protocol):
    active: bool
    next_due_on: datetime
    last_completed_on: Optional[datetime]


@dataclass(frozen=True)
class Badge:
    name: str
    quote: str
    image: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


BADGE_TIERS = (
    (100, Badge("Evergreen Legend", "Legendary, you're on your way to a greener world!", "/badges/evergreen-legend.png")),
    (60, Badge("Master Grower", "Master of the Flora.", "/badges/master-grower.png")),
    (30, Badge("Bloom Buddy", "Your plant is thriving — and so is your routine!", "/badges/bloom-buddy.png")),
    (7, Badge("Green Guardian", "You've built a steady habit. Your plant trusts you.", "/badges/green-guardian.png")),
)
DEFAULT_BADGE = Badge(
    "Sprout Starter",
    "Your plant is just getting started — and so are you!",
    "/badges/sprout-starter.png",
)


def _to_date(value: datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def _today(today: Optional[date]) -> date:
    return today or datetime.now(timezone.utc).date()


def calculate_health_score(tasks: Iterable[TaskLike], today: Optional[date] = None) -> int:
    """
    Start at 100 and subtract one point per overdue day across active tasks.

    Args:
        tasks: Plant tasks
        today: Reference date, defaults to the current UTC date

    Returns:
        int: Score between 0 and 100
    """
    today = _today(today)
    total_overdue_days = 0

    for task in tasks:
        if not task.active:
            continue
        due_date = _to_date(task.next_due_on)
        if due_date < today:
            total_overdue_days += (today - due_date).days

    return max(0, 100 - total_overdue_days)


def calculate_care_streak(
    tasks: Iterable[TaskLike],
    created_at: datetime,
    today: Optional[date] = None
) -> int:
    """
    Approximate the number of consecutive well-cared-for days.

    A plant with no overdue tasks has a streak of every day since it was added.
    Once something is overdue the streak is measured from the latest completion,
    if that completion is at most a week old.
    """
    tasks = list(tasks)
    if not tasks:
        return 0

    today = _today(today)
    days_since_creation = (today - _to_date(created_at)).days

    if days_since_creation == 0:
        return 1

    active_tasks = [task for task in tasks if task.active]
    if not active_tasks:
        return days_since_creation + 1

    has_overdue_task = any(_to_date(task.next_due_on) < today for task in active_tasks)
    if not has_overdue_task:
        return days_since_creation + 1

    completions = [task.last_completed_on for task in active_tasks if task.last_completed_on]
    if not completions:
        return 1

    days_since_last_completion = (today - _to_date(max(completions))).days
    if days_since_last_completion <= 7:
        return max(1, days_since_creation - days_since_last_completion)
    return 1


def get_badge_tier(streak: int) -> Badge:
    """Badge earned for a given care streak."""
    for threshold, badge in BADGE_TIERS:
        if streak >= threshold:
            return badge
    return DEFAULT_BADGE
