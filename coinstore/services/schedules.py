"""Staff schedules: CRUD."""

from datetime import datetime

from beanie import PydanticObjectId

from coinstore.core.exceptions import NotFoundError
from coinstore.models.schedule import Schedule

DAY_ORDER = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def _sort_key(s: Schedule) -> tuple[int, str]:
    day = DAY_ORDER.index(s.day) if s.day in DAY_ORDER else len(DAY_ORDER)
    return day, s.start_time


async def list_schedules(username: str | None = None) -> list[Schedule]:
    """Schedules sorted by weekday then start time; ``username`` matches any listed staff member."""
    query = {"usernames": username} if username else {}
    items = await Schedule.find(query).to_list()
    return sorted(items, key=_sort_key)


async def create_schedule(usernames: list[str], day: str, start_time: str, end_time: str, title: str) -> Schedule:
    s = Schedule(usernames=usernames, day=day, start_time=start_time, end_time=end_time, title=title)
    await s.insert()
    return s


async def update_schedule(
    schedule_id: PydanticObjectId,
    usernames: list[str],
    day: str,
    start_time: str,
    end_time: str,
    title: str,
) -> Schedule:
    s = await Schedule.get(schedule_id)
    if not s:
        raise NotFoundError("Schedule not found")
    s.usernames = usernames
    s.day = day
    s.start_time = start_time
    s.end_time = end_time
    s.title = title
    s.updated_at = datetime.utcnow()
    await s.save()
    return s


async def delete_schedule(schedule_id: PydanticObjectId) -> None:
    s = await Schedule.get(schedule_id)
    if not s:
        raise NotFoundError("Schedule not found")
    await s.delete()
