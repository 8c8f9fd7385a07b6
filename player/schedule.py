"""Programme schedule lookups (what is on now, what is on a given day)."""

from datetime import datetime
from typing import List, Optional

from station.constants import WEEKDAYS
from station.models import Programme


def day_name(moment: datetime) -> str:
    return WEEKDAYS[moment.weekday()]


class ProgrammeSchedule:
    def __init__(self, programmes: Optional[List[Programme]] = None):
        self.programmes: List[Programme] = list(programmes or [])

    @property
    def has_data(self) -> bool:
        return bool(self.programmes)

    def for_day(self, day: str) -> List[Programme]:
        day = day.lower()
        return sorted(
            (p for p in self.programmes if p.day == day),
            key=lambda p: p.start_time
        )

    def today(self, now: Optional[datetime] = None) -> List[Programme]:
        return self.for_day(day_name(now or datetime.now()))

    def current(self, now: Optional[datetime] = None) -> Optional[Programme]:
        """
        The programme on air at `now`. Only today's entries are considered;
        a slot ending before it starts runs past midnight.
        """
        now = now or datetime.now()
        hhmm = now.strftime("%H:%M")
        for programme in self.programmes:
            if programme.day == day_name(now) and programme.is_on_air(hhmm):
                return programme
        return None

    def next(self, now: Optional[datetime] = None) -> Optional[Programme]:
        """The next programme to start after `now`, rolling over to tomorrow."""
        now = now or datetime.now()
        hhmm = now.strftime("%H:%M")
        for programme in self.today(now):
            if programme.start_time > hhmm:
                return programme
        upcoming = self.for_day(WEEKDAYS[(now.weekday() + 1) % 7])
        return upcoming[0] if upcoming else None
