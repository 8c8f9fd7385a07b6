from datetime import datetime

from station.models import Programme
from player.schedule import ProgrammeSchedule, day_name

# 2024-05-06 is a Monday
MONDAY_MORNING = datetime(2024, 5, 6, 7, 30)


def make_schedule():
    return ProgrammeSchedule([
        Programme(id=1, name="Drive", day="monday", start_time="16:00", end_time="18:00"),
        Programme(id=2, name="Breakfast", day="monday", start_time="06:00", end_time="09:00"),
        Programme(id=3, name="Night Owls", day="monday", start_time="22:00", end_time="02:00"),
        Programme(id=4, name="Sunday Session", day="sunday", start_time="06:00", end_time="10:00"),
    ])


def test_day_name():
    assert day_name(MONDAY_MORNING) == "monday"


def test_for_day_sorted_by_start():
    assert [p.name for p in make_schedule().for_day("Monday")] == ["Breakfast", "Drive", "Night Owls"]


def test_today():
    assert len(make_schedule().today(MONDAY_MORNING)) == 3


def test_current():
    schedule = make_schedule()
    assert schedule.current(MONDAY_MORNING).name == "Breakfast"
    assert schedule.current(datetime(2024, 5, 6, 12, 0)) is None
    assert schedule.current(datetime(2024, 5, 6, 23, 15)).name == "Night Owls"
    # only today's entries are considered
    assert schedule.current(datetime(2024, 5, 7, 7, 0)) is None


def test_empty_schedule():
    assert not ProgrammeSchedule().has_data
    assert ProgrammeSchedule().current(MONDAY_MORNING) is None


def test_next_same_day():
    schedule = make_schedule()
    assert schedule.next(MONDAY_MORNING).name == "Drive"
    assert schedule.next(datetime(2024, 5, 6, 17, 0)).name == "Night Owls"


def test_next_rolls_over_to_tomorrow():
    schedule = make_schedule()
    # nothing left on Monday after Night Owls starts; Tuesday is empty
    assert schedule.next(datetime(2024, 5, 6, 22, 30)) is None
    # Sunday wraps round to Monday
    assert schedule.next(datetime(2024, 5, 12, 12, 0)).name == "Breakfast"
    assert schedule.next(datetime(2024, 5, 11, 20, 0)).name == "Sunday Session"


def test_next_empty_schedule():
    assert ProgrammeSchedule().next(MONDAY_MORNING) is None
