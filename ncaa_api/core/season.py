"""Season calendar.

NCAA seasons straddle the calendar year. A season is named by the year it
starts in: January through July belong to the season that began the previous
August.
"""

from datetime import date, timedelta

# Football postseason weeks served as one combined "playoffs" resource
PLAYOFF_WEEKS: tuple[int, ...] = (16, 17, 18, 19, 20)

FIRST_WEEK = 1
LAST_WEEK = PLAYOFF_WEEKS[-1]

# Week 1 starts on the Monday on or before this day of August
_WEEK_ONE_ANCHOR_DAY = 25


def season_year(target: date) -> int:
    """Return the season year a calendar date belongs to.

    >>> season_year(date(2026, 1, 10))
    2025
    >>> season_year(date(2025, 8, 1))
    2025
    """
    if target.month <= 7:
        return target.year - 1
    return target.year


def football_week_one(season: int) -> date:
    """First day (a Monday) of football week 1 for a season."""
    anchor = date(season, 8, _WEEK_ONE_ANCHOR_DAY)
    return anchor - timedelta(days=anchor.weekday())


def football_week(target: date) -> int:
    """Football week number for a date, clamped to [1, 20]."""
    start = football_week_one(season_year(target))
    days = (target - start).days
    if days < 0:
        return FIRST_WEEK
    return min(days // 7 + 1, LAST_WEEK)


def is_playoff_week(week: int) -> bool:
    return week in PLAYOFF_WEEKS
