"""Publication date parsing and book age arithmetic."""

import re
from collections import namedtuple
from datetime import date, datetime

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

YYYYMMDD_RE = re.compile(r"^\d{8}$")
# two defaults that differ in every field; a complete date ignores both
PARSE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def parse_pub_date(value) -> date:
    """Parse yyyy-mm-dd, yyyymmdd, or anything unambiguous dateutil accepts.

    Raises ValueError for empty, partial, ambiguous or unparseable input.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Empty date")
    s = value.strip()
    fmt = "%Y%m%d" if YYYYMMDD_RE.match(s) else "%Y-%m-%d"
    try:
        return datetime.strptime(s, fmt).date()
    except ValueError:
        pass
    # fallback: dateutil for less common spellings ("May 10, 2023")
    try:
        readings = {
            date_parser.parse(s, default=default, dayfirst=dayfirst).date()
            for default in PARSE_DEFAULTS
            for dayfirst in (False, True)
        }
    except (ValueError, OverflowError):
        raise ValueError("Invalid date format; expected YYYY-MM-DD or yyyymmdd")
    if len(readings) != 1:
        # partial ("May 2023") or day/month order unclear ("01/02/2023")
        raise ValueError("Incomplete or ambiguous date; expected YYYY-MM-DD or yyyymmdd")
    return readings.pop()


class Age(namedtuple("Age", "years months days")):
    __slots__ = ()

    def __str__(self):
        return f"{self.years} years, {self.months} months"

    def to_dict(self):
        return {"years": self.years, "months": self.months, "days": self.days}


def compute_age(pub_date: date, today: date) -> Age:
    """Calendar elapsed time between ``pub_date`` and ``today``.

    A month is only counted once today's day-of-month has reached the
    publication day-of-month. Days are counted from the anniversary of
    the last whole month (clipped to month end), so they never go negative.
    """
    if pub_date >= today:
        return Age(0, 0, 0)

    years = today.year - pub_date.year
    months = today.month - pub_date.month
    if today.day < pub_date.day:
        months -= 1
    if months < 0:
        years -= 1
        months += 12

    anchor = pub_date + relativedelta(years=years, months=months)
    return Age(years, months, (today - anchor).days)
