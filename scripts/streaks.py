import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import requests

from github_client import GitHubClient, GraphQLError
from utils import coerce_int

EPOCH_YEAR = 2008

CONTRIBUTIONS_QUERY = """
query($login: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $login) {
    contributionsCollection(from: $from, to: $to) {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            date
            contributionCount
          }
        }
      }
      totalCommitContributions
      totalPullRequestContributions
      totalPullRequestReviewContributions
      totalIssueContributions
      restrictedContributionsCount
    }
  }
}
"""


@dataclass(frozen=True)
class YearContributions:
    year: int
    total: int = 0
    commits: int = 0
    pull_requests: int = 0
    reviews: int = 0
    issues: int = 0
    restricted: int = 0
    days: Mapping[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class StreakResult:
    total_contributions: int
    current_streak: int
    longest_streak: int
    longest_start: Optional[date] = None
    longest_end: Optional[date] = None


@dataclass
class ContributionTotals:
    total: int = 0
    commits: int = 0
    pull_requests: int = 0
    reviews: int = 0
    issues: int = 0
    restricted: int = 0
    days: Dict[str, int] = field(default_factory=dict)
    years: List[int] = field(default_factory=list)
    skipped_years: List[int] = field(default_factory=list)

    def add(self, summary: YearContributions) -> None:
        self.total += summary.total
        self.commits += summary.commits
        self.pull_requests += summary.pull_requests
        self.reviews += summary.reviews
        self.issues += summary.issues
        self.restricted += summary.restricted
        merge_days(self.days, summary.days)
        self.years.append(summary.year)


def year_window(year: int) -> Tuple[str, str]:
    return f"{year}-01-01T00:00:00Z", f"{year}-12-31T23:59:59Z"


def merge_days(target: Dict[str, int], incoming: Mapping[str, int]) -> Dict[str, int]:
    for day, count in incoming.items():
        target[day] = target.get(day, 0) + coerce_int(count)
    return target


def parse_calendar(calendar: Mapping[str, Any], today: Optional[date] = None) -> Dict[str, int]:
    days: Dict[str, int] = {}
    weeks = calendar.get("weeks") if isinstance(calendar, dict) else None
    if not isinstance(weeks, list):
        return days
    for week in weeks:
        entries = week.get("contributionDays") if isinstance(week, dict) else None
        if not isinstance(entries, list):
            continue
        for day in entries:
            if not isinstance(day, dict):
                continue
            day_str = day.get("date")
            if not isinstance(day_str, str) or not day_str:
                continue
            try:
                parsed = date.fromisoformat(day_str)
            except ValueError:
                logging.warning("Ignoring malformed calendar date %r", day_str)
                continue
            # The current year's calendar runs to Dec 31; days not yet lived are not zeros.
            if today is not None and parsed > today:
                continue
            key = parsed.isoformat()
            days[key] = days.get(key, 0) + coerce_int(day.get("contributionCount"))
    return days


def fetch_year(
    client: GitHubClient, login: str, year: int, today: Optional[date] = None
) -> Optional[YearContributions]:
    """Fetch one calendar year of contributions.

    Returns None when the request fails or the payload is unusable, so the
    caller can skip this year and keep the rest of the totals.
    """
    start, end = year_window(year)
    try:
        data = client.graphql(CONTRIBUTIONS_QUERY, {"login": login, "from": start, "to": end})
    except (requests.RequestException, GraphQLError, ValueError) as exc:
        logging.warning("Error for year %s: %s", year, exc)
        return None

    user = data.get("user")
    if not isinstance(user, dict):
        logging.warning("Error for year %s: user %s not found", year, login)
        return None

    col = user.get("contributionsCollection")
    if not isinstance(col, dict):
        col = {}
    calendar = col.get("contributionCalendar")
    if not isinstance(calendar, dict):
        calendar = {}
    return YearContributions(
        year=year,
        total=coerce_int(calendar.get("totalContributions")),
        commits=coerce_int(col.get("totalCommitContributions")),
        pull_requests=coerce_int(col.get("totalPullRequestContributions")),
        reviews=coerce_int(col.get("totalPullRequestReviewContributions")),
        issues=coerce_int(col.get("totalIssueContributions")),
        restricted=coerce_int(col.get("restrictedContributionsCount")),
        days=parse_calendar(calendar, today=today),
    )


def collect_contributions(
    client: GitHubClient,
    login: str,
    start_year: int = EPOCH_YEAR,
    end_year: Optional[int] = None,
    today: Optional[date] = None,
) -> ContributionTotals:
    today = today or date.today()
    end_year = end_year or today.year

    totals = ContributionTotals()
    for year in range(start_year, end_year + 1):
        logging.info("Fetching year: %s", year)
        summary = fetch_year(client, login, year, today=today)
        if summary is None:
            totals.skipped_years.append(year)
            continue
        totals.add(summary)

    if totals.skipped_years:
        logging.warning("Skipped years: %s", ", ".join(str(y) for y in totals.skipped_years))
    return totals


def compute_streaks(days: Mapping[str, int]) -> StreakResult:
    if not days:
        return StreakResult(total_contributions=0, current_streak=0, longest_streak=0)

    total = sum(coerce_int(c) for c in days.values())
    parsed = {date.fromisoformat(d): coerce_int(c) for d, c in days.items()}
    have: Set[date] = {d for d, c in parsed.items() if c > 0}
    first = min(parsed)
    last = max(parsed)
    one = timedelta(days=1)

    longest = 0
    longest_start: Optional[date] = None
    longest_end: Optional[date] = None
    run = 0
    run_start: Optional[date] = None
    cur = first
    while cur <= last:
        if cur in have:
            if run == 0:
                run_start = cur
            run += 1
        else:
            if run > longest:
                longest, longest_start, longest_end = run, run_start, cur - one
            run = 0
        cur += one
    if run > longest:
        longest, longest_start, longest_end = run, run_start, last

    current = 0
    cur = last
    while cur in have:
        current += 1
        cur -= one

    return StreakResult(
        total_contributions=total,
        current_streak=current,
        longest_streak=longest,
        longest_start=longest_start,
        longest_end=longest_end,
    )
