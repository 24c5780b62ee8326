from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Optional

import requests

from .errors import FetchError
from .model import Contributions
from .stats import parse_day

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com/graphql"
USER_AGENT = "github-skyline"

CONTRIBUTIONS_QUERY = """
query($username: String!, $from: DateTime!, $to: DateTime!) {
  user(login: $username) {
    contributionsCollection(from: $from, to: $to) {
      contributionCalendar {
        totalContributions
        weeks {
          contributionDays {
            contributionCount
            date
          }
        }
      }
    }
  }
}
""".strip()


def _year_window(year: int) -> tuple[str, str]:
    start = datetime(year, 1, 1, tzinfo=timezone.utc)
    end = datetime(year, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    return start.isoformat().replace("+00:00", "Z"), end.isoformat().replace("+00:00", "Z")


class GitHubContributionsFetcher:
    def __init__(
        self,
        username: str,
        token: str,
        *,
        session: Optional[requests.Session] = None,
        api_url: str = GITHUB_API_URL,
        timeout: float = 30.0,
    ) -> None:
        if not username:
            raise ValueError("username is required")
        if not token:
            raise ValueError("token is required")
        self.username = username
        self.api_url = api_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "User-Agent": USER_AGENT,
            }
        )

    def query_year(self, year: int) -> dict[str, Any]:
        start, end = _year_window(year)
        payload = {
            "query": CONTRIBUTIONS_QUERY,
            "variables": {"username": self.username, "from": start, "to": end},
        }
        try:
            response = self.session.post(self.api_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise FetchError(f"GitHub query for {self.username} ({year}) failed: {exc}") from exc

        body = response.json()
        errors = body.get("errors")
        if errors:
            messages = "; ".join(str(e.get("message") or e) for e in errors)
            raise FetchError(f"GitHub query for {self.username} ({year}) returned errors: {messages}")
        user = (body.get("data") or {}).get("user")
        if not user:
            raise FetchError(f"GitHub user not found: {self.username}")
        return user["contributionsCollection"]["contributionCalendar"]

    def fetch_contributions(self, start_year: int, end_year: int, *, today: Optional[date] = None) -> Contributions:
        if end_year < start_year:
            raise ValueError(f"end year {end_year} is before start year {start_year}")
        today = today or date.today()

        by_date: dict[str, int] = {}
        first: Optional[date] = None
        last: Optional[date] = None

        for year in range(start_year, end_year + 1):
            calendar = self.query_year(year)
            logger.info("Fetched contributions from %d: found %d", year, calendar.get("totalContributions", 0))
            for week in calendar.get("weeks") or []:
                for day in week.get("contributionDays") or []:
                    key = str(day["date"])
                    parsed = parse_day(key)
                    # Skip contributions from the future
                    if parsed > today:
                        continue
                    if first is None or parsed < first:
                        first = parsed
                    if last is None or parsed > last:
                        last = parsed
                    by_date[key] = int(day["contributionCount"])

        return Contributions(
            username=self.username,
            total_contributions=sum(by_date.values()),
            first_date=first.isoformat() if first else "",
            last_date=last.isoformat() if last else "",
            by_date=by_date,
        )
