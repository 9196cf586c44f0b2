from typing import Dict

import pytest

from github_client import GitHubClient

API = "https://api.github.com"
GRAPHQL = "https://api.github.com/graphql"


def calendar_payload(days: Dict[str, int], **totals) -> Dict:
    return {
        "data": {
            "user": {
                "contributionsCollection": {
                    "contributionCalendar": {
                        "totalContributions": totals.get("total", sum(days.values())),
                        "weeks": [
                            {"contributionDays": [{"date": d, "contributionCount": c} for d, c in days.items()]}
                        ],
                    },
                    "totalCommitContributions": totals.get("commits", 0),
                    "totalPullRequestContributions": totals.get("prs", 0),
                    "totalPullRequestReviewContributions": totals.get("reviews", 0),
                    "totalIssueContributions": totals.get("issues", 0),
                    "restrictedContributionsCount": totals.get("private", 0),
                }
            }
        }
    }


@pytest.fixture
def client() -> GitHubClient:
    return GitHubClient(token="test-token")


@pytest.fixture
def calendar():
    return calendar_payload
