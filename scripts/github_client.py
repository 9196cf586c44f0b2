import time
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

import requests

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"


class GraphQLError(RuntimeError):
    def __init__(self, errors: Any) -> None:
        super().__init__(f"GraphQL errors: {errors}")
        self.errors = errors


@dataclass
class RateLimit:
    remaining: Optional[int]
    reset_epoch: Optional[int]


class GitHubClient:
    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        graphql_url: str = DEFAULT_GRAPHQL_URL,
        timeout: int = 30,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.graphql_url = graphql_url
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "github-stats-card",
            }
        )

    def _parse_rate_limit(self, headers: Dict[str, str]) -> RateLimit:
        remaining = headers.get("X-RateLimit-Remaining")
        reset = headers.get("X-RateLimit-Reset")
        return RateLimit(
            remaining=int(remaining) if remaining and remaining.isdigit() else None,
            reset_epoch=int(reset) if reset and reset.isdigit() else None,
        )

    def _maybe_sleep_for_rate_limit(self, rl: RateLimit, threshold: int = 1) -> None:
        if rl.remaining is None or rl.reset_epoch is None:
            return
        if rl.remaining > threshold:
            return

        now = int(time.time())
        sleep_s = max(0, rl.reset_epoch - now) + 2
        time.sleep(min(sleep_s, 60 * 5))

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self.base_url}{path}"

    def _send(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> requests.Response:
        resp = self.session.request(
            method=method, url=url, params=params, json=json, timeout=self.timeout
        )
        rl = self._parse_rate_limit(resp.headers)

        # A rate-limited 403 fails like any other error; callers decide whether to skip.
        resp.raise_for_status()
        self._maybe_sleep_for_rate_limit(rl)
        return resp

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        return self._send(method, self._url(path), params=params, json=json).json()

    def paginate(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        per_page: int = 100,
        max_pages: int = 10,
    ) -> Iterator[List[Dict[str, Any]]]:
        page = 1
        while page <= max_pages:
            merged = dict(params or {})
            merged.update({"per_page": per_page, "page": page})
            data = self.request("GET", path, params=merged)
            if not isinstance(data, list) or len(data) == 0:
                break
            yield data
            if len(data) < per_page:
                break
            page += 1

    def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = self._send(
            "POST", self.graphql_url, json={"query": query, "variables": variables or {}}
        ).json()
        if not isinstance(payload, dict):
            raise GraphQLError("unexpected payload")
        if payload.get("errors"):
            raise GraphQLError(payload["errors"])
        data = payload.get("data")
        if not isinstance(data, dict):
            raise GraphQLError("response carried no data")
        return data

    def get_user(self, login: str) -> Dict[str, Any]:
        return self.request("GET", f"/users/{login}")

    def get_authenticated_user(self) -> Dict[str, Any]:
        return self.request("GET", "/user")

    def list_user_repos_public(
        self, username: str, max_pages: int = 10
    ) -> Iterator[List[Dict[str, Any]]]:
        return self.paginate(
            f"/users/{username}/repos",
            params={"type": "owner", "sort": "updated"},
            max_pages=max_pages,
        )

    def list_user_repos_auth(self, max_pages: int = 10) -> Iterator[List[Dict[str, Any]]]:
        return self.paginate(
            "/user/repos",
            params={"affiliation": "owner", "visibility": "all", "sort": "updated"},
            max_pages=max_pages,
        )

    def list_commits(self, full_name: str, author: str, per_page: int = 1) -> List[Dict[str, Any]]:
        # First page only: callers just need to know whether any commit exists.
        data = self.request(
            "GET",
            f"/repos/{full_name}/commits",
            params={"author": author, "per_page": per_page},
        )
        return data if isinstance(data, list) else []

    def get_languages(self, languages_url: str) -> Dict[str, int]:
        data = self.request("GET", languages_url)
        if not isinstance(data, dict):
            return {}
        out: Dict[str, int] = {}
        for k, v in data.items():
            if isinstance(v, bool):
                continue
            try:
                out[str(k)] = int(v)
            except (TypeError, ValueError):
                continue
        return out

    def get_image(self, url: str, size: Optional[int] = None) -> Tuple[bytes, str]:
        params = {"s": size} if size else None
        # Plain request: avatar hosts must not receive the API token.
        resp = requests.get(url, params=params, timeout=self.timeout)
        resp.raise_for_status()
        content_type = resp.headers.get("Content-Type", "image/png").split(";")[0].strip()
        return resp.content, content_type or "image/png"
