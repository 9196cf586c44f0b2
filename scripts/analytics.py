import argparse
import base64
import logging
import os
import sys
from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

import pytz
import requests

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
if SCRIPT_DIR not in sys.path:
    sys.path.insert(0, SCRIPT_DIR)

from card_writer import CardWriter
from github_client import GitHubClient
from languages import top_languages
from render_cards import CardData, Profile, render_stats_card
from streaks import EPOCH_YEAR, collect_contributions, compute_streaks
from utils import coerce_int

DEFAULT_LOGIN = "Mithun055"
AVATAR_SIZE = 96


@dataclass(frozen=True)
class Config:
    username: str
    token: str
    output_dir: Path
    filename: str = "stats.svg"
    timestamped_copy: bool = False
    start_year: int = EPOCH_YEAR
    top_n: int = 6
    timezone: str = "UTC"
    include_private: bool = False
    exclude_forks: bool = False
    count_contributed: bool = True
    max_pages: int = 10


@dataclass(frozen=True)
class RepoSummary:
    full_name: str
    languages_url: str
    stargazers_count: int
    fork: bool = False


@dataclass
class RepoAggregate:
    repo_count: int = 0
    stars: int = 0
    # Owned repos whose default branch has a commit by the user; a rough proxy only.
    contributed_to: int = 0
    languages: Dict[str, int] = field(default_factory=dict)


def repo_summary(raw: Mapping) -> Optional[RepoSummary]:
    full_name = raw.get("full_name")
    if not full_name:
        return None
    return RepoSummary(
        full_name=str(full_name),
        languages_url=raw.get("languages_url") or f"/repos/{full_name}/languages",
        stargazers_count=coerce_int(raw.get("stargazers_count")),
        fork=raw.get("fork") is True,
    )


def iter_repos(client: GitHubClient, cfg: Config) -> Iterable[RepoSummary]:
    if cfg.include_private:
        pages = client.list_user_repos_auth(max_pages=cfg.max_pages)
    else:
        pages = client.list_user_repos_public(cfg.username, max_pages=cfg.max_pages)

    try:
        for page in pages:
            for raw in page:
                summary = repo_summary(raw) if isinstance(raw, dict) else None
                if summary is not None:
                    yield summary
    except (requests.RequestException, ValueError):
        logging.exception("Failed to list repositories for %s; keeping pages already fetched", cfg.username)


def aggregate_repositories(client: GitHubClient, cfg: Config) -> RepoAggregate:
    agg = RepoAggregate()
    lang_bytes: Dict[str, int] = defaultdict(int)

    for repo in iter_repos(client, cfg):
        if cfg.exclude_forks and repo.fork:
            continue

        agg.repo_count += 1
        agg.stars += repo.stargazers_count

        # Languages
        try:
            for lang, b in client.get_languages(repo.languages_url).items():
                lang_bytes[lang] += b
        except (requests.RequestException, ValueError):
            logging.exception("Failed to fetch languages for %s", repo.full_name)

        if not cfg.count_contributed:
            continue
        try:
            if client.list_commits(repo.full_name, cfg.username):
                agg.contributed_to += 1
        except (requests.RequestException, ValueError) as exc:
            # Empty repositories answer 409 here.
            logging.warning("No commit history for %s: %s", repo.full_name, exc)

    agg.languages = dict(lang_bytes)
    return agg


def fetch_profile(client: GitHubClient, login: str) -> Profile:
    try:
        user = client.get_user(login)
    except (requests.RequestException, ValueError):
        logging.exception("Failed to fetch profile for %s", login)
        return Profile(login=login, display_name=login)
    if not isinstance(user, dict):
        return Profile(login=login, display_name=login)

    avatar = None
    avatar_url = user.get("avatar_url")
    if avatar_url:
        try:
            content, content_type = client.get_image(avatar_url, size=AVATAR_SIZE)
            avatar = f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"
        except requests.RequestException:
            logging.warning("Failed to fetch avatar for %s", login)

    return Profile(
        login=login,
        display_name=user.get("name") or user.get("login") or login,
        avatar_data_uri=avatar,
        followers=coerce_int(user.get("followers")),
        public_repos=coerce_int(user.get("public_repos")),
    )


def check_private_access(client: GitHubClient, cfg: Config) -> Config:
    if not cfg.include_private:
        return cfg
    # The default Actions GITHUB_TOKEN is often forbidden from /user; fall back to public listing.
    try:
        client.get_authenticated_user()
    except requests.RequestException:
        logging.warning(
            "include-private requested but token cannot access /user. "
            "Falling back to public repositories only. "
            "To include private repos, add a PAT as GH_TOKEN secret with repo scope."
        )
        return replace(cfg, include_private=False)
    return cfg


def run(cfg: Config, client: Optional[GitHubClient] = None, now: Optional[datetime] = None) -> List[Path]:
    client = client or GitHubClient(token=cfg.token)
    now = now or datetime.now(pytz.UTC)
    today = now.astimezone(pytz.timezone(cfg.timezone)).date()

    cfg = check_private_access(client, cfg)
    profile = fetch_profile(client, cfg.username)

    contributions = collect_contributions(
        client, cfg.username, start_year=cfg.start_year, end_year=today.year, today=today
    )
    streak = compute_streaks(contributions.days)
    logging.info(
        "Contributions: %s total, current streak %s, longest streak %s",
        contributions.total,
        streak.current_streak,
        streak.longest_streak,
    )

    repos = aggregate_repositories(client, cfg)
    logging.info("Repositories: %s, stars: %s, languages: %s", repos.repo_count, repos.stars, len(repos.languages))

    data = CardData(
        profile=profile,
        contributions=contributions,
        streak=streak,
        repo_count=repos.repo_count,
        stars=repos.stars,
        contributed_to=repos.contributed_to,
        languages=top_languages(repos.languages, cfg.top_n),
        updated_at=now,
    )
    svg = render_stats_card(data, tz_name=cfg.timezone)

    writer = CardWriter(
        output_dir=cfg.output_dir, filename=cfg.filename, timestamped_copy=cfg.timestamped_copy
    )
    written = writer.write(svg, now=now)
    for path in written:
        logging.info("Wrote SVG → %s", path)
    return written


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="GitHub all-time stats card generator")
    p.add_argument("--username", default=None, help="defaults to $GITHUB_LOGIN")
    p.add_argument("--output-dir", default="assets")
    p.add_argument("--filename", default="stats.svg")
    p.add_argument("--timestamped-copy", action="store_true")
    p.add_argument("--start-year", type=int, default=EPOCH_YEAR)
    p.add_argument("--top-languages", type=int, default=6)
    p.add_argument("--timezone", default=None, help="defaults to $STATS_TIMEZONE or UTC")
    p.add_argument("--include-private", action="store_true")
    p.add_argument("--exclude-forks", action="store_true")
    p.add_argument("--skip-contributed", action="store_true")
    p.add_argument("--max-pages", type=int, default=10)
    return p


def load_config(argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None) -> Config:
    env = os.environ if environ is None else environ
    args = build_arg_parser().parse_args(argv)
    return Config(
        username=args.username or env.get("GITHUB_LOGIN") or DEFAULT_LOGIN,
        token=env.get("GH_TOKEN") or env.get("GITHUB_TOKEN") or "",
        output_dir=Path(args.output_dir),
        filename=args.filename,
        timestamped_copy=bool(args.timestamped_copy),
        start_year=args.start_year,
        top_n=args.top_languages,
        timezone=args.timezone or env.get("STATS_TIMEZONE") or "UTC",
        include_private=bool(args.include_private),
        exclude_forks=bool(args.exclude_forks),
        count_contributed=not args.skip_contributed,
        max_pages=args.max_pages,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    cfg = load_config(argv)
    if not cfg.token:
        logging.error("GH_TOKEN not provided.")
        return 1

    try:
        run(cfg)
    except Exception:
        logging.exception("Failed to generate stats card")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
