import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Sequence, Tuple

import pytz

from languages import DEFAULT_COLOR, LanguageShare
from streaks import ContributionTotals, StreakResult
from utils import format_number, xml_escape

WIDTH = 900
HEIGHT = 420

BG = "#071327"
CARD_BG = "#0d1b33"
BORDER = "#1e3a5f"
TITLE = "#ff6bcb"
BIG = "#8be9fd"
META = "#cbd5e1"
MUTED = "#94a3b8"
RING_TRACK = "#1e293b"

FONT = "'Segoe UI', Ubuntu, sans-serif"

STYLE = f"""
    .title{{font:700 22px {FONT}; fill:{TITLE};}}
    .login{{font:500 13px {FONT}; fill:{MUTED};}}
    .big{{font:700 28px {FONT}; fill:{BIG};}}
    .label{{font:600 14px {FONT}; fill:{META};}}
    .meta{{font:500 14px {FONT}; fill:{META};}}
    .small{{font:400 12px {FONT}; fill:{MUTED};}}
"""

RING_RADIUS = 34
BAR_X = 24
BAR_Y = 318
BAR_WIDTH = WIDTH - 48
BAR_HEIGHT = 10
LEGEND_MAX = 6


@dataclass(frozen=True)
class Profile:
    login: str
    display_name: str
    avatar_data_uri: Optional[str] = None
    followers: int = 0
    public_repos: int = 0


@dataclass
class CardData:
    profile: Profile
    contributions: ContributionTotals
    streak: StreakResult
    repo_count: int = 0
    stars: int = 0
    contributed_to: int = 0
    languages: List[LanguageShare] = field(default_factory=list)
    updated_at: Optional[datetime] = None


def clamp_percent(percent: float) -> float:
    if percent is None or math.isnan(percent):
        return 0.0
    return max(0.0, min(100.0, float(percent)))


def ring_dash(percent: float, radius: float = RING_RADIUS) -> Tuple[float, float]:
    """stroke-dasharray (dash, gap) filling `percent` of a circle."""
    circumference = 2 * math.pi * max(0.0, radius)
    dash = round(circumference * clamp_percent(percent) / 100.0, 2)
    gap = round(max(0.0, circumference - dash), 2)
    return dash, gap


def bar_segments(
    shares: Sequence[LanguageShare], width: int = BAR_WIDTH
) -> List[Tuple[int, int, LanguageShare]]:
    segments: List[Tuple[int, int, LanguageShare]] = []
    x = 0
    for share in shares:
        pct = clamp_percent(share.percent)
        if pct <= 0:
            continue
        w = max(1, int(round(pct * width / 100.0)))
        segments.append((x, w, share))
        x += w
    return segments


def _fmt_day(d: Optional[date]) -> str:
    if d is None:
        return ""
    return f"{d.strftime('%b')} {d.day}, {d.year}"


def _fmt_updated(updated_at: datetime, tz_name: str) -> str:
    if updated_at.tzinfo is None:
        updated_at = pytz.UTC.localize(updated_at)
    local = updated_at.astimezone(pytz.timezone(tz_name))
    return local.strftime("%d/%m/%Y, %H:%M:%S")


def _text(x: float, y: float, s: str, cls: str, anchor: str = "start") -> str:
    return f"<text x='{x}' y='{y}' class='{cls}' text-anchor='{anchor}'>{xml_escape(s)}</text>"


def _card(x: int, y: int, w: int, h: int) -> str:
    return (
        f"<rect x='{x}' y='{y}' width='{w}' height='{h}' rx='8' "
        f"fill='{CARD_BG}' stroke='{BORDER}' stroke-width='1'/>"
    )


def _with_other(shares: Sequence[LanguageShare]) -> List[LanguageShare]:
    rest = 100.0 - sum(clamp_percent(s.percent) for s in shares)
    out = list(shares)
    if shares and rest >= 0.05:
        out.append(LanguageShare(name="Other", bytes=0, percent=rest, color=DEFAULT_COLOR))
    return out


def render_header(profile: Profile) -> List[str]:
    nodes: List[str] = []
    text_x = 24
    if profile.avatar_data_uri:
        nodes.extend(
            [
                "<clipPath id='avatar-clip'><circle cx='48' cy='44' r='24'/></clipPath>",
                f"<image x='24' y='20' width='48' height='48' href='{xml_escape(profile.avatar_data_uri)}' "
                "clip-path='url(#avatar-clip)'/>",
            ]
        )
        text_x = 84
    name = profile.display_name or profile.login
    nodes.append(_text(text_x, 42, f"{name}'s GitHub – All-time", "title"))
    nodes.append(_text(text_x, 62, f"@{profile.login}", "login"))
    nodes.append(
        _text(
            WIDTH - 24,
            42,
            f"Followers: {format_number(profile.followers)} • Public repos: {format_number(profile.public_repos)}",
            "small",
            anchor="end",
        )
    )
    return nodes


def render_stat_cards(contributions: ContributionTotals, streak: StreakResult) -> List[str]:
    y, h, w = 86, 130, 276
    xs = (24, 312, 600)
    nodes = [_card(x, y, w, h) for x in xs]

    cx = xs[0] + w / 2
    years = contributions.years
    span = f"{min(years)} – {max(years)}" if years else ""
    nodes.append(_text(cx, y + 56, format_number(contributions.total), "big", anchor="middle"))
    nodes.append(_text(cx, y + 84, "Total Contributions", "label", anchor="middle"))
    nodes.append(_text(cx, y + 106, span, "small", anchor="middle"))

    cx = xs[1] + w / 2
    cy = y + 48
    pct = 100.0 * streak.current_streak / streak.longest_streak if streak.longest_streak else 0.0
    dash, gap = ring_dash(pct)
    nodes.append(
        f"<circle cx='{cx}' cy='{cy}' r='{RING_RADIUS}' fill='none' stroke='{RING_TRACK}' stroke-width='6'/>"
    )
    nodes.append(
        f"<circle cx='{cx}' cy='{cy}' r='{RING_RADIUS}' fill='none' stroke='{TITLE}' stroke-width='6' "
        f"stroke-dasharray='{dash} {gap}' stroke-linecap='round' transform='rotate(-90 {cx} {cy})'/>"
    )
    nodes.append(_text(cx, cy + 9, format_number(streak.current_streak), "big", anchor="middle"))
    nodes.append(_text(cx, y + 106, "Current Streak", "label", anchor="middle"))

    cx = xs[2] + w / 2
    if streak.longest_start and streak.longest_end:
        best = f"{_fmt_day(streak.longest_start)} – {_fmt_day(streak.longest_end)}"
    else:
        best = ""
    nodes.append(_text(cx, y + 56, format_number(streak.longest_streak), "big", anchor="middle"))
    nodes.append(_text(cx, y + 84, "Longest Streak", "label", anchor="middle"))
    nodes.append(_text(cx, y + 106, best, "small", anchor="middle"))
    return nodes


def render_breakdown(data: CardData) -> List[str]:
    c = data.contributions
    return [
        _text(
            24,
            244,
            f"Commits: {format_number(c.commits)} • PRs: {format_number(c.pull_requests)} • "
            f"Reviews: {format_number(c.reviews)} • Issues: {format_number(c.issues)} • "
            f"Private: {format_number(c.restricted)}",
            "meta",
        ),
        _text(
            24,
            268,
            f"Repositories: {format_number(data.repo_count)} • Stars: {format_number(data.stars)} • "
            f"Contributed to (approx.): {format_number(data.contributed_to)}",
            "meta",
        ),
    ]


def render_languages(shares: Sequence[LanguageShare]) -> List[str]:
    nodes = [_text(24, 304, "Top Languages", "label")]
    if not shares:
        nodes.append(_text(24, 346, "No language data", "small"))
        return nodes

    nodes.append(
        f"<clipPath id='bar-clip'><rect x='{BAR_X}' y='{BAR_Y}' width='{BAR_WIDTH}' "
        f"height='{BAR_HEIGHT}' rx='5'/></clipPath>"
    )
    nodes.append("<g clip-path='url(#bar-clip)'>")
    nodes.append(
        f"<rect x='{BAR_X}' y='{BAR_Y}' width='{BAR_WIDTH}' height='{BAR_HEIGHT}' fill='{RING_TRACK}'/>"
    )
    for x, w, share in bar_segments(_with_other(shares)):
        nodes.append(
            f"<rect x='{BAR_X + x}' y='{BAR_Y}' width='{w}' height='{BAR_HEIGHT}' "
            f"fill='{xml_escape(share.color)}'/>"
        )
    nodes.append("</g>")

    col_w = BAR_WIDTH // 3
    for i, share in enumerate(shares[:LEGEND_MAX]):
        x = BAR_X + (i % 3) * col_w
        y = 350 + (i // 3) * 22
        nodes.append(f"<circle cx='{x + 5}' cy='{y - 4}' r='5' fill='{xml_escape(share.color)}'/>")
        nodes.append(_text(x + 16, y, f"{share.name} {clamp_percent(share.percent):.2f}%", "small"))
    return nodes


def render_stats_card(data: CardData, tz_name: str = "UTC") -> str:
    updated_at = data.updated_at or datetime.now(pytz.UTC)

    svg = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f"<svg xmlns='http://www.w3.org/2000/svg' width='{WIDTH}' height='{HEIGHT}' "
        f"viewBox='0 0 {WIDTH} {HEIGHT}' role='img' "
        f"aria-label='{xml_escape(data.profile.login)} GitHub stats'>",
        f"<style>{STYLE}</style>",
        f"<rect x='0' y='0' width='{WIDTH}' height='{HEIGHT}' rx='12' fill='{BG}'/>",
        *render_header(data.profile),
        *render_stat_cards(data.contributions, data.streak),
        *render_breakdown(data),
        *render_languages(data.languages),
        _text(24, HEIGHT - 16, f"Updated: {_fmt_updated(updated_at, tz_name)}", "small"),
        "</svg>",
    ]
    return "\n".join(svg)
