from dataclasses import dataclass
from typing import Dict, List, Mapping

from utils import coerce_int, safe_div

LANGUAGE_COLORS: Dict[str, str] = {
    "Python": "#3572A5",
    "JavaScript": "#f1e05a",
    "TypeScript": "#3178c6",
    "Java": "#b07219",
    "C": "#555555",
    "C++": "#f34b7d",
    "C#": "#178600",
    "Go": "#00ADD8",
    "Rust": "#dea584",
    "Ruby": "#701516",
    "PHP": "#4F5D95",
    "Kotlin": "#A97BFF",
    "Swift": "#F05138",
    "Dart": "#00B4AB",
    "HTML": "#e34c26",
    "CSS": "#563d7c",
    "SCSS": "#c6538c",
    "Shell": "#89e051",
    "Jupyter Notebook": "#DA5B0B",
    "Vue": "#41b883",
    "Lua": "#000080",
    "R": "#198CE7",
    "Dockerfile": "#384d54",
}
DEFAULT_COLOR = "#8b949e"


@dataclass(frozen=True)
class LanguageShare:
    name: str
    bytes: int
    percent: float
    color: str


def language_color(name: str) -> str:
    return LANGUAGE_COLORS.get(name, DEFAULT_COLOR)


def language_shares(totals: Mapping[str, int]) -> List[LanguageShare]:
    """Every language with its share of all bytes, largest first.

    Percentages are unrounded so they sum to 100 across the full list.
    Ties on byte count are broken by name to keep output stable.
    """
    cleaned = {name: coerce_int(b) for name, b in totals.items() if coerce_int(b) > 0}
    total = sum(cleaned.values())
    ordered = sorted(cleaned.items(), key=lambda kv: (-kv[1], kv[0]))
    return [
        LanguageShare(
            name=name,
            bytes=b,
            percent=safe_div(b, total) * 100.0,
            color=language_color(name),
        )
        for name, b in ordered
    ]


def top_languages(totals: Mapping[str, int], n: int = 6) -> List[LanguageShare]:
    if n <= 0:
        return []
    return language_shares(totals)[:n]
