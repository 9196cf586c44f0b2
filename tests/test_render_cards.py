import math
import xml.etree.ElementTree as ET
from datetime import datetime

import pytest
import pytz

from languages import LanguageShare, language_shares
from render_cards import CardData, Profile, bar_segments, clamp_percent, render_stats_card, ring_dash
from streaks import ContributionTotals, compute_streaks

SVG_NS = "{http://www.w3.org/2000/svg}"
UPDATED = datetime(2026, 10, 18, 14, 3, 22, tzinfo=pytz.UTC)


def make_card(display_name="Octo Cat", languages=None):
    totals = ContributionTotals(
        total=12345,
        commits=10000,
        pull_requests=1200,
        reviews=845,
        issues=300,
        restricted=0,
        days={"2026-10-16": 1, "2026-10-17": 3, "2026-10-18": 2},
        years=[2008, 2026],
    )
    return CardData(
        profile=Profile(login="octo", display_name=display_name, followers=1500, public_repos=42),
        contributions=totals,
        streak=compute_streaks(totals.days),
        repo_count=42,
        stars=2048,
        contributed_to=30,
        languages=language_shares({"Python": 7000, "Go": 3000}) if languages is None else languages,
        updated_at=UPDATED,
    )


def parse(svg):
    return ET.fromstring(svg.encode("utf-8"))


def all_text(root):
    return ["".join(el.itertext()) for el in root.iter(f"{SVG_NS}text")]


def test_rendering_is_deterministic():
    assert render_stats_card(make_card()) == render_stats_card(make_card())


def test_document_declares_dimensions():
    root = parse(render_stats_card(make_card()))
    assert root.tag == f"{SVG_NS}svg"
    assert root.get("width") == "900"
    assert root.get("height") == "420"
    assert root.get("viewBox") == "0 0 900 420"


def test_numbers_use_thousands_separators():
    texts = all_text(parse(render_stats_card(make_card())))
    assert "12,345" in texts
    assert any("Commits: 10,000" in t for t in texts)
    assert any("Stars: 2,048" in t for t in texts)
    assert any("Contributed to (approx.): 30" in t for t in texts)


def test_streak_figures_rendered():
    texts = all_text(parse(render_stats_card(make_card())))
    assert texts.count("3") >= 2
    assert "Oct 16, 2026 – Oct 18, 2026" in texts
    assert "2008 – 2026" in texts


def test_display_name_is_escaped():
    svg = render_stats_card(make_card(display_name="<b>Tom & Jerry</b>"))
    assert "&lt;b&gt;Tom &amp; Jerry&lt;/b&gt;" in svg
    assert "<b>" not in svg
    texts = all_text(parse(svg))
    assert "<b>Tom & Jerry</b>'s GitHub – All-time" in texts


def test_language_name_is_escaped():
    shares = [LanguageShare(name="C<&>", bytes=10, percent=100.0, color="#123456")]
    svg = render_stats_card(make_card(languages=shares))
    assert "C&lt;&amp;&gt; 100.00%" in svg
    parse(svg)


def test_updated_footer_in_timezone():
    utc = all_text(parse(render_stats_card(make_card())))
    assert "Updated: 18/10/2026, 14:03:22" in utc

    berlin = all_text(parse(render_stats_card(make_card(), tz_name="Europe/Berlin")))
    assert "Updated: 18/10/2026, 16:03:22" in berlin


def test_no_language_data():
    texts = all_text(parse(render_stats_card(make_card(languages=[]))))
    assert "No language data" in texts


def test_avatar_embedded_when_present():
    card = make_card()
    card.profile = Profile(login="octo", display_name="Octo", avatar_data_uri="data:image/png;base64,UE5H")
    root = parse(render_stats_card(card))
    images = list(root.iter(f"{SVG_NS}image"))
    assert images[0].get("href") == "data:image/png;base64,UE5H"


@pytest.mark.parametrize("percent, expected", [(-5, 0.0), (150, 100.0), (float("nan"), 0.0), (42.5, 42.5)])
def test_clamp_percent(percent, expected):
    assert clamp_percent(percent) == expected


@pytest.mark.parametrize("percent", [-20, 0, 33.3, 100, 250, float("nan")])
def test_ring_dash_never_negative(percent):
    dash, gap = ring_dash(percent, radius=10)
    assert dash >= 0 and gap >= 0
    assert not math.isnan(dash) and not math.isnan(gap)
    assert dash + gap == pytest.approx(2 * math.pi * 10, abs=0.02)


def test_ring_dash_half():
    dash, gap = ring_dash(50, radius=10)
    assert dash == pytest.approx(math.pi * 10, abs=0.01)
    assert gap == pytest.approx(math.pi * 10, abs=0.01)


def test_bar_segments_minimum_width():
    shares = language_shares({"Python": 1_000_000, "Makefile": 10, "Empty": 0})
    segments = bar_segments(shares, width=100)
    assert [s.name for _, _, s in segments] == ["Python", "Makefile"]
    assert segments[1][1] == 1
    assert all(w >= 1 for _, w, _ in segments)
    assert segments[1][0] == segments[0][1]


def test_bar_segments_skip_zero_and_nan():
    shares = [
        LanguageShare(name="A", bytes=0, percent=0.0, color="#000"),
        LanguageShare(name="B", bytes=0, percent=float("nan"), color="#000"),
    ]
    assert bar_segments(shares, width=100) == []
