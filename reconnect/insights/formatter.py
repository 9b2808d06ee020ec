"""
Report Formatter

Plain-text renderings of the user and admin dashboards for the terminal.
"""

from typing import List

from reconnect.analyzers.wellness import score_level
from reconnect.catalog.achievements import ACHIEVEMENTS
from reconnect.core.models import AdminDashboard, Protocol, UserAchievement

BAR_WIDTH = 20


def score_bar(score: int, width: int = BAR_WIDTH) -> str:
    filled = max(0, min(width, round(score / 100 * width)))
    return "#" * filled + "." * (width - filled)


def format_protocols(protocols: List[Protocol]) -> str:
    return "\n".join(
        f"    {i}. {p.title:<20} {p.category.value:<7} {p.duration} min  {p.tagline}"
        for i, p in enumerate(protocols, 1)
    )


def format_achievements(results: List[UserAchievement]) -> str:
    titles = {a.id: (a.title, a.requirements.count) for a in ACHIEVEMENTS}
    lines = []
    for r in results:
        title, target = titles.get(r.achievement_id, (r.achievement_id, 0))
        mark = "+" if r.completed else "-"
        lines.append(f"    {mark} {title:<26} {r.progress}/{target}")
    return "\n".join(lines)


def format_user_dashboard(dashboard) -> str:
    """Render a UserDashboard."""
    w = dashboard.stats.wellness
    lines = [
        "",
        f"  Reconnect Score: {w.reconnect_score}  [{score_bar(w.reconnect_score)}]"
        f"  {score_level(w.reconnect_score)}",
        f"    base {w.base_score:.1f}  +{w.consistency_bonus} consistency"
        f"  -{w.inactivity_penalty} inactivity",
    ]
    if w.days_since_last_session is not None:
        lines.append(f"    last session {w.days_since_last_session} day(s) ago")
    lines += [
        "",
        f"  Averages (1-10): calm {w.calm_avg}  clarity {w.clarity_avg}  energy {w.energy_avg}",
        f"  Sessions: {dashboard.stats.total_sessions} completed,"
        f" {dashboard.stats.weekly_resets} this week,"
        f" {dashboard.stats.completion_rate}% completion,"
        f" {dashboard.stats.total_minutes} min",
        f"  Streak: {dashboard.habits.day_streak} day(s), best {dashboard.habits.personal_best},"
        f" {dashboard.habits.weekly_active_days}/{dashboard.habits.weekly_goal} days this week,"
        f" {dashboard.habits.monthly_consistency}% of last 30 days",
    ]
    if w.session_qualities:
        lines.append("\n  Recent sessions:")
        for q in w.session_qualities:
            lines.append(
                f"    {q.date.strftime('%Y-%m-%d %H:%M')}  {q.quality:>3}"
                f"  calm {q.pre_calm}->{q.post_calm}"
                f"  clarity {q.pre_clarity}->{q.post_clarity}"
                f"  energy {q.pre_energy}->{q.post_energy}"
            )
    lines += ["\n  Recommended now:", format_protocols(dashboard.recommendations)]
    lines += ["\n  Achievements:", format_achievements(dashboard.achievements), ""]
    return "\n".join(lines)


def format_admin_dashboard(dashboard: AdminDashboard) -> str:
    lines = [
        "",
        f"  Users: {len(dashboard.users)}  active {dashboard.active_percentage}%"
        f"  resets {dashboard.total_resets}  avg score {dashboard.average_score}"
        f"  avg delta {dashboard.average_delta:+.1f}",
        "",
        f"  {'Company':<24} {'Users':>5} {'Active':>6} {'WAU':>4} {'MAU':>4}"
        f" {'Sessions':>8} {'Score':>5}",
    ]
    for c in dashboard.companies:
        lines.append(
            f"  {c.name:<24} {c.user_count:>5} {c.active_users:>6}"
            f" {c.weekly_active_users:>4} {c.monthly_active_users:>4}"
            f" {c.total_sessions:>8} {c.average_score:>5}"
        )
    if dashboard.score_distribution:
        lines.append("\n  Session scores:")
        for bucket in dashboard.score_distribution:
            lines.append(f"    {bucket['range']:>7}  {'#' * bucket['count']} {bucket['count']}")
    if dashboard.time_of_day:
        tod = dashboard.time_of_day
        lines.append(
            f"\n  Time of day: morning {tod['morning']}  afternoon {tod['afternoon']}"
            f"  evening {tod['evening']}"
        )
    for n, days in sorted(dashboard.activity.items()):
        if n > 7:
            continue
        lines.append(f"\n  Last {n} days:")
        for d in days:
            lines.append(f"    {d.label:<5} {d.count:>3} sessions  avg {d.avg_score}")
    lines.append("")
    return "\n".join(lines)
