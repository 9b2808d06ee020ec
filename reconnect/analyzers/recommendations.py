"""
Recommendation Engine

Ranks the protocol catalog into a short list for the current moment:
time-of-day defaults first, then overrides for low energy or calm, then a
full reset when several dimensions are low at once.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from reconnect.analyzers.wellness import compute_wellness
from reconnect.catalog.protocols import PROTOCOLS, first_of_category
from reconnect.config.defaults import (
    LOW_DIMENSION_THRESHOLD,
    MAX_RECOMMENDATIONS,
    MIN_RECOMMENDATIONS,
)
from reconnect.core.calendar import to_local
from reconnect.core.models import Protocol, ProtocolCategory, Session

logger = logging.getLogger(__name__)

F = ProtocolCategory.FOCUS
E = ProtocolCategory.ENERGY
C = ProtocolCategory.CALM
R = ProtocolCategory.RESET

# (start hour inclusive, end hour exclusive, categories); anything else is night
TIME_BANDS: List[Tuple[int, int, Tuple[ProtocolCategory, ProtocolCategory]]] = [
    (5, 9, (F, R)),     # early morning
    (9, 12, (F, E)),    # late morning
    (12, 15, (E, R)),   # post-lunch slump
    (15, 18, (E, F)),   # late afternoon
    (18, 21, (C, R)),   # early evening
]
NIGHT_CATEGORIES = (C, R)

# Dimensions that can trigger a priority override, with their category
OVERRIDE_DIMENSIONS = [("energy", E), ("calm", C)]

# What to try after finishing a protocol of a given category
COMPLEMENTARY: Dict[ProtocolCategory, Tuple[ProtocolCategory, ProtocolCategory]] = {
    F: (C, E),
    E: (F, C),
    C: (F, R),
    R: (F, C),
}

HISTORY_CATEGORIES = [F, E, C, R]


def time_band_categories(hour: int) -> Tuple[ProtocolCategory, ProtocolCategory]:
    for start, end, categories in TIME_BANDS:
        if start <= hour < end:
            return categories
    return NIGHT_CATEGORIES


def recommend(
    now_hour: int,
    averages: Dict[str, int],
    catalog: List[Protocol] = PROTOCOLS,
) -> List[Protocol]:
    """
    Recommend 2-3 distinct protocols.

    Args:
        now_hour: Local hour of day (0-23).
        averages: Dimension averages on the 1-10 scale, keyed "calm",
            "clarity", "energy". 0 means no data.
        catalog: Protocols to choose from, in priority order.

    Returns:
        Ordered list of protocols, highest priority first.
    """
    recommendations: List[Protocol] = []
    for category in time_band_categories(now_hour):
        protocol = first_of_category(category, catalog)
        if protocol:
            recommendations.append(protocol)

    # Lowest score first; each prepend pushes earlier ones back
    scored = sorted(
        ((averages.get(dim, 0), category) for dim, category in OVERRIDE_DIMENSIONS),
        key=lambda item: item[0],
    )
    low = [(score, category) for score, category in scored if 0 < score < LOW_DIMENSION_THRESHOLD]
    for score, category in low:
        protocol = first_of_category(category, catalog)
        if protocol and protocol not in recommendations:
            recommendations.insert(0, protocol)
            logger.debug("Low %s (%d): prioritizing %s", category.value, score, protocol.id)

    if len(low) >= 2:
        reset = first_of_category(R, catalog)
        if reset and reset not in recommendations:
            recommendations.insert(0, reset)

    if len(recommendations) < MIN_RECOMMENDATIONS:
        remaining = [p for p in catalog if p not in recommendations]
        recommendations.extend(remaining[:MAX_RECOMMENDATIONS - len(recommendations)])

    return _dedupe(recommendations)[:MAX_RECOMMENDATIONS]


def recommend_for_user(
    sessions: List[Session],
    now: datetime,
    catalog: List[Protocol] = PROTOCOLS,
) -> List[Protocol]:
    """Convenience wrapper: averages from the Score Engine, hour from ``now``."""
    report = compute_wellness(sessions, now)
    return recommend(now.hour, report.dimension_averages, catalog)


def suggest_from_history(
    sessions: List[Session],
    now: datetime,
    catalog: List[Protocol] = PROTOCOLS,
) -> List[Protocol]:
    """Suggestions that complement what the user did recently.

    With no history, falls back to the two time-of-day protocols.
    """
    if not sessions:
        return [
            p for p in (first_of_category(c, catalog) for c in time_band_categories(now.hour))
            if p
        ][:2]

    by_id = {p.id: p for p in catalog}
    recent = sorted(sessions, key=lambda s: to_local(s.created_at, now), reverse=True)

    suggestions: List[Protocol] = []
    last_protocol: Optional[Protocol] = by_id.get(recent[0].protocol_id)
    if last_protocol and last_protocol.category in COMPLEMENTARY:
        for category in COMPLEMENTARY[last_protocol.category]:
            protocol = first_of_category(category, catalog)
            if protocol:
                suggestions.append(protocol)

    category_counts: Dict[ProtocolCategory, int] = {}
    for s in recent[:3]:
        protocol = by_id.get(s.protocol_id)
        if protocol:
            category_counts[protocol.category] = category_counts.get(protocol.category, 0) + 1

    for category in HISTORY_CATEGORIES:
        if category_counts.get(category, 0) < 2:
            protocol = first_of_category(category, catalog)
            if protocol and protocol not in suggestions:
                suggestions.append(protocol)

    return _dedupe(suggestions)[:MAX_RECOMMENDATIONS]


def _dedupe(protocols: List[Protocol]) -> List[Protocol]:
    seen = set()
    unique = []
    for p in protocols:
        if p.id not in seen:
            seen.add(p.id)
            unique.append(p)
    return unique
