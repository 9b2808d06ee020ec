"""
Protocol Catalog

Static guided-audio protocols. Order matters: recommendation lookups take
the first protocol of a category.
"""

from typing import Dict, List, Optional

from reconnect.core.models import Protocol, ProtocolCategory

PROTOCOLS: List[Protocol] = [
    Protocol(
        id="presence-drop",
        title="Presence Drop",
        category=ProtocolCategory.RESET,
        duration=3,
        impact={"calm": 80, "clarity": 40, "energy": 20},
        tagline="Cut stress instantly.",
        description="A fast reset using breath and posture to bring you back "
                    "to calm and clarity before your next task.",
    ),
    Protocol(
        id="peak-focus",
        title="Peak Focus",
        category=ProtocolCategory.FOCUS,
        duration=5,
        impact={"calm": 50, "clarity": 80, "energy": 40},
        tagline="Lock in sharp concentration.",
        description="Breathing and visual drills that steady your nerves and "
                    "boost clarity before deep work or key meetings.",
    ),
    Protocol(
        id="reset-recharge",
        title="Reset & Recharge",
        category=ProtocolCategory.ENERGY,
        duration=6,
        impact={"calm": 50, "clarity": 40, "energy": 80},
        tagline="Beat the afternoon slump.",
        description="Energizing breath and light movement to clear fatigue "
                    "and restore sustainable energy without caffeine.",
    ),
    Protocol(
        id="unplug-recover",
        title="Unplug & Recover",
        category=ProtocolCategory.CALM,
        duration=8,
        impact={"calm": 80, "clarity": 30, "energy": 60},
        tagline="Switch off and release.",
        description="Slow breathing and guided body release to let go of "
                    "tension and shift fully into recovery mode.",
    ),
    Protocol(
        id="back-to-baseline",
        title="Back to Baseline",
        category=ProtocolCategory.RESET,
        duration=10,
        impact={"calm": 70, "clarity": 70, "energy": 70},
        tagline="Full system reset.",
        description="A complete reset protocol blending breath and relaxation "
                    "to restore balance across calm, clarity, and energy.",
    ),
]

PROTOCOLS_BY_ID: Dict[str, Protocol] = {p.id: p for p in PROTOCOLS}


def get_protocol(protocol_id: str) -> Optional[Protocol]:
    return PROTOCOLS_BY_ID.get(protocol_id)


def first_of_category(
    category: ProtocolCategory,
    catalog: List[Protocol] = PROTOCOLS,
) -> Optional[Protocol]:
    return next((p for p in catalog if p.category == category), None)


def category_of(
    protocol_id: str,
    catalog: List[Protocol] = PROTOCOLS,
) -> Optional[ProtocolCategory]:
    """Category of a protocol id; None for ids outside the catalog."""
    for p in catalog:
        if p.id == protocol_id:
            return p.category
    return None
