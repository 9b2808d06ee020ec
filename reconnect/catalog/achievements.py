"""
Achievement Catalog

Static achievement definitions. Each carries the kind of progress rule it
is evaluated with.
"""

from typing import List

from reconnect.config.defaults import TEAM_SESSION_MULTIPLIER
from reconnect.core.models import (
    Achievement,
    AchievementKind,
    AchievementRequirements,
    ProtocolCategory,
    Timeframe,
)

ACHIEVEMENTS: List[Achievement] = [
    Achievement(
        id="weekly-reset-streak",
        title="Weekly Reset Streak",
        description="Complete at least 3 resets per week",
        badge="Calm Consistency",
        kind=AchievementKind.WEEKLY_COUNT,
        category="streak",
        requirements=AchievementRequirements(count=3, timeframe=Timeframe.WEEKLY),
    ),
    Achievement(
        id="morning-focus-challenge",
        title="Morning Focus Challenge",
        description="Use a Focus protocol 3 mornings in a row",
        badge="Sharp Starter",
        kind=AchievementKind.CONSECUTIVE_MORNING,
        category="focus",
        requirements=AchievementRequirements(
            count=3,
            timeframe=Timeframe.DAILY,
            protocol_type=ProtocolCategory.FOCUS,
            consecutive=True,
        ),
    ),
    Achievement(
        id="stress-reset-sprint",
        title="Stress Reset Sprint",
        description="Do a Calm protocol twice in the same week",
        badge="Stress Slayer",
        kind=AchievementKind.WEEKLY_CATEGORY_COUNT,
        category="stress",
        requirements=AchievementRequirements(
            count=2,
            timeframe=Timeframe.WEEKLY,
            protocol_type=ProtocolCategory.CALM,
        ),
    ),
    Achievement(
        id="team-challenge",
        title="Team Challenge",
        description="Collective goal: 50 resets completed by the team in 1 month",
        badge="Team Recharge Award",
        kind=AchievementKind.TEAM_MONTHLY,
        category="team",
        requirements=AchievementRequirements(count=50, timeframe=Timeframe.MONTHLY),
        team_multiplier=TEAM_SESSION_MULTIPLIER,
    ),
]
