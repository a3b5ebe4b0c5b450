"""Skill-based ranking of teams and developer profiles.

Both entry points are pure functions of their arguments: they never mutate the
candidate sequences they are given and keep no state between calls.

The two percentages are normalised differently. A team is scored against its
own required skills ("how much of what they need do I have"), a profile
against the smaller of the two skill lists ("how much do we overlap").
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Sequence, Set

from loguru import logger

from hackmatch.models.match import ProfileMatch, TeamMatch
from hackmatch.models.profile import ProfileCandidate
from hackmatch.models.team import TeamCandidate

DEFAULT_TEAM_LIMIT = 5
DEFAULT_TEAM_MIN_SCORE = 30
DEFAULT_PROFILE_LIMIT = 5
DEFAULT_PROFILE_MIN_SCORE = 40


def _lowered(skills: Optional[Sequence[str]]) -> Set[str]:
    return {skill.lower() for skill in skills or []}


def match_percentage(matched: int, total: int) -> int:
    """100 * matched / total rounded half up; 0 when total is 0."""
    if total <= 0:
        return 0
    ratio = Decimal(matched * 100) / Decimal(total)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def score_team(
    requester_skills: Optional[Sequence[str]], team: TeamCandidate
) -> TeamMatch:
    """Scores a single team without applying any threshold."""
    wanted = _lowered(requester_skills)
    required = list(team.required_skills or [])

    matching = [skill for skill in required if skill.lower() in wanted]
    missing = [skill for skill in required if skill.lower() not in wanted]

    return TeamMatch(
        team=team,
        match_percentage=match_percentage(len(matching), len(required)),
        matching_skills=matching,
        missing_skills=missing,
    )


def score_profile(
    requester_skills: Optional[Sequence[str]], profile: ProfileCandidate
) -> ProfileMatch:
    """Scores a single profile without applying any threshold."""
    requester = list(requester_skills or [])
    wanted = _lowered(requester)
    declared = list(profile.skills or [])

    common = [skill for skill in declared if skill.lower() in wanted]
    # Either side empty gives a zero denominator, scored as 0
    denominator = min(len(requester), len(declared))

    return ProfileMatch(
        profile=profile,
        match_percentage=match_percentage(len(common), denominator),
        common_skills=common,
    )


def match_teams(
    requester_skills: Optional[Sequence[str]],
    teams: Optional[Sequence[TeamCandidate]],
    limit: int = DEFAULT_TEAM_LIMIT,
    min_score: int = DEFAULT_TEAM_MIN_SCORE,
) -> List[TeamMatch]:
    """
    Ranks teams by how many of their required skills the requester has.

    Args:
        requester_skills: The requester's skills. Compared case-insensitively.
        teams: Already-fetched, bounded list of teams.
        limit: Maximum number of matches returned.
        min_score: Exclusive floor; a team must score strictly above it.

    Returns:
        Matches ordered by descending percentage. Equal percentages keep the
        order the teams were given in.
    """
    scored = [score_team(requester_skills, team) for team in teams or []]
    kept = [m for m in scored if m.match_percentage > min_score]
    # sorted() is stable, so ties keep input order
    ranked = sorted(kept, key=lambda m: m.match_percentage, reverse=True)[: max(limit, 0)]

    logger.debug(
        f"Team matching: {len(scored)} candidates, {len(kept)} above {min_score}%, "
        f"returning {len(ranked)}."
    )
    return ranked


def match_profiles(
    requester_skills: Optional[Sequence[str]],
    profiles: Optional[Sequence[ProfileCandidate]],
    limit: int = DEFAULT_PROFILE_LIMIT,
    min_score: int = DEFAULT_PROFILE_MIN_SCORE,
    min_common_skills: int = 0,
) -> List[ProfileMatch]:
    """
    Ranks developer profiles by skill overlap with the requester.

    A profile is kept only if its percentage is strictly above ``min_score``
    and it shares strictly more than ``min_common_skills`` skills.
    """
    scored = [score_profile(requester_skills, profile) for profile in profiles or []]
    kept = [
        m
        for m in scored
        if m.match_percentage > min_score and len(m.common_skills) > min_common_skills
    ]
    ranked = sorted(kept, key=lambda m: m.match_percentage, reverse=True)[: max(limit, 0)]

    logger.debug(
        f"Profile matching: {len(scored)} candidates, {len(kept)} kept, "
        f"returning {len(ranked)}."
    )
    return ranked
