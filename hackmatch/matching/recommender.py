from typing import List, Optional, Sequence

from loguru import logger
from supabase import AsyncClient

from hackmatch.config.settings import AppSettings, settings as app_settings
from hackmatch.matching.skill_matcher import match_profiles, match_teams
from hackmatch.models.match import MatchConfig, Recommendations
from hackmatch.storage.supabase_client import fetch_profiles, fetch_teams


def team_match_config(config: Optional[AppSettings] = None) -> MatchConfig:
    config = config or app_settings
    return MatchConfig(limit=config.team_match_limit, min_score=config.team_min_score)


def profile_match_config(config: Optional[AppSettings] = None) -> MatchConfig:
    config = config or app_settings
    return MatchConfig(
        limit=config.profile_match_limit,
        min_score=config.profile_min_score,
        min_common_skills=config.profile_min_common_skills,
    )


async def fetch_recommendations(
    supabase_client: Optional[AsyncClient] = None,
    requester_skills: Optional[Sequence[str]] = None,
    config: Optional[AppSettings] = None,
    include_teams: bool = True,
    include_profiles: bool = True,
) -> Recommendations:
    """
    Fetches bounded candidate lists from Supabase and ranks them.

    Args:
        supabase_client: An initialized async Supabase client instance.
        requester_skills: Skills of the user receiving recommendations. None
                          falls back to the configured default skill set.
        config: Settings to read limits and thresholds from.
        include_teams: Whether to compute team recommendations.
        include_profiles: Whether to compute developer recommendations.

    Returns:
        The ranked recommendations. A failed fetch yields an empty list for
        that half rather than an error.
    """
    config = config or app_settings
    skills: List[str] = list(
        requester_skills if requester_skills is not None else config.default_requester_skills
    )
    result = Recommendations(requester_skills=skills)
    logger.info(f"Computing recommendations for skills: {skills}")

    if include_teams:
        teams = await fetch_teams(supabase_client, limit=config.team_fetch_limit)
        if teams is None:
            logger.error("Team fetch failed; no team recommendations.")
        team_config = team_match_config(config)
        result.teams = match_teams(
            skills, teams or [], limit=team_config.limit, min_score=team_config.min_score
        )

    if include_profiles:
        profiles = await fetch_profiles(supabase_client, limit=config.profile_fetch_limit)
        if profiles is None:
            logger.error("Profile fetch failed; no developer recommendations.")
        profile_config = profile_match_config(config)
        result.profiles = match_profiles(
            skills,
            profiles or [],
            limit=profile_config.limit,
            min_score=profile_config.min_score,
            min_common_skills=profile_config.min_common_skills,
        )

    logger.success(
        f"Recommendations ready: {len(result.teams)} teams, {len(result.profiles)} developers."
    )
    return result
