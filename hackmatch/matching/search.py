# hackmatch/matching/search.py
from typing import List, Optional, Sequence

from hackmatch.models.profile import Profile
from hackmatch.models.team import Team


def _contains(value: Optional[str], term: str) -> bool:
    return bool(value) and term in value.lower()


def filter_teams(teams: Sequence[Team], search_term: Optional[str]) -> List[Team]:
    """Keeps teams whose name or any required skill contains the search term."""
    term = (search_term or "").lower()
    if not term:
        return list(teams)
    return [
        team
        for team in teams
        if _contains(team.name, term)
        or any(_contains(skill, term) for skill in team.required_skills)
    ]


def filter_profiles(
    profiles: Sequence[Profile], search_term: Optional[str]
) -> List[Profile]:
    """Keeps profiles whose name, college or any skill contains the search term."""
    term = (search_term or "").lower()
    if not term:
        return list(profiles)
    return [
        profile
        for profile in profiles
        if _contains(profile.name, term)
        or _contains(profile.college, term)
        or any(_contains(skill, term) for skill in profile.skills)
    ]
