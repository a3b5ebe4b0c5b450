# hackmatch/models/skills.py
from typing import Annotated, Any, List

from pydantic import BeforeValidator


def coerce_skill_list(value: Any) -> List[str]:
    """Absent or malformed skill collections become an empty list.

    Anything that is not a list (None, a bare string, a number, an object) is
    replaced by ``[]``; non-string entries inside a list are dropped.
    """
    if not isinstance(value, (list, tuple)):
        return []
    return [skill for skill in value if isinstance(skill, str)]


# Skill columns are nullable in the backend; models use this type so that the
# matcher only ever sees lists of strings.
SkillList = Annotated[List[str], BeforeValidator(coerce_skill_list)]
