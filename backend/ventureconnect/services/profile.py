"""
Profile helpers: completion scoring and the resource grid view.
"""
from typing import Any, Iterable, Mapping, Union

from ..db import schemas

BASE_COMPLETION = 25
OPTIONAL_PROFILE_FIELDS = ("bio", "location", "headline", "company", "avatar_url")
FIELD_WEIGHT = 15


def compute_profile_completion(user: Union[Mapping[str, Any], Any]) -> int:
    """
    Score how complete a profile is, from 25 (bare account) up to 100.

    Accepts a user schema, an ORM row or a plain dict.
    """
    def value(field):
        if isinstance(user, Mapping):
            return user.get(field)
        return getattr(user, field, None)

    filled = sum(1 for field in OPTIONAL_PROFILE_FIELDS if (value(field) or "").strip())
    return min(100, BASE_COMPLETION + FIELD_WEIGHT * filled)


def build_resource_grid(resources: Iterable[schemas.Resource]) -> schemas.ResourceGrid:
    """
    Fold a user's resource rows into category -> {have, need}.

    Every known category is present. Several rows for one category are merged
    in order, without duplicates.
    """
    grid = {category: schemas.ResourceGridCell() for category in schemas.RESOURCE_CATEGORIES}
    for resource in resources:
        cell = grid.setdefault(resource.category, schemas.ResourceGridCell())
        for item in resource.have:
            if item not in cell.have:
                cell.have.append(item)
        for item in resource.need:
            if item not in cell.need:
                cell.need.append(item)
    return grid
