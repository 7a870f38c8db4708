# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
"""Translate a granted scope into a declarative row filter.

The filter only describes field constraints; storage layers turn it into
their own query criteria (see ``rbac_service.apply_scope_filter``) and
``ScopeFilter.matches`` evaluates it against a single loaded record.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from .evaluator import Actor
from .permissions import Scope, ScopeValue

DEFAULT_OWNER_FIELD = "assigned_to_id"
DEFAULT_TEAM_ATTRIBUTE = "country_id"


@dataclass(frozen=True)
class FieldConstraint:
    """Equality or membership constraint on a (possibly dotted) field path."""

    field: str
    op: Literal["eq", "in"]
    value: Any

    def matches(self, record: Any) -> bool:
        actual = _read_path(record, self.field)
        if self.op == "in":
            return actual in self.value
        return actual == self.value


@dataclass(frozen=True)
class ScopeFilter:
    """Row restriction derived from a scope.

    ``denied`` means the collection must not be queried at all, while
    ``matches_nothing`` describes a legal query that can return no rows.
    """

    scope: ScopeValue
    denied: bool = False
    constraints: tuple[FieldConstraint, ...] = ()
    matches_nothing: bool = False

    @property
    def unrestricted(self) -> bool:
        return not self.denied and not self.matches_nothing and not self.constraints

    def matches(self, record: Any) -> bool:
        """Check a single record against the filter."""
        if self.denied or self.matches_nothing:
            return False
        return all(constraint.matches(record) for constraint in self.constraints)


_MISSING = object()


def _read_path(record: Any, path: str) -> Any:
    value = record
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, Mapping):
            value = value.get(part, _MISSING)
        else:
            value = getattr(value, part, _MISSING)
        if value is _MISSING:
            return None
    return value


def default_team_field(
    owner_field: str = DEFAULT_OWNER_FIELD,
    team_attribute: str = DEFAULT_TEAM_ATTRIBUTE,
) -> str:
    """Build the team field path reached through the owner relationship.

    ``assigned_to_id`` with ``country_id`` gives ``assigned_to.country_id``.
    """
    relationship = owner_field.removesuffix("_id")
    return f"{relationship}.{team_attribute}"


def resolve_scope_filter(
    scope: ScopeValue,
    actor: Actor,
    owner_field: str = DEFAULT_OWNER_FIELD,
    team_field: str | None = None,
) -> ScopeFilter:
    """Resolve a granted scope into the filter for a target collection.

    ``owner_field`` names the ownership/assignment column of the target and
    ``team_field`` the path to the owner's team attribute.
    """
    if scope == Scope.ALL.value:
        return ScopeFilter(scope=scope)

    if scope == Scope.TEAM.value:
        if actor.team is None:
            # Without a team nothing can be shared with the actor
            return ScopeFilter(scope=scope, matches_nothing=True)
        return ScopeFilter(
            scope=scope,
            constraints=(
                FieldConstraint(
                    field=team_field or default_team_field(owner_field),
                    op="eq",
                    value=actor.team,
                ),
            ),
        )

    if scope == Scope.SELF.value:
        if actor.id is None:
            return ScopeFilter(scope=scope, matches_nothing=True)
        return ScopeFilter(
            scope=scope,
            constraints=(FieldConstraint(field=owner_field, op="eq", value=actor.id),),
        )

    return ScopeFilter(scope=False, denied=True)


def can_assign_to(
    scope: ScopeValue, actor: Actor, assignee_id: Any, assignee_team: Any = None
) -> bool:
    """Check whether the actor may assign a new record to the given user."""
    if scope == Scope.ALL.value:
        return True
    if scope == Scope.TEAM.value:
        if assignee_id == actor.id:
            return True
        return actor.team is not None and assignee_team == actor.team
    if scope == Scope.SELF.value:
        return assignee_id == actor.id
    return False
