"""Role-typed user records.

Each role is its own frozen dataclass sharing ``UserBase``. Role-specific
fields are rendered through a singledispatch function with one
registration per role, so a new role without a registration fails loudly
instead of silently rendering nothing.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass, fields
from typing import Any

from markupsafe import Markup, escape

from .core.columns import ColumnDefinition, FacetFilter

ROLES = ("admin", "teacher", "student", "parent")
STATUSES = ("active", "inactive", "pending", "suspended")
RELATIONSHIPS = ("father", "mother", "guardian", "other")


@dataclass(frozen=True)
class UserBase:
    id: str
    first_name: str
    last_name: str
    email: str
    status: str = "active"
    phone_number: str | None = None

    role = "user"

    @property
    def name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class AdminUser(UserBase):
    permissions: tuple[str, ...] = ()
    department: str | None = None
    position: str | None = None

    role = "admin"


@dataclass(frozen=True)
class TeacherUser(UserBase):
    subjects: tuple[str, ...] = ()
    classrooms: tuple[str, ...] = ()
    years_of_experience: int = 0

    role = "teacher"


@dataclass(frozen=True)
class StudentUser(UserBase):
    student_id: str = ""
    grade: str = ""
    parent_name: str | None = None

    role = "student"


@dataclass(frozen=True)
class ParentUser(UserBase):
    children: tuple[str, ...] = ()
    relationship: str = "guardian"
    occupation: str | None = None

    role = "parent"

    def __post_init__(self) -> None:
        if self.relationship not in RELATIONSHIPS:
            raise ValueError(
                f"Invalid relationship '{self.relationship}'. Must be one of {RELATIONSHIPS}."
            )


_ROLE_TYPES: dict[str, type[UserBase]] = {
    "admin": AdminUser,
    "teacher": TeacherUser,
    "student": StudentUser,
    "parent": ParentUser,
}

# camelCase keys as served by the REST backend
_ALIASES = {
    "firstName": "first_name",
    "lastName": "last_name",
    "phoneNumber": "phone_number",
    "yearsOfExperience": "years_of_experience",
    "studentId": "student_id",
    "parentName": "parent_name",
}


def user_from_dict(payload: dict[str, Any]) -> UserBase:
    """Build the role-specific user from a backend payload.

    The ``role`` key selects the variant. Unknown keys are dropped, list
    values become tuples.
    """
    role = payload.get("role")
    if role not in _ROLE_TYPES:
        raise ValueError(f"Unknown user role {role!r}. Must be one of {ROLES}.")
    cls = _ROLE_TYPES[role]
    allowed = {f.name for f in fields(cls)}
    kwargs: dict[str, Any] = {}
    for key, value in payload.items():
        key = _ALIASES.get(key, key)
        if key not in allowed:
            continue
        kwargs[key] = tuple(value) if isinstance(value, list) else value
    kwargs["id"] = str(kwargs.get("id", ""))
    return cls(**kwargs)


@functools.singledispatch
def role_details(user: UserBase) -> list[tuple[str, str]]:
    """Return the role-specific (label, value) pairs for a user."""
    raise TypeError(f"No role details registered for {type(user).__name__}.")


@role_details.register
def _(user: StudentUser) -> list[tuple[str, str]]:
    details = [("Student ID", user.student_id), ("Grade", f"Grade {user.grade}")]
    if user.parent_name:
        details.append(("Parent", user.parent_name))
    return details


@role_details.register
def _(user: TeacherUser) -> list[tuple[str, str]]:
    subjects = ", ".join(user.subjects[:2])
    if len(user.subjects) > 2:
        subjects += f" +{len(user.subjects) - 2}"
    return [
        ("Experience", f"{user.years_of_experience} years"),
        ("Subjects", subjects),
    ]


@role_details.register
def _(user: ParentUser) -> list[tuple[str, str]]:
    details = [
        ("Relationship", user.relationship.capitalize()),
        ("Children", str(len(user.children))),
    ]
    if user.occupation:
        details.append(("Occupation", user.occupation))
    return details


@role_details.register
def _(user: AdminUser) -> list[tuple[str, str]]:
    details = []
    if user.position:
        details.append(("Position", user.position))
    if user.department:
        details.append(("Department", user.department))
    details.append(("Permissions", str(len(user.permissions))))
    return details


def render_user_card(user: UserBase, is_selected: bool) -> Markup:
    """Grid card renderer for any user variant."""
    rows = "".join(
        f'<div class="rt-card-field"><dt>{escape(label)}</dt><dd>{escape(value)}</dd></div>'
        for label, value in role_details(user)
    )
    css = "rt-user-card rt-selected" if is_selected else "rt-user-card"
    return Markup(
        f'<div class="{css}" data-role="{escape(user.role)}">'
        f'<div class="rt-user-name">{escape(user.name)}</div>'
        f'<div class="rt-user-email">{escape(user.email)}</div>'
        f'<span class="rt-badge">{escape(user.role.capitalize())}</span>'
        f'<dl class="rt-card-fields">{rows}</dl>'
        f"</div>"
    )


def user_columns() -> list[ColumnDefinition]:
    """Default columns for a mixed-role user table."""
    return [
        ColumnDefinition("name", accessor=lambda u: u.name),
        ColumnDefinition("email"),
        ColumnDefinition("role", accessor=lambda u: u.role),
        ColumnDefinition("status"),
        ColumnDefinition(
            "details",
            label="Details",
            accessor=lambda u: "; ".join(f"{k}: {v}" for k, v in role_details(u)),
            sortable=False,
        ),
    ]


def user_facets() -> list[FacetFilter]:
    return [
        FacetFilter.from_values("role", list(ROLES)),
        FacetFilter.from_values("status", list(STATUSES)),
    ]
