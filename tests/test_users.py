"""Tests for role-typed users and their rendering."""

from dataclasses import dataclass

import pytest

from roster_table import DataTable
from roster_table.users import (
    AdminUser,
    ParentUser,
    StudentUser,
    TeacherUser,
    UserBase,
    render_user_card,
    role_details,
    user_columns,
    user_facets,
    user_from_dict,
)


@pytest.fixture
def mixed_users():
    return [
        user_from_dict({
            "id": 1, "role": "student", "firstName": "Ali", "lastName": "Ben",
            "email": "ali@school.org", "studentId": "ST-001", "grade": "9",
            "parentName": "Omar Ben",
        }),
        user_from_dict({
            "id": 2, "role": "teacher", "firstName": "Sara", "lastName": "Lee",
            "email": "sara@school.org", "subjects": ["Math", "Physics", "Chemistry"],
            "yearsOfExperience": 7,
        }),
        user_from_dict({
            "id": 3, "role": "parent", "firstName": "Omar", "lastName": "Ben",
            "email": "omar@mail.org", "children": ["1"], "relationship": "father",
        }),
        user_from_dict({
            "id": 4, "role": "admin", "firstName": "Nora", "lastName": "Kay",
            "email": "nora@school.org", "permissions": ["users", "billing"],
            "department": "Office", "status": "inactive",
        }),
    ]


class TestUserFromDict:
    def test_dispatches_on_role(self, mixed_users):
        assert [type(u) for u in mixed_users] == [StudentUser, TeacherUser, ParentUser, AdminUser]

    def test_aliases_and_tuples(self, mixed_users):
        teacher = mixed_users[1]
        assert teacher.id == "2"
        assert teacher.first_name == "Sara"
        assert teacher.subjects == ("Math", "Physics", "Chemistry")
        assert teacher.years_of_experience == 7

    def test_unknown_role(self):
        with pytest.raises(ValueError, match="Unknown user role"):
            user_from_dict({"id": 1, "role": "janitor"})

    def test_unknown_keys_dropped(self):
        user = user_from_dict({
            "id": 9, "role": "student", "firstName": "A", "lastName": "B",
            "email": "a@b.c", "favouriteColour": "red",
        })
        assert user.name == "A B"

    def test_invalid_relationship(self):
        with pytest.raises(ValueError, match="relationship"):
            ParentUser("1", "A", "B", "a@b.c", relationship="uncle")


class TestRoleDetails:
    def test_student(self, mixed_users):
        assert role_details(mixed_users[0]) == [
            ("Student ID", "ST-001"), ("Grade", "Grade 9"), ("Parent", "Omar Ben"),
        ]

    def test_teacher_truncates_subjects(self, mixed_users):
        assert ("Subjects", "Math, Physics +1") in role_details(mixed_users[1])

    def test_parent(self, mixed_users):
        assert role_details(mixed_users[2]) == [("Relationship", "Father"), ("Children", "1")]

    def test_admin(self, mixed_users):
        assert role_details(mixed_users[3]) == [("Department", "Office"), ("Permissions", "2")]

    def test_every_role_registered(self):
        for cls in (AdminUser, TeacherUser, StudentUser, ParentUser):
            assert role_details.dispatch(cls) is not role_details.dispatch(UserBase)

    def test_unregistered_variant_raises(self):
        @dataclass(frozen=True)
        class GuestUser(UserBase):
            role = "guest"

        with pytest.raises(TypeError, match="GuestUser"):
            role_details(GuestUser("g", "G", "U", "g@x.org"))


class TestUserCard:
    def test_card_escapes_and_marks_selection(self):
        user = StudentUser("1", "<Ali>", "Ben", "ali@x.org", student_id="S1", grade="9")
        html = str(render_user_card(user, True))
        assert "&lt;Ali&gt; Ben" in html
        assert "rt-selected" in html
        assert 'data-role="student"' in html

    def test_as_grid_renderer(self, mixed_users):
        table = DataTable(
            mixed_users, user_columns(),
            facets=user_facets(),
            grid_item_renderer=render_user_card,
            view_modes=("grid", "table"),
        )
        html = str(table.render_view())
        assert html.count("rt-user-card") == 4


class TestUserTable:
    def test_search_and_role_facet(self, mixed_users):
        table = DataTable(mixed_users, user_columns(), facets=user_facets())
        table.set_facet("role", ["parent", "student"])
        table.set_query("ben")
        assert [u.id for _, u in table.page_records()] == ["1", "3"]

    def test_sort_by_derived_name(self, mixed_users):
        table = DataTable(mixed_users, user_columns())
        table.toggle_sort("name")
        assert [u.name for _, u in table.page_records()] == [
            "Ali Ben", "Nora Kay", "Omar Ben", "Sara Lee",
        ]
