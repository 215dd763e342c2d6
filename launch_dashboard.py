"""Launch the roster-table dashboard over a generated school user roster."""

import random

import roster_table as rt
from roster_table.users import ROLES, STATUSES, user_columns, user_facets

FIRST = ["Ali", "Sara", "Omar", "Nora", "Yusuf", "Lina", "Karim", "Maya", "Adam", "Hana"]
LAST = ["Ben", "Lee", "Haddad", "Kay", "Mansour", "Said", "Rahal", "Aziz"]
SUBJECTS = ["Math", "Physics", "Chemistry", "Biology", "History", "Arabic", "English"]

rng = random.Random(7)


def make_user(i):
    role = rng.choice(ROLES)
    first, last = rng.choice(FIRST), rng.choice(LAST)
    payload = {
        "id": i,
        "role": role,
        "firstName": first,
        "lastName": last,
        "email": f"{first.lower()}.{last.lower()}{i}@school.org",
        "status": rng.choice(STATUSES),
    }
    if role == "student":
        payload.update(studentId=f"ST-{i:04d}", grade=str(rng.randint(7, 12)))
    elif role == "teacher":
        payload.update(subjects=rng.sample(SUBJECTS, 3), yearsOfExperience=rng.randint(1, 30))
    elif role == "parent":
        payload.update(children=[str(rng.randint(1, 200))], relationship="guardian")
    else:
        payload.update(permissions=["users"], department="Office", position="Registrar")
    return rt.user_from_dict(payload)


users = [make_user(i) for i in range(1, 201)]


def archive(selected):
    for user in selected:
        print(f"archived {user.id} ({user.name})")


table = rt.DataTable(
    users,
    user_columns(),
    facets=user_facets(),
    bulk_actions=[rt.BulkAction("archive", "Archive", archive)],
    grid_item_renderer=rt.render_user_card,
    page_size=20,
)

print(f"Users: {len(users)}")
print("Launching dashboard...")

rt.explore(table)
