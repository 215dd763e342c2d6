"""Display utilities for prettifying field names."""

_ACRONYMS = {
    "id", "dob", "gpa", "url", "api", "sms", "pdf",
}


def prettify_name(name: str) -> str:
    """Convert snake_case or camelCase field keys to Title Case labels.

    Examples::

        prettify_name("first_name")   # -> "First Name"
        prettify_name("student_id")   # -> "Student ID"
        prettify_name("createdAt")    # -> "Created At"
    """
    spaced = []
    for i, ch in enumerate(name):
        if ch.isupper() and i > 0 and not name[i - 1].isupper():
            spaced.append(" ")
        spaced.append(ch)
    words = "".join(spaced).replace("_", " ").split()
    return " ".join(
        w.upper() if w.lower() in _ACRONYMS else w.capitalize()
        for w in words
    )
