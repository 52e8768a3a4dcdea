"""JSON API responses -- JSON mode.

In JSON mode a call names an object key, ``item(...)`` appends to an array,
and keyword arguments build a nested object. Keys are used verbatim.

Run:
    python app.py
"""

from dataclasses import dataclass, field

from tagcraft import json


@dataclass
class User:
    id: int
    name: str
    roles: list[str] = field(default_factory=list)


@json
def UserResource(user):
    id(user.id)
    name(user.name)
    with roles():
        for role in user.roles:
            item(role)


@json
def user_list(users, page=1):
    with data():
        for user in users:
            with item():
                UserResource(user)
    meta(page=page, count=len(users))


users = [User(1, "Ada", ["admin"]), User(2, "Grace")]

output = user_list.render(users)


def main() -> None:
    print(output)


if __name__ == "__main__":
    main()
