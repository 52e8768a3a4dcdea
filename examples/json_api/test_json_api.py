"""Tests for the JSON API example."""

import json


class TestJsonApiApp:
    """Verify the generated documents."""

    def test_output(self, example_app) -> None:
        assert json.loads(example_app.output) == {
            "data": [
                {"id": 1, "name": "Ada", "roles": ["admin"]},
                {"id": 2, "name": "Grace", "roles": None},
            ],
            "meta": {"page": 1, "count": 2},
        }

    def test_single_resource(self, example_app) -> None:
        user = example_app.User(3, 'Quote "me"', ["x", "y"])
        assert example_app.UserResource.render(user) == (
            '{"id":3,"name":"Quote \\"me\\"","roles":["x","y"]}'
        )

    def test_empty_list(self, example_app) -> None:
        assert json.loads(example_app.user_list.render([], page=2)) == {
            "data": None,
            "meta": {"page": 2, "count": 0},
        }
