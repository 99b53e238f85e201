from studio_nodes.shapes import arr, cardinality_problems, integer, number, obj, string, structural_problems

PERSON = obj({
    "name": string("Full name"),
    "age": integer(),
    "role": string(enum=["judge", "lawyer"]),
    "tags": arr(string(), min_items=1, max_items=2),
})


def test_to_response_schema():
    schema = PERSON.to_response_schema()

    assert schema["type"] == "object"
    assert schema["required"] == ["name", "age", "role", "tags"]
    assert schema["properties"]["name"] == {"type": "string", "description": "Full name"}
    assert schema["properties"]["role"]["enum"] == ["judge", "lawyer"]
    assert schema["properties"]["tags"] == {
        "type": "array",
        "items": {"type": "string"},
        "minItems": 1,
        "maxItems": 2,
    }


def test_obj_optional_properties():
    shape = obj({"a": string(), "b": number()}, required=["a"])
    assert structural_problems({"a": "x"}, shape) == []


def test_valid_value_has_no_problems():
    value = {"name": "An", "age": 40, "role": "judge", "tags": ["x"]}
    assert structural_problems(value, PERSON) == []
    assert cardinality_problems(value, PERSON) == []


def test_structural_problems():
    value = {"name": None, "age": "40", "role": "clerk", "tags": [1]}

    problems = structural_problems(value, PERSON)

    assert "$.name: required field missing" in problems
    assert "$.age: expected integer, got str" in problems
    assert any(p.startswith("$.role:") and "clerk" in p for p in problems)
    assert "$.tags[0]: expected string, got int" in problems


def test_bool_is_not_a_number_and_integral_float_is_an_integer():
    assert structural_problems(True, number()) != []
    assert structural_problems(3.0, integer()) == []
    assert structural_problems(3.5, integer()) != []


def test_structural_ignores_cardinality():
    value = {"name": "An", "age": 40, "role": "judge", "tags": []}
    assert structural_problems(value, PERSON) == []
    assert cardinality_problems(value, PERSON) == ["$.tags: expected at least 1 items, got 0"]


def test_exact_cardinality_message():
    shape = arr(string(), min_items=3, max_items=3)
    assert cardinality_problems(["a"], shape) == ["$: expected exactly 3 items, got 1"]


def test_nested_cardinality():
    shape = obj({"rows": arr(arr(integer(), max_items=1))})
    assert cardinality_problems({"rows": [[1], [1, 2]]}, shape) == [
        "$.rows[1]: expected at most 1 items, got 2"
    ]


def test_non_blank_string():
    shape = string("Title", non_blank=True)

    assert structural_problems(" \n", shape) == ["$: must not be blank"]
    assert structural_problems("Hợp đồng", shape) == []
    assert structural_problems("", string()) == []
    assert shape.to_response_schema() == {"type": "string", "description": "Title"}
