"""
Declarative response shapes.

A Shape describes the JSON the model must return: field names, types,
enums and array cardinality. The same Shape is
- rendered to Gemini's responseSchema (to_response_schema),
- checked against decoded JSON by the decoder (structural_problems),
- checked for array sizes by the nodes (cardinality_problems).

Shapes are plain data so they can be tested without any network call.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# JSON type name -> Python types accepted for it
_JSON_TYPES: Dict[str, tuple] = {
    "object": (dict,),
    "array": (list,),
    "string": (str,),
    "number": (int, float),
    "integer": (int,),
    "boolean": (bool,),
}


class Shape(BaseModel):
    """One node of a response shape."""
    model_config = ConfigDict(frozen=True)

    type: str
    description: Optional[str] = None
    properties: Dict[str, "Shape"] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)
    items: Optional["Shape"] = None
    enum: Optional[List[str]] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    # not rendered into responseSchema
    non_blank: bool = False

    def to_response_schema(self) -> dict:
        """Render in the Gemini responseSchema dialect (OpenAPI subset)."""
        result: Dict[str, Any] = {"type": self.type}
        if self.description:
            result["description"] = self.description
        if self.enum:
            result["enum"] = list(self.enum)
        if self.properties:
            result["properties"] = {
                name: prop.to_response_schema()
                for name, prop in self.properties.items()
            }
        if self.required:
            result["required"] = list(self.required)
        if self.items is not None:
            result["items"] = self.items.to_response_schema()
        if self.min_items is not None:
            result["minItems"] = self.min_items
        if self.max_items is not None:
            result["maxItems"] = self.max_items
        return result


Shape.model_rebuild()


# =============================================================================
# CONSTRUCTORS
# =============================================================================

def string(
    description: Optional[str] = None,
    enum: Optional[List[str]] = None,
    non_blank: bool = False,
) -> Shape:
    return Shape(type="string", description=description, enum=enum, non_blank=non_blank)


def number(description: Optional[str] = None) -> Shape:
    return Shape(type="number", description=description)


def integer(description: Optional[str] = None) -> Shape:
    return Shape(type="integer", description=description)


def arr(
    items: Shape,
    description: Optional[str] = None,
    min_items: Optional[int] = None,
    max_items: Optional[int] = None,
) -> Shape:
    return Shape(
        type="array",
        items=items,
        description=description,
        min_items=min_items,
        max_items=max_items,
    )


def obj(
    properties: Dict[str, Shape],
    required: Optional[List[str]] = None,
    description: Optional[str] = None,
) -> Shape:
    """Object shape. All properties are required unless `required` says otherwise."""
    return Shape(
        type="object",
        properties=properties,
        required=list(properties) if required is None else required,
        description=description,
    )


# =============================================================================
# VALIDATION
# =============================================================================

def _type_matches(value: Any, type_name: str) -> bool:
    # bool is an int subclass; JSON true/false is never a number
    if isinstance(value, bool) and type_name in ("number", "integer"):
        return False
    if type_name == "integer" and isinstance(value, float):
        return value.is_integer()
    return isinstance(value, _JSON_TYPES.get(type_name, (object,)))


def structural_problems(value: Any, shape: Shape, path: str = "$") -> List[str]:
    """
    List everything in `value` that does not fit `shape`: wrong JSON types,
    missing required fields, values outside an enum, blank strings where
    the shape forbids them. Array sizes are not checked here (see cardinality_problems).
    """
    if not _type_matches(value, shape.type):
        return [f"{path}: expected {shape.type}, got {type(value).__name__}"]

    problems: List[str] = []
    if shape.enum is not None and value not in shape.enum:
        problems.append(f"{path}: {value!r} is not one of {shape.enum}")
    if shape.non_blank and not value.strip():
        problems.append(f"{path}: must not be blank")

    if shape.type == "object":
        for name in shape.required:
            if name not in value or value[name] is None:
                problems.append(f"{path}.{name}: required field missing")
        for name, prop in shape.properties.items():
            if name in value and value[name] is not None:
                problems.extend(structural_problems(value[name], prop, f"{path}.{name}"))

    elif shape.type == "array" and shape.items is not None:
        for i, item in enumerate(value):
            problems.extend(structural_problems(item, shape.items, f"{path}[{i}]"))

    return problems


def cardinality_problems(value: Any, shape: Shape, path: str = "$") -> List[str]:
    """List every array in `value` whose length falls outside the shape's min/max items."""
    problems: List[str] = []

    if shape.type == "object" and isinstance(value, dict):
        for name, prop in shape.properties.items():
            if name in value:
                problems.extend(cardinality_problems(value[name], prop, f"{path}.{name}"))

    elif shape.type == "array" and isinstance(value, list):
        count = len(value)
        if shape.min_items is not None and shape.min_items == shape.max_items:
            if count != shape.min_items:
                problems.append(f"{path}: expected exactly {shape.min_items} items, got {count}")
        else:
            if shape.min_items is not None and count < shape.min_items:
                problems.append(f"{path}: expected at least {shape.min_items} items, got {count}")
            if shape.max_items is not None and count > shape.max_items:
                problems.append(f"{path}: expected at most {shape.max_items} items, got {count}")
        if shape.items is not None:
            for i, item in enumerate(value):
                problems.extend(cardinality_problems(item, shape.items, f"{path}[{i}]"))

    return problems
