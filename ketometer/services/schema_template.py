"""
Render the output models into the JSON skeleton embedded in prompts.

A field's first ``examples`` entry wins, nested models are rendered
recursively, lists become a one-element list and plain fields fall back to
their description.
"""
import json
import types
from typing import Annotated, Any, Literal, Optional, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo


def _unwrap(annotation: Any) -> Any:
    """Strip Optional[...] and Annotated[...] wrappers."""
    while True:
        origin = get_origin(annotation)
        if origin is Annotated:
            annotation = get_args(annotation)[0]
        elif origin in (Union, types.UnionType):
            args = [arg for arg in get_args(annotation) if arg is not type(None)]
            annotation = args[0]
        else:
            return annotation


def _render(annotation: Any, field: Optional[FieldInfo] = None) -> Any:
    if field is not None and field.examples:
        return field.examples[0]

    annotation = _unwrap(annotation)
    origin = get_origin(annotation)

    if origin is list:
        return [_render(get_args(annotation)[0])]
    if origin is Literal:
        return " | ".join(str(arg) for arg in get_args(annotation))
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return render_template(annotation)
    if field is not None and field.description:
        return field.description
    return "..."


def render_template(model: type[BaseModel]) -> dict:
    """Build an example JSON object for ``model``."""
    return {
        name: _render(field.annotation, field)
        for name, field in model.model_fields.items()
    }


def required_fields(model: type[BaseModel]) -> list[str]:
    """Top-level fields the model cannot do without."""
    return [name for name, field in model.model_fields.items() if field.is_required()]


def to_prompt_json(template: Any) -> str:
    return json.dumps(template, indent=2, ensure_ascii=False)
