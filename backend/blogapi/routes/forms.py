"""
Blog API Backend — Request Body Parsing
========================================

What:  A dependency factory that reads a request body as JSON *or* as a form
       and validates it against a Pydantic schema.
Why:   Write endpoints accept both `application/json` and HTML form posts
       (the static front page submits forms). FastAPI's own Body()/Form()
       parameters bind to one content type only.
How:   `payload: PostCreate = Depends(body_as(PostCreate))`

Error mapping:
    unreadable body (bad JSON, wrong content type) → ValidationError (400)
    schema violation                               → ValidationError (400)
"""

from typing import Any, Callable, Coroutine, Dict, Iterable, Mapping, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from blogapi.exceptions import ValidationError

SchemaT = TypeVar("SchemaT", bound=BaseModel)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def describe_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """
    Collapse Pydantic/FastAPI error dicts into one readable line, e.g.
    "title: String should have at least 1 character; user_id: Field required".
    """
    parts = []
    for error in errors:
        loc = [str(p) for p in error.get("loc", ()) if p not in ("body", "query", "path")]
        msg = error.get("msg", "Invalid value")
        parts.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


async def read_body(request: Request) -> Dict[str, Any]:
    content_type = request.headers.get("content-type", "").lower()

    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items()}

    try:
        data = await request.json()
    except ValueError as e:
        raise ValidationError(
            message="Request body must be a JSON object or form data",
            context={"content_type": content_type},
        ) from e

    if not isinstance(data, dict):
        raise ValidationError(message="Request body must be a JSON object")
    return data


def body_as(schema: Type[SchemaT]) -> Callable[[Request], Coroutine[Any, Any, SchemaT]]:
    """Build a dependency returning the request body validated as `schema`."""

    async def dependency(request: Request) -> SchemaT:
        data = await read_body(request)
        try:
            return schema.model_validate(data)
        except PydanticValidationError as e:
            errors = e.errors(include_url=False)
            raise ValidationError(
                message=describe_errors(errors),
                context={"errors": errors},
            ) from e

    return dependency
