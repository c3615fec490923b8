"""Request body parsing."""

from flask import request


def parse_json(schema):
    """Validate the request's JSON body against a pydantic ``schema``.

    A missing or non-JSON body validates as ``{}`` so required fields are
    reported the same way as any other invalid input.
    """
    return schema.model_validate(request.get_json(silent=True) or {})


def partial_update(model, payload, fields=None):
    """Copy the fields explicitly sent in ``payload`` onto ``model``.

    Returns the names of the fields that were set.
    """
    values = payload.model_dump(exclude_unset=True, mode='json')
    if fields is not None:
        values = {key: value for key, value in values.items() if key in fields}
    for key, value in values.items():
        setattr(model, key, value)
    return list(values)
