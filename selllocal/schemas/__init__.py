"""
Request schemas.

Every JSON (or multipart) body is parsed into one of these pydantic models
before it reaches a service. Field names are snake_case in Python and
camelCase on the wire.
"""
from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from selllocal.exceptions import RequestValidationError

_VALUE_ERROR_PREFIX = 'Value error, '


class RequestModel(BaseModel):
    """Base for request bodies: camelCase aliases, unknown fields ignored."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra='ignore',
        str_strip_whitespace=True,
    )


def _clean_message(msg):
    if msg.startswith(_VALUE_ERROR_PREFIX):
        return msg[len(_VALUE_ERROR_PREFIX):]
    return msg


def parse_body(model, data):
    """
    Validate a request body against a schema.

    Raises:
        RequestValidationError: with one {field, message} entry per problem.
            When a check raised its own message, that message is used as the
            top-level one.
    """
    try:
        return model.model_validate(data or {})
    except ValidationError as e:
        errors = []
        message = None
        for error in e.errors():
            text = _clean_message(error['msg'])
            errors.append({
                'field': '.'.join(str(part) for part in error['loc']),
                'message': text,
            })
            if message is None and error['type'] == 'value_error':
                message = text
        raise RequestValidationError(errors, message or 'Validation failed')
