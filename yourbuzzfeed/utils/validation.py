"""
Request validation on top of jsonschema (Draft 7).

Schemas are built with the small Object/String/Integer/... helpers below and checked
with raise_for_body(), which collects every violation into one ValidationError.
"""
import jsonschema
from flask import request

from .errors import ValidationError

MAX_PAGE_SIZE = 100


def get_json_body():
    """Return the request JSON object; an empty body reads as ``{}``."""
    if not request.get_data(cache=True):
        return {}
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def raise_for_body(obj, schema, message=None):
    validator = jsonschema.Draft7Validator(schema)
    errors = []
    for exc in sorted(validator.iter_errors(obj), key=lambda e: list(e.path)):
        errors.append({
            'message': exc.message,
            'pointer': "." + ".".join(str(part) for part in exc.path),
        })
    if errors:
        raise ValidationError(message or "Invalid request body", errors=errors)


def get_int_arg(name, default, minimum=None, maximum=None):
    """Read an integer query parameter, clamped to [minimum, maximum]."""
    raw = request.args.get(name)
    if raw is None or raw == '':
        value = default
    else:
        try:
            value = int(raw)
        except ValueError:
            raise ValidationError(f"Invalid {name} parameter")
    if minimum is not None:
        value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def get_limit(default):
    return get_int_arg('limit', default, minimum=1, maximum=MAX_PAGE_SIZE)


def get_offset():
    return get_int_arg('offset', 0, minimum=0)


def _nullable(result, nullable):
    if nullable:
        result["type"] = [result["type"], "null"]
    return result


def Object(properties, required=None, **kwargs):
    if required is None:
        required = list(properties.keys())
    result = {
        "type": "object",
        "additionalProperties": False,
        "required": required,
        "properties": properties,
    }
    result.update(kwargs)
    return result


def String(enum=None, nullable=False, **kwargs):
    if isinstance(enum, str):
        enum = [enum]
    result = {"type": "string"}
    if enum is not None:
        result["enum"] = enum
    result.update(**kwargs)
    return _nullable(result, nullable)


def Integer(nullable=False, **kwargs):
    result = {"type": "integer"}
    result.update(**kwargs)
    return _nullable(result, nullable)


def Boolean(**kwargs):
    result = {"type": "boolean"}
    result.update(**kwargs)
    return result


def Array(items, **kwargs):
    result = {"type": "array", "items": items}
    result.update(**kwargs)
    return result


NonEmpty = String(minLength=1)
Slug = String(minLength=1, maxLength=500, pattern=r"^[a-z0-9_-]+$")
Color = String(maxLength=20, nullable=True)
ContentType = String(enum=["article", "listicle", "news"])


LOGIN_SCHEMA = Object({
    "username": NonEmpty,
    "password": NonEmpty,
}, additionalProperties=True)

INSERT_CATEGORY_SCHEMA = Object({
    "name": NonEmpty,
    "slug": Slug,
    "description": String(nullable=True),
    "color": Color,
    "bgColor": Color,
}, required=["name"])

INSERT_TAG_SCHEMA = Object({
    "name": NonEmpty,
    "slug": Slug,
}, required=["name"])

_ARTICLE_PROPERTIES = {
    "title": String(minLength=1, maxLength=500),
    "slug": Slug,
    "excerpt": String(),
    "content": NonEmpty,
    "featuredImage": String(nullable=True),
    "publishDate": String(format="date-time"),
    "authorId": Integer(nullable=True),
    "categoryId": Integer(nullable=True),
    "isPublished": Boolean(),
    "isFeatured": Boolean(),
    "contentType": ContentType,
    "readTime": Integer(minimum=1),
}

# views/shares/id are owned by the server and rejected as unknown properties
INSERT_ARTICLE_SCHEMA = Object(_ARTICLE_PROPERTIES, required=["title", "content"])

ARTICLE_PATCH_SCHEMA = Object(_ARTICLE_PROPERTIES, required=[])

ARTICLE_TAGS_SCHEMA = Object({
    "tagIds": Array(Integer(minimum=1), minItems=1, uniqueItems=True),
})

BULK_DELETE_SCHEMA = Object({
    "ids": Array(Integer(), minItems=1),
})

TargetLength = Integer(minimum=100, maximum=5000)
NumItems = Integer(minimum=1, maximum=50)
Percentage = Integer(minimum=0, maximum=100)

GENERATE_CONTENT_SCHEMA = Object({
    "topic": NonEmpty,
    "targetLength": TargetLength,
}, required=["topic"])

GENERATE_IDEAS_SCHEMA = Object({
    "category": NonEmpty,
    "count": Integer(minimum=1, maximum=20),
}, required=["category"])

GENERATE_LISTICLE_SCHEMA = Object({
    "topic": NonEmpty,
    "numItems": NumItems,
    "targetLength": TargetLength,
}, required=["topic"])

CREATE_ARTICLE_SCHEMA = Object({
    "topic": NonEmpty,
    "categoryId": Integer(minimum=1),
    "targetLength": TargetLength,
    "imageKeyword": String(nullable=True),
}, required=["topic", "categoryId"])

CREATE_LISTICLE_SCHEMA = Object({
    "topic": NonEmpty,
    "categoryId": Integer(minimum=1),
    "numItems": NumItems,
    "targetLength": TargetLength,
    "imageKeyword": String(nullable=True),
}, required=["topic", "categoryId"])

BATCH_GENERATE_SCHEMA = Object({
    "count": Integer(minimum=1, maximum=50),
    "listiclePercentage": Percentage,
}, required=[])

ENTERTAINMENT_BATCH_SCHEMA = Object({
    "count": Integer(minimum=1, maximum=20),
    "listiclePercentage": Percentage,
}, required=[])
