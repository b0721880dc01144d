"""Query-string pagination helpers."""
import math

MAX_LIMIT = 100


def _positive_int(value, default):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def parse_pagination(args, default_limit=20):
    """Return (page, limit, offset) from request args."""
    page = _positive_int(args.get('page'), 1)
    limit = min(_positive_int(args.get('limit'), default_limit), MAX_LIMIT)
    return page, limit, (page - 1) * limit


def pagination_dict(page, limit, total):
    return {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': math.ceil(total / limit) if limit else 0,
    }
