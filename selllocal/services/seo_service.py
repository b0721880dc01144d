"""
Hyperlocal SEO for seller storefronts.

Builds location-aware keywords, titles and descriptions so a storefront can
rank for searches like "home bakers near me" or "cakes in Pune". The seller
is passed as a plain dict (camelCase keys, as the profile API uses) so the
caller can merge pending profile edits before generating.
"""
import re

TITLE_LIMIT = 60
DESCRIPTION_LIMIT = 160
KEYWORD_LIMIT = 30

LOCAL_PATTERNS = (
    'near me',
    'in {city}',
    '{city} {category}',
    '{category} {city}',
    '{neighborhood} {category}',
    'local {category}',
    '{category} delivery {city}',
    '{category} shop {city}',
    'best {category} {city}',
    'cheap {category} {city}',
    'wholesale {category} {city}',
    'home based {category} {city}',
    'online {category} {city}',
    '{category} seller {city}',
    '{category} supplier {city}',
    'buy {category} {city}',
    '{category} store {city}',
    '{category} shop near me',
    '{category} {city} {state}',
)

_WHITESPACE = re.compile(r'\s+')


def _location(seller):
    address = seller.get('address') or {}
    local_area = seller.get('seoLocalArea') or ''
    return {
        'city': address.get('city') or local_area,
        'state': address.get('state') or '',
        'neighborhood': address.get('street') or local_area,
    }


def _truncate(text, limit):
    if len(text) > limit:
        return text[:limit - 3] + '...'
    return text


def generate_keywords(seller, categories=()):
    """Location-based search keywords, at most 30."""
    location = _location(seller)
    city = location['city'].lower()
    keywords = []

    for category in categories or ():
        if not category:
            continue
        for pattern in LOCAL_PATTERNS:
            keyword = pattern.format(
                city=city,
                state=location['state'].lower(),
                neighborhood=location['neighborhood'].lower(),
                category=category.lower(),
            )
            keyword = _WHITESPACE.sub(' ', keyword.strip())
            if len(keyword) > 3 and keyword not in keywords:
                keywords.append(keyword)

    business_name = (seller.get('businessName') or '').lower()
    if business_name and city:
        keywords.append(f"{business_name} {city}")
        keywords.append(f"{business_name} near me")

    if city:
        keywords.extend([
            f"local sellers {city}",
            f"home business {city}",
            f"online store {city}",
            f"microsite {city}",
        ])

    return keywords[:KEYWORD_LIMIT]


def generate_title(seller, custom_title=None):
    """Meta title of at most 60 characters."""
    if custom_title:
        return _truncate(custom_title, TITLE_LIMIT)

    city = _location(seller)['city']
    business = seller.get('businessName') or 'Online Store'

    if city:
        title = f"{business} - Best Products in {city} | SellLocal"
        if len(title) > TITLE_LIMIT:
            title = f"{business} - Products in {city}"
        if len(title) > TITLE_LIMIT:
            suffix = f" - Products in {city}"
            title = _truncate(business, TITLE_LIMIT - len(suffix)) + suffix
        return _truncate(title, TITLE_LIMIT)

    suffix = ' - Online Store'
    title = f"{business}{suffix}"
    if len(title) > TITLE_LIMIT:
        title = _truncate(business, TITLE_LIMIT - len(suffix)) + suffix
    return title


def generate_description(seller, categories=(), custom_description=None):
    """Meta description of at most 160 characters."""
    if custom_description:
        return custom_description

    location = _location(seller)
    city, state = location['city'], location['state']
    description = f"Shop from {seller.get('businessName') or 'Local Seller'}"

    if city:
        description += f" in {city}"
        if state and state != city:
            description += f", {state}"

    categories = [category for category in (categories or ()) if category]
    if categories:
        description += f". Find {', '.join(categories[:3])}"

    description += ' at best prices. Local delivery available. Order now via WhatsApp!'
    return _truncate(description, DESCRIPTION_LIMIT)


def auto_generate(seller, categories=()):
    """All SEO fields at once. Existing title/description are kept."""
    address = seller.get('address') or {}
    return {
        'seoMetaTitle': generate_title(seller, seller.get('seoMetaTitle')),
        'seoMetaDescription': generate_description(seller, categories, seller.get('seoMetaDescription')),
        'seoKeywords': generate_keywords(seller, categories),
        'seoLocalArea': seller.get('seoLocalArea') or address.get('city') or '',
    }
