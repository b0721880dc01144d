"""Slug helpers for product URLs and seller aliases."""
import re
import unicodedata


def slugify(text: str) -> str:
    """Generate URL-safe slug from a product or business name."""
    # Normalize unicode characters
    slug = unicodedata.normalize('NFKD', text or '')
    slug = slug.encode('ascii', 'ignore').decode('ascii')

    # Convert to lowercase and replace spaces/special chars with hyphens
    slug = slug.lower()
    slug = re.sub(r"[*+~.()'\"!:@]", '', slug)
    slug = re.sub(r'[^a-z0-9]+', '-', slug)
    slug = slug.strip('-')

    # Limit length
    slug = slug[:80].rstrip('-')

    return slug or 'product'


def create_unique_slug(db_session, seller_id: int, name: str, exclude_product_id=None) -> str:
    """
    Generate a product slug that is unique within one seller's catalogue.

    The product being updated is excluded so renaming to the same name keeps
    its slug.
    """
    from selllocal.models import Product

    base_slug = slugify(name)
    slug = base_slug
    counter = 0
    while True:
        query = db_session.query(Product.id).filter(
            Product.seller_id == seller_id,
            Product.slug == slug
        )
        if exclude_product_id is not None:
            query = query.filter(Product.id != exclude_product_id)
        if not query.first():
            return slug
        counter += 1
        slug = f"{base_slug}-{counter}"


def create_unique_alias(db_session, business_name: str) -> str:
    """Generate a store alias that no other user holds."""
    from selllocal.models import User

    base_alias = slugify(business_name)
    alias = base_alias
    counter = 0
    while db_session.query(User.id).filter(User.alias == alias).first():
        counter += 1
        alias = f"{base_alias}-{counter}"
    return alias
