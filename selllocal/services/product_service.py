"""
Catalogue service: storefront listings and seller product management.

Storefront prices shown with a promotion are computed on base_price; the
tiered unit price only comes into play in the cart.
"""
import logging

from sqlalchemy import String, cast, or_

from selllocal.exceptions import BusinessLogicError, NotFoundError
from selllocal.models import Product, User, UserRole
from selllocal.schemas.product import MAX_IMAGES
from selllocal.services import pricing_service, upload_service
from selllocal.services.cache_service import get_category_cache
from selllocal.utils.pagination import pagination_dict, parse_pagination
from selllocal.utils.slugify import create_unique_slug

logger = logging.getLogger(__name__)

_SORTS = {
    'price_asc': (Product.base_price.asc(),),
    'price_desc': (Product.base_price.desc(),),
    'name_asc': (Product.name.asc(),),
    'name_desc': (Product.name.desc(),),
    'newest': (Product.created_at.desc(), Product.id.desc()),
}


def _order_by(sort):
    return _SORTS.get(sort, _SORTS['newest'])


def invalidate_categories_cache(seller_id):
    """Drop the cached category lists for a seller's storefront."""
    get_category_cache().invalidate(seller_id)


def _load_categories(session, seller_id, active_only):
    query = session.query(Product.category).filter(Product.seller_id == seller_id)
    if active_only:
        query = query.filter(Product.is_active == True)  # noqa: E712
    return [row[0] for row in query.distinct().order_by(Product.category).all()]


def get_categories(session, seller_id, active_only=True):
    """Distinct product categories, cached per seller."""
    return get_category_cache().fetch(
        seller_id, 'active' if active_only else 'all',
        lambda: _load_categories(session, seller_id, active_only)
    )


def get_storefront_seller(session, alias):
    """Approved, active seller behind a storefront alias."""
    seller = session.query(User).filter(
        User.alias == alias,
        User.role == UserRole.SELLER,
        User.is_active == True,  # noqa: E712
        User.is_approved == True  # noqa: E712
    ).first()
    if seller is None:
        raise NotFoundError('Store not found')
    return seller


def storefront_product_dict(product, promotions):
    data = product.to_dict()
    data.update(pricing_service.storefront_promotion_fields(product, promotions))
    return data


def list_store_products(session, alias, args):
    """Public storefront listing with search, category filter, sort and paging."""
    seller = get_storefront_seller(session, alias)
    page, limit, offset = parse_pagination(args)

    query = session.query(Product).filter(
        Product.seller_id == seller.id,
        Product.is_active == True  # noqa: E712
    )
    search = (args.get('search') or '').strip()
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(
            Product.name.ilike(pattern),
            Product.description.ilike(pattern),
            Product.category.ilike(pattern),
            cast(Product.tags, String).ilike(pattern)
        ))
    if args.get('category'):
        query = query.filter(Product.category == args.get('category'))

    total = query.count()
    products = query.order_by(*_order_by(args.get('sort'))).offset(offset).limit(limit).all()
    promotions = pricing_service.active_promotions_for_seller(session, seller.id)

    return {
        'products': [storefront_product_dict(product, promotions) for product in products],
        'pagination': pagination_dict(page, limit, total),
        'categories': get_categories(session, seller.id),
        'store': {
            'businessName': seller.business_name,
            'businessDescription': seller.business_description,
            'theme': seller.theme,
            'logo': seller.business_logo,
            'banner': seller.business_banner,
        },
    }


def get_store_product(session, alias, slug):
    seller = get_storefront_seller(session, alias)
    product = session.query(Product).filter(
        Product.seller_id == seller.id,
        Product.slug == slug,
        Product.is_active == True  # noqa: E712
    ).first()
    if product is None:
        raise NotFoundError('Product not found')

    promotions = pricing_service.active_promotions_for_seller(session, seller.id)
    return {
        'product': storefront_product_dict(product, promotions),
        'store': {
            'businessName': seller.business_name,
            'phone': seller.phone,
            'theme': seller.theme,
        },
    }


def list_seller_products(session, seller, args):
    """Seller dashboard listing, including inactive products."""
    page, limit, offset = parse_pagination(args)
    query = session.query(Product).filter(Product.seller_id == seller.id)

    search = (args.get('search') or '').strip()
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
    if args.get('category'):
        query = query.filter(Product.category == args.get('category'))
    if args.get('status') == 'active':
        query = query.filter(Product.is_active == True)  # noqa: E712
    elif args.get('status') == 'inactive':
        query = query.filter(Product.is_active == False)  # noqa: E712

    total = query.count()
    products = query.order_by(*_order_by(args.get('sort'))).offset(offset).limit(limit).all()
    return {
        'products': [product.to_dict() for product in products],
        'pagination': pagination_dict(page, limit, total),
        'categories': _load_categories(session, seller.id, active_only=False),
    }


def get_seller_product(session, seller, product_id):
    product = session.query(Product).filter(
        Product.id == product_id,
        Product.seller_id == seller.id
    ).first()
    if product is None:
        raise NotFoundError('Product not found')
    return product


def _store_images(files, seller_id):
    """Validate and upload product images; undo partial uploads on failure."""
    urls = []
    try:
        for file in files:
            url, _ = upload_service.store_validated_image(file, 'product', seller_id)
            urls.append(url)
    except Exception:
        upload_service.delete_stored_media(urls)
        raise
    return urls


def _video_for(seller_id, video_file, video_link):
    if video_file is not None and video_file.filename:
        return 'file', upload_service.store_video(video_file, seller_id)
    if video_link:
        return 'link', video_link
    return None


def create_product(session, seller, data, image_files=(), video_file=None):
    """
    Create a product from a validated ProductInput.

    Returns:
        The product dict.
    """
    image_files = [file for file in image_files if file and file.filename]
    if len(image_files) > MAX_IMAGES:
        raise BusinessLogicError(f'You can upload at most {MAX_IMAGES} images')

    product = Product(
        seller_id=seller.id,
        name=data.name,
        slug=create_unique_slug(session, seller.id, data.name),
        description=data.description,
        category=data.category,
        base_price=data.base_price,
        minimum_order_quantity=data.minimum_order_quantity,
        stock=data.stock,
        unit=data.unit,
        tags=data.tags,
        meta_title=data.meta_title or data.name,
        meta_description=data.meta_description or data.description[:160],
    )
    product.set_price_tiers([tier.as_tier() for tier in data.price_tiers])

    images = _store_images(image_files, seller.id)
    product.images = images
    video = _video_for(seller.id, video_file, data.video_link)
    if video:
        product.video_type, product.video_url = video

    session.add(product)
    try:
        session.commit()
    except Exception:
        session.rollback()
        upload_service.delete_stored_media(images)
        raise

    invalidate_categories_cache(seller.id)
    logger.info(f"[CATALOG] Product {product.id} '{product.name}' created by seller {seller.id}")
    return product.to_dict()


def update_product(session, seller, product_id, data, image_files=(), video_file=None):
    """Apply a partial ProductUpdate. New images are appended after removals."""
    product = get_seller_product(session, seller, product_id)
    updates = data.model_dump(exclude_unset=True)

    if data.name and data.name != product.name:
        product.slug = create_unique_slug(session, seller.id, data.name, exclude_product_id=product.id)

    for field in ('name', 'description', 'category', 'base_price', 'minimum_order_quantity',
                  'stock', 'unit', 'tags', 'meta_title', 'meta_description', 'is_active'):
        if field in updates and updates[field] is not None:
            setattr(product, field, updates[field])

    if data.price_tiers is not None:
        product.set_price_tiers([tier.as_tier() for tier in data.price_tiers])

    removed = [url for url in (product.images or []) if url in set(data.remove_images)]
    kept = [url for url in (product.images or []) if url not in set(data.remove_images)]

    image_files = [file for file in image_files if file and file.filename]
    if len(kept) + len(image_files) > MAX_IMAGES:
        raise BusinessLogicError(f'You can upload at most {MAX_IMAGES} images')
    new_images = _store_images(image_files, seller.id)
    product.images = kept + new_images

    previous_video = product.video_url if product.video_type == 'file' else None
    video = _video_for(seller.id, video_file, data.video_link)
    if video:
        product.video_type, product.video_url = video

    try:
        session.commit()
    except Exception:
        session.rollback()
        upload_service.delete_stored_media(new_images)
        raise

    discarded = list(removed)
    if video and previous_video and previous_video != product.video_url:
        discarded.append(previous_video)
    upload_service.delete_stored_media(discarded)

    invalidate_categories_cache(seller.id)
    return product.to_dict()


def toggle_product(session, seller, product_id):
    product = get_seller_product(session, seller, product_id)
    product.is_active = not product.is_active
    session.commit()
    invalidate_categories_cache(seller.id)
    state = 'enabled' if product.is_active else 'disabled'
    return {'message': f'Product {state}', 'isActive': product.is_active}


def delete_product(session, seller, product_id):
    product = get_seller_product(session, seller, product_id)
    media = list(product.images or [])
    if product.video_type == 'file':
        media.append(product.video_url)

    session.delete(product)
    session.commit()

    upload_service.delete_stored_media(media)
    invalidate_categories_cache(seller.id)
    logger.info(f"[CATALOG] Product {product_id} deleted by seller {seller.id}")
    return {'message': 'Product deleted successfully'}
