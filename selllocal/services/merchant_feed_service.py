"""
Google Merchant Center product feed (RSS 2.0 with the g: namespace).

render_feed is pure so the XML can be checked without a database.
"""
import logging
import re
from xml.sax.saxutils import escape

from flask import current_app, request

from selllocal.exceptions import NotFoundError
from selllocal.models import Product, User, UserRole

logger = logging.getLogger(__name__)

GOOGLE_NS = 'http://base.google.com/ns/1.0'
MAX_DESCRIPTION = 5000
MAX_ADDITIONAL_IMAGES = 10
LOW_STOCK = 10

_QUOTE_ENTITIES = {'"': '&quot;', "'": '&apos;'}
_ILLEGAL_XML_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f]')

FEED_INSTRUCTIONS = {
    'step1': 'Copy the feed URL above',
    'step2': 'Go to Google Merchant Center (merchants.google.com)',
    'step3': 'Navigate to Products > Feeds',
    'step4': 'Click "+" to add a new feed',
    'step5': 'Select "Scheduled fetch"',
    'step6': 'Paste your feed URL and set fetch frequency (recommended: daily)',
    'step7': 'Save and wait for Google to process your feed',
}

FEED_REQUIREMENTS = {
    'validImages': 'Products must have HTTP/HTTPS image URLs (not base64) to appear in feed',
    'stock': 'Products must have stock > 0 to appear in feed',
    'active': 'Only active products are included',
}


def escape_xml(value):
    """Escape text for the feed, dropping control characters XML 1.0 forbids."""
    if value is None:
        return ''
    return escape(_ILLEGAL_XML_CHARS.sub('', str(value)), _QUOTE_ENTITIES)


def http_images(product):
    return [url for url in (product.images or []) if url and url.startswith(('http://', 'https://'))]


def _availability(stock):
    return 'limited availability' if stock < LOW_STOCK else 'in stock'


def _description(product):
    text = product.description or product.name
    if len(text) > MAX_DESCRIPTION:
        text = text[:MAX_DESCRIPTION - 3] + '...'
    return text


def _item(product, seller, store_url):
    images = http_images(product)
    lines = [
        '    <item>',
        f'      <g:id>{escape_xml(product.id)}</g:id>',
        f'      <g:title>{escape_xml(product.name)}</g:title>',
        f'      <g:description>{escape_xml(_description(product))}</g:description>',
        f'      <g:link>{escape_xml(f"{store_url}/product/{product.slug}")}</g:link>',
        f'      <g:image_link>{escape_xml(images[0])}</g:image_link>',
    ]
    for image in images[1:1 + MAX_ADDITIONAL_IMAGES]:
        lines.append(f'      <g:additional_image_link>{escape_xml(image)}</g:additional_image_link>')

    lines += [
        f'      <g:price>{float(product.base_price):.2f} INR</g:price>',
        f'      <g:availability>{_availability(product.stock)}</g:availability>',
        '      <g:condition>new</g:condition>',
        f'      <g:brand>{escape_xml(seller.business_name or "Generic")}</g:brand>',
        f'      <g:product_type>{escape_xml(product.category)}</g:product_type>',
    ]
    if product.category:
        lines.append(f'      <g:google_product_category>{escape_xml(product.category)}</g:google_product_category>')
    if product.minimum_order_quantity > 1:
        lines.append(f'      <g:custom_label_0>Min Qty: {product.minimum_order_quantity}</g:custom_label_0>')
    lines.append(f'      <g:quantity>{product.stock}</g:quantity>')
    if product.unit and product.unit != 'piece':
        lines.append(f'      <g:unit_pricing_measure>1 {escape_xml(product.unit)}</g:unit_pricing_measure>')
    lines.append('    </item>')
    return lines


def render_feed(seller, products, frontend_url):
    """Build the feed document. Products without an HTTP(S) image are skipped."""
    business = escape_xml(seller.business_name or 'Store')
    store_url = f"{frontend_url}/store/{seller.alias}"
    lines = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        f'<rss version="2.0" xmlns:g="{GOOGLE_NS}">',
        '  <channel>',
        f'    <title>{business} - Google Merchant Feed</title>',
        f'    <link>{escape_xml(store_url)}</link>',
        f'    <description>Product feed for {business}</description>',
    ]
    for product in products:
        if product.stock <= 0 or not http_images(product):
            continue
        lines.extend(_item(product, seller, store_url))
    lines += ['  </channel>', '</rss>']
    return '\n'.join(lines)


def error_document(message):
    return f'<?xml version="1.0" encoding="UTF-8"?>\n<error>{escape_xml(message)}</error>'


def generate_feed(session, seller_id):
    seller = session.get(User, seller_id)
    if seller is None or seller.role != UserRole.SELLER or not seller.is_active or not seller.is_approved:
        raise NotFoundError('Seller not found or not active')

    products = session.query(Product).filter(
        Product.seller_id == seller.id,
        Product.is_active == True,  # noqa: E712
        Product.stock > 0
    ).order_by(Product.created_at.desc(), Product.id.desc()).all()

    return render_feed(seller, products, current_app.config['FRONTEND_URL'])


def feed_url(seller_id):
    """Public feed address, on API_URL when configured, else this host."""
    base = (current_app.config.get('API_URL') or request.host_url).rstrip('/')
    return f"{base}/api/merchant-feed/{seller_id}/feed.xml"


def _feed_candidates(session, seller_id):
    return session.query(Product).filter(
        Product.seller_id == seller_id,
        Product.is_active == True,  # noqa: E712
        Product.stock > 0
    )


def get_feed_url(session, seller):
    return {
        'feedUrl': feed_url(seller.id),
        'productCount': _feed_candidates(session, seller.id).count(),
        'instructions': FEED_INSTRUCTIONS,
    }


def get_feed_info(session, seller):
    total = session.query(Product).filter(
        Product.seller_id == seller.id,
        Product.is_active == True  # noqa: E712
    ).count()
    in_stock = _feed_candidates(session, seller.id).all()
    with_images = sum(1 for product in in_stock if http_images(product))

    return {
        'feedUrl': feed_url(seller.id),
        'statistics': {
            'totalProducts': total,
            'productsWithStock': len(in_stock),
            'productsWithImages': with_images,
            'productsInFeed': with_images,
        },
        'requirements': FEED_REQUIREMENTS,
    }
