"""
Buyer carts and WhatsApp checkout.

A cart belongs to one buyer and one seller. Stored lines keep price_at_add
for reference only; the view and checkout always re-resolve live prices
(volume tier plus the active promotion).
"""
import logging
from decimal import Decimal

from selllocal.blueprints.metrics import orders_checked_out_total
from selllocal.exceptions import BusinessLogicError, NotFoundError
from selllocal.models import Cart, CartItem, EventType, Product, User, UserRole
from selllocal.services import analytics_service, pricing_service
from selllocal.utils.money import money_json, to_money
from selllocal.utils.whatsapp import build_whatsapp_url

logger = logging.getLogger(__name__)

RULE = '─' * 30


def _find_seller(session, alias, active_only=False):
    query = session.query(User).filter(User.alias == alias, User.role == UserRole.SELLER)
    if active_only:
        query = query.filter(User.is_active == True)  # noqa: E712
    seller = query.first()
    if seller is None:
        raise NotFoundError('Store not found')
    return seller


def _find_cart(session, buyer_id, seller_id):
    return session.query(Cart).filter(
        Cart.buyer_id == buyer_id,
        Cart.seller_id == seller_id
    ).first()


def _check_minimum(product, quantity):
    if quantity < product.minimum_order_quantity:
        raise BusinessLogicError(f'Minimum order quantity is {product.minimum_order_quantity}')


def _priced_lines(session, cart):
    """Live-priced lines for active products in a cart."""
    promotions = pricing_service.active_promotions_for_seller(session, cart.seller_id)
    lines = []
    for item in cart.items:
        product = item.product
        if product is None or not product.is_active:
            continue
        quote = pricing_service.resolve_unit_price(product, item.quantity, promotions)
        lines.append((item, product, quote, to_money(quote.unit_price * item.quantity)))
    return lines


def view_cart(session, buyer, seller_alias):
    seller = _find_seller(session, seller_alias)
    cart = _find_cart(session, buyer.id, seller.id)
    if cart is None:
        return {'items': [], 'total': 0}

    items = []
    total = Decimal('0.00')
    for item, product, quote, line_total in _priced_lines(session, cart):
        total += line_total
        items.append({
            'product': product.to_dict(),
            'quantity': item.quantity,
            'unitPrice': money_json(quote.unit_price),
            'originalPrice': money_json(quote.tier_price),
            'lineTotal': money_json(line_total),
        })
    return {'items': items, 'total': money_json(total)}


def add_item(session, buyer, data):
    """Add a product or set the quantity of an existing line."""
    seller = _find_seller(session, data.seller_alias, active_only=True)
    product = session.query(Product).filter(
        Product.id == data.product_id,
        Product.seller_id == seller.id,
        Product.is_active == True  # noqa: E712
    ).first()
    if product is None:
        raise NotFoundError('Product not found')
    _check_minimum(product, data.quantity)

    cart = _find_cart(session, buyer.id, seller.id)
    if cart is None:
        cart = Cart(buyer_id=buyer.id, seller_id=seller.id)
        session.add(cart)

    price = pricing_service.resolve_tier_price(product.base_price, product.price_tiers, data.quantity)
    item = cart.find_item(product.id)
    if item is None:
        cart.items.append(CartItem(product_id=product.id, quantity=data.quantity, price_at_add=price))
    else:
        item.quantity = data.quantity
        item.price_at_add = price

    session.commit()
    return {'message': 'Cart updated', 'cart': cart.to_dict()}


def update_item(session, buyer, data):
    seller = _find_seller(session, data.seller_alias)
    cart = _find_cart(session, buyer.id, seller.id)
    if cart is None:
        raise NotFoundError('Cart not found')

    product = session.get(Product, data.product_id)
    if product is None:
        raise NotFoundError('Product not found')
    _check_minimum(product, data.quantity)

    item = cart.find_item(product.id)
    if item is None:
        raise NotFoundError('Item not in cart')
    item.quantity = data.quantity
    item.price_at_add = pricing_service.resolve_tier_price(product.base_price, product.price_tiers, data.quantity)

    session.commit()
    return {'message': 'Cart updated', 'cart': cart.to_dict()}


def remove_item(session, buyer, seller_alias, product_id):
    seller = _find_seller(session, seller_alias)
    cart = _find_cart(session, buyer.id, seller.id)
    if cart is None:
        raise NotFoundError('Cart not found')

    item = cart.find_item(product_id)
    if item is not None:
        cart.items.remove(item)
        session.commit()
    return {'message': 'Item removed from cart'}


def build_order_message(buyer, seller, lines, total, notes=None):
    """Compose the WhatsApp order text sent to the seller."""
    parts = [f"🛒 *New Order from {buyer.name}*\n\n", f"📧 Email: {buyer.email}\n"]
    if buyer.phone:
        parts.append(f"📱 Phone: {buyer.phone}\n")
    parts.append(f"\n*Order Details:*\n{RULE}\n")

    for item, product, quote, line_total in lines:
        parts.append(f"\n📦 *{product.name}*\n")
        parts.append(f"   Qty: {item.quantity} × ₹{quote.unit_price:.2f} = ₹{line_total:.2f}\n")

    parts.append(f"\n{RULE}\n")
    parts.append(f"*Total: ₹{total:.2f}*\n\n")
    if notes:
        parts.append(f"📝 Notes: {notes}\n\n")
    parts.append(f"_Sent via {seller.business_name}_")
    return ''.join(parts)


def checkout(session, buyer, seller_alias, notes=None):
    """
    Turn the cart into a WhatsApp order link.

    The cart is deleted and a checkout_completed event recorded in the same
    transaction.
    """
    seller = _find_seller(session, seller_alias)
    cart = _find_cart(session, buyer.id, seller.id)
    if cart is None or not cart.items:
        raise BusinessLogicError('Cart is empty')

    lines = _priced_lines(session, cart)
    if not lines:
        raise BusinessLogicError('Cart is empty')
    total = sum((line_total for _, _, _, line_total in lines), Decimal('0.00'))

    message = build_order_message(buyer, seller, lines, total, notes)
    whatsapp_url = build_whatsapp_url(seller.phone, message)

    session.delete(cart)
    analytics_service.record_event(
        session, seller.id, EventType.CHECKOUT_COMPLETED,
        session_id=f'buyer_{buyer.id}',
        buyer_id=buyer.id,
        metadata={'items': len(lines), 'total': money_json(total)}
    )
    session.commit()

    orders_checked_out_total.inc()
    logger.info(f"[CHECKOUT] Buyer {buyer.id} checked out {len(lines)} item(s) from seller {seller.id}")

    return {
        'whatsappUrl': whatsapp_url,
        'message': 'Redirecting to WhatsApp...',
        'orderSummary': {'items': len(lines), 'total': money_json(total)},
    }
