"""
Integration tests for buyer carts and WhatsApp checkout.
"""

from datetime import timedelta
from decimal import Decimal
from urllib.parse import unquote

from selllocal.models import AnalyticsEvent, Cart, EventType, Promotion
from selllocal.utils.dates import utcnow

TIERS = [
    {'min_quantity': 5, 'max_quantity': 9, 'price': Decimal('90')},
    {'min_quantity': 10, 'price': Decimal('80')},
]


def add_to_cart(client, headers, seller, product, quantity):
    return client.post('/api/cart/add', json={
        'productId': product.id,
        'quantity': quantity,
        'sellerAlias': seller.alias,
    }, headers=headers)


class TestAddToCart:

    def test_add_records_tier_price(self, client, seller, buyer, make_product, auth_headers):
        product = make_product(seller, tiers=TIERS)

        response = add_to_cart(client, auth_headers(buyer), seller, product, 5)

        assert response.status_code == 200
        body = response.get_json()
        assert body['message'] == 'Cart updated'
        assert body['cart']['items'] == [{'product': product.id, 'quantity': 5, 'priceAtAdd': 90.0}]

    def test_adding_again_sets_quantity(self, client, seller, buyer, make_product, auth_headers):
        product = make_product(seller, tiers=TIERS)
        add_to_cart(client, auth_headers(buyer), seller, product, 5)

        response = add_to_cart(client, auth_headers(buyer), seller, product, 12)

        items = response.get_json()['cart']['items']
        assert items == [{'product': product.id, 'quantity': 12, 'priceAtAdd': 80.0}]

    def test_below_minimum_quantity(self, client, seller, buyer, make_product, auth_headers):
        product = make_product(seller, minimum_order_quantity=3)

        response = add_to_cart(client, auth_headers(buyer), seller, product, 2)

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Minimum order quantity is 3'

    def test_inactive_product(self, client, seller, buyer, make_product, auth_headers):
        product = make_product(seller, is_active=False)

        response = add_to_cart(client, auth_headers(buyer), seller, product, 1)

        assert response.status_code == 404
        assert response.get_json()['message'] == 'Product not found'

    def test_product_from_another_store(self, client, make_seller, buyer, seller, make_product, auth_headers):
        other = make_seller()
        product = make_product(other)

        response = add_to_cart(client, auth_headers(buyer), seller, product, 1)

        assert response.status_code == 404

    def test_requires_login(self, client, seller, product):
        response = client.post('/api/cart/add', json={'productId': product.id, 'quantity': 1,
                                                      'sellerAlias': seller.alias})
        assert response.status_code == 401


class TestViewCart:

    def test_empty_cart(self, client, seller, buyer, auth_headers):
        response = client.get(f'/api/cart/{seller.alias}', headers=auth_headers(buyer))

        assert response.get_json() == {'items': [], 'total': 0}

    def test_live_prices_with_promotion(self, client, session, seller, buyer, make_product, auth_headers):
        product = make_product(seller, tiers=TIERS)
        add_to_cart(client, auth_headers(buyer), seller, product, 5)
        session.add(Promotion(
            seller_id=seller.id, name='Weekend', discount_type='percentage',
            discount_value=Decimal('10'), apply_to_all=True, is_active=True,
            start_date=utcnow() - timedelta(days=1), end_date=utcnow() + timedelta(days=1),
        ))
        session.commit()

        response = client.get(f'/api/cart/{seller.alias}', headers=auth_headers(buyer))

        body = response.get_json()
        (item,) = body['items']
        assert item['unitPrice'] == 81.0
        assert item['originalPrice'] == 90.0
        assert item['lineTotal'] == 405.0
        assert body['total'] == 405.0

    def test_inactive_products_are_skipped(self, client, session, seller, buyer, make_product, auth_headers):
        kept = make_product(seller, name='Kept')
        hidden = make_product(seller, name='Hidden')
        add_to_cart(client, auth_headers(buyer), seller, kept, 2)
        add_to_cart(client, auth_headers(buyer), seller, hidden, 1)
        hidden.is_active = False
        session.commit()

        response = client.get(f'/api/cart/{seller.alias}', headers=auth_headers(buyer))

        body = response.get_json()
        assert [item['product']['name'] for item in body['items']] == ['Kept']
        assert body['total'] == 200.0


class TestUpdateAndRemove:

    def test_update_quantity(self, client, seller, buyer, make_product, auth_headers):
        product = make_product(seller, tiers=TIERS)
        add_to_cart(client, auth_headers(buyer), seller, product, 1)

        response = client.put('/api/cart/update', json={
            'productId': product.id, 'quantity': 10, 'sellerAlias': seller.alias,
        }, headers=auth_headers(buyer))

        assert response.get_json()['cart']['items'][0]['priceAtAdd'] == 80.0

    def test_update_without_cart(self, client, seller, buyer, product, auth_headers):
        response = client.put('/api/cart/update', json={
            'productId': product.id, 'quantity': 2, 'sellerAlias': seller.alias,
        }, headers=auth_headers(buyer))

        assert response.status_code == 404
        assert response.get_json()['message'] == 'Cart not found'

    def test_update_item_not_in_cart(self, client, seller, buyer, make_product, auth_headers):
        in_cart = make_product(seller)
        other = make_product(seller)
        add_to_cart(client, auth_headers(buyer), seller, in_cart, 1)

        response = client.put('/api/cart/update', json={
            'productId': other.id, 'quantity': 2, 'sellerAlias': seller.alias,
        }, headers=auth_headers(buyer))

        assert response.status_code == 404
        assert response.get_json()['message'] == 'Item not in cart'

    def test_remove(self, client, seller, buyer, product, auth_headers):
        add_to_cart(client, auth_headers(buyer), seller, product, 1)

        response = client.delete(f'/api/cart/remove/{seller.alias}/{product.id}', headers=auth_headers(buyer))

        assert response.get_json() == {'message': 'Item removed from cart'}
        view = client.get(f'/api/cart/{seller.alias}', headers=auth_headers(buyer))
        assert view.get_json()['items'] == []


class TestCheckout:

    def test_checkout_builds_whatsapp_order(self, client, session, seller, buyer, make_product, auth_headers):
        product = make_product(seller, name='Chocolate Cake', tiers=TIERS)
        add_to_cart(client, auth_headers(buyer), seller, product, 10)

        response = client.post(f'/api/cart/checkout/{seller.alias}', json={'notes': 'Deliver after 6pm'},
                               headers=auth_headers(buyer))

        assert response.status_code == 200
        body = response.get_json()
        assert body['message'] == 'Redirecting to WhatsApp...'
        assert body['orderSummary'] == {'items': 1, 'total': 800.0}

        url = body['whatsappUrl']
        assert url.startswith(f"https://wa.me/{seller.phone.lstrip('+')}?text=")
        text = unquote(url.split('?text=', 1)[1])
        assert f'New Order from {buyer.name}' in text
        assert 'Qty: 10 × ₹80.00 = ₹800.00' in text
        assert '*Total: ₹800.00*' in text
        assert '📝 Notes: Deliver after 6pm' in text
        assert text.endswith(f'_Sent via {seller.business_name}_')

    def test_checkout_clears_cart_and_records_event(self, client, session, seller, buyer, product, auth_headers):
        add_to_cart(client, auth_headers(buyer), seller, product, 2)

        client.post(f'/api/cart/checkout/{seller.alias}', json={}, headers=auth_headers(buyer))

        assert session.query(Cart).filter_by(buyer_id=buyer.id).count() == 0
        event = session.query(AnalyticsEvent).filter_by(event_type=EventType.CHECKOUT_COMPLETED).one()
        assert event.seller_id == seller.id
        assert event.session_id == f'buyer_{buyer.id}'
        assert event.event_metadata == {'items': 1, 'total': 200.0}

    def test_empty_cart(self, client, seller, buyer, auth_headers):
        response = client.post(f'/api/cart/checkout/{seller.alias}', json={}, headers=auth_headers(buyer))

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Cart is empty'

    def test_only_inactive_lines(self, client, session, seller, buyer, product, auth_headers):
        add_to_cart(client, auth_headers(buyer), seller, product, 1)
        product.is_active = False
        session.commit()

        response = client.post(f'/api/cart/checkout/{seller.alias}', json={}, headers=auth_headers(buyer))

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Cart is empty'
