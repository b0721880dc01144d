"""
Integration tests for out-of-stock availability requests.
"""

from datetime import timedelta
from urllib.parse import unquote

from selllocal.models import AvailabilityRequest
from selllocal.utils.dates import utcnow


def ask(client, headers, seller, product):
    return client.post('/api/availability/request', json={
        'productId': product.id, 'sellerAlias': seller.alias,
    }, headers=headers)


class TestRequestAvailability:

    def test_request_notifies_seller(self, client, seller, buyer, make_product, auth_headers):
        product = make_product(seller, name='Mango Pickle', stock=0)

        response = ask(client, auth_headers(buyer), seller, product)

        assert response.status_code == 200
        body = response.get_json()
        assert body['message'] == 'Availability request sent to seller'
        assert body['request']['status'] == 'notified'
        assert body['request']['productName'] == 'Mango Pickle'
        assert body['request']['buyerPhone'] == buyer.phone
        text = unquote(body['whatsappUrl'])
        assert 'Product: Mango Pickle' in text
        assert f'Buyer: {buyer.name}' in text

    def test_buyer_without_phone(self, client, seller, make_buyer, product, auth_headers):
        anonymous = make_buyer(seller, phone=None)

        response = ask(client, auth_headers(anonymous), seller, product)

        assert response.get_json()['request']['buyerPhone'] == 'Not provided'

    def test_duplicate_within_window(self, client, seller, buyer, product, auth_headers):
        ask(client, auth_headers(buyer), seller, product)

        response = ask(client, auth_headers(buyer), seller, product)

        assert response.status_code == 400
        assert response.get_json()['message'] == 'You have already requested this product recently'

    def test_old_request_does_not_block(self, client, session, seller, buyer, product, auth_headers):
        session.add(AvailabilityRequest(
            product_id=product.id, seller_id=seller.id, buyer_id=buyer.id,
            buyer_name=buyer.name, buyer_phone=buyer.phone, product_name=product.name,
            status='notified', created_at=utcnow() - timedelta(hours=30),
        ))
        session.commit()

        response = ask(client, auth_headers(buyer), seller, product)

        assert response.status_code == 200

    def test_missing_fields(self, client, buyer, auth_headers):
        response = client.post('/api/availability/request', json={'productId': 1}, headers=auth_headers(buyer))

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Product ID and seller alias are required'

    def test_unknown_seller(self, client, buyer, product, auth_headers):
        response = client.post('/api/availability/request', json={
            'productId': product.id, 'sellerAlias': 'nobody',
        }, headers=auth_headers(buyer))

        assert response.status_code == 404
        assert response.get_json()['message'] == 'Seller not found'


class TestSellerRequests:

    def test_list_and_fulfill(self, client, seller, buyer, product, auth_headers):
        ask(client, auth_headers(buyer), seller, product)

        listing = client.get('/api/availability/seller', headers=auth_headers(seller)).get_json()
        assert len(listing) == 1
        request_id = listing[0]['id']

        response = client.patch(f'/api/availability/{request_id}/fulfill', headers=auth_headers(seller))

        body = response.get_json()
        assert body['message'] == 'Request marked as fulfilled'
        assert body['request']['status'] == 'fulfilled'
        assert body['request']['fulfilledAt'] is not None

    def test_other_seller_cannot_fulfill(self, client, seller, make_seller, buyer, product, auth_headers):
        created = ask(client, auth_headers(buyer), seller, product).get_json()['request']

        response = client.patch(f"/api/availability/{created['id']}/fulfill", headers=auth_headers(make_seller()))

        assert response.status_code == 404
        assert response.get_json()['message'] == 'Request not found'
