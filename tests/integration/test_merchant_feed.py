"""
Integration tests for the public Google Merchant feed.
"""

from xml.etree import ElementTree

from selllocal.services.merchant_feed_service import GOOGLE_NS

IMAGE = 'https://cdn.test/products/cake.jpg'


def feed_ids(xml):
    root = ElementTree.fromstring(xml)
    return [item.find(f'{{{GOOGLE_NS}}}id').text for item in root.findall('./channel/item')]


class TestPublicFeed:

    def test_feed_lists_eligible_products(self, client, seller, make_product):
        listed = make_product(seller, images=[IMAGE])
        make_product(seller, images=['data:image/png;base64,AAAA'])
        make_product(seller, images=[IMAGE], stock=0)
        make_product(seller, images=[IMAGE], is_active=False)

        response = client.get(f'/api/merchant-feed/{seller.id}/feed.xml')

        assert response.status_code == 200
        assert response.mimetype == 'application/xml'
        assert response.headers['Cache-Control'] == 'public, max-age=3600'
        assert feed_ids(response.data) == [str(listed.id)]

        root = ElementTree.fromstring(response.data)
        link = root.find('./channel/item').find(f'{{{GOOGLE_NS}}}link').text
        assert link == f'http://shop.test/store/{seller.alias}/product/{listed.slug}'

    def test_unknown_seller(self, client):
        response = client.get('/api/merchant-feed/999/feed.xml')

        assert response.status_code == 404
        root = ElementTree.fromstring(response.data)
        assert root.tag == 'error'
        assert root.text == 'Seller not found or not active'

    def test_inactive_seller(self, client, make_seller):
        inactive = make_seller(is_active=False)

        response = client.get(f'/api/merchant-feed/{inactive.id}/feed.xml')

        assert response.status_code == 404


class TestSellerFeedEndpoints:

    def test_my_feed_url(self, client, seller, make_product, auth_headers):
        make_product(seller, images=[IMAGE])
        make_product(seller, stock=0)

        response = client.get('/api/merchant-feed/my-feed-url', headers=auth_headers(seller))

        body = response.get_json()
        assert body['feedUrl'] == f'http://api.test/api/merchant-feed/{seller.id}/feed.xml'
        assert body['productCount'] == 1
        assert body['instructions']['step1'] == 'Copy the feed URL above'

    def test_feed_info(self, client, seller, make_product, auth_headers):
        make_product(seller, images=[IMAGE])
        make_product(seller, images=[])
        make_product(seller, images=[IMAGE], stock=0)

        response = client.get('/api/merchant-feed/feed-info', headers=auth_headers(seller))

        assert response.get_json()['statistics'] == {
            'totalProducts': 3,
            'productsWithStock': 2,
            'productsWithImages': 1,
            'productsInFeed': 1,
        }
