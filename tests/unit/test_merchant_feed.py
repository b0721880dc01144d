"""
Unit tests for the Google Merchant feed renderer.
"""

from decimal import Decimal
from types import SimpleNamespace
from xml.etree import ElementTree

from selllocal.services.merchant_feed_service import GOOGLE_NS, error_document, escape_xml, render_feed

SELLER = SimpleNamespace(business_name='Tom & Jerry\'s "Bakes"', alias='tom-bakes')


def make_product(product_id, **overrides):
    values = dict(
        id=product_id,
        name=f'Cake {product_id}',
        slug=f'cake-{product_id}',
        description='Soft <sponge> cake',
        category='Bakery',
        base_price=Decimal('250.00'),
        stock=25,
        minimum_order_quantity=1,
        unit='piece',
        images=['https://cdn.test/cake.jpg'],
    )
    values.update(overrides)
    return SimpleNamespace(**values)


def items(xml):
    root = ElementTree.fromstring(xml)
    return root.findall('./channel/item')


def field(item, name):
    return item.find(f'{{{GOOGLE_NS}}}{name}')


class TestEscape:

    def test_escapes_all_xml_entities(self):
        assert escape_xml('<a href="x">Tom & Jerry\'s</a>') == (
            '&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&apos;s&lt;/a&gt;'
        )

    def test_control_characters_are_dropped(self):
        assert escape_xml('Fresh\x00 bread\x0b\x1f\tdaily\r\n') == 'Fresh bread\tdaily\r\n'

    def test_none_is_empty(self):
        assert escape_xml(None) == ''


class TestRenderFeed:

    def test_channel_header(self):
        xml = render_feed(SELLER, [], 'http://shop.test')
        root = ElementTree.fromstring(xml)

        assert root.tag == 'rss'
        assert root.find('./channel/title').text == 'Tom & Jerry\'s "Bakes" - Google Merchant Feed'
        assert root.find('./channel/link').text == 'http://shop.test/store/tom-bakes'

    def test_item_fields(self):
        xml = render_feed(SELLER, [make_product(1)], 'http://shop.test')
        (item,) = items(xml)

        assert field(item, 'id').text == '1'
        assert field(item, 'description').text == 'Soft <sponge> cake'
        assert field(item, 'link').text == 'http://shop.test/store/tom-bakes/product/cake-1'
        assert field(item, 'image_link').text == 'https://cdn.test/cake.jpg'
        assert field(item, 'price').text == '250.00 INR'
        assert field(item, 'availability').text == 'in stock'
        assert field(item, 'condition').text == 'new'
        assert field(item, 'quantity').text == '25'
        assert field(item, 'custom_label_0') is None
        assert field(item, 'unit_pricing_measure') is None

    def test_products_without_http_images_or_stock_are_skipped(self):
        products = [
            make_product(1, images=['data:image/png;base64,AAAA']),
            make_product(2, images=[]),
            make_product(3, stock=0),
            make_product(4),
        ]
        xml = render_feed(SELLER, products, 'http://shop.test')

        assert [field(item, 'id').text for item in items(xml)] == ['4']

    def test_low_stock_and_extras(self):
        product = make_product(
            5, stock=3, minimum_order_quantity=6, unit='kg',
            images=['https://cdn.test/a.jpg', 'data:image/png;base64,AAAA', 'http://cdn.test/b.jpg']
        )
        (item,) = items(render_feed(SELLER, [product], 'http://shop.test'))

        assert field(item, 'availability').text == 'limited availability'
        assert field(item, 'custom_label_0').text == 'Min Qty: 6'
        assert field(item, 'unit_pricing_measure').text == '1 kg'
        extra = item.findall(f'{{{GOOGLE_NS}}}additional_image_link')
        assert [link.text for link in extra] == ['http://cdn.test/b.jpg']

    def test_control_characters_keep_feed_well_formed(self):
        product = make_product(7, name='Rusk\x08', description='Crisp\x0c tea rusk\x1b')
        (item,) = items(render_feed(SELLER, [product], 'http://shop.test'))

        assert field(item, 'title').text == 'Rusk'
        assert field(item, 'description').text == 'Crisp tea rusk'

    def test_long_description_is_truncated(self):
        product = make_product(6, description='x' * 6000)
        (item,) = items(render_feed(SELLER, [product], 'http://shop.test'))

        text = field(item, 'description').text
        assert len(text) == 5000
        assert text.endswith('...')


class TestErrorDocument:

    def test_error_document(self):
        root = ElementTree.fromstring(error_document('Seller not found or not active'))
        assert root.tag == 'error'
        assert root.text == 'Seller not found or not active'
