"""
Unit tests for phone, slug, date and WhatsApp helpers.
"""

from datetime import datetime
from urllib.parse import unquote

import pytest

from selllocal.utils.dates import add_months, format_long_date, parse_iso_datetime
from selllocal.utils.phone import normalize_indian_phone
from selllocal.utils.slugify import create_unique_alias, create_unique_slug, slugify
from selllocal.utils.whatsapp import (
    build_broadcast_message, build_whatsapp_url, format_phone_for_whatsapp, send_whatsapp_message
)


class TestPhone:
    """Indian phone normalization."""

    @pytest.mark.parametrize('raw', [
        '9876543210',
        '+91 98765 43210',
        '091-9876-543210',
        '919876543210',
    ])
    def test_normalizes_to_plus_91(self, raw):
        assert normalize_indian_phone(raw) == '+919876543210'

    def test_too_short(self):
        with pytest.raises(ValueError):
            normalize_indian_phone('12345')

    def test_empty(self):
        with pytest.raises(ValueError):
            normalize_indian_phone('')


class TestSlugify:
    """Slug generation."""

    def test_basic(self):
        assert slugify('Fresh Mango Pickle!') == 'fresh-mango-pickle'

    def test_accents_are_stripped(self):
        assert slugify('Crème Brûlée') == 'creme-brulee'

    def test_empty_falls_back(self):
        assert slugify('!!!') == 'product'

    def test_unique_slug_per_seller(self, session, seller, make_seller, make_product):
        make_product(seller, name='Plum Cake', slug='plum-cake')

        assert create_unique_slug(session, seller.id, 'Plum Cake') == 'plum-cake-1'

        other = make_seller()
        assert create_unique_slug(session, other.id, 'Plum Cake') == 'plum-cake'

    def test_unique_slug_excludes_self(self, session, seller, make_product):
        cake = make_product(seller, name='Plum Cake', slug='plum-cake')
        assert create_unique_slug(session, seller.id, 'Plum Cake', exclude_product_id=cake.id) == 'plum-cake'

    def test_unique_alias(self, session, make_seller):
        make_seller(alias='cake-house')
        assert create_unique_alias(session, 'Cake House') == 'cake-house-1'


class TestDates:
    """Calendar helpers."""

    def test_add_months_clamps_day(self):
        assert add_months(datetime(2026, 1, 31), 1) == datetime(2026, 2, 28)

    def test_add_months_crosses_year(self):
        assert add_months(datetime(2026, 11, 15), 3) == datetime(2027, 2, 15)

    def test_parse_iso_with_z(self):
        assert parse_iso_datetime('2026-03-01T10:00:00Z') == datetime(2026, 3, 1, 10, 0)

    def test_format_long_date(self):
        assert format_long_date(datetime(2026, 10, 19)) == '19 October 2026'


class TestWhatsapp:
    """wa.me links and message formatting."""

    def test_url_uses_digits_only(self):
        url = build_whatsapp_url('+91 98765-43210', 'Hi there!')
        assert url == 'https://wa.me/919876543210?text=Hi%20there!'

    def test_url_encodes_unicode(self):
        url = build_whatsapp_url('+919876543210', 'Total: ₹100')
        assert unquote(url.split('text=')[1]) == 'Total: ₹100'

    @pytest.mark.parametrize('raw,expected', [
        ('9876543210', '+919876543210'),
        ('919876543210', '+919876543210'),
        ('+1 415 555 0100', '+14155550100'),
        ('12345', None),
        ('', None),
    ])
    def test_format_phone(self, raw, expected):
        assert format_phone_for_whatsapp(raw) == expected

    def test_broadcast_footer_with_opt_out_link(self):
        message = build_broadcast_message('Sale!', 'http://shop.test/store/x', 'http://shop.test/unsubscribe?token=t')
        assert '🔗 View Store: http://shop.test/store/x' in message
        assert message.endswith('📱 To stop receiving updates, click: http://shop.test/unsubscribe?token=t')

    def test_broadcast_footer_without_link(self):
        message = build_broadcast_message('Sale!')
        assert message.endswith('Reply STOP to unsubscribe from updates.')

    def test_send_rejects_bad_number(self):
        result = send_whatsapp_message('123', 'hello')
        assert result['success'] is False
        assert result['error'] == 'Invalid phone number format'

    def test_send_returns_message_id(self):
        result = send_whatsapp_message('9876543210', 'hello')
        assert result['success'] is True
        assert result['to'] == '+919876543210'
        assert result['messageId'].startswith('msg_')
