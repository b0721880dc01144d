"""
Integration tests for the admin panel API.
"""

from datetime import timedelta
from urllib.parse import unquote

from selllocal.models import ConfigSetting
from selllocal.utils.dates import utcnow


class TestAccess:

    def test_contact_info_is_public(self, client):
        response = client.get('/api/admin/contact-info')

        assert response.get_json() == {'whatsapp': '+919999999999', 'email': 'support@selllocal.test'}

    def test_seller_is_refused(self, client, seller, auth_headers):
        response = client.get('/api/admin/sellers', headers=auth_headers(seller))

        assert response.status_code == 403
        assert response.get_json()['message'] == 'Access denied. Admin only.'


class TestSellerList:

    def test_lists_with_product_counts(self, client, admin, seller, make_product, auth_headers):
        make_product(seller)
        make_product(seller, is_active=False)

        response = client.get('/api/admin/sellers', headers=auth_headers(admin))

        body = response.get_json()
        (row,) = body['sellers']
        assert row['id'] == seller.id
        assert row['productCount'] == 2
        assert row['activeProductCount'] == 1
        assert body['pagination']['total'] == 1

    def test_status_filter_and_search(self, client, admin, make_seller, auth_headers):
        make_seller(business_name='Spice Corner')
        pending = make_seller(business_name='Tea Stall', is_approved=False)

        response = client.get('/api/admin/sellers?status=pending', headers=auth_headers(admin))
        assert [row['id'] for row in response.get_json()['sellers']] == [pending.id]

        response = client.get('/api/admin/sellers?search=spice', headers=auth_headers(admin))
        assert [row['businessName'] for row in response.get_json()['sellers']] == ['Spice Corner']


class TestStats:

    def test_stats_run_expiry_sweep(self, client, session, admin, make_seller, auth_headers):
        make_seller()
        make_seller(is_approved=False)
        expired = make_seller(trial_ends_at=utcnow() - timedelta(days=2))
        make_seller(trial_ends_at=utcnow() + timedelta(days=3))

        response = client.get('/api/admin/stats', headers=auth_headers(admin))

        assert response.get_json() == {
            'totalSellers': 4,
            'pendingSellers': 1,
            'activeSellers': 2,
            'suspendedSellers': 1,
            'totalBuyers': 0,
            'totalProducts': 0,
            'trialExpiringSoon': 1,
        }
        session.refresh(expired)
        assert expired.is_suspended is True
        assert expired.is_active is False


class TestApproval:

    def test_requires_verified_phone(self, client, admin, make_seller, auth_headers):
        pending = make_seller(is_approved=False, phone_verified=False)

        response = client.patch(f'/api/admin/sellers/{pending.id}/approve', headers=auth_headers(admin))

        assert response.status_code == 400
        assert response.get_json()['message'] == (
            'Seller WhatsApp number is not verified yet. Send verification link first.'
        )

    def test_approve(self, client, admin, make_seller, auth_headers):
        pending = make_seller(is_approved=False)

        response = client.patch(f'/api/admin/sellers/{pending.id}/approve', headers=auth_headers(admin))

        body = response.get_json()
        assert body['message'] == 'Seller approved successfully'
        assert body['seller']['isApproved'] is True
        assert body['notificationUrl'].startswith(f"https://wa.me/{pending.phone.lstrip('+')}?text=")
        assert 'has been approved' in unquote(body['notificationUrl'])

    def test_unknown_seller(self, client, admin, auth_headers):
        response = client.patch('/api/admin/sellers/999/approve', headers=auth_headers(admin))

        assert response.status_code == 404
        assert response.get_json()['message'] == 'Seller not found'

    def test_verification_round_trip(self, client, session, admin, make_seller, auth_headers):
        """The link sent by the admin verifies the number, which unlocks approval."""
        pending = make_seller(is_approved=False, phone_verified=False)

        response = client.post(f'/api/admin/sellers/{pending.id}/send-phone-verification',
                               headers=auth_headers(admin))
        body = response.get_json()
        assert body['verifyUrl'].startswith('http://shop.test/verify-phone?token=')
        token = body['verifyUrl'].split('token=', 1)[1]

        client.get(f'/api/auth/verify-phone?token={token}')
        response = client.patch(f'/api/admin/sellers/{pending.id}/approve', headers=auth_headers(admin))

        assert response.status_code == 200
        session.refresh(pending)
        assert pending.phone_verified is True
        assert pending.is_approved is True


class TestLifecycle:

    def test_toggle_reactivates_suspended(self, client, admin, make_seller, auth_headers):
        suspended = make_seller(is_active=False, is_suspended=True)

        response = client.patch(f'/api/admin/sellers/{suspended.id}/toggle', headers=auth_headers(admin))

        assert response.get_json() == {'message': 'Seller activated', 'isActive': True, 'isSuspended': False}

    def test_toggle_deactivates(self, client, admin, seller, auth_headers):
        response = client.patch(f'/api/admin/sellers/{seller.id}/toggle', headers=auth_headers(admin))

        assert response.get_json()['message'] == 'Seller deactivated'

    def test_extend_active_seller_from_current_end(self, client, session, admin, make_seller, auth_headers):
        end = utcnow().replace(microsecond=0) + timedelta(days=10)
        target = make_seller(trial_ends_at=end)

        response = client.patch(f'/api/admin/sellers/{target.id}/extend-validity', json={'months': 2},
                                headers=auth_headers(admin))

        assert response.get_json()['message'] == 'Account extended by 2 months'
        session.refresh(target)
        assert target.trial_ends_at > end + timedelta(days=58)

    def test_extend_suspended_seller_from_now(self, client, session, admin, make_seller, auth_headers):
        target = make_seller(
            trial_ends_at=utcnow() - timedelta(days=90), is_suspended=True, is_active=False
        )

        response = client.patch(f'/api/admin/sellers/{target.id}/extend-validity', json={'months': 1},
                                headers=auth_headers(admin))

        assert response.get_json()['message'] == 'Account extended by 1 month'
        session.refresh(target)
        assert target.is_suspended is False
        assert target.is_active is True
        assert target.trial_ends_at > utcnow() + timedelta(days=27)

    def test_extend_rejects_bad_months(self, client, admin, seller, auth_headers):
        for payload in ({'months': 0}, {'months': 'abc'}, {}):
            response = client.patch(f'/api/admin/sellers/{seller.id}/extend-validity', json=payload,
                                    headers=auth_headers(admin))
            assert response.status_code == 400
            assert response.get_json()['message'] == 'Please provide valid number of months (minimum 1)'


class TestBroadcastSwitches:

    def test_global_switch(self, client, session, admin, auth_headers):
        headers = auth_headers(admin)
        assert client.get('/api/admin/config/broadcasts-enabled', headers=headers).get_json() == {'enabled': True}

        response = client.put('/api/admin/config/broadcasts-enabled', json={'enabled': False}, headers=headers)

        assert response.get_json()['enabled'] is False
        assert ConfigSetting.get_value(session, 'broadcasts_enabled') is False
        assert client.get('/api/admin/config/broadcasts-enabled', headers=headers).get_json() == {'enabled': False}

    def test_global_switch_validation(self, client, admin, auth_headers):
        headers = auth_headers(admin)

        response = client.put('/api/admin/config/broadcasts-enabled', json={}, headers=headers)
        assert response.get_json()['message'] == 'enabled field is required'

        response = client.put('/api/admin/config/broadcasts-enabled', json={'enabled': 'yes'}, headers=headers)
        assert response.get_json()['message'] == 'enabled must be a boolean'

    def test_seller_switch(self, client, admin, seller, auth_headers):
        headers = auth_headers(admin)

        response = client.put(f'/api/admin/sellers/{seller.id}/broadcasts-enabled', json={'enabled': False},
                              headers=headers)
        assert response.get_json()['seller']['broadcastsEnabled'] is False

        response = client.get(f'/api/admin/sellers/{seller.id}/broadcasts-enabled', headers=headers)
        assert response.get_json()['broadcastsEnabled'] is False

    def test_seller_switch_requires_boolean(self, client, admin, seller, auth_headers):
        response = client.put(f'/api/admin/sellers/{seller.id}/broadcasts-enabled', json={},
                              headers=auth_headers(admin))

        assert response.status_code == 400
        assert response.get_json()['message'] == 'enabled must be a boolean'
