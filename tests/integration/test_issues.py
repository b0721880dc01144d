"""
Integration tests for issue reporting and admin triage.
"""

from selllocal.models import IssueReport

SCREENSHOT = 'data:image/png;base64,iVBORw0KGgo='


def report(client, headers, **overrides):
    payload = {
        'title': 'Cart button broken',
        'description': 'Nothing happens when I tap add to cart',
        'pageUrl': 'http://shop.test/store/cakes',
        'screenshot': SCREENSHOT,
        'browserInfo': {'userAgent': 'pytest'},
    }
    payload.update(overrides)
    return client.post('/api/issues/report', json=payload, headers=headers)


class TestReport:

    def test_seller_reports(self, client, seller, auth_headers):
        response = report(client, auth_headers(seller))

        assert response.status_code == 201
        body = response.get_json()
        assert body['message'] == 'Issue reported successfully'
        assert body['issue']['status'] == 'pending'
        assert body['issue']['issueType'] == 'bug'
        assert body['issue']['reporterRole'] == 'seller'
        assert body['issue']['browserInfo'] == {'userAgent': 'pytest'}

    def test_missing_fields(self, client, buyer, auth_headers):
        response = report(client, auth_headers(buyer), screenshot=None)

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Missing required fields: title, description, pageUrl, screenshot'

    def test_admin_cannot_report(self, client, admin, auth_headers):
        response = report(client, auth_headers(admin))

        assert response.status_code == 403
        assert response.get_json()['message'] == 'Admins cannot report issues'

    def test_my_issues(self, client, seller, buyer, auth_headers):
        report(client, auth_headers(seller), title='Seller issue')
        report(client, auth_headers(buyer), title='Buyer issue')

        response = client.get('/api/issues/my-issues', headers=auth_headers(buyer))

        assert [issue['title'] for issue in response.get_json()['issues']] == ['Buyer issue']


class TestTriage:

    def test_admin_lists_and_counts(self, client, admin, seller, auth_headers):
        report(client, auth_headers(seller), title='First')
        report(client, auth_headers(seller), title='Second')

        response = client.get('/api/issues/?limit=1', headers=auth_headers(admin))

        body = response.get_json()
        assert [issue['title'] for issue in body['issues']] == ['Second']
        assert body['total'] == 2
        assert body['totalPages'] == 2

        stats = client.get('/api/issues/stats', headers=auth_headers(admin)).get_json()
        assert stats == {'total': 2, 'pending': 2, 'byStatus': {'pending': 2}}

    def test_non_admin_cannot_list(self, client, seller, auth_headers):
        response = client.get('/api/issues/', headers=auth_headers(seller))

        assert response.status_code == 403
        assert response.get_json()['message'] == 'Only admins can view all issues'

    def test_resolve_records_resolver(self, client, session, admin, seller, auth_headers):
        issue_id = report(client, auth_headers(seller)).get_json()['issue']['id']

        response = client.patch(f'/api/issues/{issue_id}/status', json={
            'status': 'resolved', 'adminNotes': 'Fixed in latest release',
        }, headers=auth_headers(admin))

        body = response.get_json()
        assert body['message'] == 'Issue status updated'
        assert body['issue']['resolvedBy']['id'] == admin.id
        assert body['issue']['adminNotes'] == 'Fixed in latest release'
        assert session.get(IssueReport, issue_id).resolved_at is not None

    def test_in_progress_does_not_resolve(self, client, admin, seller, auth_headers):
        issue_id = report(client, auth_headers(seller)).get_json()['issue']['id']

        response = client.patch(f'/api/issues/{issue_id}/status', json={'status': 'in_progress'},
                                headers=auth_headers(admin))

        assert response.get_json()['issue']['resolvedAt'] is None

    def test_invalid_status(self, client, admin, seller, auth_headers):
        issue_id = report(client, auth_headers(seller)).get_json()['issue']['id']

        response = client.patch(f'/api/issues/{issue_id}/status', json={'status': 'done'},
                                headers=auth_headers(admin))

        assert response.status_code == 400
        assert response.get_json()['message'] == 'Invalid status'
