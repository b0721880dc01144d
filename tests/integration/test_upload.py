"""
Integration tests for seller logo and banner uploads.
"""

import io

from PIL import Image


def image_file(width, height, name='image.png'):
    buffer = io.BytesIO()
    Image.new('RGB', (width, height), color=(30, 90, 160)).save(buffer, format='PNG')
    buffer.seek(0)
    return buffer, name


class TestLogo:

    def test_upload_logo(self, client, session, seller, auth_headers, storage):
        response = client.post('/api/upload/logo', data={'logo': image_file(512, 512, 'logo.png')},
                               headers=auth_headers(seller), content_type='multipart/form-data')

        assert response.status_code == 200
        body = response.get_json()
        assert body['message'] == 'Logo uploaded successfully'
        assert body['path'].startswith(f'http://storage.test/uploads/logos/{seller.id}/')
        assert body['dimensions']['width'] == 512
        session.refresh(seller)
        assert seller.business_logo == body['path']

    def test_previous_logo_is_deleted(self, client, make_seller, auth_headers, storage):
        previous = 'http://storage.test/uploads/logos/1/old.png'
        owner = make_seller(business_logo=previous)

        client.post('/api/upload/logo', data={'logo': image_file(512, 512)},
                    headers=auth_headers(owner), content_type='multipart/form-data')

        assert storage.deleted == [previous]

    def test_rectangular_logo_rejected(self, client, seller, auth_headers, storage):
        response = client.post('/api/upload/logo', data={'logo': image_file(600, 300)},
                               headers=auth_headers(seller), content_type='multipart/form-data')

        assert response.status_code == 400
        body = response.get_json()
        assert body['message'].startswith('Aspect ratio (2.00)')
        assert body['dimensions']['aspectRatio'] == 2.0
        assert storage.uploaded == []

    def test_no_file(self, client, seller, auth_headers, storage):
        response = client.post('/api/upload/logo', data={}, headers=auth_headers(seller),
                               content_type='multipart/form-data')

        assert response.status_code == 400
        assert response.get_json()['message'] == 'No file uploaded'


class TestBanner:

    def test_upload_banner(self, client, seller, auth_headers, storage):
        response = client.post('/api/upload/banner', data={'banner': image_file(1500, 300, 'banner.png')},
                               headers=auth_headers(seller), content_type='multipart/form-data')

        assert response.status_code == 200
        body = response.get_json()
        assert body['message'] == 'Banner uploaded successfully'
        assert '/banners/' in body['path']

    def test_wrong_field_name(self, client, seller, auth_headers, storage):
        response = client.post('/api/upload/banner', data={'logo': image_file(1500, 300)},
                               headers=auth_headers(seller), content_type='multipart/form-data')

        assert response.get_json()['message'] == 'No file uploaded'
