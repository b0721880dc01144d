"""
Upload pipeline for images and videos.

Images are staged to UPLOAD_FOLDER, run through the dimension gate and only
then pushed to object storage. The staged copy is always removed.
"""
import logging
import os
import uuid

from flask import current_app
from werkzeug.utils import secure_filename

from selllocal.exceptions import BusinessLogicError
from selllocal.services import storage_service
from selllocal.utils.image_validator import get_image_specs, validate_and_cleanup

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = {'jpg', 'jpeg', 'png', 'gif', 'webp'}
ALLOWED_VIDEO_EXTENSIONS = {'mp4', 'webm', 'mov', 'avi'}

_FOLDERS = {
    'logo': 'logos',
    'banner': 'banners',
    'product': 'products',
}


def _is_image(file):
    extension = storage_service.file_extension(file.filename)
    mimetype = (file.mimetype or '').lower()
    return extension in ALLOWED_IMAGE_EXTENSIONS and mimetype.startswith('image/')


def _is_video(file):
    extension = storage_service.file_extension(file.filename)
    mimetype = (file.mimetype or '').lower()
    return extension in ALLOWED_VIDEO_EXTENSIONS and mimetype.startswith('video/')


def stage_upload(file):
    """Save an incoming file under UPLOAD_FOLDER and return the path."""
    folder = current_app.config['UPLOAD_FOLDER']
    os.makedirs(folder, exist_ok=True)
    filename = f"{uuid.uuid4().hex}_{secure_filename(file.filename or '') or 'upload'}"
    path = os.path.join(folder, filename)
    file.save(path)
    return path


def store_validated_image(file, image_type, owner_id):
    """
    Validate an uploaded image for its type and push it to storage.

    Returns:
        (public_url, dimensions)

    Raises:
        BusinessLogicError: when the file is not an image or fails the gate.
            The payload carries the requirements text and measured dimensions.
    """
    if not _is_image(file):
        raise BusinessLogicError('Only image files are allowed')

    path = stage_upload(file)
    try:
        result = validate_and_cleanup(path, image_type)
        if not result.valid:
            raise BusinessLogicError(
                result.error,
                payload={
                    'requirements': get_image_specs(image_type)['description'],
                    'dimensions': result.dimensions,
                }
            )
        object_name = storage_service.build_object_name(_FOLDERS[image_type], owner_id, file.filename)
        url = storage_service.get_storage_service().upload_path(path, object_name, file.mimetype)
        logger.info(f"[UPLOAD] Stored {image_type} image for {owner_id}: {url}")
        return url, result.dimensions
    finally:
        if os.path.exists(path):
            os.remove(path)


def store_video(file, owner_id):
    """Push an uploaded product video to storage and return its URL."""
    if not _is_video(file):
        raise BusinessLogicError('Only video files are allowed')
    object_name = storage_service.build_object_name('videos', owner_id, file.filename)
    file.stream.seek(0)
    return storage_service.get_storage_service().upload_file(file.stream, object_name, file.mimetype)


def delete_stored_media(urls):
    """Best-effort removal of stored objects for discarded media."""
    if not urls:
        return
    storage = storage_service.get_storage_service()
    for url in urls:
        if url:
            storage.delete_url(url)


def update_business_image(session, seller, file, image_type):
    """
    Replace a seller's logo or banner.

    Returns the response body for the upload endpoint.
    """
    if file is None or not file.filename:
        raise BusinessLogicError('No file uploaded')

    url, dimensions = store_validated_image(file, image_type, seller.id)
    previous = seller.business_logo if image_type == 'logo' else seller.business_banner
    if image_type == 'logo':
        seller.business_logo = url
    else:
        seller.business_banner = url
    session.commit()

    if previous and previous != url:
        delete_stored_media([previous])

    label = 'Logo' if image_type == 'logo' else 'Banner'
    return {'message': f'{label} uploaded successfully', 'path': url, 'dimensions': dimensions}
