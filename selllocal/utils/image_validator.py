"""
Image dimension gate for uploaded logos, banners and product photos.

Every image type has a width/height window, an aspect ratio band and a
file-size ceiling. Checks run in a fixed order (size, width, height,
aspect ratio) and the first failure is reported.
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

MB = 1024 * 1024

IMAGE_SPECS = {
    'logo': {
        'min_width': 256,
        'max_width': 2048,
        'min_height': 256,
        'max_height': 2048,
        'min_aspect_ratio': 0.9,
        'max_aspect_ratio': 1.1,
        'max_file_size': 2 * MB,
        'description': 'Logo must be square (256x256 to 2048x2048 pixels, max 2MB)',
    },
    'banner': {
        'min_width': 1200,
        'max_width': 3840,
        'min_height': 250,
        'max_height': 800,
        'min_aspect_ratio': 4.0,
        'max_aspect_ratio': 6.0,
        'max_file_size': 5 * MB,
        'description': (
            'Banner must be 1200x250 to 3840x800 pixels with aspect ratio '
            'between 4:1 and 6:1 (max 5MB)'
        ),
    },
    'product': {
        'min_width': 400,
        'max_width': 2400,
        'min_height': 400,
        'max_height': 2400,
        'min_aspect_ratio': 0.9,
        'max_aspect_ratio': 1.1,
        'max_file_size': 5 * MB,
        'description': 'Product images must be square (400x400 to 2400x2400 pixels, max 5MB)',
    },
}


@dataclass
class ValidationResult:
    valid: bool
    error: Optional[str] = None
    dimensions: Optional[dict] = None


def get_image_specs(image_type: str) -> Optional[dict]:
    return IMAGE_SPECS.get(image_type)


def validate_image(path: str, image_type: str) -> ValidationResult:
    """
    Validate an image file on disk against the IMAGE_SPECS entry for its type.

    Args:
        path: Path to the image file
        image_type: 'logo', 'banner' or 'product'

    Returns:
        ValidationResult with the measured dimensions when readable
    """
    spec = IMAGE_SPECS.get(image_type)
    if not spec:
        return ValidationResult(False, f"Invalid image type: {image_type}")

    try:
        size = os.path.getsize(path)
        with Image.open(path) as img:
            width, height = img.size
            image_format = img.format
    except (OSError, UnidentifiedImageError) as e:
        return ValidationResult(False, f"Failed to process image: {e}")

    aspect_ratio = width / height if height else 0
    dimensions = {
        'width': width,
        'height': height,
        'size': size,
        'aspectRatio': round(aspect_ratio, 2),
        'format': image_format,
    }
    description = spec['description']

    if size > spec['max_file_size']:
        return ValidationResult(
            False,
            f"File size ({size / MB:.2f}MB) exceeds maximum allowed "
            f"({spec['max_file_size'] // MB}MB). {description}",
            dimensions
        )

    if width < spec['min_width'] or width > spec['max_width']:
        return ValidationResult(
            False,
            f"Width ({width}px) must be between {spec['min_width']}px and "
            f"{spec['max_width']}px. {description}",
            dimensions
        )

    if height < spec['min_height'] or height > spec['max_height']:
        return ValidationResult(
            False,
            f"Height ({height}px) must be between {spec['min_height']}px and "
            f"{spec['max_height']}px. {description}",
            dimensions
        )

    if aspect_ratio < spec['min_aspect_ratio'] or aspect_ratio > spec['max_aspect_ratio']:
        return ValidationResult(
            False,
            f"Aspect ratio ({aspect_ratio:.2f}) is outside allowed range "
            f"({spec['min_aspect_ratio']} to {spec['max_aspect_ratio']}). {description}",
            dimensions
        )

    return ValidationResult(True, None, dimensions)


def validate_and_cleanup(path: str, image_type: str) -> ValidationResult:
    """Validate an image and delete it from disk when it is rejected."""
    result = validate_image(path, image_type)
    if not result.valid:
        logger.info(f"[UPLOAD] Rejected {image_type} image {path}: {result.error}")
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
    return result
