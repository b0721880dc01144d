"""
Spreadsheet product import and its sample template.

Rows are read with pandas (openpyxl engine). Each row is validated and
committed on its own so one bad row never blocks the rest.
"""
import logging
import math
from io import BytesIO

import pandas as pd

from selllocal.blueprints.metrics import products_imported_total
from selllocal.exceptions import BusinessLogicError
from selllocal.models import UNITS, Product
from selllocal.services.product_service import invalidate_categories_cache
from selllocal.utils.slugify import create_unique_slug

logger = logging.getLogger(__name__)

TEMPLATE_FILENAME = 'selllocal-product-template.xlsx'
XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
EXCEL_EXTENSIONS = ('xlsx', 'xls')
EXCEL_MIMETYPES = (XLSX_MIMETYPE, 'application/vnd.ms-excel')

TEMPLATE_COLUMNS = [
    ('Product Name', 20),
    ('Description', 40),
    ('Category', 15),
    ('Base Price (₹)', 15),
    ('Minimum Order Quantity', 20),
    ('Stock', 10),
    ('Unit', 10),
    ('Tags', 30),
]

SAMPLE_ROWS = [
    ['Sample Product 1', 'This is a sample product description', 'Food', 100, 1, 50, 'piece',
     'organic, fresh, handmade'],
    ['Sample Product 2', 'Another sample product description', 'Clothing', 500, 2, 30, 'piece',
     'cotton, comfortable'],
]

# Accepted header spellings, first match wins
COLUMN_ALIASES = {
    'name': ('Product Name', 'product name', 'ProductName'),
    'description': ('Description', 'description'),
    'category': ('Category', 'category'),
    'base_price': ('Base Price (₹)', 'Base Price', 'basePrice', 'Base Price (INR)'),
    'minimum_order_quantity': ('Minimum Order Quantity', 'minimumOrderQuantity', 'MOQ'),
    'stock': ('Stock', 'stock'),
    'unit': ('Unit', 'unit'),
    'tags': ('Tags', 'tags'),
}

MISSING_FIELDS_ERROR = 'Missing required fields: Product Name, Description, or Category'
INVALID_PRICE_ERROR = 'Invalid or missing Base Price'


def build_template():
    """Render the sample workbook. Returns a BytesIO positioned at 0."""
    columns = [name for name, _ in TEMPLATE_COLUMNS]
    frame = pd.DataFrame(SAMPLE_ROWS, columns=columns)

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        frame.to_excel(writer, sheet_name='Products', index=False)
        sheet = writer.sheets['Products']
        for index, (_, width) in enumerate(TEMPLATE_COLUMNS):
            sheet.column_dimensions[chr(ord('A') + index)].width = width
    buffer.seek(0)
    return buffer


def is_excel_upload(file):
    extension = file.filename.rsplit('.', 1)[-1].lower() if '.' in (file.filename or '') else ''
    return extension in EXCEL_EXTENSIONS or (file.mimetype or '') in EXCEL_MIMETYPES


def _is_blank(value):
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()


def _cell(row, field):
    for column in COLUMN_ALIASES[field]:
        value = row.get(column)
        if not _is_blank(value):
            return value
    return None


def _text(value):
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip() or None


def _number(value, cast, default=None):
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return cast(number)


def parse_row(row):
    """
    Map one sheet row onto product fields.

    Raises:
        ValueError: with the row-level error message.
    """
    name = _text(_cell(row, 'name'))
    description = _text(_cell(row, 'description'))
    category = _text(_cell(row, 'category'))
    if not name or not description or not category:
        raise ValueError(MISSING_FIELDS_ERROR)

    try:
        base_price = float(_cell(row, 'base_price'))
    except (TypeError, ValueError):
        raise ValueError(INVALID_PRICE_ERROR)
    if not math.isfinite(base_price) or base_price <= 0:
        raise ValueError(INVALID_PRICE_ERROR)

    unit = (_text(_cell(row, 'unit')) or 'piece').lower()
    if unit not in UNITS:
        unit = 'piece'

    minimum = _number(_cell(row, 'minimum_order_quantity'), int)
    stock = _number(_cell(row, 'stock'), int)
    tags = _text(_cell(row, 'tags'))

    return {
        'name': name,
        'description': description,
        'category': category,
        'base_price': round(base_price, 2),
        'minimum_order_quantity': minimum if minimum and minimum >= 1 else 1,
        'stock': stock if stock and stock > 0 else 0,
        'unit': unit,
        'tags': [tag.strip() for tag in tags.split(',') if tag.strip()] if tags else [],
    }


def read_rows(file):
    """Rows of the first sheet as dicts keyed by header."""
    try:
        frame = pd.read_excel(file.stream, sheet_name=0, dtype=object)
    except Exception as e:
        logger.warning(f"[BULK] Could not read workbook {file.filename}: {e}")
        raise BusinessLogicError('Failed to process Excel file', payload={'error': str(e)})
    frame = frame.dropna(how='all')
    return frame.to_dict(orient='records')


def import_products(session, seller, file):
    """Create one product per row; returns per-row successes and errors."""
    if file is None or not file.filename:
        raise BusinessLogicError('No Excel file uploaded')
    if not is_excel_upload(file):
        raise BusinessLogicError('Only Excel files (.xlsx, .xls) are allowed')

    rows = read_rows(file)
    if not rows:
        raise BusinessLogicError('Excel file is empty')

    details = {'success': [], 'errors': []}
    for index, row in enumerate(rows):
        row_number = index + 2  # header is row 1
        try:
            fields = parse_row(row)
        except ValueError as e:
            details['errors'].append({'row': row_number, 'error': str(e)})
            continue

        try:
            product = Product(
                seller_id=seller.id,
                slug=create_unique_slug(session, seller.id, fields['name']),
                is_active=True,
                **fields
            )
            session.add(product)
            session.commit()
        except Exception as e:
            session.rollback()
            logger.warning(f"[BULK] Row {row_number} for seller {seller.id} failed: {e}")
            details['errors'].append({'row': row_number, 'error': str(e) or 'Failed to create product'})
            continue

        details['success'].append({'row': row_number, 'productId': product.id, 'name': product.name})

    if details['success']:
        products_imported_total.inc(len(details['success']))
        invalidate_categories_cache(seller.id)
    logger.info(
        f"[BULK] Seller {seller.id} imported {len(details['success'])} of {len(rows)} row(s)"
    )

    return {
        'message': f'Processed {len(rows)} products',
        'success': len(details['success']),
        'errors': len(details['errors']),
        'details': details,
    }
