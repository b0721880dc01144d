"""
WhatsApp helpers.

Orders, notifications and broadcasts are delivered through wa.me deep links.
send_whatsapp_message is the single transport seam; it does not call any
business API and only logs the outgoing message.
"""
import logging
import random
import secrets
import time
from urllib.parse import quote

from selllocal.utils.phone import digits_only

logger = logging.getLogger(__name__)

# Characters encodeURIComponent leaves untouched
_URI_SAFE = "-_.!~*'()"


def build_whatsapp_url(phone, text):
    """Build a https://wa.me deep link with a pre-filled message."""
    return f"https://wa.me/{digits_only(phone)}?text={quote(text or '', safe=_URI_SAFE)}"


def format_phone_for_whatsapp(phone):
    """
    Format a phone number in E.164 form.

    Returns None when the number cannot be interpreted.
    """
    cleaned = digits_only(phone)
    if not cleaned:
        return None
    if cleaned.startswith('91') and len(cleaned) == 12:
        return f"+{cleaned}"
    if len(cleaned) == 10:
        return f"+91{cleaned}"
    if len(cleaned) > 10:
        return f"+{cleaned}"
    return None


def generate_token():
    """Opaque opt-in/opt-out token."""
    return secrets.token_hex(32)


def build_broadcast_message(base_message, store_link=None, opt_out_link=None):
    """Append the store link and the unsubscribe footer to a broadcast body."""
    message = base_message
    if store_link:
        message += f"\n\n🔗 View Store: {store_link}"
    if opt_out_link:
        message += f"\n\n---\n📱 To stop receiving updates, click: {opt_out_link}"
    else:
        message += "\n\n---\n📱 Reply STOP to unsubscribe from updates."
    return message


def send_whatsapp_message(phone, message):
    """
    Deliver one message.

    Returns a result dict with 'success'. Invalid numbers are reported, not raised.
    """
    formatted = format_phone_for_whatsapp(phone)
    if not formatted:
        return {'success': False, 'error': 'Invalid phone number format', 'to': phone}

    message_id = f"msg_{int(time.time() * 1000)}_{random.randint(100000, 999999)}"
    logger.info(f"[WHATSAPP] Queued {message_id} to {formatted} ({len(message)} chars)")
    return {
        'success': True,
        'messageId': message_id,
        'to': formatted,
        'status': 'sent',
        'whatsappUrl': build_whatsapp_url(formatted, message),
    }
