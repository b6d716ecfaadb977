from flask import current_app
from datetime import datetime


def notify_estimate_saved(estimate, action):
    """
    Notify about an estimate insert/update.
    Args:
        estimate: Estimate instance
        action: str ('insert' or 'update')
    Behavior:
        - Log a one-line [NOTIFY] event
        - Never break main flow (catch and log all exceptions)
    """
    try:
        payload = {
            'estimate_id': getattr(estimate, 'id', None),
            'opportunity_id': getattr(estimate, 'opportunity_id', None),
            'display_number': getattr(estimate, 'display_number', None),
            'action': str(action),
            'timestamp_utc': datetime.utcnow().isoformat(),
        }
        current_app.logger.info(
            '[NOTIFY] estimate action=%s estimate_id=%s opportunity_id=%s display_number=%s',
            payload['action'], payload['estimate_id'], payload['opportunity_id'], payload['display_number']
        )
        send_email(payload)
    except Exception as e:
        current_app.logger.exception('[NOTIFY] Notification failed: %s', e)


def notify_letter_saved(letter, action):
    """Same as notify_estimate_saved, for letter proposals ('insert', 'update', 'delete')."""
    try:
        payload = {
            'letter_id': getattr(letter, 'id', None),
            'opportunity_id': getattr(letter, 'opportunity_id', None),
            'quote_number': getattr(letter, 'quote_number', None),
            'action': str(action),
            'timestamp_utc': datetime.utcnow().isoformat(),
        }
        current_app.logger.info(
            '[NOTIFY] letter action=%s letter_id=%s opportunity_id=%s quote_number=%s',
            payload['action'], payload['letter_id'], payload['opportunity_id'], payload['quote_number']
        )
        send_email(payload)
    except Exception as e:
        current_app.logger.exception('[NOTIFY] Notification failed: %s', e)


def send_email(payload):
    """Delivery hook; logs at debug level until a mail transport is configured."""
    current_app.logger.debug('[NOTIFY] payload=%s', payload)
