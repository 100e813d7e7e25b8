"""Log filters for driver PII masking and correlation ID defaults."""

import logging
import re


class PIIFilter(logging.Filter):
    """Masks driver contact details in log messages.

    Driver phones are stored as ``+1`` followed by ten digits; dashed,
    dotted and parenthesized US forms are caught too. String ``args`` of
    %-style calls are masked along with the message.
    """

    EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+")
    PHONE_PATTERN = re.compile(r"(?<![\w-])(?:\+1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b")

    def mask(self, text: str) -> str:
        if "@" in text:
            text = self.EMAIL_PATTERN.sub("[EMAIL]", text)
        if any(c.isdigit() for c in text):
            text = self.PHONE_PATTERN.sub("[PHONE]", text)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self.mask(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(
                self.mask(arg) if isinstance(arg, str) else arg for arg in record.args
            )
        return True


class DefaultCorrelationFilter(logging.Filter):
    """Fills ``correlation_id`` for records logged outside any connection.

    Must run after ContextFilter, which never overwrites an attribute that
    is already set.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = "-"
        return True
