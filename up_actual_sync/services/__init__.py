"""Services package: schema transformation and webhook notifications."""

from .notifier import Notifier  # noqa: F401
from .transform import extract_date, transform_batch, transform_one  # noqa: F401
