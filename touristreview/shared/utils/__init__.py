"""Small helpers with no dependency on the rest of the application."""

from touristreview.shared.utils.datetime import format_rating_date, utc_now
from touristreview.shared.utils.generators import generate_cuid

__all__ = ["format_rating_date", "generate_cuid", "utc_now"]
