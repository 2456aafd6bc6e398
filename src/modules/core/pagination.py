"""Page-number pagination for list endpoints.

``?page=N&page_size=M``; ``page_size`` is capped at ``MAX_PAGE_SIZE``.
"""

from __future__ import annotations

from django.conf import settings
from rest_framework.pagination import PageNumberPagination


class StandardPageNumberPagination(PageNumberPagination):
    page_size_query_param = "page_size"
    max_page_size = settings.MAX_PAGE_SIZE
