"""Response interceptors: the fallback stages that build responses.

Each interceptor acts on the dispatcher type it owns, and only while no
earlier stage finalized the response:

    PageInterceptor -- ``sync``: render a page template with mock data
    ApiInterceptor -- ``async``: answer JSON from a handler or data file
    DirInterceptor -- ``dir``: list a directory under the view root
"""

from burrow.interceptors.api import ApiInterceptor
from burrow.interceptors.dir import DirInterceptor
from burrow.interceptors.page import PageInterceptor

__all__ = [
    "ApiInterceptor",
    "DirInterceptor",
    "PageInterceptor",
]
