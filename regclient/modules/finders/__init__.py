from .pagination import paginate, decode_page, next_page_url
from .listings import stream_catalog, stream_tags
