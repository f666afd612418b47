from .client import Client, API_VERSION, API_VERSION_HEADER
from .response import check_response
