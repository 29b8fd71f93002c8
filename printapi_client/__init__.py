"""
Python client for interacting with the Print API REST API.

Print API lets you print and ship PDF or image files as a wide range of
products, like hardcover books, posters, canvases and wood prints.  This
package provides an :func:`authenticate` function that performs OAuth2
client-credentials authentication and returns a :class:`Client` for
making authenticated requests to API endpoints.

Examples
--------

```python
from printapi_client import authenticate

client = authenticate("YOUR_CLIENT_ID", "YOUR_SECRET", "test")

# List products
products = client.get("products", {"limit": 10})

# Create an order
order = client.post("orders", {"email": "jane@example.com", "items": [...]})
```

Failures of the client itself raise :class:`PrintApiError`; error
reports from the API raise :class:`PrintApiResponseError`, which keeps
the raw response body and status code.
"""

from .client import API_VERSION, VERSION, Client, authenticate, base_uri_for
from .exceptions import PrintApiError, PrintApiResponseError

__version__ = VERSION

__all__ = [
    "API_VERSION",
    "Client",
    "PrintApiError",
    "PrintApiResponseError",
    "authenticate",
    "base_uri_for",
]
