from __future__ import annotations

import uvicorn
from dotenv import load_dotenv

# Load .env before config is imported so the values are picked up
load_dotenv()

from config import config  # noqa: E402
from logging_utils import configure_logging  # noqa: E402


def main() -> None:
    configure_logging()

    from api_server import AVAILABLE_ENDPOINTS, app

    server = config.server
    print("=" * 50)
    print("Math Calculator Backend Server")
    print("=" * 50)
    print(f"Server running on port: {server.port}")
    print(f"Environment: {server.environment}")
    print(f"API Key configured: {'Yes' if server.api_key else 'No'}")
    print("Available endpoints:")
    for endpoint in AVAILABLE_ENDPOINTS:
        method, path = endpoint.split(" ", 1)
        print(f"  {method} http://localhost:{server.port}{path}")
    print("=" * 50)

    uvicorn.run(app, host=server.host, port=server.port, log_level=config.logging.level.lower())


if __name__ == "__main__":
    main()
