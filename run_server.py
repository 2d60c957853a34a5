"""Start the debate arena API server with uvicorn."""

import os
import socket
import sys

from dotenv import load_dotenv
load_dotenv()

from src.api.logging_config import setup_logging
setup_logging()

from src.api.config import settings


def is_port_in_use(port):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        return s.connect_ex(('localhost', port)) == 0


if __name__ == "__main__":
    port = settings.api_port

    if is_port_in_use(port):
        print(f"⚠️  Port {port} is already in use!")
        print("   Stop the process holding it, or set PORT / API_PORT in .env")
        sys.exit(1)

    print("=" * 80)
    print(f"📡 Starting server: http://{settings.api_host}:{port}")
    print(f"🔌 Viewer socket:   ws://localhost:{port}/ws")
    print("=" * 80)

    import uvicorn

    project_root = os.path.dirname(os.path.abspath(__file__))
    reload = os.getenv("UVICORN_RELOAD", "").lower() in ("1", "true", "yes")
    log_level = os.getenv("UVICORN_LOG_LEVEL", "info")
    try:
        uvicorn.run(
            "src.api.main:app",
            host=settings.api_host,
            port=port,
            log_level=log_level,
            access_log=True,
            reload=reload,
            reload_dirs=[os.path.join(project_root, "src")] if reload else None,
        )
    except KeyboardInterrupt:
        print("\n\nServer stopped")
