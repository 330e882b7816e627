# run_server.py
import uvicorn

from inventory_api.core.config import settings
from inventory_api.main import app

if __name__ == "__main__":
    uvicorn.run(
        app,
        host="127.0.0.1",
        port=8000,
        log_level="debug" if settings.DEBUG else "info",
    )
