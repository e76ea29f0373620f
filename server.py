import os

import uvicorn

from app.core.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    dev = os.environ.get("ENV", "dev") == "dev"
    port = int(os.environ.get("PORT", 8000))
    host = os.environ.get("HOST") or ("127.0.0.1" if dev else "0.0.0.0")
    log_level = "debug" if settings.debug else "info"

    # reload only in dev; judge polling holds requests open and reload would drop them
    uvicorn.run("app.main:app", host=host, port=port, reload=dev, log_level=log_level, proxy_headers=not dev)
