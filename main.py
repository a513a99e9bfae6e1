# main.py
import os
from nicegui import ui
from fastapi import FastAPI

from settings import load_settings
from transport import ApiTransport
from ui.switcher_page import register_pages

import logging
import sys
from contextlib import asynccontextmanager


# -------------------
# Logging setup
# -------------------

LOG_LEVEL = os.getenv("LOG_LEVEL", "info").upper()

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s [%(levelname)s] %(threadName)s: %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

# -------------------
# Configuration & shared backend client
# -------------------
settings = load_settings()
transport = ApiTransport(settings.api_base_url, timeout=settings.request_timeout)


# =========================================================
# FastAPI lifespan
# =========================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"MPD Mode Switcher using backend {settings.api_base_url}")

    yield  # ---- application runs here ----

    logger.info("Closing backend client")
    await transport.aclose()


# -------------------
# FastAPI app (single ASGI root)
# -------------------
app = FastAPI(lifespan=lifespan)

register_pages(transport, settings)

# -------------------
# Attach NiceGUI to FastAPI
# -------------------
ui.run_with(app, title="MPD Mode Switcher")

# -------------------
# Uvicorn entrypoint
# -------------------
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.listen_host,
        port=settings.port,
        reload=False,
    )
