import logging
import os

import uvicorn
from dotenv import load_dotenv

from .app import create_app

load_dotenv()

logging.basicConfig(level=logging.INFO, format="wallet_idcard %(levelname)s: %(message)s")

PORT = int(os.getenv("PORT", "3456"))
HOST = os.getenv("HOST", "0.0.0.0")

if __name__ == "__main__":
    uvicorn.run(create_app(), host=HOST, port=PORT)
