"""
filename: main.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Entry point serving the ledger API.
"""

import uvicorn

from ledger.main import app  # noqa: F401

if __name__ == "__main__":
    uvicorn.run("ledger.main:app", host="0.0.0.0", port=8080)
