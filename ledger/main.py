"""
filename: main.py
author: Valentin Piombo
email: valenp97@gmail.com
description: Project's root module.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ledger.config import configure_logging
from ledger.exceptions import StoreError
from ledger.routers.client import router as client_router
from ledger.routers.transaction import router as transaction_router

configure_logging()

app = FastAPI(
    title="Ledger",
    version="0.1.0",
    summary="Clients, aliases and transactions with a running client balance",
)
app.include_router(client_router)
app.include_router(transaction_router)


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    """Turn the store errors into responses using the status code each one carries."""
    return JSONResponse(status_code=exc.status_code, content={"detail": {"message": exc.detail}})
