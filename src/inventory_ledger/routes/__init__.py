from fastapi import APIRouter

from . import barcodes, catalog, health, scanner, stock

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(catalog.router)
api_router.include_router(stock.router)
api_router.include_router(scanner.router)
api_router.include_router(barcodes.router)
