# yatra/api/v1/api.py
from fastapi import APIRouter

from yatra.api.v1.endpoints import bookings, guides, homestays, products, search

api_router_v1 = APIRouter(prefix="/api/v1")

api_router_v1.include_router(homestays.router, prefix="/homestays")
api_router_v1.include_router(guides.router, prefix="/guides")
api_router_v1.include_router(products.router, prefix="/products")
api_router_v1.include_router(bookings.router, prefix="/bookings")
api_router_v1.include_router(search.router, prefix="/search")
