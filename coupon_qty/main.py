import logging

from fastapi import FastAPI

from .core.config import settings
from .db import Base, engine
from .hooks import hooks
from .quantity_usage import install_quantity_usage
from .routers import cart, coupons, health, orders, reports_coupons

# IMPORTA MODELOS antes de create_all
from .models import coupon as _coupon_models
from .models import order as _order_models

logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")

# Crea tablas faltantes (desarrollo)
Base.metadata.create_all(bind=engine)

install_quantity_usage(hooks)

app = FastAPI(title=settings.app_name, version=settings.app_version)

app.include_router(health.router)
app.include_router(coupons.router)
app.include_router(cart.router)
app.include_router(orders.router)
app.include_router(reports_coupons.router)
