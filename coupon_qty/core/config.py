from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = Field(default="Coupon Qty Usage", alias="APP_NAME")
    app_env: str = Field(default="dev", alias="APP_ENV")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    database_url: str = Field(default="sqlite:///./coupon_qty.db", alias="DATABASE_URL")
    currency: str = Field(default="MXN", alias="CURRENCY")
    # price_desc: el presupuesto restante va primero a las unidades más caras
    # cart: orden en que llegan las líneas del carrito
    allocation_order: Literal["price_desc", "cart"] = Field(
        default="price_desc", alias="ALLOCATION_ORDER"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


settings = Settings()
