from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator


class CouponIn(BaseModel):
    code: str
    discount_type: Literal["percent", "amount"] = "percent"
    amount: Decimal = Field(gt=0)
    usage_limit: Optional[int] = Field(default=None, gt=0)
    count_by_quantity: bool = False
    individual_use: bool = False
    is_active: bool = True

    @field_validator("code", mode="before")
    @classmethod
    def _norm_code(cls, v):
        s = str(v or "").strip().upper()
        if not s:
            raise ValueError("code required")
        return s

    @model_validator(mode="after")
    def _percent_range(self):
        if self.discount_type == "percent" and self.amount > 100:
            raise ValueError("percent amount must be <= 100")
        return self


class CouponPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    discount_type: Optional[Literal["percent", "amount"]] = None
    amount: Optional[Decimal] = Field(default=None, gt=0)
    usage_limit: Optional[int] = Field(default=None, gt=0)
    count_by_quantity: Optional[bool] = None
    individual_use: Optional[bool] = None
    is_active: Optional[bool] = None


class CouponOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    code: str
    discount_type: str
    amount: Decimal
    usage_limit: Optional[int] = None
    usage_count: int
    usage_remaining: Optional[int] = None
    count_by_quantity: bool
    individual_use: bool
    is_active: bool


class CartItem(BaseModel):
    product_id: int
    name: Optional[str] = None
    quantity: int = Field(ge=0)
    unit_price: Decimal = Field(ge=0)

    @field_validator("unit_price", mode="before")
    @classmethod
    def _money_to_decimal(cls, v):
        return Decimal(str(v))


class CartIn(BaseModel):
    items: List[CartItem]
    coupon_codes: List[str] = Field(default_factory=list)


class CartLineOut(BaseModel):
    product_id: int
    name: Optional[str] = None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    discount: Decimal
    discounted_quantity: int
    total: Decimal


class CartOut(BaseModel):
    coupon_codes: List[str]
    lines: List[CartLineOut]
    subtotal: Decimal
    discount_total: Decimal
    total: Decimal


class OrderLineOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: int
    name: Optional[str] = None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    total: Decimal


class OrderOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    order_id: int = Field(validation_alias=AliasChoices("id", "order_id"))
    status: str
    subtotal: Decimal
    discount_total: Decimal
    total: Decimal
    usage_adjusted: bool
    coupon_codes: List[str]
    lines: List[OrderLineOut]

    @field_validator("coupon_codes", mode="before")
    @classmethod
    def _sorted_codes(cls, v):
        return sorted(v)


class StatusIn(BaseModel):
    status: Literal["pending", "processing", "completed", "cancelled"]
