from typing import List

from rbac_admin.api.schemas.common import APIModel


class MonthlyTrend(APIModel):
    month: str
    sales: float
    profit: float
    profit_margin: float


class RegionSales(APIModel):
    name: str
    value: float


class TopProduct(APIModel):
    rank: int
    product_id: str
    product_name: str
    category: str
    quantity: int
    sales: float


class MonthlyTrendsResponse(APIModel):
    data: List[MonthlyTrend]


class RegionSalesResponse(APIModel):
    data: List[RegionSales]


class TopProductsResponse(APIModel):
    data: List[TopProduct]
