from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict


class Bedrooms(str, Enum):
    one_to_two = "1-2"
    three = "3"
    four = "4"
    five_plus = "5+"


class Bathrooms(str, Enum):
    one = "1"
    two = "2"
    three_plus = "3+"


class Radiators(str, Enum):
    up_to_ten = "up-to-10"
    ten_to_fifteen = "10-15"
    fifteen_plus = "15+"


class EstimateRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    bedrooms: Bedrooms
    bathrooms: Bathrooms
    radiators: Radiators


class BoilerRecommendation(BaseModel):
    name: str
    model: str
    tier: str
    price_gbp: int
    price: str
    monthly: str
    warranty: str
    output: str
    tag: str
    features: List[str]


class EstimateResponse(BaseModel):
    score: int
    recommendation: BoilerRecommendation
