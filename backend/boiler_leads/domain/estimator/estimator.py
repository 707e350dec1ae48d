from boiler_leads.domain.estimator.models import (
    Bathrooms,
    Bedrooms,
    BoilerRecommendation,
    EstimateRequest,
    EstimateResponse,
    Radiators,
)

BEDROOM_POINTS = {
    Bedrooms.one_to_two: 1,
    Bedrooms.three: 2,
    Bedrooms.four: 3,
    Bedrooms.five_plus: 4,
}
BATHROOM_POINTS = {
    Bathrooms.one: 1,
    Bathrooms.two: 2,
    Bathrooms.three_plus: 3,
}
RADIATOR_POINTS = {
    Radiators.up_to_ten: 1,
    Radiators.ten_to_fifteen: 2,
    Radiators.fifteen_plus: 3,
}

ENTRY_MAX_SCORE = 4
MID_MAX_SCORE = 7

ENTRY = BoilerRecommendation(
    name="Greenstar 2000i",
    model="25kW Combi",
    tier="2000",
    price_gbp=1790,
    price="£1,790",
    monthly="£22.38",
    warranty="8 year",
    output="25kW",
    tag="Great Value",
    features=[
        "Up to 94% efficiency",
        "Compact & lightweight",
        "8 year warranty",
        "Quiet operation",
        "Easy to use controls",
    ],
)
MID_RANGE = BoilerRecommendation(
    name="Greenstar 4000",
    model="25kW Combi",
    tier="4000",
    price_gbp=2199,
    price="£2,199",
    monthly="£27.49",
    warranty="10 year",
    output="25kW",
    tag="Most Popular",
    features=[
        "Up to 94% efficiency",
        "Which? Best Buy 2025",
        "10 year warranty",
        "Smart thermostat ready",
        "Quiet Mark certified",
        "Most popular in the UK",
    ],
)
PREMIUM = BoilerRecommendation(
    name="Greenstar 8000 Life",
    model="35kW Combi",
    tier="8000",
    price_gbp=2690,
    price="£2,690",
    monthly="£33.63",
    warranty="12 year",
    output="35kW",
    tag="Premium",
    features=[
        "Up to 94% efficiency",
        "Which? Best Buy 2025",
        "12 year warranty",
        "Built-in smart controls",
        "Premium black design",
        "High hot water flow rate",
    ],
)


def score(request: EstimateRequest) -> int:
    return (
        BEDROOM_POINTS[request.bedrooms]
        + BATHROOM_POINTS[request.bathrooms]
        + RADIATOR_POINTS[request.radiators]
    )


def recommend(request: EstimateRequest) -> EstimateResponse:
    total = score(request)
    if total <= ENTRY_MAX_SCORE:
        recommendation = ENTRY
    elif total <= MID_MAX_SCORE:
        recommendation = MID_RANGE
    else:
        recommendation = PREMIUM
    return EstimateResponse(score=total, recommendation=recommendation)
