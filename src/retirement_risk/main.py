from dataclasses import asdict
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import (
    API_DESCRIPTION,
    API_TITLE,
    API_VERSION,
    CORS_CREDENTIALS,
    CORS_HEADERS,
    CORS_METHODS,
    CORS_ORIGINS,
    configure_logging,
)
from .models import SimulationInput, SimulationRequest, SimulationResponse
from .monte_carlo import DEFAULT_MARKET_MODEL, Engine

configure_logging()

# ============================
# FastAPI app
# ============================
app = FastAPI(title=API_TITLE, description=API_DESCRIPTION, version=API_VERSION)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=CORS_CREDENTIALS,
    allow_methods=CORS_METHODS,
    allow_headers=CORS_HEADERS,
)


@app.get("/")
def root():
    return {"message": API_TITLE, "docs": "Visit /docs for API documentation"}


@app.get("/api/default_inputs")
def default_inputs() -> SimulationInput:
    return SimulationInput(
        current_age=40,
        retirement_age=65,
        current_savings=200_000,
        monthly_contributions=2000,
        target_monthly_income=8000,
        inflation_rate=2.5,
    )


@app.get("/api/parameters")
def market_parameters() -> Dict[str, Any]:
    m = DEFAULT_MARKET_MODEL
    return {
        "assets": {asset.value: asdict(p) for asset, p in m.single_assets.items()},
        "personal_portfolio": asdict(m.personal_portfolio),
        "inflation": asdict(m.inflation),
        "scenarios": {regime.value: asdict(s) for regime, s in m.scenarios.items()},
    }


@app.post("/api/simulate")
def simulate(request: SimulationRequest) -> SimulationResponse:
    try:
        result = Engine().run(
            request.inputs,
            projection_years=request.projection_years,
            simulations=request.simulations,
            language=request.language,
            seed=request.seed,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return result.to_response()
