"""
HTTP API - forwards already-measured parcel dimensions to the locker
recommendation engine.

Run with: parcelmeasure-api --port 8000
"""

import argparse
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, StrictFloat, StrictInt, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .locker import recommend


INVALID_MEASUREMENTS = ("Invalid measurements. Expected: "
                        "{ length_mm: number, width_mm: number, height_mm: number }")
NON_POSITIVE = "All dimensions must be positive numbers"

Number = Union[StrictInt, StrictFloat]


class ParcelMeasurements(BaseModel):
    length_mm: Number
    width_mm: Number
    height_mm: Number

    def is_positive(self):
        return all(_is_finite(v) and v > 0
                   for v in (self.length_mm, self.width_mm, self.height_mm))


def _is_finite(value):
    # JSON integers beyond float range count as infinite
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


class MeasureParcelRequest(BaseModel):
    measurements: ParcelMeasurements
    metadata: Optional[Dict[str, Any]] = None


app = FastAPI(title="Parcel Measurement API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


def _timestamp():
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _error(status_code, message):
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request, exc):
    if exc.status_code == 405:
        return _error(405, "Method not allowed")
    return _error(exc.status_code, str(exc.detail))


@app.post("/measure-parcel")
async def measure_parcel(request: Request):
    try:
        try:
            body = await request.json()
            payload = MeasureParcelRequest.model_validate(body)
        except (ValueError, ValidationError):
            return _error(400, INVALID_MEASUREMENTS)

        measurements = payload.measurements
        if not measurements.is_positive():
            return _error(400, NON_POSITIVE)

        recommendation = recommend(measurements.length_mm, measurements.width_mm,
                                   measurements.height_mm)
        timestamp = _timestamp()

        logging.info("Parcel measurement request: %s -> %s at %s (metadata: %s)",
                     measurements.model_dump(), recommendation.size, timestamp,
                     payload.metadata or {})

        return {
            "success": True,
            "lockerRecommendation": recommendation.to_dict(),
            "timestamp": timestamp,
        }
    except Exception:
        logging.exception("Error processing parcel measurement")
        return _error(500, "Internal server error")


@app.api_route("/test", methods=["GET", "POST"])
def api_test():
    return {
        "success": True,
        "message": "Parcel Measurement API is working!",
        "timestamp": _timestamp(),
        "endpoints": {
            "POST /measure-parcel": "Get locker recommendation from measurements",
            "GET /test": "Test endpoint",
        },
    }


def main():
    parser = argparse.ArgumentParser(description='Parcel Measurement API server')
    parser.add_argument('--host', default='127.0.0.1', help='Interface to bind (default: 127.0.0.1)')
    parser.add_argument('--port', type=int, default=8000, help='Port to listen on (default: 8000)')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level (default: INFO)')
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level, format='%(asctime)s %(levelname)s %(message)s')
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


if __name__ == "__main__":
    main()
