"""
Trajectory HTTP Service

Flask adapter around the trajectory pipeline.

Endpoints:
    POST /propagate   TLE + duration + step in, sampled trajectory out
    GET  /health      Propagates the reference TLE at epoch

Status codes for /propagate:
    200  trajectory computed
    400  malformed request, invalid TLE text, or too many samples
    422  elements cannot be initialized or a sample failed to propagate
    507  output buffer could not be allocated
"""

import json
from datetime import datetime, timezone
from typing import Optional

import structlog
from flask import Flask, jsonify, request
from flask_cors import CORS
from pydantic import BaseModel, Field, ValidationError, field_validator
from werkzeug.exceptions import HTTPException

from config import REFERENCE_TLE, ServiceConfig
from trajectory_service import __version__
from trajectory_service.boundary import propagate_from_tle
from trajectory_service.constants import GRAVITY_MODELS, get_gravity_model
from trajectory_service.errors import (
    AllocationError,
    InvalidOrbitError,
    PropagationError,
    TrajectoryError,
)
from trajectory_service.frames import teme_to_ecef
from trajectory_service.geodetic import ecef_to_geodetic
from trajectory_service.sampler import ROW_FIELDS, sample_count
from trajectory_service.sgp4_propagator import SGP4Propagator
from trajectory_service.tle_parser import parse_tle

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


class PropagateRequest(BaseModel):
    """Request body for POST /propagate"""
    line1: str
    line2: str
    duration_hours: float = Field(..., allow_inf_nan=False)
    step_minutes: float = Field(..., gt=0, allow_inf_nan=False)
    gravity_model: Optional[str] = None
    opsmode: Optional[str] = None
    verify_checksum: Optional[bool] = None

    @field_validator('gravity_model')
    @classmethod
    def known_gravity_model(cls, value):
        if value is not None and value.lower() not in GRAVITY_MODELS:
            raise ValueError(f"must be one of {sorted(GRAVITY_MODELS)}")
        return value.lower() if value is not None else None

    @field_validator('opsmode')
    @classmethod
    def known_opsmode(cls, value):
        if value is not None and value not in ('a', 'i'):
            raise ValueError("must be 'a' or 'i'")
        return value


def _error(message: str, status: int, /, **extra):
    body = {
        "error": message,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    body.update(extra)
    return jsonify(body), status


def create_app(config: Optional[ServiceConfig] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        config: Service configuration; read from the environment when omitted

    Returns:
        Flask app
    """
    config = config or ServiceConfig.from_env()

    app = Flask(__name__)
    CORS(app)
    app.config["TRAJECTORY"] = config

    @app.route('/health', methods=['GET'])
    def health_check():
        """Health check endpoint"""
        try:
            record = parse_tle(REFERENCE_TLE['line1'], REFERENCE_TLE['line2'],
                               name=REFERENCE_TLE['name'],
                               gravity_model=get_gravity_model(config.gravity_model))
            propagator = SGP4Propagator(record, config.opsmode)
            inertial = propagator.propagate(0.0)
            geodetic = ecef_to_geodetic(teme_to_ecef(inertial, record.julian_date).position_km)
        except (TrajectoryError, ValueError) as e:
            logger.error("health_check_failed", error=str(e))
            return _error(str(e), 503, status="unhealthy")

        return jsonify({
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
            "reference": {
                "name": record.name,
                "norad_id": record.satnum,
                "method": propagator.method,
                "gravity_model": record.gravity_model.name,
                "altitude_km": geodetic.altitude_km,
            },
            "configuration": {
                "gravity_model": config.gravity_model,
                "opsmode": config.opsmode,
                "verify_checksum": config.verify_checksum,
                "max_samples": config.max_samples,
            },
        }), 200

    @app.route('/propagate', methods=['POST'])
    def propagate_trajectory():
        """Sample a TLE trajectory"""
        payload = request.get_json(silent=True)
        if payload is None:
            return _error("Request body must be a JSON object", 400)

        try:
            body = PropagateRequest.model_validate(payload)
        except ValidationError as e:
            return _error("Invalid request", 400, details=json.loads(e.json()))

        duration_minutes = body.duration_hours * 60.0
        try:
            count = sample_count(duration_minutes, body.step_minutes)
        except ValueError as e:
            return _error(str(e), 400)
        if count > config.max_samples:
            return _error(
                f"Request needs {count} samples; the limit is {config.max_samples}", 400
            )

        gravity_model = body.gravity_model or config.gravity_model
        opsmode = body.opsmode or config.opsmode
        verify_checksum = (
            config.verify_checksum if body.verify_checksum is None else body.verify_checksum
        )

        try:
            rows = propagate_from_tle(
                body.line1,
                body.line2,
                body.duration_hours,
                body.step_minutes,
                gravity_model=gravity_model,
                verify_checksum=verify_checksum,
                opsmode=opsmode,
            )
        except AllocationError as e:
            logger.error("allocation_failed", samples=count, error=str(e))
            return _error(str(e), 507)
        except InvalidOrbitError as e:
            return _error(str(e), 422, code=e.code)
        except PropagationError as e:
            logger.warning("propagation_failed", sample_index=e.sample_index, code=e.code)
            return _error(str(e), 422, code=e.code, sample_index=e.sample_index,
                          tsince_minutes=e.tsince)
        except ValueError as e:
            return _error(str(e), 400)

        logger.info("trajectory_served", samples=len(rows), gravity_model=gravity_model)
        return jsonify({
            "count": len(rows),
            "fields": list(ROW_FIELDS),
            "step_minutes": body.step_minutes,
            "duration_hours": body.duration_hours,
            "gravity_model": gravity_model,
            "samples": rows.tolist(),
        }), 200

    @app.errorhandler(Exception)
    def handle_error(error):
        """Global error handler"""
        if isinstance(error, HTTPException):
            return error
        logger.exception("unhandled_error", error=str(error))
        return _error("Internal server error", 500)

    return app


def main():
    from logging_config import configure_logging

    config = ServiceConfig.from_env()
    configure_logging(config.logging_level, quiet_requests=True)
    app = create_app(config)
    logger.info("service_starting", host=config.host, port=config.port)
    app.run(host=config.host, port=config.port, debug=False)


if __name__ == '__main__':
    main()
