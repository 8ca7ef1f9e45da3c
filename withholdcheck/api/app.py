"""FastAPI application factory.

Start with: withhold-check serve
(or: uvicorn withholdcheck.api.app:app --port 3000)
"""
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from withholdcheck import __version__
from withholdcheck.api.deps import Calculator, get_calculator
from withholdcheck.api.schemas import CalculationResponse
from withholdcheck.sdk.schemas import REQUIRED_REQUEST_FIELDS, CalculationRequest

logger = logging.getLogger(__name__)


def _field_name(loc) -> str:
    """Dot-notation field path without the leading 'body'."""
    return ".".join(str(part) for part in loc if part != "body")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Withhold Check API",
        version=__version__,
        description="Paycheck withholding cross-checked between two public calculators.",
    )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        """Missing or malformed request fields -> 400, all violations in one response."""
        details = [
            {"field": _field_name(error["loc"]) or None, "issue": error["msg"]}
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={
                "error": "Missing required fields",
                "requiredFields": REQUIRED_REQUEST_FIELDS,
                "details": details,
            },
        )

    @app.get("/health", tags=["ops"])
    def health() -> dict:
        return {"status": "healthy"}

    @app.post("/api/calculate-taxes", tags=["taxes"])
    def calculate_taxes(
        payload: CalculationRequest,
        calculator: Calculator = Depends(get_calculator),
    ) -> JSONResponse:
        """Cross-checked withholding breakdown.

        Returns:
          200: merged breakdown with percentages and per-category deviations
          400: missing or invalid fields
          500: sources never agreed, or an internal error
        """
        try:
            report = calculator(payload)
        except Exception as e:
            logger.error(f"Calculation failed: {e}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "message": str(e)},
            )

        if not report:
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Failed to calculate taxes after multiple attempts",
                    "reason": report.reason,
                    "attempts": report.attempt_count,
                },
            )

        body = CalculationResponse.from_report(report)
        return JSONResponse(status_code=200, content=body.model_dump(by_alias=True))

    return app


app = create_app()
