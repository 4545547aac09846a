"""
FastAPI app for tax-calc.

Routes:
- POST /tax/calculations            : compute tax for one JSON record
- POST /tax/calculations/upload-csv : compute taxes for an uploaded CSV (form field 'taxFile')
- GET  /tax/brackets                : active bracket schedule

Every client error is returned as {"error": "<message>"}.
"""

import logging
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from taxcalc import __version__
from taxcalc.sdk import (
    BracketSchedule,
    IncomeTaxRecord,
    TaxCalcError,
    calculate_income_tax,
    describe_validation_error,
    load_bracket_schedule,
    run_batch_csv,
    to_response,
)

logger = logging.getLogger(__name__)

TAX_FILE_FIELD = "taxFile"

router = APIRouter(prefix="/tax", tags=["Tax"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _schedule(request: Request) -> BracketSchedule:
    return request.app.state.schedule


# =============================================================================
# TAX ROUTES
# =============================================================================

@router.post("/calculations")
async def calculate_tax(request: Request):
    """Compute tax owed or refundable for one record."""
    body = await request.body()
    if not body.strip():
        return _error(400, "empty request body")

    try:
        record = IncomeTaxRecord.model_validate_json(body)
    except ValidationError as e:
        logger.warning(f"Rejected record body: {describe_validation_error(e)}")
        return _error(400, describe_validation_error(e))

    result = calculate_income_tax(record, _schedule(request))
    return to_response(result)


@router.post("/calculations/upload-csv")
async def upload_csv(request: Request):
    """Compute taxes for every row of an uploaded CSV file.

    The file has a header row, then rows of totalIncome,withholdingTax,donation.
    The first bad row rejects the whole upload.
    """
    body = await request.body()
    if not body:
        return _error(400, "empty request body")

    form = await request.form()
    upload = form.get(TAX_FILE_FIELD)
    if not isinstance(upload, UploadFile):
        return _error(400, f"missing file field '{TAX_FILE_FIELD}'")

    content = await upload.read()
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.warning(f"Unreadable upload: {upload.filename}")
        return _error(422, f"cannot read file '{upload.filename}': not UTF-8 text")

    result = run_batch_csv(text, _schedule(request))
    logger.info(f"Batch upload {upload.filename}: {len(result.taxes)} row(s)")
    return to_response(result)


@router.get("/brackets")
async def get_brackets(request: Request):
    """Return the bracket schedule this app computes with."""
    return _schedule(request).model_dump(mode="json")


# =============================================================================
# APP FACTORY
# =============================================================================

async def tax_calc_error_handler(request: Request, exc: TaxCalcError):
    """Validation, parse and batch errors are client errors."""
    logger.warning(f"{type(exc).__name__}: {exc}")
    return _error(400, str(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Keep the {"error": ...} shape for framework-raised HTTP errors too."""
    return _error(exc.status_code, str(exc.detail))


def create_app(schedule: Optional[BracketSchedule] = None) -> FastAPI:
    """Build the API app.

    Args:
        schedule: Bracket schedule to compute with (default: configured schedule,
            loaded once at startup)
    """
    if schedule is None:
        schedule = load_bracket_schedule()

    app = FastAPI(title="tax-calc", version=__version__)
    app.state.schedule = schedule
    app.include_router(router)
    app.add_exception_handler(TaxCalcError, tax_calc_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    return app
