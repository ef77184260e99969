import asyncio
import logging
from typing import List, Optional

from fastapi import FastAPI, File, Header, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse

from funnel_processor import DataProcessor, ProcessedResult
from funnel_processor.config import settings
from funnel_processor.exceptions import (
    ConfigurationError,
    IngestionError,
    SourceFetchError,
)

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

app = FastAPI(title="Sales Funnel Data Processor")

# Initialize the processor once
processor = DataProcessor()


def auth_ok(x_api_key: Optional[str]) -> bool:
    expected = settings.api_key()
    if expected is None:
        return True
    return x_api_key == expected


def _error_status(exc: Exception) -> int:
    if isinstance(exc, SourceFetchError):
        return 502
    if isinstance(exc, IngestionError):
        return 400
    return 500


async def _apply_dealer_filter(result: ProcessedResult, dealers: Optional[List[str]]) -> ProcessedResult:
    if not dealers:
        return result
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, processor.filter_by_dealers, result, dealers)


@app.post("/process-file", response_model=ProcessedResult)
async def process_file(
    file: UploadFile = File(...),
    dealer: Optional[List[str]] = Query(None),
    x_api_key: Optional[str] = Header(None),
):
    if not auth_ok(x_api_key):
        raise HTTPException(status_code=401, detail="Unauthorized")

    data = await file.read()
    filename = file.filename or ""
    logger.info(f"Upload received: {filename} ({len(data)} bytes)")

    try:
        loop = asyncio.get_running_loop()
        # Parsing and metrics are synchronous; keep them off the event loop
        result = await asyncio.wait_for(
            loop.run_in_executor(None, processor.process_file, data, filename),
            timeout=settings.request_timeout(),
        )
        return await _apply_dealer_filter(result, dealer)
    except asyncio.TimeoutError:
        logger.error(f"Processing of {filename} timed out")
        raise HTTPException(status_code=504, detail="Processing timed out")
    except Exception as e:
        logger.error(f"Processing failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=_error_status(e), detail=f"Processing failed: {str(e)}")


@app.post("/process-api", response_model=ProcessedResult)
async def process_api(
    file: Optional[UploadFile] = File(None),
    dealer: Optional[List[str]] = Query(None),
    x_api_key: Optional[str] = Header(None),
):
    if not auth_ok(x_api_key):
        raise HTTPException(status_code=401, detail="Unauthorized")

    store_visits = None
    filename = ""
    if file is not None:
        store_visits = await file.read()
        filename = file.filename or ""

    try:
        result = await asyncio.wait_for(
            processor.process_api(store_visits=store_visits, filename=filename),
            timeout=settings.request_timeout(),
        )
        return await _apply_dealer_filter(result, dealer)
    except asyncio.TimeoutError:
        logger.error("Remote processing timed out")
        raise HTTPException(status_code=504, detail="Processing timed out")
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.error(f"Processing failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=_error_status(e), detail=f"Processing failed: {str(e)}")


@app.get("/health")
async def health():
    return JSONResponse({"status": "ok"})
