from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

from ...api import ApiFunction, call_api, get_api_functions
from ...data import BackendNotConfiguredError, BackendRequestError
from ...logging import configure_logging
from ..exceptions import (
    FieldSaveError,
    InvalidTransition,
    LifecycleValidationError,
    StatusUpdateError,
)

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Curator Portal Local API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ApiCallRequest(BaseModel):
    arguments: Dict[str, Any] = Field(default_factory=dict)


def _serialize_api_function(api_function: ApiFunction) -> dict:
    return api_function.describe()


@app.get("/api/functions")
async def list_api_functions() -> JSONResponse:
    functions = [_serialize_api_function(func) for func in get_api_functions()]
    return JSONResponse({"functions": functions})


@app.post("/api/functions/{function_name}")
async def invoke_api_function(function_name: str, request: ApiCallRequest) -> JSONResponse:
    if function_name not in {func.name for func in get_api_functions()}:
        logger.warning("API function not found: %s", function_name)
        raise HTTPException(status_code=404, detail=f"API function '{function_name}' is not registered.")
    try:
        result = await call_api(function_name, **request.arguments)
    except LifecycleValidationError as exc:
        raise HTTPException(status_code=400, detail={"message": str(exc), "errors": exc.errors}) from exc
    except InvalidTransition as exc:
        raise HTTPException(status_code=409, detail={"message": str(exc)}) from exc
    except StatusUpdateError as exc:
        # Fields are already persisted here; the client must not report a plain save failure.
        detail: Dict[str, Any] = {"message": str(exc), "fieldsSaved": exc.event is not None}
        if exc.event is not None:
            detail["eventId"] = exc.event.id
            detail["status"] = exc.event.status.value
        raise HTTPException(status_code=502, detail=detail) from exc
    except (FieldSaveError, BackendRequestError) as exc:
        raise HTTPException(status_code=502, detail={"message": str(exc), "fieldsSaved": False}) from exc
    except BackendNotConfiguredError as exc:
        raise HTTPException(status_code=503, detail={"message": str(exc)}) from exc
    except (ValidationError, ValueError, TypeError) as exc:
        logger.info("API function %s rejected its arguments: %s", function_name, exc)
        raise HTTPException(status_code=400, detail={"message": str(exc)}) from exc
    logger.debug("API function %s executed successfully", function_name)
    return JSONResponse({"name": function_name, "result": result})


def run_local_server(host: str = "127.0.0.1", port: int = 8000) -> None:
    import asyncio

    from hypercorn.asyncio import serve
    from hypercorn.config import Config

    config = Config()
    config.bind = [f"{host}:{port}"]
    asyncio.run(serve(app, config))
