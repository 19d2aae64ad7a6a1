import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from sagascript.app.entitlements import EntitlementConfigurationError  # noqa: E402
from sagascript.app.routes.entitlements import router as entitlements_router  # noqa: E402
from sagascript.app.services.entitlements import get_entitlement_service  # noqa: E402

logger = logging.getLogger("entitlements")

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", "http://localhost:5173").split(",")
    if origin.strip()
]


@asynccontextmanager
async def lifespan(_: FastAPI):
    get_entitlement_service()
    yield


app = FastAPI(title="SagaScript Entitlements API", lifespan=lifespan)

# Vite proxy origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(entitlements_router)


@app.exception_handler(EntitlementConfigurationError)
async def entitlement_configuration_error_handler(
    request: Request, exc: EntitlementConfigurationError
) -> JSONResponse:
    logger.error("Entitlement configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": "entitlement_configuration", "message": str(exc)},
    )


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}

# run: uvicorn sagascript.main:app --host 127.0.0.1 --port 8000 --reload
