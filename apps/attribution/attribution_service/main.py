import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from attribution_service.api import router
from attribution_service.links_api import links_router
from attribution_service.services.exceptions import AttributionError
from attribution_service.settings import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Attribution Service", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=settings.CORS_ALLOW_HEADERS,
)
app.include_router(router)
app.include_router(links_router)


@app.exception_handler(AttributionError)
async def attribution_error_handler(request: Request, exc: AttributionError):
    logger.error("Error in %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})
