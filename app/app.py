# Main script to run the eventcal api, startup scripts, start the different routers

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import config
import database
import db_setup
import schemas
from routers import events, views

# Initialize logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Check if the database is set up, if not, create it and the events table
    db_setup.setup_database()
    yield
    database.close_connection()


# Initialize FastAPI app
app = FastAPI(title="EventCal-API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(events.router, prefix="/api/events", tags=["events"])
app.include_router(views.router, prefix="/api/views", tags=["views"])


@app.exception_handler(Exception)
async def unhandled_exception(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Something went wrong!"})


# Health check endpoint
@app.get("/api/health", response_model=schemas.HealthResponse)
async def health():
    return {"status": "Server is running"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.API_HOST, port=config.API_PORT)
