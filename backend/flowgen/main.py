from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from flowgen.api.routes import router
from flowgen.config import CORS_ORIGINS
from flowgen.logging_config import configure_logging

configure_logging()

app = FastAPI(
    title="Workflow Orchestrator",
    version="0.1.0",
)

# Middleware FIRST
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes AFTER middleware
app.include_router(router)
