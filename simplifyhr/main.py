"""
SimplifyHR - Main Application

FastAPI backend with:
- PostgreSQL for structured data
- MongoDB for documents (AI interview transcripts, JD generations, offer templates)
- OpenAI-compatible AI for job descriptions, screening and interviews
- JWT authentication

Run: uvicorn simplifyhr.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from simplifyhr import __version__
from simplifyhr.api.routes import api_router
from simplifyhr.core.logging_config import configure_logging
from simplifyhr.db.mongodb import init_mongo_indexes, test_mongo_connection
from simplifyhr.db.postgres import test_postgres_connection

configure_logging()
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="SimplifyHR",
    description="""
    Recruitment platform with AI-assisted hiring.

    ## Features
    - **Authentication**: JWT-based auth for admins, clients, vendors, candidates and interviewers
    - **Jobs**: Wizard validation, AI job descriptions (streamed), interview rounds, publishing
    - **Applications**: Pipeline status, AI screening
    - **Scheduling**: Scored interview slots, bulk scheduling with meeting links
    - **Interviews**: Feedback, AI interviewer chat, realtime voice tokens
    - **Offers**: Templates and the five-step offer workflow
    - **Analytics**: Recruitment funnel and AI performance

    ## Databases
    - PostgreSQL: Structured data
    - MongoDB: Documents (interview transcripts, JD generations, template files)
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize MongoDB indexes on startup."""
    try:
        init_mongo_indexes()
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "SimplifyHR", "version": __version__}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    postgres_ok = test_postgres_connection()
    mongo_ok = test_mongo_connection()
    return {
        "status": "healthy" if postgres_ok and mongo_ok else "degraded",
        "postgres": "connected" if postgres_ok else "disconnected",
        "mongodb": "connected" if mongo_ok else "disconnected"
    }
