import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scopelint.routers import lint

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(
    title="scopelint",
    description="API for scope-aware linting of JavaScript and TypeScript sources.",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for local development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(lint.router)


@app.get("/api-status")
async def root():
    return {"message": "scopelint server is running. Visit /docs for API documentation."}
