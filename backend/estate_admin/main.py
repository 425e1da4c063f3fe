import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from estate_admin.api import auth, permissions, sidebar
from estate_admin.core.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=f"{settings.PROJECT_NAME} API",
    description="Admin area access control: role/permission-filtered sidebar navigation",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(auth.router, prefix="/api/v1")
app.include_router(sidebar.router, prefix="/api/v1")
app.include_router(permissions.router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "ok", "version": "0.1.0"}
