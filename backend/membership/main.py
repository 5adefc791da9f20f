import logging

from fastapi import FastAPI

from membership.api import health
from membership.api.errors import register_exception_handlers
from membership.api.v1.endpoints import invites, members
from membership.core.config import settings
from membership.core.init_db import init_db
from membership.core.metrics import PrometheusMiddleware, metrics_endpoint
from membership.db.mongodb import close_mongo_connection, connect_to_mongo

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Workspace membership API: email invitations, shareable invite links and
    seat synchronisation with the billing subscription.
    """,
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
)

app.add_middleware(PrometheusMiddleware)
register_exception_handlers(app)


@app.on_event("startup")
async def startup_event():
    await connect_to_mongo()
    await init_db()


@app.on_event("shutdown")
async def shutdown_event():
    await close_mongo_connection()


app.add_route("/metrics", metrics_endpoint, methods=["GET"])
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(members.router, prefix=settings.API_V1_STR, tags=["members"])
app.include_router(invites.router, prefix=settings.API_V1_STR, tags=["invites"])


@app.get("/")
async def root():
    return {"message": "Welcome to the Workspace Membership API"}
