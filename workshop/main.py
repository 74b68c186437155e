# workshop/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from workshop.core.config import get_settings
from workshop.core.database import Base, engine
from workshop.core.log_config import configure_logging
from workshop.customer.routes import router as customer_router
from workshop.dashboard.routes import router as dashboard_router
from workshop.session.routes import router as session_router
from workshop.ticket.deps import get_poller, get_ticket_service
from workshop.ticket.routes import router as ticket_router

settings = get_settings()
configure_logging(settings.LOG_LEVEL)

Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await run_in_threadpool(get_ticket_service().init)
    yield
    await get_poller().stop()


app = FastAPI(
    title=settings.APP_NAME,
    description=settings.APP_DESC,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(ticket_router)
app.include_router(customer_router)
app.include_router(dashboard_router)
app.include_router(session_router)

@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}
