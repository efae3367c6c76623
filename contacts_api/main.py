import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from contacts_api import db, models
from contacts_api.avatars import build_avatar_storage
from contacts_api.config import get_settings
from contacts_api.errors import register_error_handlers
from contacts_api.logging_config import AccessLogMiddleware, configure_logging
from contacts_api.mail import Mailer
from contacts_api.routers import contacts, users

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    models.Base.metadata.create_all(bind=db.engine)
    logger.info("Contacts API started (%s)", app.state.settings.app_env)
    yield


def create_app() -> FastAPI:
    """
    Build the application and the services its handlers depend on.

    :return: Configured FastAPI instance.
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Contacts API", lifespan=lifespan)
    app.state.settings = settings
    app.state.mailer = Mailer(settings)
    app.state.avatar_storage = build_avatar_storage(settings)

    allow_origins = list(settings.cors_origins) or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=allow_origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(AccessLogMiddleware, verbose=not settings.is_production)

    register_error_handlers(app)

    app.include_router(users.router)
    app.include_router(contacts.router)

    os.makedirs(settings.avatars_dir, exist_ok=True)
    app.mount("/avatars", StaticFiles(directory=settings.avatars_dir), name="avatars")
    return app


app = create_app()
