import logging
import time
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from hrtests.config import Settings, get_settings
from hrtests.database import create_db_engine
from hrtests.exceptions import (
    ServiceException,
    StoreError,
    general_exception_handler,
    http_exception_handler,
    request_validation_handler,
    service_exception_handler,
)
from hrtests.routers import health as health_router
from hrtests.routers import stats as stats_router
from hrtests.routers import submit as submit_router
from hrtests.routers import users as users_router
from hrtests.services.reporting import ReportingService
from hrtests.services.submission import SubmissionService
from hrtests.store import ResultStore
from hrtests.utils.formatter import MessageFormatter
from hrtests.utils.scoring_config import get_scoring_config
from hrtests.utils.telegram import TelegramNotifier

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[ResultStore] = None,
    notifier: Optional[TelegramNotifier] = None,
) -> FastAPI:
    """
    Собирает приложение: хранилище, канал уведомлений, сервисы и роутеры.
    store и notifier можно подменить (тесты).
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)

    if store is None:
        store = ResultStore(create_db_engine(settings.database_url))
    try:
        store.init_schema()
    except StoreError as e:
        # без базы сервис продолжает считать и отправлять результаты
        logger.error(f"База данных недоступна при старте: {e}")

    if notifier is None:
        notifier = TelegramNotifier(
            bot_token=settings.telegram_bot_token,
            channel_id=settings.telegram_channel_id,
            timeout=settings.telegram_timeout,
            dry_run=settings.notification_dry_run,
        )
        if not notifier.configured and not notifier.dry_run:
            logger.warning("TELEGRAM_BOT_TOKEN или TELEGRAM_CHANNEL_ID не заданы: уведомления отключены")

    config = get_scoring_config()
    formatter = MessageFormatter(config=config, hr_contact=settings.hr_contact)

    app = FastAPI(title="HR Tests", version="1.0.0")
    app.state.settings = settings
    app.state.store = store
    app.state.started_at = time.monotonic()
    app.state.submission_service = SubmissionService(store, notifier, formatter, config=config)
    app.state.reporting_service = ReportingService(store)

    app.add_exception_handler(ServiceException, service_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    app.include_router(submit_router.router)
    app.include_router(submit_router.legacy_router)
    app.include_router(users_router.router)
    app.include_router(stats_router.router)
    app.include_router(health_router.router)
    return app
