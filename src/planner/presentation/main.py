from fastapi import FastAPI

import inject

from src.planner.application.cache import TaskCache
from src.planner.application.services import TaskSyncService
from src.planner.infrastructure.fragments.client import WorkspaceApiClient
from src.planner.presentation.websockets import (
    WebSocketTasksBroadcaster,
    connection_manager,
    router as ws_router,
)
from src.setup.api_config import ApiSettings
from src.setup.app_config import configure_di
from src.setup.logging_config import configure_logging

settings = ApiSettings()
configure_logging(settings.LOG_LEVEL)
configure_di()

broadcaster = WebSocketTasksBroadcaster(connection_manager)
inject.instance(TaskCache).subscribe(broadcaster.broadcast_tasks_changed)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Tasks stored as workspace fragments, linked to an issue tracker",
)


async def _shutdown() -> None:
    await inject.instance(TaskSyncService).aclose()
    inject.instance(TaskCache).close()
    await inject.instance(WorkspaceApiClient).close()


app.add_event_handler("shutdown", _shutdown)

from src.planner.presentation.routes import router as api_router  # noqa: E402

app.include_router(api_router, prefix="")
app.include_router(ws_router, prefix="")
