import inject

from src.planner.application.cache import TaskCache
from src.planner.application.services import TaskSyncService
from src.planner.domain.repositories import (
    FragmentRepository,
    MemberDirectoryRepository,
    TrackerConfigRepository,
    TrackerRepository,
    WorkspaceConfigRepository,
)
from src.planner.infrastructure.config.store import TrackerConfigStore, WorkspaceConfigStore
from src.planner.infrastructure.fragments.client import (
    HttpFragmentRepository,
    HttpMemberDirectory,
    WorkspaceApiClient,
)
from src.planner.infrastructure.tracker.client import JiraTrackerRepository
from src.setup.tracker_config import TrackerSettings
from src.setup.workspace_config import WorkspaceSettings


def _build_config(
    workspace_settings: WorkspaceSettings, tracker_settings: TrackerSettings
):
    def _config(binder: inject.Binder) -> None:
        api_client = WorkspaceApiClient(
            workspace_settings.WORKSPACE_API_URL,
            workspace_settings.WORKSPACE_API_TOKEN,
            timeout=workspace_settings.WORKSPACE_TIMEOUT_SECONDS,
        )
        fragments = HttpFragmentRepository(api_client)
        tracker_store = TrackerConfigStore(workspace_settings.CONFIG_DIR)
        cache = TaskCache(fragments)

        binder.bind(WorkspaceApiClient, api_client)
        binder.bind(FragmentRepository, fragments)
        binder.bind(MemberDirectoryRepository, HttpMemberDirectory(api_client))
        binder.bind(TrackerConfigRepository, tracker_store)
        binder.bind(WorkspaceConfigRepository, WorkspaceConfigStore(workspace_settings.CONFIG_DIR))
        binder.bind(
            TrackerRepository,
            JiraTrackerRepository(
                tracker_store,
                api_prefix=tracker_settings.TRACKER_API_PREFIX,
                timeout=tracker_settings.TRACKER_TIMEOUT_SECONDS,
            ),
        )
        binder.bind(TaskCache, cache)
        # Service resolves the bindings above, so it is built lazily.
        binder.bind_to_constructor(TaskSyncService, TaskSyncService)

    return _config


def configure_di(
    workspace_settings: WorkspaceSettings | None = None,
    tracker_settings: TrackerSettings | None = None,
) -> None:
    """Bind the process-wide collaborators into the injector once."""
    if inject.is_configured():
        return
    inject.configure(
        _build_config(
            workspace_settings or WorkspaceSettings(),
            tracker_settings or TrackerSettings(),
        )
    )
