import structlog

from scoresheet.logic.service import ScoresheetService
from scoresheet.server.settings import ScoresheetSettings
from shared.logging import setup_logging
from shared.storage import LocalRoundScoreStorage, LocalSnapshotStorage

logger = structlog.get_logger()


def build_service(settings: ScoresheetSettings | None = None) -> ScoresheetService:
    """Configure logging and local storage, then build the scoresheet service."""
    settings = settings or ScoresheetSettings()
    log_file = setup_logging(log_dir=settings.log_dir)

    score_storage = LocalRoundScoreStorage(settings.save_dir) if settings.persist_rounds else None
    service = ScoresheetService(
        score_storage=score_storage,
        snapshot_storage=LocalSnapshotStorage(settings.save_dir),
        max_sessions=settings.max_sessions,
        autosave=settings.autosave,
    )
    logger.info(
        "scoresheet service ready",
        save_dir=settings.save_dir,
        persist_rounds=settings.persist_rounds,
        log_file=str(log_file) if log_file else None,
    )
    return service
