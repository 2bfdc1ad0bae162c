import sentry_sdk

from ems.core.config import settings
from ems.core.errors import EMSError


def drop_client_errors(event, hint):
    """Validation, duplicate and not-found failures are expected outcomes, not incidents."""
    exc_info = hint.get("exc_info")
    if exc_info and isinstance(exc_info[1], EMSError) and exc_info[1].status_code < 500:
        return None
    return event


def configure_error_monitoring() -> None:
    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.env,
            traces_sample_rate=0.2,
            before_send=drop_client_errors,
        )
