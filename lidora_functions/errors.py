from contextlib import contextmanager

import structlog

logger = structlog.get_logger(__name__)

GENERIC_MESSAGE = "An error occurred, developers have been alerted"


class HandlerError(Exception):
    pass


class ProviderRejected(HandlerError):
    """Stripe refused the request; the message is safe to show the user."""

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code


class InternalError(HandlerError):
    pass


def user_facing_message(error: Exception) -> str:
    if isinstance(error, ProviderRejected):
        return error.message
    return GENERIC_MESSAGE


@contextmanager
def reporting_errors(services, function_name: str, doc_path: str = None, **context):
    """Catch everything raised inside the block.

    The sanitized message is merged onto ``doc_path`` and the raw error is
    forwarded to the error reporter. Nothing propagates to the caller.
    """
    try:
        yield
    except Exception as error:
        logger.error(
            "handler_failed",
            function=function_name,
            path=doc_path,
            error=str(error),
            **context,
        )
        if doc_path is not None:
            try:
                services.store.set(doc_path, {"error": user_facing_message(error)}, merge=True)
            except Exception as write_error:
                logger.error("error_write_failed", path=doc_path, error=str(write_error))
        try:
            services.reporter.report(error, context, function_name=function_name)
        except Exception as report_error:
            logger.error("error_report_failed", function=function_name, error=str(report_error))
