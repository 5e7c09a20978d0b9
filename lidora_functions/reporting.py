"""
Forward caught exceptions to Cloud Error Reporting.

Entries are written to a log stream whose name contains "err" so that
Error Reporting picks them up, with cloud_function resource metadata.
"""
import traceback

import structlog
from google.cloud.logging_v2.resource import Resource

logger = structlog.get_logger(__name__)

LOG_NAME = "errors"
RESOURCE_TYPE = "cloud_function"


class ErrorReporter:
    def __init__(self, logging_client):
        self.log = logging_client.logger(LOG_NAME)

    def report(self, error: Exception, context: dict = None, function_name: str = "unknown"):
        resource = Resource(type=RESOURCE_TYPE, labels={"function_name": function_name})
        self.log.log_struct(
            build_error_event(error, context or {}, function_name),
            resource=resource,
            severity="ERROR",
        )
        logger.info("error_reported", function=function_name)


def build_error_event(error: Exception, context: dict, function_name: str) -> dict:
    stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return {
        "message": stack,
        "serviceContext": {
            "service": function_name,
            "resourceType": RESOURCE_TYPE,
        },
        "context": context,
    }
