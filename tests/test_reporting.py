from lidora_functions.reporting import ErrorReporter, build_error_event


def raise_and_catch():
    try:
        raise ValueError("bad amount")
    except ValueError as error:
        return error


def test_build_error_event():
    event = build_error_event(raise_and_catch(), {"user": "u1"}, "create_payment")

    assert "ValueError: bad amount" in event["message"]
    assert "Traceback" in event["message"]
    assert event["serviceContext"] == {"service": "create_payment", "resourceType": "cloud_function"}
    assert event["context"] == {"user": "u1"}


def test_report_writes_to_errors_log(mocker):
    logging_client = mocker.Mock()
    reporter = ErrorReporter(logging_client)

    reporter.report(raise_and_catch(), {"user": "u1"}, function_name="create_payment")

    logging_client.logger.assert_called_once_with("errors")
    log = logging_client.logger.return_value
    payload = log.log_struct.call_args.args[0]
    kwargs = log.log_struct.call_args.kwargs
    assert payload["context"] == {"user": "u1"}
    assert kwargs["severity"] == "ERROR"
    assert kwargs["resource"].type == "cloud_function"
    assert kwargs["resource"].labels == {"function_name": "create_payment"}
