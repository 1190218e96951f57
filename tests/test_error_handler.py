from formflow.error_handler import ErrorHandler, PersistenceError, SubmissionError


def test_handle_exception_returns_payload():
    eh = ErrorHandler()
    out = eh.handle_exception(Exception("boom"), context={"k": "v"})
    assert out["error"] == "internal_error"
    assert "internal error" in out["message"].lower()
    assert "boom" in out["metadata"]["error"]
    assert out["metadata"]["context"] == {"k": "v"}


def test_persistence_error_keeps_key():
    err = PersistenceError("hq:abc", "write failed")
    assert err.key == "hq:abc"
    assert "hq:abc" in str(err)


def test_submission_error_is_retryable_by_default():
    assert SubmissionError(kind="network", message="offline").to_dict() == {
        "kind": "network",
        "message": "offline",
        "retryable": True,
    }
