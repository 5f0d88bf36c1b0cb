"""Tests for error types."""

from tc_monitor.errors import ClientKeyCollisionError, ServiceClientError


class TestErrors:
    def test_service_client_error_message(self):
        error = ServiceClientError("cvm", "AuthFailure", "bad key", request_id="r-1")

        assert str(error) == "[cvm] AuthFailure: bad key"
        assert error.request_id == "r-1"

    def test_message_defaults_to_code(self):
        error = ServiceClientError("cdb", "InternalError")

        assert error.message == "InternalError"

    def test_collision_is_value_error(self):
        error = ClientKeyCollisionError("CVMDatasource", "cvm", "CVM")

        assert isinstance(error, ValueError)
        assert "'cvm'" in str(error) and "'CVM'" in str(error)
