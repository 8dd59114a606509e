"""ポートバインド判定のテスト"""

import errno
import socket

import pytest

from displayhub.core.binding import (
    BindOutcome,
    bind_port,
    classify_bind_error,
    default_binder,
)


def _raising_binder(exc: BaseException):
    def binder(host: str, port: int) -> socket.socket:
        raise exc

    return binder


class TestClassifyBindError:
    """classify_bind_error のテスト"""

    def test_eaddrinuse_is_address_in_use(self):
        """EADDRINUSE は使用中"""
        exc = OSError(errno.EADDRINUSE, "Address already in use")
        assert classify_bind_error(exc) == BindOutcome.ADDRESS_IN_USE

    def test_windows_addrinuse_is_address_in_use(self):
        """WSAEADDRINUSE も使用中"""
        exc = OSError(10048, "Only one usage of each socket address")
        assert classify_bind_error(exc) == BindOutcome.ADDRESS_IN_USE

    @pytest.mark.parametrize("code", [errno.EACCES, errno.EADDRNOTAVAIL])
    def test_other_errno_is_error(self, code):
        """使用中以外の理由はエラー"""
        assert classify_bind_error(OSError(code, "nope")) == BindOutcome.ERROR

    def test_non_os_error_is_error(self):
        """OSError 以外はエラー"""
        assert classify_bind_error(ValueError("bad host")) == BindOutcome.ERROR


class TestBindPort:
    """bind_port のテスト"""

    def test_bind_free_port(self):
        """空きポートにバインドできる"""
        # Act
        result = bind_port("127.0.0.1", 0)

        # Assert
        try:
            assert result.outcome == BindOutcome.BOUND
            assert result.port and result.port > 0
        finally:
            result.sock.close()

    def test_bind_port_in_use(self):
        """リッスン中のポートは使用中と判定する"""
        # Arrange
        holder = default_binder("127.0.0.1", 0)
        port = holder.getsockname()[1]

        # Act
        try:
            result = bind_port("127.0.0.1", port)
        finally:
            holder.close()

        # Assert
        assert result.outcome == BindOutcome.ADDRESS_IN_USE
        assert result.sock is None

    def test_binder_errors_are_returned_not_raised(self):
        """バインダーの例外は送出せず結果として返す"""
        # Arrange
        error = OSError(errno.EACCES, "Permission denied")

        # Act
        result = bind_port("127.0.0.1", 80, binder=_raising_binder(error))

        # Assert
        assert result.outcome == BindOutcome.ERROR
        assert result.error is error
        assert result.port is None
