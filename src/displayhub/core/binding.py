"""ポートバインド判定

1つのホスト・ポートを所有できるHubは1プロセスだけ。
バインドを試み、結果を {成功, 使用中, その他のエラー} に分類する。
使用中の場合のみ、呼び出し側はリレーモードに切り替える。
"""

from __future__ import annotations

import errno
import socket
import sys
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

# Windows の WSAEADDRINUSE
_WSAEADDRINUSE = 10048

Binder = Callable[[str, int], socket.socket]


class PortBindError(Exception):
    """使用中以外の理由でポートをバインドできなかった"""

    def __init__(self, host: str, port: int, cause: BaseException):
        super().__init__(f"Failed to bind {host}:{port}: {cause}")
        self.host = host
        self.port = port
        self.cause = cause


class BindOutcome(StrEnum):
    """バインド結果の種別"""

    BOUND = "bound"
    ADDRESS_IN_USE = "address_in_use"
    ERROR = "error"


@dataclass
class BindResult:
    """バインド試行の結果"""

    outcome: BindOutcome
    sock: socket.socket | None = None
    error: BaseException | None = None

    @property
    def port(self) -> int | None:
        """実際にバインドしたポート（port=0 指定時に有用）"""
        if self.sock is None:
            return None
        return self.sock.getsockname()[1]


def default_binder(host: str, port: int) -> socket.socket:
    """リッスン用ソケットを作成してバインドする

    POSIX では TIME_WAIT のソケットを使用中と判定しないよう SO_REUSEADDR を設定する。
    リッスン中のソケットがあれば EADDRINUSE になる。
    Windows の SO_REUSEADDR は使用中ポートの奪取を許すため設定しない。
    """
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        if sys.platform != "win32":
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(128)
        sock.setblocking(False)
    except BaseException:
        sock.close()
        raise
    return sock


def classify_bind_error(exc: BaseException) -> BindOutcome:
    """バインド時の例外を分類"""
    if isinstance(exc, OSError) and exc.errno in (errno.EADDRINUSE, _WSAEADDRINUSE):
        return BindOutcome.ADDRESS_IN_USE
    return BindOutcome.ERROR


def bind_port(host: str, port: int, binder: Binder = default_binder) -> BindResult:
    """ポートのバインドを試みる

    例外は送出せず、結果として返す。
    """
    try:
        sock = binder(host, port)
    except Exception as e:
        return BindResult(outcome=classify_bind_error(e), error=e)
    return BindResult(outcome=BindOutcome.BOUND, sock=sock)
