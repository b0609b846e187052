from __future__ import annotations

from typing import Any, Iterable

from flask_socketio import SocketIO


class SocketIOTransport:
    """Delivers gateway output over Socket.IO rooms.

    Works with explicit session ids so it can be used from background tasks,
    outside of any request context.
    """

    def __init__(self, socketio: SocketIO, namespace: str = "/") -> None:
        self.socketio = socketio
        self.namespace = namespace

    def send(self, connection_id: str, event: str, payload: Any) -> None:
        self.socketio.emit(event, payload, to=connection_id, namespace=self.namespace)

    def broadcast(self, group: str, event: str, payload: Any, skip: Iterable[str] = ()) -> None:
        skip_sid = list(skip) or None
        self.socketio.emit(event, payload, to=group, skip_sid=skip_sid, namespace=self.namespace)

    def join(self, connection_id: str, group: str) -> None:
        self.socketio.server.enter_room(connection_id, group, namespace=self.namespace)

    def leave(self, connection_id: str, group: str) -> None:
        self.socketio.server.leave_room(connection_id, group, namespace=self.namespace)
