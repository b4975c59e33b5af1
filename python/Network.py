import json
import logging
import socket

import zmq

log = logging.getLogger(__name__)


def encode_event(event_data):
    """One newline-terminated UTF-8 JSON document per event."""
    return (json.dumps(event_data, ensure_ascii=False) + "\n").encode("utf-8")


# ==========================================
# TCP: single client, newline-delimited JSON
# ==========================================
class NetworkBridge:
    def __init__(self, host="127.0.0.1", port=5555):
        self.addr = (host, port)
        self.sock = None
        self.conn = None
        self._setup_server()

    def _setup_server(self):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self.sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self.sock.bind(self.addr)
        self.sock.listen(1)
        self.sock.setblocking(False)  # Non-blocking accept
        log.info("Listening on %s:%s...", *self.sock.getsockname()[:2])

    def update(self):
        """Check for new connections non-blockingly"""
        if self.conn is None:
            try:
                self.conn, addr = self.sock.accept()
                self.conn.setblocking(True)  # Blocking sends
                log.info("Connected: %s", addr)
            except BlockingIOError:
                pass

    def send_event(self, event_data):
        self.update()
        if not self.conn:
            return False
        try:
            self.conn.sendall(encode_event(event_data))
            return True
        except (BrokenPipeError, ConnectionResetError):
            log.warning("Client disconnected")
            self.conn.close()
            self.conn = None
            return False

    def close(self):
        if self.conn is not None:
            self.conn.close()
            self.conn = None
        if self.sock is not None:
            self.sock.close()
            self.sock = None


# ==========================================
# ZeroMQ: PUB socket, any number of subscribers
# ==========================================
class ZmqPublisher:
    def __init__(self, host="*", port=5555, context=None):
        self.context = context or zmq.Context.instance()
        self.socket = self.context.socket(zmq.PUB)
        self.socket.bind(f"tcp://{host}:{port}")
        log.info("Publishing on tcp://%s:%s", host, port)

    def update(self):
        pass

    def send_event(self, event_data):
        self.socket.send(encode_event(event_data))
        return True

    def close(self):
        self.socket.close(linger=0)


def make_publisher(cfg):
    net = (cfg or {}).get("network", {})
    transport = net.get("transport", "tcp")
    port = int(net.get("port", 5555))
    if transport == "zmq":
        return ZmqPublisher(host=net.get("host", "*"), port=port)
    if transport == "tcp":
        return NetworkBridge(host=net.get("host", "127.0.0.1"), port=port)
    raise ValueError(f"unknown network transport: {transport!r}")
