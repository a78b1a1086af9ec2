"""
Background IRC listener for Twitch chat.

Connects to IRC, hands every chat message to the registered handlers,
and sends replies over the same connection.
"""

import re
import socket
import ssl
import threading
import time
from dataclasses import dataclass, field
from typing import Callable

from .logger import get_logger

logger = get_logger("chat_listener")

IRC_HOST = "irc.chat.twitch.tv"
IRC_PORT = 6697

# PRIVMSG format: @tags :user!user@user.tmi.twitch.tv PRIVMSG #channel :message
PRIVMSG_PATTERN = re.compile(
    r"(?:@(\S+)\s+)?:(\w+)!\w+@\w+\.tmi\.twitch\.tv\s+PRIVMSG\s+#(\w+)\s+:(.+)"
)


@dataclass
class ChatMessage:
    """Represents a Twitch chat message."""

    username: str
    message: str
    channel: str = ""
    message_id: str = ""
    is_mod: bool = False
    is_subscriber: bool = False


def parse_message(raw: str) -> ChatMessage | None:
    """Parse an IRC line into a ChatMessage. Returns None for anything but PRIVMSG."""
    privmsg_match = PRIVMSG_PATTERN.match(raw.strip())
    if not privmsg_match:
        return None

    tags_str, username, channel, message = privmsg_match.groups()

    is_mod = False
    is_sub = False
    msg_id = ""

    if tags_str:
        tags = dict(t.split("=", 1) for t in tags_str.split(";") if "=" in t)
        is_mod = tags.get("mod") == "1" or "broadcaster" in tags.get("badges", "")
        is_sub = tags.get("subscriber") == "1"
        msg_id = tags.get("id", "")

    return ChatMessage(
        username=username,
        message=message,
        channel=channel,
        message_id=msg_id,
        is_mod=is_mod,
        is_subscriber=is_sub,
    )


@dataclass
class ChatListener:
    """Background listener for Twitch IRC chat."""

    channel: str
    oauth_token: str
    nick: str = ""
    _socket: ssl.SSLSocket | None = None
    _thread: threading.Thread | None = None
    _running: bool = False
    _send_lock: threading.Lock = field(default_factory=threading.Lock)
    _handlers: list[Callable[[ChatMessage], None]] = field(default_factory=list)

    def __post_init__(self):
        if not self.nick:
            self.nick = self.channel

    def add_handler(self, handler: Callable[[ChatMessage], None]) -> None:
        """Add a message handler."""
        self._handlers.append(handler)

    def _connect(self) -> None:
        """Connect to Twitch IRC."""
        token = self.oauth_token
        if not token.startswith("oauth:"):
            token = f"oauth:{token}"

        logger.debug(f"Connecting to Twitch IRC for #{self.channel}")
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(8.0)  # Set timeout BEFORE SSL wrap and connect
        ctx = ssl.create_default_context()
        self._socket = ctx.wrap_socket(sock, server_hostname=IRC_HOST)
        self._socket.connect((IRC_HOST, IRC_PORT))
        self._socket.settimeout(1.0)  # Short timeout for responsive shutdown

        self._socket.send(f"PASS {token}\r\n".encode())
        self._socket.send(f"NICK {self.nick}\r\n".encode())
        self._socket.send(b"CAP REQ :twitch.tv/tags twitch.tv/commands\r\n")
        self._socket.send(f"JOIN #{self.channel}\r\n".encode())
        logger.debug("IRC connection established")

    def _dispatch(self, msg: ChatMessage) -> None:
        for handler in self._handlers:
            try:
                handler(msg)
            except Exception as e:
                logger.warning(f"Chat handler error: {e}")  # Log but don't break chain

    def _reconnect(self) -> None:
        backoff = 5
        for attempt in range(3):
            logger.info(f"Reconnecting (attempt {attempt + 1}/3) in {backoff}s...")
            time.sleep(backoff)
            try:
                self._connect()
                logger.info("Reconnected successfully")
                return
            except OSError as reconnect_err:
                logger.warning(f"Reconnect attempt {attempt + 1} failed: {reconnect_err}")
                backoff *= 2
        logger.error("Giving up on chat connection")
        self._running = False

    def _listen_loop(self) -> None:
        """Main listening loop."""
        try:
            self._connect()
            logger.info(f"Chat listener connected for #{self.channel}")
        except OSError as e:
            logger.error(f"Chat listener failed to connect: {e}")
            self._running = False
            return

        buffer = ""

        while self._running:
            try:
                data = self._socket.recv(4096).decode("utf-8", errors="ignore")
                if not data:
                    raise ConnectionError("Connection closed by server")

                buffer += data

                while "\r\n" in buffer:
                    line, buffer = buffer.split("\r\n", 1)

                    # Respond to PING to stay connected
                    if line.startswith("PING"):
                        self._send_line("PONG :tmi.twitch.tv")
                        continue

                    msg = parse_message(line)
                    if msg:
                        self._dispatch(msg)

            except socket.timeout:
                continue
            except OSError as e:
                if self._running:
                    logger.error(f"Chat listener error: {e}")
                    buffer = ""
                    self._reconnect()

    def start(self) -> None:
        """Start the listener in a background thread."""
        if self._running:
            return

        self._running = True
        self._thread = threading.Thread(target=self._listen_loop, daemon=True, name="irc-listener")
        self._thread.start()
        logger.info(f"Chat listener starting for #{self.channel} (connecting in background)")

    def stop(self) -> None:
        """Stop the listener."""
        self._running = False
        if self._socket:
            try:
                self._socket.close()
            except OSError as e:
                logger.debug(f"Socket close error (expected): {e}")
        if self._thread:
            self._thread.join(timeout=2.0)
        logger.info("Chat listener stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    def send_message(self, message: str) -> None:
        """Send a single-line message through the IRC connection."""
        if not self._running or not self._socket:
            raise RuntimeError("Chat listener not connected - cannot send message")

        self._send_line(f"PRIVMSG #{self.channel} :{message}")

    def _send_line(self, line: str) -> None:
        # Reader and worker threads share one SSL socket
        with self._send_lock:
            self._socket.send(f"{line}\r\n".encode())
