"""
Twitch chat bot: answers !clips commands in a channel.

Usage:
    export TWITCH_CLIENT_ID=... (see README.md for the full list)
    clips-bot
"""

import signal
import sys
import threading
from concurrent.futures import ThreadPoolExecutor

from .app import create_twitch_client
from .bot import ClipsBot
from .command import is_command
from .config import Config
from .utils.chat_listener import ChatListener, ChatMessage
from .utils.logger import get_logger, set_level
from .utils.twitch_client import TransportError

logger = get_logger("chat_bot")

LISTENER_POLL_SECONDS = 1.0


class ChatCommandHandler:
    """
    Feeds chat messages to a ClipsBot and sends the replies.

    Each command runs on a worker thread so a long catalog scan never
    stalls the IRC read loop.
    """

    def __init__(self, bot: ClipsBot, listener: ChatListener, executor: ThreadPoolExecutor):
        self.bot = bot
        self.listener = listener
        self.executor = executor

    def __call__(self, msg: ChatMessage) -> None:
        if msg.username.lower() == self.listener.nick.lower():
            return
        if not is_command(msg.message):
            return
        logger.info(f"Got command from {msg.username}: {msg.message}")
        self.executor.submit(self._respond, msg)

    def _respond(self, msg: ChatMessage) -> None:
        try:
            reply = self.bot.handle_message(msg.message)
            if not reply:
                return
            # IRC messages are single lines
            for line in reply.splitlines():
                if line.strip():
                    self.listener.send_message(line.strip())
        except Exception:
            logger.exception(f"Failed to answer {msg.username}")


def main() -> int:
    config = Config.from_env()
    set_level(config.log_level)

    missing = config.missing(for_chat=True)
    if missing:
        logger.error(f"Missing env vars (see the README's export block): {', '.join(missing)}")
        return 1

    try:
        twitch = create_twitch_client(config)
    except TransportError as e:
        logger.error(f"Could not authenticate with Twitch: {e}")
        return 1

    listener = ChatListener(channel=config.channel, oauth_token=config.oauth_token, nick=config.bot_nick)
    stop = threading.Event()
    exit_code = 0

    with twitch, ThreadPoolExecutor(max_workers=config.workers, thread_name_prefix="clips") as executor:
        listener.add_handler(ChatCommandHandler(ClipsBot(twitch), listener, executor))
        listener.start()

        previous = {sig: signal.signal(sig, lambda *_: stop.set()) for sig in (signal.SIGINT, signal.SIGTERM)}
        logger.info("Bot is now running. Press CTRL-C to exit.")
        try:
            while not stop.wait(LISTENER_POLL_SECONDS):
                # The listener gives up after failed connects and reconnects
                if not listener.is_running:
                    logger.error("Chat listener stopped, shutting down")
                    exit_code = 1
                    break
        finally:
            for sig, handler in previous.items():
                if handler is not None:
                    signal.signal(sig, handler)
            listener.stop()

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
