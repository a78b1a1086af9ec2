"""
clips-bot: search Twitch clips from chat.

Chat messages like `!clips streamer "title" creator 7d` are parsed into a
Command, then resolved against the broadcaster's clip catalog.
"""

__version__ = "0.3.0"
