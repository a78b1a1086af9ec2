"""
Transport collaborators: Twitch Helix client, OAuth helpers, IRC chat.
"""
