"""Feature cogs: thin discord.py adapters over CommandRouter."""
