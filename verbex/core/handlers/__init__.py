"""Tool handlers: ``async def handler(args, ctx) -> str``."""
