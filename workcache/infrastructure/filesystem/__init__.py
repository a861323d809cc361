"""FileSystem adapters: local disk (aiofiles) and in-memory."""
