from redis import asyncio as aioredis
from storefront.config import Config

# Revoked access-token ids are written here by the identity provider
token_blocklist = aioredis.from_url(Config.REDIS_URL)


async def token_in_blocklist(jti: str) -> bool:
    jti = await token_blocklist.get(jti)
    return jti is not None
