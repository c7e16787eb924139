from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker

from microblog.core.timestamps import sort_key
from microblog.models.activitypub import Post

class PostStore:
    """Read-only access to posts, newest first."""

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def list_recent(self, limit: Optional[int] = None) -> List[Post]:
        # Stored timestamps mix formats, so order on the parsed instant
        async with self.session_factory() as session:
            result = await session.execute(select(Post))
            posts = list(result.scalars().all())
        posts.sort(key=lambda post: (sort_key(post.created_at), post.id), reverse=True)
        if limit is not None:
            posts = posts[:limit]
        return posts

    async def get(self, post_id: int) -> Optional[Post]:
        async with self.session_factory() as session:
            return await session.get(Post, post_id)

    async def count(self) -> int:
        async with self.session_factory() as session:
            result = await session.execute(select(func.count()).select_from(Post))
            return result.scalar_one()
