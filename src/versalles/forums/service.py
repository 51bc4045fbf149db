"""Forum catalogue, threads and replies."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from versalles.forums.models import ForumModel, PostModel, ThreadModel
from versalles.forums.schemas import ForumCategory, ForumSummary

THREADS_PER_PAGE = 20
POSTS_PER_PAGE = 15

# (category, name, description)
DEFAULT_FORUMS = [
    ("Comunidade", "Boas-vindas", "Apresente-se para a comunidade."),
    ("Comunidade", "Anúncios", "Novidades do portal."),
    ("Mesas", "Procura-se Jogadores", "Mestres recrutando para suas campanhas."),
    ("Mesas", "Procura-se Mestre", "Jogadores em busca de uma mesa."),
    ("Sistemas", "Regras e Dúvidas", "Discussões sobre regras de sistemas."),
    ("Oficina", "Criações", "Mostre e comente conteúdo da oficina."),
]


class ForumService:
    async def seed_defaults(self, session: AsyncSession) -> int:
        """Create the default forum catalogue if no forum exists yet."""
        existing = await session.execute(select(func.count(ForumModel.id)))
        if existing.scalar_one():
            return 0
        for position, (category, name, description) in enumerate(DEFAULT_FORUMS):
            session.add(ForumModel(
                category=category, name=name, description=description, position=position,
            ))
        await session.flush()
        return len(DEFAULT_FORUMS)

    async def get_forum(self, session: AsyncSession, forum_id: str) -> ForumModel | None:
        return await session.get(ForumModel, forum_id)

    async def list_categories(self, session: AsyncSession) -> list[ForumCategory]:
        """Forums grouped by category, in catalogue order, with activity counts."""
        thread_counts = (
            select(ThreadModel.forum_id, func.count(ThreadModel.id).label("n"))
            .group_by(ThreadModel.forum_id)
            .subquery()
        )
        post_counts = (
            select(ThreadModel.forum_id, func.count(PostModel.id).label("n"))
            .join(PostModel, PostModel.thread_id == ThreadModel.id)
            .group_by(ThreadModel.forum_id)
            .subquery()
        )
        result = await session.execute(
            select(
                ForumModel,
                func.coalesce(thread_counts.c.n, 0),
                func.coalesce(post_counts.c.n, 0),
            )
            .outerjoin(thread_counts, thread_counts.c.forum_id == ForumModel.id)
            .outerjoin(post_counts, post_counts.c.forum_id == ForumModel.id)
            .order_by(ForumModel.position, ForumModel.name)
        )

        categories: dict[str, ForumCategory] = {}
        for forum, n_threads, n_posts in result.all():
            category = categories.setdefault(
                forum.category, ForumCategory(name=forum.category, forums=[])
            )
            category.forums.append(ForumSummary(
                id=forum.id,
                name=forum.name,
                description=forum.description or "",
                thread_count=n_threads,
                post_count=n_posts,
            ))
        return list(categories.values())

    async def list_threads(self, session: AsyncSession, forum_id: str) -> list[ThreadModel]:
        """Most recent threads first."""
        result = await session.execute(
            select(ThreadModel)
            .where(ThreadModel.forum_id == forum_id)
            .order_by(ThreadModel.created_at.desc())
            .limit(THREADS_PER_PAGE)
        )
        return list(result.scalars().all())

    async def create_thread(
        self, session: AsyncSession, forum_id: str, author_id: str, title: str, content: str
    ) -> ThreadModel:
        """Create a thread together with its opening post."""
        thread = ThreadModel(forum_id=forum_id, author_id=author_id, title=title)
        session.add(thread)
        await session.flush()
        session.add(PostModel(thread_id=thread.id, author_id=author_id, content=content))
        await session.flush()
        return thread

    async def get_thread(self, session: AsyncSession, thread_id: str) -> ThreadModel | None:
        return await session.get(ThreadModel, thread_id)

    async def list_posts(self, session: AsyncSession, thread_id: str) -> list[PostModel]:
        """Posts in reading order, opening post first."""
        result = await session.execute(
            select(PostModel)
            .where(PostModel.thread_id == thread_id)
            .order_by(PostModel.created_at, PostModel.id)
            .limit(POSTS_PER_PAGE)
        )
        return list(result.scalars().all())

    async def add_post(
        self, session: AsyncSession, thread_id: str, author_id: str, content: str
    ) -> PostModel:
        post = PostModel(thread_id=thread_id, author_id=author_id, content=content)
        session.add(post)
        await session.flush()
        return post
