"""Infrastructure resources: database engine and outbound HTTP client.

This module is part of the infra layer and must not import from application features.
"""
from typing import Optional

import httpx
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker


class DatabaseResource:
    """Database resource for dependency injection."""

    def __init__(self, database_url: str):
        self.database_url = str(database_url)
        self.engine = None
        self.session_factory = None

    async def init(self):
        """Initialize database connection."""
        if self.engine is not None:
            return self
        self.engine = create_async_engine(
            self.database_url,
            echo=False,
            pool_pre_ping=True,
            pool_recycle=3600,
        )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        return self

    @property
    def dialect_name(self) -> str:
        if self.engine is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.engine.dialect.name

    def get_session(self) -> AsyncSession:
        """Get database session (synchronous accessor)."""
        if self.session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.session_factory()

    async def shutdown(self):
        """Shutdown database connection."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None


class HttpClientResource:
    """Pooled outbound HTTP client shared by every request."""

    def __init__(
        self,
        timeout_seconds: float,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout_seconds = timeout_seconds
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def init(self):
        """Create the underlying connection pool."""
        if self.client is None:
            self.client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                transport=self.transport,
            )
        return self

    def get_client(self) -> httpx.AsyncClient:
        if self.client is None:
            raise RuntimeError("HTTP client not initialized. Call init() first.")
        return self.client

    async def shutdown(self):
        """Close pooled connections."""
        if self.client is not None:
            await self.client.aclose()
            self.client = None
