import io

import pytest
from httpx import ASGITransport, AsyncClient
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from auth.application.services import issue_token
from auth.domain.entities import Subject
from documents.application.services import create_document
from main import app
from shared.dependencies import get_blob_store, get_db
from shared.infrastructure.database import Base
from shared.infrastructure.unit_of_work import SqlAlchemyUnitOfWork
from storage.infrastructure.local_blob_store import LocalBlobStore

import audit.infrastructure.models  # noqa: F401
import comments.infrastructure.models  # noqa: F401
import documents.infrastructure.models  # noqa: F401
import revisions.infrastructure.models  # noqa: F401
import timeline.infrastructure.models  # noqa: F401
import versions.infrastructure.models  # noqa: F401

PDF = "application/pdf"
PDF_BYTES = b"%PDF-1.4\n1 0 obj << /Type /Catalog >> endobj\n%%EOF\n"

OWNER = Subject.build("u1", permission_codes=["DOC_CREATE"], unit_ids=["unit-a"])
STRANGER = Subject.build("u2", unit_ids=["unit-b"])
READER = Subject.build("u3", permission_codes=["DOC_READ"], unit_ids=["unit-b"])
WRITER = Subject.build("u4", permission_codes=["DOC_WRITE"], unit_ids=["unit-b"])
REVIEWER = Subject.build("u5", permission_codes=["DOC_REVIEW"], unit_ids=["unit-b"])
ADMIN = Subject.build("admin", roles=["ADMIN"])


def make_image(fmt: str = "PNG", size: tuple[int, int] = (40, 20), mode: str = "RGBA") -> bytes:
    """Render a small solid image in memory."""
    out = io.BytesIO()
    Image.new(mode, size, color=(200, 30, 30, 255) if mode == "RGBA" else (200, 30, 30)).save(
        out, format=fmt
    )
    return out.getvalue()


def auth_headers_for(subject: Subject) -> dict:
    return {"Authorization": f"Bearer {issue_token(subject)}"}


async def make_document(uow: SqlAlchemyUnitOfWork, owner: Subject = OWNER, **kwargs):
    kwargs.setdefault("title", "Quality Manual")
    kwargs.setdefault("unit_id", "unit-a")
    return await create_document(uow, owner, **kwargs)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def test_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'docflow.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def uow(db):
    return SqlAlchemyUnitOfWork(db)


@pytest.fixture
def blob_store(tmp_path):
    return LocalBlobStore(tmp_path / "blobs", public_base_url="/files")


@pytest.fixture(autouse=True)
async def override_dependencies(session_factory, blob_store):
    async def _override():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _override
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def owner_headers() -> dict:
    return auth_headers_for(OWNER)
