"""
Tests for DocumentMetaRepository against a SQLite session.
"""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from embedthumbs.db.models import DocumentMeta as DocumentMetaDB
from embedthumbs.models.thumbnail import ThumbnailReference
from embedthumbs.repositories.document_meta_repository import DocumentMetaRepository
from embedthumbs.repositories.document_repository import DocumentRepository
from tests.factories.document_factory import DocumentCreateFactory

pytestmark = pytest.mark.asyncio


@pytest.fixture
def repository() -> DocumentMetaRepository:
    return DocumentMetaRepository()


async def create_document(session: AsyncSession) -> int:
    document = await DocumentRepository().create(
        session, obj_in=DocumentCreateFactory()
    )
    return document.id


class TestGetAndUpdate:
    """Tests for single-key access."""

    async def test_get_missing_key(
        self, repository: DocumentMetaRepository, db_session: AsyncSession
    ) -> None:
        doc_id = await create_document(db_session)

        assert await repository.get(db_session, doc_id, "missing") is None

    async def test_update_inserts_then_overwrites(
        self, repository: DocumentMetaRepository, db_session: AsyncSession
    ) -> None:
        doc_id = await create_document(db_session)

        await repository.update(db_session, doc_id, "color", "red")
        await repository.update(db_session, doc_id, "color", "blue")

        assert await repository.get(db_session, doc_id, "color") == "blue"
        assert await repository.get_all(db_session, doc_id) == {"color": ["blue"]}

    async def test_keys_are_per_document(
        self, repository: DocumentMetaRepository, db_session: AsyncSession
    ) -> None:
        doc1 = await create_document(db_session)
        doc2 = await create_document(db_session)

        await repository.update(db_session, doc1, "color", "red")

        assert await repository.get(db_session, doc2, "color") is None


class TestGetAll:
    """Tests for whole-document metadata reads."""

    async def test_values_wrapped_in_lists(
        self, repository: DocumentMetaRepository, db_session: AsyncSession
    ) -> None:
        doc_id = await create_document(db_session)
        db_session.add_all(
            [
                DocumentMetaDB(document_id=doc_id, meta_key="tag", meta_value="a"),
                DocumentMetaDB(document_id=doc_id, meta_key="tag", meta_value="b"),
                DocumentMetaDB(document_id=doc_id, meta_key="empty", meta_value=None),
            ]
        )
        await db_session.flush()

        metadata = await repository.get_all(db_session, doc_id)

        assert metadata == {"tag": ["a", "b"], "empty": [""]}
        assert await repository.get(db_session, doc_id, "tag") == "a"

    async def test_empty_document(
        self, repository: DocumentMetaRepository, db_session: AsyncSession
    ) -> None:
        doc_id = await create_document(db_session)

        assert await repository.get_all(db_session, doc_id) == {}


class TestDelete:
    """Tests for metadata removal."""

    async def test_delete_key(
        self, repository: DocumentMetaRepository, db_session: AsyncSession
    ) -> None:
        doc_id = await create_document(db_session)
        await repository.update(db_session, doc_id, "color", "red")
        await repository.update(db_session, doc_id, "size", "xl")

        assert await repository.delete(db_session, doc_id, "color") == 1
        assert await repository.delete(db_session, doc_id, "color") == 0
        assert await repository.get_all(db_session, doc_id) == {"size": ["xl"]}

    async def test_delete_all(
        self, repository: DocumentMetaRepository, db_session: AsyncSession
    ) -> None:
        doc1 = await create_document(db_session)
        doc2 = await create_document(db_session)
        await repository.update(db_session, doc1, "color", "red")
        await repository.update(db_session, doc1, "size", "xl")
        await repository.update(db_session, doc2, "color", "green")

        assert await repository.delete_all(db_session, doc1) == 2
        assert await repository.get_all(db_session, doc1) == {}
        assert await repository.get(db_session, doc2, "color") == "green"


class TestThumbnailReferences:
    """Tests for the bulk thumbnail reference snapshot."""

    async def test_snapshot_excludes_url_keys_and_other_meta(
        self, repository: DocumentMetaRepository, db_session: AsyncSession
    ) -> None:
        doc1 = await create_document(db_session)
        doc2 = await create_document(db_session)
        key = "embed_privacy_thumbnail_youtube_abc123"
        filename = "youtube-abc123-maxresdefault.jpg"
        for doc_id in (doc1, doc2):
            await repository.update(db_session, doc_id, key, filename)
            await repository.update(
                db_session, doc_id, f"{key}_url", "https://youtu.be/abc123"
            )
        await repository.update(db_session, doc1, "seo_title", filename)

        references = await repository.get_thumbnail_references(db_session)

        assert sorted(references, key=lambda r: r.document_id) == [
            ThumbnailReference(document_id=doc1, filename=filename),
            ThumbnailReference(document_id=doc2, filename=filename),
        ]

    async def test_snapshot_includes_ids_ending_in_url(
        self, repository: DocumentMetaRepository, db_session: AsyncSession
    ) -> None:
        doc_id = await create_document(db_session)
        key = "embed_privacy_thumbnail_youtube_abcdefg_url"
        filename = "youtube-abcdefg_url-hqdefault.jpg"
        await repository.update(db_session, doc_id, key, filename)
        await repository.update(
            db_session, doc_id, f"{key}_url", "https://youtu.be/abcdefg_url"
        )

        references = await repository.get_thumbnail_references(db_session)

        assert references == [ThumbnailReference(document_id=doc_id, filename=filename)]

    async def test_prefix_wildcards_are_literal(
        self, repository: DocumentMetaRepository, db_session: AsyncSession
    ) -> None:
        """Underscores in the key prefix do not act as LIKE wildcards."""
        doc_id = await create_document(db_session)
        await repository.update(
            db_session, doc_id, "embedXprivacyXthumbnailXyoutubeXabc", "x.jpg"
        )

        assert await repository.get_thumbnail_references(db_session) == []

    async def test_empty_snapshot(
        self, repository: DocumentMetaRepository, db_session: AsyncSession
    ) -> None:
        assert await repository.get_thumbnail_references(db_session) == []
