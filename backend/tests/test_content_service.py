"""
ReportDesk Backend — Content Service Tests
============================================

What:  ContentService against a real (SQLite) database, since the
       properties under test are transactional.

What we test:
    ✅ Create then fetch round-trips name/title/content at version 1
    ✅ Each update bumps version by exactly 1 and snapshots the old state
    ✅ A failure between snapshot and bump leaves neither behind
    ✅ Concurrent updates never duplicate a version or skip a snapshot
    ✅ Inactive pages are hidden from the public fetch
    ✅ Deleting a page keeps its history rows
    ✅ A page created after a delete never inherits the old history
"""

import asyncio
from unittest.mock import patch

import pytest
from sqlalchemy import Update, func, select, update
from sqlalchemy.exc import OperationalError

from reportdesk.exceptions import ConflictError, DatabaseError, NotFoundError, ValidationError
from reportdesk.models.page_content import PageContent, PageContentHistory
from reportdesk.models.user import Role
from reportdesk.services.content_service import ContentService


async def _history(session_factory, page_id):
    async with session_factory() as db:
        result = await db.execute(
            select(PageContentHistory)
            .where(PageContentHistory.page_id == page_id)
            .order_by(PageContentHistory.version)
        )
        return list(result.scalars().all())


async def _page(session_factory, page_name):
    async with session_factory() as db:
        result = await db.execute(select(PageContent).where(PageContent.page_name == page_name))
        return result.scalar_one()


class TestCreateAndFetch:

    def setup_method(self):
        self.service = ContentService()

    @pytest.mark.asyncio
    async def test_round_trip(self, session_factory, admin):
        async with session_factory() as db:
            created = await self.service.create_page(
                db, page_name="rules", content="<p>Be nice</p>", actor=admin, title="Rules"
            )
            await db.commit()

        async with session_factory() as db:
            fetched = await self.service.get_page(db, "rules")

        assert fetched.id == created.id
        assert fetched.page_name == "rules"
        assert fetched.title == "Rules"
        assert fetched.content == "<p>Be nice</p>"
        assert fetched.version == 1

    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts(self, session_factory, admin):
        async with session_factory() as db:
            await self.service.create_page(db, page_name="rules", content="a", actor=admin)
            await db.commit()

        async with session_factory() as db:
            with pytest.raises(ConflictError):
                await self.service.create_page(db, page_name="rules", content="b", actor=admin)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page_name, content", [("", "x"), ("rules", ""), (None, "x"), ("rules", None)])
    async def test_name_and_content_are_required(self, session_factory, admin, page_name, content):
        async with session_factory() as db:
            with pytest.raises(ValidationError):
                await self.service.create_page(db, page_name=page_name, content=content, actor=admin)

    @pytest.mark.asyncio
    async def test_inactive_page_is_not_served(self, session_factory, admin):
        async with session_factory() as db:
            await self.service.create_page(db, page_name="hidden", content="secret", actor=admin)
            await db.execute(
                update(PageContent)
                .where(PageContent.page_name == "hidden")
                .values(is_active=False)
            )
            await db.commit()

        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await self.service.get_page(db, "hidden")
            # still visible to admins
            summaries = await self.service.list_pages(db)
            assert [(p.page_name, p.is_active) for p in summaries] == [("hidden", False)]

    @pytest.mark.asyncio
    async def test_missing_page(self, session_factory):
        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await self.service.get_page(db, "nope")


class TestUpdatePage:

    def setup_method(self):
        self.service = ContentService()

    async def _seed(self, session_factory, admin, content="v1 text"):
        async with session_factory() as db:
            page = await self.service.create_page(
                db, page_name="rules", content=content, actor=admin, title="Rules"
            )
            await db.commit()
        return page

    @pytest.mark.asyncio
    async def test_version_increments_and_history_holds_previous_state(self, session_factory, admin):
        page = await self._seed(session_factory, admin)

        async with session_factory() as db:
            updated = await self.service.update_page(db, "rules", "v2 text", actor=admin)
        assert updated.version == 2
        assert updated.content == "v2 text"

        async with session_factory() as db:
            updated = await self.service.update_page(db, "rules", "v3 text", actor=admin)
        assert updated.version == 3

        history = await _history(session_factory, page.id)
        assert [(h.version, h.content_text) for h in history] == [(1, "v1 text"), (2, "v2 text")]
        assert all(h.created_by == admin.id for h in history)

        stored = await _page(session_factory, "rules")
        assert stored.version == 3
        assert stored.content == "v3 text"
        assert stored.updated_by == admin.id

    @pytest.mark.asyncio
    async def test_omitted_title_is_kept(self, session_factory, admin):
        await self._seed(session_factory, admin)

        async with session_factory() as db:
            updated = await self.service.update_page(db, "rules", "new", actor=admin)
        assert updated.title == "Rules"

        async with session_factory() as db:
            updated = await self.service.update_page(db, "rules", "newer", actor=admin, title="House rules")
        assert updated.title == "House rules"

    @pytest.mark.asyncio
    async def test_blank_content_is_rejected_without_side_effects(self, session_factory, admin):
        page = await self._seed(session_factory, admin)

        async with session_factory() as db:
            with pytest.raises(ValidationError):
                await self.service.update_page(db, "rules", "   ", actor=admin)

        assert await _history(session_factory, page.id) == []
        assert (await _page(session_factory, "rules")).version == 1

    @pytest.mark.asyncio
    async def test_missing_page_is_404(self, session_factory, admin):
        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await self.service.update_page(db, "nope", "text", actor=admin)

    @pytest.mark.asyncio
    async def test_failure_after_snapshot_rolls_everything_back(self, session_factory, admin):
        page = await self._seed(session_factory, admin)

        async with session_factory() as db:
            real_execute = db.execute

            async def failing_execute(statement, *args, **kwargs):
                if isinstance(statement, Update):
                    raise RuntimeError("injected failure before version bump")
                return await real_execute(statement, *args, **kwargs)

            with patch.object(db, "execute", new=failing_execute), pytest.raises(RuntimeError):
                await self.service.update_page(db, "rules", "never stored", actor=admin)

        assert await _history(session_factory, page.id) == []
        stored = await _page(session_factory, "rules")
        assert stored.version == 1
        assert stored.content == "v1 text"

    @pytest.mark.asyncio
    async def test_database_failure_becomes_database_error(self, session_factory, admin):
        page = await self._seed(session_factory, admin)

        async with session_factory() as db:
            real_execute = db.execute

            async def failing_execute(statement, *args, **kwargs):
                if isinstance(statement, Update):
                    raise OperationalError("UPDATE page_content", {}, Exception("disk I/O error"))
                return await real_execute(statement, *args, **kwargs)

            with patch.object(db, "execute", new=failing_execute), pytest.raises(DatabaseError):
                await self.service.update_page(db, "rules", "never stored", actor=admin)

        assert await _history(session_factory, page.id) == []
        assert (await _page(session_factory, "rules")).version == 1

    @pytest.mark.asyncio
    async def test_concurrent_updates_keep_versions_consistent(self, session_factory, make_user):
        editors = [await make_user(f"editor{i}", role=Role.ADMIN) for i in range(4)]
        page = await self._seed(session_factory, editors[0])

        async def edit(editor, n):
            async with session_factory() as db:
                return await self.service.update_page(db, "rules", f"edit {n}", actor=editor)

        results = await asyncio.gather(
            *(edit(editor, n) for n, editor in enumerate(editors)),
            return_exceptions=True,
        )

        successes = [r for r in results if not isinstance(r, BaseException)]
        failures = [r for r in results if isinstance(r, BaseException)]
        assert successes
        assert all(isinstance(f, (ConflictError, DatabaseError)) for f in failures)

        stored = await _page(session_factory, "rules")
        assert stored.version == 1 + len(successes)

        history = await _history(session_factory, page.id)
        # one snapshot per committed bump, versions 1..n with no gaps or repeats
        assert [h.version for h in history] == list(range(1, stored.version))


class TestHistoryAndDelete:

    def setup_method(self):
        self.service = ContentService()

    @pytest.mark.asyncio
    async def test_history_newest_first_with_editor_name(self, session_factory, admin):
        async with session_factory() as db:
            await self.service.create_page(db, page_name="faq", content="one", actor=admin)
            await db.commit()
        for text in ("two", "three"):
            async with session_factory() as db:
                await self.service.update_page(db, "faq", text, actor=admin)

        async with session_factory() as db:
            history = await self.service.get_history(db, "faq")

        assert [(h.version, h.content_text) for h in history] == [(2, "two"), (1, "one")]
        assert {h.created_by for h in history} == {"boss"}

    @pytest.mark.asyncio
    async def test_delete_keeps_history(self, session_factory, admin):
        async with session_factory() as db:
            page = await self.service.create_page(db, page_name="faq", content="one", actor=admin)
            await db.commit()
        async with session_factory() as db:
            await self.service.update_page(db, "faq", "two", actor=admin)

        async with session_factory() as db:
            await self.service.delete_page(db, "faq", actor=admin)
            await db.commit()

        async with session_factory() as db:
            with pytest.raises(NotFoundError):
                await self.service.get_page(db, "faq")
            remaining = await db.scalar(
                select(func.count(PageContentHistory.id)).where(PageContentHistory.page_id == page.id)
            )
        assert remaining == 1

    @pytest.mark.asyncio
    async def test_new_page_after_delete_gets_a_fresh_id(self, session_factory, admin):
        async with session_factory() as db:
            old = await self.service.create_page(db, page_name="old", content="one", actor=admin)
            await db.commit()
        async with session_factory() as db:
            await self.service.update_page(db, "old", "two", actor=admin)
        async with session_factory() as db:
            await self.service.delete_page(db, "old", actor=admin)
            await db.commit()

        async with session_factory() as db:
            new = await self.service.create_page(db, page_name="new", content="fresh", actor=admin)
            await db.commit()

        assert new.id != old.id
        async with session_factory() as db:
            assert await self.service.get_history(db, "new") == []

        async with session_factory() as db:
            updated = await self.service.update_page(db, "new", "fresh v2", actor=admin)
        assert updated.version == 2

        history = await _history(session_factory, new.id)
        assert [(h.version, h.content_text) for h in history] == [(1, "fresh")]
