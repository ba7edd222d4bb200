"""
SNApp Backend: Note Service Unit Tests
========================================

What:  NoteService business rules against a mocked AsyncSession.

What we test:
    ✅ Name sanitization and counter suffixes
    ✅ Create: next per-user id, unique name, retry on id collision
    ✅ Get / update / delete, including NotFoundError
    ✅ Update validation
    ✅ Welcome content for never-edited notes
    ✅ Database failures wrapped in DatabaseError
"""

import warnings
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from snapp.exceptions import DatabaseError, NotFoundError, ValidationError
from snapp.services.note_service import (
    MAX_NAME_LENGTH,
    NoteService,
    next_available_name,
    sanitize_note_name,
)


def _scalar_result(value):
    result = MagicMock()
    result.scalar.return_value = value
    return result


def _scalars_result(values):
    result = MagicMock()
    result.scalars.return_value.all.return_value = values
    return result


def _one_result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def _integrity_error():
    return IntegrityError("INSERT INTO note", {}, Exception("duplicate key"))


class TestSanitizeNoteName:
    def test_strips_forbidden_characters(self):
        assert sanitize_note_name('  My <invalid>   note?  ') == "My invalid note"

    def test_removes_control_characters(self):
        assert sanitize_note_name("a\x00b\x1fc") == "abc"

    def test_collapses_whitespace(self):
        assert sanitize_note_name("a \t\n  b") == "a b"

    def test_truncates(self):
        assert len(sanitize_note_name("x" * 400)) == MAX_NAME_LENGTH

    def test_only_forbidden_characters(self):
        assert sanitize_note_name('<>:"/\\|?*') == ""


class TestNextAvailableName:
    def test_unused_base(self):
        assert next_available_name("New Note", []) == "New Note"

    def test_base_taken(self):
        assert next_available_name("New Note", ["New Note"]) == "New Note 1"

    def test_highest_counter_plus_one(self):
        existing = ["New Note", "New Note 1", "New Note 4"]

        assert next_available_name("New Note", existing) == "New Note 5"

    def test_counter_without_bare_base(self):
        assert next_available_name("New Note", ["New Note 2"]) == "New Note 3"

    def test_prefix_only_names_are_ignored(self):
        existing = ["New Notebook", "New Note draft", "New Note 2b"]

        assert next_available_name("New Note", existing) == "New Note"

    def test_regex_characters_in_base(self):
        assert next_available_name("a.b (1)", ["a.b (1)", "aXb (1) 3"]) == "a.b (1) 1"

    def test_long_base_is_shortened_to_fit(self):
        base = "x" * MAX_NAME_LENGTH
        name = next_available_name(base, [base])

        assert len(name) == MAX_NAME_LENGTH
        assert name.endswith(" 1")


class TestNoteServiceCreate:
    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_first_note_gets_id_one(self, mock_db_session):
        mock_db_session.execute.side_effect = [_scalar_result(None), _scalars_result([])]

        result = await self.service.create_note(mock_db_session, "user-1")

        assert result.id == 1
        assert result.name == "New Note"
        assert result.content == ""
        mock_db_session.add.assert_called_once()
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_next_id_and_counter(self, mock_db_session):
        mock_db_session.execute.side_effect = [
            _scalar_result(7),
            _scalars_result(["New Note", "New Note 1"]),
        ]

        result = await self.service.create_note(mock_db_session, "user-1")

        assert result.id == 8
        assert result.name == "New Note 2"

    @pytest.mark.asyncio
    async def test_requested_name_is_sanitized(self, mock_db_session):
        mock_db_session.execute.side_effect = [_scalar_result(None), _scalars_result([])]

        result = await self.service.create_note(mock_db_session, "user-1", base_name=" Plan: Q3? ")

        assert result.name == "Plan Q3"

    @pytest.mark.asyncio
    async def test_unusable_name_falls_back_to_default(self, mock_db_session):
        mock_db_session.execute.side_effect = [_scalar_result(None), _scalars_result([])]

        result = await self.service.create_note(mock_db_session, "user-1", base_name="???")

        assert result.name == "New Note"

    @pytest.mark.asyncio
    async def test_id_collision_is_retried(self, mock_db_session):
        mock_db_session.execute.side_effect = [
            _scalar_result(1),
            _scalars_result([]),
            _scalar_result(2),
            _scalars_result([]),
        ]
        mock_db_session.flush.side_effect = [_integrity_error(), None]

        result = await self.service.create_note(mock_db_session, "user-1")

        assert result.id == 3
        mock_db_session.rollback.assert_awaited_once()
        assert mock_db_session.flush.await_count == 2

    @pytest.mark.asyncio
    async def test_retry_backoff_emits_no_deprecation_warning(self, mock_db_session):
        mock_db_session.execute.side_effect = [
            _scalar_result(1),
            _scalars_result([]),
            _scalar_result(2),
            _scalars_result([]),
        ]
        mock_db_session.flush.side_effect = [_integrity_error(), None]

        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            await self.service.create_note(mock_db_session, "user-1")

        deprecations = [
            w for w in caught
            if issubclass(w.category, DeprecationWarning)
            and ("tenacity" in w.filename or "note_service" in w.filename)
        ]
        assert deprecations == []

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, mock_db_session):
        with patch("snapp.services.note_service.settings") as mock_settings:
            mock_settings.note_create_max_attempts = 2
            mock_db_session.execute.side_effect = [
                _scalar_result(1), _scalars_result([]),
                _scalar_result(1), _scalars_result([]),
            ]
            mock_db_session.flush.side_effect = [_integrity_error(), _integrity_error()]

            with pytest.raises(DatabaseError):
                await self.service.create_note(mock_db_session, "user-1")

        assert mock_db_session.flush.await_count == 2

    @pytest.mark.asyncio
    async def test_database_failure_wrapped(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await self.service.create_note(mock_db_session, "user-1")


class TestNoteServiceRead:
    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_get_note(self, mock_db_session, make_note):
        mock_db_session.execute.return_value = _one_result(make_note(3, "Ideas", "# Ideas"))

        result = await self.service.get_note(mock_db_session, "user-1", 3)

        assert result.id == 3
        assert result.name == "Ideas"
        assert result.content == "# Ideas"

    @pytest.mark.asyncio
    async def test_get_note_not_found(self, mock_db_session):
        mock_db_session.execute.return_value = _one_result(None)

        with pytest.raises(NotFoundError) as exc:
            await self.service.get_note(mock_db_session, "user-1", 99)

        assert "99" in exc.value.message

    @pytest.mark.asyncio
    async def test_null_content_served_as_welcome(self, mock_db_session, make_note):
        mock_db_session.execute.return_value = _one_result(make_note(1, "Welcome", None))

        with patch("snapp.services.note_service.welcome_service") as mock_welcome:
            mock_welcome.get_content = AsyncMock(return_value="# Welcome")
            result = await self.service.get_note(mock_db_session, "user-1", 1)

        assert result.content == "# Welcome"

    @pytest.mark.asyncio
    async def test_list_notes(self, mock_db_session, make_note):
        mock_db_session.execute.return_value = _scalars_result([
            make_note(1, "A", "a"),
            make_note(2, "B", "b"),
        ])

        result = await self.service.list_notes(mock_db_session, "user-1")

        assert result.total_count == 2
        assert [n.name for n in result.notes] == ["A", "B"]

    @pytest.mark.asyncio
    async def test_list_notes_database_failure(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))

        with pytest.raises(DatabaseError):
            await self.service.list_notes(mock_db_session, "user-1")

    @pytest.mark.asyncio
    async def test_outline_of_stored_note(self, mock_db_session, make_note):
        mock_db_session.execute.return_value = _one_result(
            make_note(5, "Doc", "# Title\ntext\n## Part")
        )

        outline = await self.service.get_outline(mock_db_session, "user-1", 5, tree=True)

        assert outline.note_id == 5
        assert [(h.text, h.url) for h in outline.headings] == [
            ("Title", "/note/5?line=1"),
            ("Part", "/note/5?line=3"),
        ]
        assert outline.tree[0].children[0].text == "Part"


class TestNoteServiceUpdate:
    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_nothing_to_update(self, mock_db_session):
        with pytest.raises(ValidationError):
            await self.service.update_note(mock_db_session, "user-1", 1)

        mock_db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_name_that_sanitizes_to_nothing(self, mock_db_session):
        with pytest.raises(ValidationError) as exc:
            await self.service.update_note(mock_db_session, "user-1", 1, name="***")

        assert exc.value.context["field"] == "name"

    @pytest.mark.asyncio
    async def test_rename(self, mock_db_session, make_note):
        note = make_note(1, "Old", "body")
        mock_db_session.execute.return_value = _one_result(note)

        result = await self.service.update_note(mock_db_session, "user-1", 1, name=" New / name ")

        assert result.name == "New name"
        assert result.content == "body"
        assert note.name == "New name"

    @pytest.mark.asyncio
    async def test_save_content(self, mock_db_session, make_note):
        note = make_note(1, "Doc", "old")
        before = note.updated_at
        mock_db_session.execute.return_value = _one_result(note)

        result = await self.service.update_note(mock_db_session, "user-1", 1, content="")

        assert result.content == ""
        assert note.updated_at >= before
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_missing_note(self, mock_db_session):
        mock_db_session.execute.return_value = _one_result(None)

        with pytest.raises(NotFoundError):
            await self.service.update_note(mock_db_session, "user-1", 9, content="x")


class TestNoteServiceDelete:
    def setup_method(self):
        self.service = NoteService()

    @pytest.mark.asyncio
    async def test_delete(self, mock_db_session, make_note):
        note = make_note(2)
        mock_db_session.execute.return_value = _one_result(note)

        await self.service.delete_note(mock_db_session, "user-1", 2)

        mock_db_session.delete.assert_awaited_once_with(note)
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_missing_note(self, mock_db_session):
        mock_db_session.execute.return_value = _one_result(None)

        with pytest.raises(NotFoundError):
            await self.service.delete_note(mock_db_session, "user-1", 2)

        mock_db_session.delete.assert_not_awaited()
