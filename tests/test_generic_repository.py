"""Generic repository tests (strict error policy)."""
import uuid
import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel.ext.asyncio.session import AsyncSession

from framework.exceptions.handler import EntityNotFoundException
from framework.repository.base import BaseRepository
from framework.repository.result import Found, NotFound
from apps.users.models import User


@pytest.fixture
def repo(uow) -> BaseRepository[User]:
    return BaseRepository(uow.context, User, uow.logger)


class TestReadOperations:

    @pytest.mark.asyncio
    async def test_add_then_get_by_id_returns_equal_entity(self, repo, user_factory):
        user = user_factory()
        assert await repo.add(user) is True

        fetched = await repo.get_by_id(user.id)
        assert fetched.id == user.id
        assert fetched.model_dump() == user.model_dump()

    @pytest.mark.asyncio
    async def test_get_by_id_missing_raises_not_found(self, repo):
        missing = uuid.uuid4()
        with pytest.raises(EntityNotFoundException) as exc_info:
            await repo.get_by_id(missing)
        assert exc_info.value.key == missing

    @pytest.mark.asyncio
    async def test_lookup_reports_found_and_not_found(self, repo, sample_user):
        assert await repo.lookup(sample_user.id) == Found(sample_user)
        result = await repo.lookup(uuid.uuid4())
        assert isinstance(result, NotFound)
        assert result.entity == "User"

    @pytest.mark.asyncio
    async def test_all_returns_every_entity(self, repo, user_factory):
        assert await repo.all() == []
        for i in range(3):
            await repo.add(user_factory(email=f"user{i}@example.com"))

        users = await repo.all()
        assert len(users) == 3
        assert await repo.count() == 3

    @pytest.mark.asyncio
    async def test_find_matches_filtered_all(self, repo, user_factory):
        await repo.add(user_factory(email="a@x.com", last_name="Smith"))
        await repo.add(user_factory(email="b@x.com", last_name="Jones"))
        await repo.add(user_factory(email="c@x.com", last_name="Smith"))

        predicates = [
            (User.last_name == "Smith", lambda u: u.last_name == "Smith"),
            (User.email == "b@x.com", lambda u: u.email == "b@x.com"),
            (User.email.startswith("z"), lambda u: u.email.startswith("z")),
        ]
        everyone = await repo.all()
        for expression, check in predicates:
            found = await repo.find(expression)
            assert {u.id for u in found} == {u.id for u in everyone if check(u)}

    @pytest.mark.asyncio
    async def test_find_combines_criteria(self, repo, user_factory):
        await repo.add(user_factory(email="a@x.com", first_name="Ann", last_name="Smith"))
        await repo.add(user_factory(email="b@x.com", first_name="Bob", last_name="Smith"))

        found = await repo.find(User.last_name == "Smith", User.first_name == "Bob")
        assert [u.email for u in found] == ["b@x.com"]
        assert (await repo.find_one(User.first_name == "Ann")).email == "a@x.com"
        assert await repo.find_one(User.first_name == "Cid") is None


class TestWriteOperations:

    @pytest.mark.asyncio
    async def test_add_persists_immediately(self, repo, async_session: AsyncSession, user_factory):
        user = user_factory()
        await repo.add(user)

        # Drop anything uncommitted; the insert must survive
        await async_session.rollback()
        assert [u.id for u in await repo.all()] == [user.id]

    @pytest.mark.asyncio
    async def test_add_duplicate_email_propagates_constraint_violation(self, repo, sample_user, user_factory):
        with pytest.raises(IntegrityError):
            await repo.add(user_factory(email=sample_user.email))

        # Session is usable again after the failed save
        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_delete_then_get_raises_not_found(self, repo, sample_user):
        assert await repo.delete(sample_user.id) is True

        with pytest.raises(EntityNotFoundException):
            await repo.get_by_id(sample_user.id)

    @pytest.mark.asyncio
    async def test_delete_missing_raises_not_found(self, repo):
        with pytest.raises(EntityNotFoundException):
            await repo.delete(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_upsert_inserts_when_absent(self, repo, user_factory):
        user = user_factory()
        assert await repo.upsert(user) is True
        assert (await repo.get_by_id(user.id)).email == user.email

    @pytest.mark.asyncio
    async def test_upsert_copies_fields_onto_existing(self, repo, sample_user, user_factory):
        replacement = user_factory(id=sample_user.id, first_name="Grace", email="grace@example.com")

        assert await repo.upsert(replacement) is True

        stored = await repo.get_by_id(sample_user.id)
        assert stored.first_name == "Grace"
        assert stored.email == "grace@example.com"
        assert await repo.count() == 1

    @pytest.mark.asyncio
    async def test_upsert_is_idempotent(self, repo, user_factory):
        user_id = uuid.uuid4()
        await repo.upsert(user_factory(id=user_id, first_name="Grace"))
        once = (await repo.get_by_id(user_id)).model_dump()

        # Same value again: nothing changes, no duplicate identity
        assert await repo.upsert(user_factory(id=user_id, first_name="Grace")) is False
        twice = (await repo.get_by_id(user_id)).model_dump()

        assert once == twice
        assert await repo.count(User.id == user_id) == 1
