import pytest
from sqlalchemy import select, func

from messenger.exceptions import ConflictError, NotFoundError, SelfReferenceError, ValidationError
from messenger.models.chat import Chat
from messenger.models.chat_member import ChatMember
from messenger.models.message import Message
from messenger.models.relationship_list import ListKind, RelationshipList, RelationshipMembership
from messenger.repositories.chat_repository import ChatRepository
from messenger.repositories.message_repository import MessageRepository
from messenger.repositories.user_repository import UserRepository
from messenger.schemas.user import UserCreate


async def members(repo, kind, owner):
    return {login async for login, _ in repo.list_members(kind, owner)}


async def test_new_user_has_one_empty_list_of_each_kind(db, make_user):
    user = await make_user("alice")

    result = await db.execute(
        select(RelationshipList).where(RelationshipList.id.in_([user.contact_list_id, user.block_list_id]))
    )
    kinds = sorted(rel_list.kind.value for rel_list in result.scalars().all())
    assert kinds == ["block", "contact"]
    assert user.contact_list_id != user.block_list_id

    repo = UserRepository(db)
    assert await members(repo, ListKind.CONTACT, "alice") == set()
    assert await members(repo, ListKind.BLOCK, "alice") == set()


async def test_duplicate_login_is_rejected_without_provisioning_lists(db, make_user):
    await make_user("alice")
    lists_before = (await db.execute(select(func.count(RelationshipList.id)))).scalar()

    with pytest.raises(ValidationError):
        await make_user("alice")

    lists_after = (await db.execute(select(func.count(RelationshipList.id)))).scalar()
    assert lists_after == lists_before


async def test_concurrent_signup_with_same_login_is_rejected(session_factory):
    async with session_factory() as first_session:
        await UserRepository(first_session).create(UserCreate(login="alice", password="x", phone="1"))

    async with session_factory() as other_session:
        repo = UserRepository(other_session)

        async def nobody(login):
            return None

        # the other session has not seen alice yet
        repo.get_by_login = nobody
        with pytest.raises(ValidationError):
            await repo.create(UserCreate(login="alice", password="x", phone="1"))

        lists = (await other_session.execute(select(func.count(RelationshipList.id)))).scalar()
        assert lists == 2


async def test_empty_login_is_rejected(db):
    with pytest.raises(ValidationError):
        await UserRepository(db).create(UserCreate(login="", password="x", phone="1"))


@pytest.mark.parametrize("kind", [ListKind.CONTACT, ListKind.BLOCK])
async def test_adding_yourself_to_your_own_list_fails(db, make_user, kind):
    await make_user("alice")
    repo = UserRepository(db)

    with pytest.raises(SelfReferenceError):
        await repo.add_to_list(kind, "alice", "alice")
    assert await members(repo, kind, "alice") == set()


async def test_add_and_remove_contact(db, make_user):
    await make_user("alice")
    await make_user("bob")
    repo = UserRepository(db)
    await repo.update_status("bob", "at lunch")

    await repo.add_to_list(ListKind.CONTACT, "alice", "bob")
    listed = [entry async for entry in repo.list_members(ListKind.CONTACT, "alice")]
    assert listed == [("bob", "at lunch")]
    assert await members(repo, ListKind.BLOCK, "alice") == set()

    assert await repo.remove_from_list(ListKind.CONTACT, "alice", "bob") is True
    assert await members(repo, ListKind.CONTACT, "alice") == set()


async def test_removing_absent_member_is_not_an_error(db, make_user):
    await make_user("alice")
    assert await UserRepository(db).remove_from_list(ListKind.BLOCK, "alice", "nobody") is False


async def test_duplicate_edge_is_a_conflict(db, make_user):
    await make_user("alice")
    await make_user("bob")
    repo = UserRepository(db)
    await repo.add_to_list(ListKind.BLOCK, "alice", "bob")

    with pytest.raises(ConflictError):
        await repo.add_to_list(ListKind.BLOCK, "alice", "bob")


async def test_same_login_may_be_contact_and_blocked(db, make_user):
    await make_user("alice")
    await make_user("bob")
    repo = UserRepository(db)

    await repo.add_to_list(ListKind.CONTACT, "alice", "bob")
    await repo.add_to_list(ListKind.BLOCK, "alice", "bob")

    assert await members(repo, ListKind.CONTACT, "alice") == {"bob"}
    assert await members(repo, ListKind.BLOCK, "alice") == {"bob"}


async def test_adding_unknown_user_fails(db, make_user):
    await make_user("alice")
    with pytest.raises(NotFoundError):
        await UserRepository(db).add_to_list(ListKind.CONTACT, "alice", "ghost")


async def test_authenticate_compares_credentials(db, make_user):
    await make_user("alice", password="secret")
    repo = UserRepository(db)

    assert (await repo.authenticate("alice", "secret")).login == "alice"
    with pytest.raises(NotFoundError):
        await repo.authenticate("alice", "wrong")
    with pytest.raises(NotFoundError):
        await repo.authenticate("ghost", "secret")


async def test_status_is_limited_to_140_characters(db, make_user):
    await make_user("alice")
    repo = UserRepository(db)

    await repo.update_status("alice", "x" * 140)
    assert await repo.get_status("alice") == "x" * 140

    with pytest.raises(ValidationError):
        await repo.update_status("alice", "y" * 141)
    assert await repo.get_status("alice") == "x" * 140


async def test_delete_user_removes_everything_that_references_them(db, make_user):
    alice = await make_user("alice")
    await make_user("bob")
    await make_user("carol")
    users = UserRepository(db)
    chats = ChatRepository(db)
    ledger = MessageRepository(db)

    await users.add_to_list(ListKind.CONTACT, "alice", "bob")
    await users.add_to_list(ListKind.CONTACT, "bob", "alice")
    owned = await chats.create("alice", ["bob"], "hi bob")
    joined = await chats.create("bob", ["alice", "carol"])
    await ledger.create(joined.id, "alice", "from alice")
    await ledger.create(joined.id, "carol", "from carol")
    own_lists = [alice.contact_list_id, alice.block_list_id]

    await users.delete("alice")

    assert await users.get_by_login("alice") is None
    assert await chats.get_by_id(owned.id) is None
    assert [m.member_login for m in (await chats.get(joined.id)).members] == ["bob", "carol"]
    remaining = (await db.execute(select(Message.sender_login))).scalars().all()
    assert remaining == ["carol"]
    assert (await db.execute(
        select(func.count(RelationshipList.id)).where(RelationshipList.id.in_(own_lists))
    )).scalar() == 0
    assert (await db.execute(
        select(func.count(RelationshipMembership.id)).where(RelationshipMembership.member_login == "alice")
    )).scalar() == 0
    assert (await db.execute(
        select(func.count(ChatMember.id)).where(ChatMember.member_login == "alice")
    )).scalar() == 0
    assert (await db.execute(select(func.count(Chat.id)))).scalar() == 1


async def test_delete_unknown_user_fails(db):
    with pytest.raises(NotFoundError):
        await UserRepository(db).delete("ghost")
