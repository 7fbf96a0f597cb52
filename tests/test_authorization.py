import pytest
import pytest_asyncio

from messenger.exceptions import ForbiddenError, NotFoundError
from messenger.models.chat import Chat
from messenger.models.message import Message
from messenger.repositories.chat_repository import ChatRepository
from messenger.services.authorization import Action, AuthorizationGate, is_allowed

CHAT = Chat(id=1, initiator="owner")
ANN_MESSAGE = Message(id=7, chat_id=1, sender_login="ann", text="hi")


@pytest.mark.parametrize("action", [Action.ADD_MEMBER, Action.REMOVE_MEMBER, Action.DELETE_CHAT])
def test_chat_management_is_initiator_only(action):
    assert is_allowed(action, "owner", CHAT)
    assert not is_allowed(action, "ann", CHAT, is_member=True)


@pytest.mark.parametrize("action", [Action.POST_MESSAGE, Action.VIEW_CHAT])
def test_members_may_post_and_read(action):
    assert is_allowed(action, "ann", CHAT, is_member=True)
    assert not is_allowed(action, "stranger", CHAT, is_member=False)


def test_only_sender_may_edit():
    assert is_allowed(Action.EDIT_MESSAGE, "ann", CHAT, message=ANN_MESSAGE)
    assert not is_allowed(Action.EDIT_MESSAGE, "owner", CHAT, message=ANN_MESSAGE)
    assert not is_allowed(Action.EDIT_MESSAGE, "ben", CHAT, message=ANN_MESSAGE)


def test_sender_or_initiator_may_delete():
    assert is_allowed(Action.DELETE_MESSAGE, "ann", CHAT, message=ANN_MESSAGE)
    assert is_allowed(Action.DELETE_MESSAGE, "owner", CHAT, message=ANN_MESSAGE)
    assert not is_allowed(Action.DELETE_MESSAGE, "ben", CHAT, message=ANN_MESSAGE)


def test_message_actions_without_message_are_denied():
    assert not is_allowed(Action.EDIT_MESSAGE, "ann", CHAT)
    assert not is_allowed(Action.DELETE_MESSAGE, "owner", CHAT)


@pytest_asyncio.fixture
async def chat(db, make_user):
    for login in ("owner", "ann", "stranger"):
        await make_user(login)
    return await ChatRepository(db).create("owner", ["ann"])


async def test_gate_returns_chat_for_member(db, chat):
    allowed = await AuthorizationGate(db).authorize(Action.POST_MESSAGE, "ann", chat.id)
    assert allowed.id == chat.id


async def test_gate_rejects_non_member(db, chat):
    with pytest.raises(ForbiddenError):
        await AuthorizationGate(db).authorize(Action.POST_MESSAGE, "stranger", chat.id)


async def test_gate_rejects_member_managing_chat(db, chat):
    with pytest.raises(ForbiddenError):
        await AuthorizationGate(db).authorize(Action.DELETE_CHAT, "ann", chat.id)


async def test_gate_reports_missing_chat(db, chat):
    with pytest.raises(NotFoundError):
        await AuthorizationGate(db).authorize(Action.VIEW_CHAT, "ann", 999)
