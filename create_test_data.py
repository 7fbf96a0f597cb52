#!/usr/bin/env python3

import asyncio
import logging
import sys
import os

sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from messenger.database import create_tables, AsyncSessionLocal
from messenger.logger import setup_logger
from messenger.models.relationship_list import ListKind
from messenger.repositories.user_repository import UserRepository
from messenger.repositories.chat_repository import ChatRepository
from messenger.repositories.message_repository import MessageRepository
from messenger.schemas.user import UserCreate

logger = logging.getLogger("messenger.seed")

USERS = [
    {"login": "alice", "password": "password123", "phone": "+1-555-0101"},
    {"login": "bob", "password": "password123", "phone": "+1-555-0102"},
    {"login": "charlie", "password": "password123", "phone": "+1-555-0103"},
    {"login": "diana", "password": "password123", "phone": "+1-555-0104"},
    {"login": "eve", "password": "password123", "phone": "+1-555-0105"},
]

async def create_test_users():
    async with AsyncSessionLocal() as db:
        user_repo = UserRepository(db)

        created_users = []
        for user_data in USERS:
            existing_user = await user_repo.get_by_login(user_data["login"])
            if existing_user:
                created_users.append(existing_user)
                logger.info("User %s exists", existing_user.login)
                continue
            user = await user_repo.create(UserCreate(**user_data))
            created_users.append(user)

        return created_users

async def create_test_relationships():
    async with AsyncSessionLocal() as db:
        user_repo = UserRepository(db)

        for owner, target in [("alice", "bob"), ("alice", "charlie"), ("bob", "alice"), ("diana", "charlie")]:
            if target not in {login async for login, _ in user_repo.list_members(ListKind.CONTACT, owner)}:
                await user_repo.add_to_list(ListKind.CONTACT, owner, target)

        if "eve" not in {login async for login, _ in user_repo.list_members(ListKind.BLOCK, "alice")}:
            await user_repo.add_to_list(ListKind.BLOCK, "alice", "eve")

async def create_test_chats():
    async with AsyncSessionLocal() as db:
        chat_repo = ChatRepository(db)

        private_chat = await chat_repo.create("alice", ["bob"], "Hey Bob! How's it going?")
        group_chat = await chat_repo.create("alice", ["bob", "charlie", "eve"], "Welcome to our test group!")
        private_chat2 = await chat_repo.create("charlie", ["diana"])

        return [private_chat, group_chat, private_chat2]

async def create_test_messages(chats):
    async with AsyncSessionLocal() as db:
        message_repo = MessageRepository(db)

        messages_data = [
            (chats[0].id, "bob", "Hi Alice! All good, thanks!"),
            (chats[0].id, "alice", "Great! Ready to work on the project?"),
            (chats[1].id, "bob", "Thanks for the invitation!"),
            (chats[1].id, "charlie", "Hey everyone! Glad to be here"),
            (chats[1].id, "eve", "Alice will not see this one"),
            (chats[1].id, "alice", "Great idea! Let's start with defining tasks"),
            (chats[2].id, "charlie", "Diana, can we discuss project details?"),
            (chats[2].id, "diana", "Sure! I have a few ideas"),
        ]

        created_messages = []
        for chat_id, sender, text in messages_data:
            created_messages.append(await message_repo.create(chat_id, sender, text))

        return created_messages

async def main():
    setup_logger()
    print("Creating test data for Messenger...\n")

    try:
        await create_tables()
        users = await create_test_users()
        await create_test_relationships()
        chats = await create_test_chats()
        messages = await create_test_messages(chats)
    except Exception:
        logger.exception("Error creating test data")
        sys.exit(1)

    print("\nTest data summary:")
    print("Users:")
    for user in users:
        print(f"  - {user.login} - password: password123")

    print("\nChats:")
    for chat in chats:
        print(f"  - {chat.chat_type.value.capitalize()} chat #{chat.id} started by {chat.initiator}")

    print(f"\nMessages: {len(messages)}")
    print("\nAPI docs: http://localhost:8000/docs")

if __name__ == "__main__":
    asyncio.run(main())
