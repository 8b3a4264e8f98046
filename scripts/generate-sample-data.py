#!/usr/bin/env python3
"""
Todo API — Sample Data Generator
Generates realistic users and todos for development and demo environments.

Usage:
    python scripts/generate-sample-data.py
    python scripts/generate-sample-data.py --users 10 --todos 8 --output sample-data.json
    python scripts/generate-sample-data.py --load   # insert into DATABASE_URL

Loaded users all share the password given by --password.
"""

import json
import random
import asyncio
import argparse
from datetime import datetime, timezone


# ── Configuration ───────────────────────────────────────────

FIRST_NAMES = ["Alex", "Jordan", "Taylor", "Morgan", "Casey", "Riley", "Quinn", "Avery", "Sage", "River",
               "Kai", "Rowan", "Phoenix", "Skyler", "Dakota", "Reese", "Finley", "Harper", "Emery", "Blake"]
LAST_NAMES = ["Chen", "Patel", "Kim", "Santos", "Müller", "Okafor", "Tanaka", "Johansson", "Silva", "Kowalski",
              "Nguyen", "Andersen", "Dubois", "Rossi", "Yamamoto", "Petrov", "Larsson", "Fernandez", "Ali", "Park"]
DOMAINS = ["todo.dev", "example.com"]

VERBS = ["Buy", "Call", "Email", "Fix", "Book", "Renew", "Pay", "Clean", "Plan", "Return"]
OBJECTS = ["milk", "the dentist", "the landlord", "bike tyre", "train tickets", "passport",
           "electricity bill", "garage", "birthday party", "library books"]
DETAILS = ["before Friday", "ask about the discount", "check the receipt first", "after work",
           "needs two people", "low priority", "keep the confirmation", "remind Sam too"]

DEFAULT_PASSWORD = "SamplePass123"


class SampleDataGenerator:
    """Generates sample users and their todos."""

    def __init__(self, seed: int = 42):
        random.seed(seed)
        self.now = datetime.now(timezone.utc)

    # ── Generators ──────────────────────────────────────────

    def generate_user(self, index: int) -> dict:
        first = random.choice(FIRST_NAMES)
        last = random.choice(LAST_NAMES)
        return {
            "name": f"{first} {last}",
            "email": f"{first.lower()}.{last.lower()}{index}@{random.choice(DOMAINS)}",
        }

    def generate_todo(self, owner_email: str) -> dict:
        return {
            "owner": owner_email,
            "title": f"{random.choice(VERBS)} {random.choice(OBJECTS)}",
            "desc": random.choice(DETAILS),
            "done": random.random() < 0.4,
        }

    def generate_all(self, users: int, todos_per_user: int) -> dict:
        user_rows = [self.generate_user(i) for i in range(users)]
        todo_rows = [
            self.generate_todo(user["email"])
            for user in user_rows
            for _ in range(random.randint(0, todos_per_user))
        ]
        return {
            "generated_at": self.now.isoformat(),
            "users": user_rows,
            "todos": todo_rows,
            "counts": {
                "users": len(user_rows),
                "todos": len(todo_rows),
                "completed": sum(1 for t in todo_rows if t["done"]),
            },
        }


# ── Loader ──────────────────────────────────────────────────

async def load_into_database(data: dict, password: str = DEFAULT_PASSWORD) -> dict:
    """Insert generated rows through the service layer so every rule applies."""
    from database import async_session_maker, init_db
    from services.account_service import AccountService
    from services.errors import DuplicateEmail
    from services.task_service import TaskService

    await init_db()
    owners = {}
    skipped = 0
    async with async_session_maker() as db:
        accounts = AccountService(db)
        for user in data["users"]:
            try:
                result = await accounts.register(
                    {"name": user["name"], "email": user["email"], "password": password}
                )
            except DuplicateEmail:
                skipped += 1
                continue
            owners[user["email"]] = result["user"]["id"]

        tasks = TaskService(db)
        created = 0
        for todo in data["todos"]:
            owner_id = owners.get(todo["owner"])
            if owner_id is None:
                continue
            await tasks.create_task(
                {"title": todo["title"], "desc": todo["desc"], "done": todo["done"]}, owner_id
            )
            created += 1

    return {"users": len(owners), "todos": created, "skipped_users": skipped}


# ── CLI ─────────────────────────────────────────────────────

def main():
    parser = argparse.ArgumentParser(description="Todo API Sample Data Generator")
    parser.add_argument("--users", type=int, default=10, help="Number of users")
    parser.add_argument("--todos", type=int, default=8, help="Maximum todos per user")
    parser.add_argument("--output", type=str, default="sample-data.json", help="Output file")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--load", action="store_true", help="Insert into DATABASE_URL instead of writing JSON")
    parser.add_argument("--password", type=str, default=DEFAULT_PASSWORD, help="Password for loaded users")
    args = parser.parse_args()

    generator = SampleDataGenerator(seed=args.seed)
    data = generator.generate_all(args.users, args.todos)

    if args.load:
        loaded = asyncio.run(load_into_database(data, args.password))
        print(f"✅ Loaded {loaded['users']} users and {loaded['todos']} todos")
        if loaded["skipped_users"]:
            print(f"   Skipped {loaded['skipped_users']} users with existing emails")
        return

    with open(args.output, "w") as f:
        json.dump(data, f, indent=2, default=str)

    counts = data["counts"]
    print(f"✅ Sample data generated: {args.output}")
    print(f"   Users: {counts['users']}")
    print(f"   Todos: {counts['todos']} ({counts['completed']} completed)")


if __name__ == "__main__":
    main()
