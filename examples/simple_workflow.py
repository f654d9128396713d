import asyncio
import logging
from dataclasses import dataclass, field

from returns.result import Failure, Success

from pyresultflow import ExponentialBackoff, Flow

logging.basicConfig(level=logging.INFO)


@dataclass
class UserRepository:
    users: dict = field(default_factory=lambda: {1: {"id": 1, "name": "Ada"}})
    flaky_updates: int = 2

    async def find_by_id(self, user_id: int):
        print(f"Finding user {user_id}")
        if user_id not in self.users:
            return Failure({"reason": "not-found"})
        return Success(self.users[user_id])

    async def update_by_id(self, user_id: int, payload: dict):
        if self.flaky_updates:
            self.flaky_updates -= 1
            print(f"Update of user {user_id} timed out")
            return Failure({"reason": "timeout"})
        self.users[user_id] = {**self.users[user_id], **payload}
        print(f"Updated user {user_id}: {self.users[user_id]}")
        return Success(self.users[user_id])


def validate(user: dict):
    if not user.get("name"):
        return Failure({"reason": "invalid"})
    return Success(user)


async def rename_user(steps, repository: UserRepository) -> dict:
    user = await steps.try_to(repository.find_by_id(1))
    await steps.try_to(validate(user))
    return await steps.try_to(repository.update_by_id(user["id"], {"name": "Grace"}))


async def main():
    repository = UserRepository()

    flow = (
        Flow.of(rename_user)
        .retry_policy(
            max_retries=3,
            condition=lambda error: error["reason"] == "timeout",
            delay_strategy=ExponentialBackoff(base_delay=0.1, max_delay=1.0),
        )
        .map(lambda user: user["name"])
        .if_failure(lambda error: print(f"Giving up: {error}"))
    )

    result = await flow.run(repository)
    print(f"Pipeline complete: {result}")


if __name__ == "__main__":
    asyncio.run(main())
