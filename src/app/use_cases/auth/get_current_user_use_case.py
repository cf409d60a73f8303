from src.app.services.unit_of_work import UnitOfWork
from src.domain.authorization import Actor
from src.domain.errors import not_found
from src.libs.result import Result, Return

from .dtos import UserInfo


class GetCurrentUserUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, actor: Actor) -> Result[UserInfo]:
        async with self.uow:
            user = await self.uow.users.get_by_id(actor.id)
            if user is None:
                return Return.err(not_found("user"))
            return Return.ok(UserInfo.from_entity(user))
