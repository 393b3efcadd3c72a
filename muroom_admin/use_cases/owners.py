"""Use cases for owner registration."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnerRegistration:
    nickname: str
    phone_number: str

    @property
    def normalized_phone(self) -> str:
        return self.phone_number.replace("-", "").strip()

    def problems(self) -> list[str]:
        problems = []
        if not self.nickname.strip():
            problems.append("nickname is required (generate one first)")
        if not self.normalized_phone:
            problems.append("phoneNumber is required")
        return problems

    def to_payload(self) -> dict:
        return {"nickname": self.nickname.strip(), "phoneNumber": self.normalized_phone}


class GenerateNicknameUseCase:
    """Ask the API for a fresh random owner nickname."""

    def __init__(self, repository: Any):
        self._repository = repository

    async def execute(self) -> str:
        nickname = await self._repository.generate_nickname()
        logger.debug(f"Generated nickname: {nickname}")
        return nickname


class RegisterOwnerUseCase:
    """Validate and register a studio owner."""

    def __init__(self, repository: Any):
        self._repository = repository

    async def execute(self, registration: OwnerRegistration) -> Any:
        problems = registration.problems()
        if problems:
            raise ValidationError(problems)
        response = await self._repository.create_owner(registration.to_payload())
        logger.info(f"Registered owner {registration.nickname}")
        return response
