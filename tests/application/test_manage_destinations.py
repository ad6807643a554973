"""Unit tests for push destination registration."""

import pytest

from app.bullion_tracker.application.dto.destination_dto import (
    RegisterDestinationRequest,
)
from app.bullion_tracker.application.exceptions import InvalidDestinationError
from app.bullion_tracker.application.use_cases.manage_destinations import (
    RegisterDestinationUseCase,
    RemoveDestinationUseCase,
)
from fakes import expo_token


class TestRegisterDestinationUseCase:
    """Tests for RegisterDestinationUseCase."""

    @pytest.mark.asyncio
    async def test_register_new_token(self, destination_repository, transport) -> None:
        use_case = RegisterDestinationUseCase(destination_repository, transport)

        result = await use_case.execute(
            RegisterDestinationRequest(owner_ref="device-abc", token=expo_token(1), platform="ios")
        )

        assert result.token == expo_token(1)
        assert result.platform == "ios"
        assert expo_token(1) in destination_repository.destinations

    @pytest.mark.asyncio
    async def test_reregistering_moves_token_to_new_owner(self, destination_repository, transport) -> None:
        use_case = RegisterDestinationUseCase(destination_repository, transport)
        await use_case.execute(RegisterDestinationRequest(owner_ref="old", token=expo_token(1)))

        result = await use_case.execute(RegisterDestinationRequest(owner_ref="new", token=expo_token(1)))

        assert result.owner_ref == "new"
        assert len(destination_repository.destinations) == 1
        assert await destination_repository.get_latest_for_owner("old") is None

    @pytest.mark.asyncio
    async def test_invalid_token_rejected(self, destination_repository, transport) -> None:
        use_case = RegisterDestinationUseCase(destination_repository, transport)

        with pytest.raises(InvalidDestinationError):
            await use_case.execute(RegisterDestinationRequest(owner_ref="device-abc", token="apns-1234"))
        assert destination_repository.destinations == {}


class TestRemoveDestinationUseCase:
    """Tests for RemoveDestinationUseCase."""

    @pytest.mark.asyncio
    async def test_remove(self, destination_repository, transport) -> None:
        await RegisterDestinationUseCase(destination_repository, transport).execute(
            RegisterDestinationRequest(owner_ref="device-abc", token=expo_token(1))
        )
        use_case = RemoveDestinationUseCase(destination_repository)

        assert await use_case.execute(expo_token(1)) is True
        assert await use_case.execute(expo_token(1)) is False
