from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from dragon_farm.authentication.basic_authentication import any_role, keeper_role
from dragon_farm.converter import DataConverter
from dragon_farm.dependencies import get_converter, get_coordinator
from dragon_farm.domain.errors import BreedingRequestNotFoundError, RequestNotCancellableError
from dragon_farm.models.basic_authentication_models import UserModel
from dragon_farm.models.dc_models import BreedingRequestModel, BreedingStatusModel
from dragon_farm.services.breeding_coordinator import BreedingCoordinator

breeding_router = APIRouter()


class BreedingRequestAPI:
    @staticmethod
    @breeding_router.post(
        "/breeding-requests",
        response_model=BreedingStatusModel,
        status_code=status.HTTP_202_ACCEPTED,
    )
    async def submit_breeding_request(
        breeding_request: BreedingRequestModel,
        user_data: UserModel = Depends(keeper_role),
        coordinator: BreedingCoordinator = Depends(get_coordinator),
        converter: DataConverter = Depends(get_converter),
    ):
        """Queue a breeding request. The scheduler picks it up on its next run."""
        request = await coordinator.submit(breeding_request)
        return converter.convert_request_to_status_model(request)

    @staticmethod
    @breeding_router.get("/breeding-requests/{request_id}", response_model=BreedingStatusModel)
    async def get_breeding_request(
        request_id: UUID,
        user_data: UserModel = Depends(any_role),
        coordinator: BreedingCoordinator = Depends(get_coordinator),
        converter: DataConverter = Depends(get_converter),
    ):
        try:
            request = await coordinator.get_request(request_id)
        except BreedingRequestNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        return converter.convert_request_to_status_model(request)

    @staticmethod
    @breeding_router.post("/breeding-requests/{request_id}/cancel", response_model=BreedingStatusModel)
    async def cancel_breeding_request(
        request_id: UUID,
        user_data: UserModel = Depends(keeper_role),
        coordinator: BreedingCoordinator = Depends(get_coordinator),
        converter: DataConverter = Depends(get_converter),
    ):
        try:
            request = await coordinator.cancel(request_id)
        except BreedingRequestNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        except RequestNotCancellableError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
        return converter.convert_request_to_status_model(request)
