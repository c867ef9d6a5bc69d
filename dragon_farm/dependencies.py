from fastapi import Request

from dragon_farm.converter import DataConverter
from dragon_farm.services.breeding_coordinator import BreedingCoordinator

data_converter = DataConverter()


def get_coordinator(request: Request) -> BreedingCoordinator:
    """The breeding core wired by the application lifespan."""
    return request.app.state.coordinator


def get_converter() -> DataConverter:
    return data_converter
