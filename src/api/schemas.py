"""
Request bodies for the HTTP API.

Fields are optional at the schema level so that missing or malformed values
reach the domain validators and come back as 400 with a readable message.
"""

from pydantic import BaseModel, ConfigDict, Field


class CollectMonthRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    departure_iata: str | None = Field(default=None, alias="departureIata")
    month: str | None = None


class CollectUnitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    departure_iata: str | None = Field(default=None, alias="departureIata")
    date: str | None = None
    time_slot: str | None = Field(default=None, alias="timeSlot")


__all__ = ["CollectMonthRequest", "CollectUnitRequest"]
