"""Request and response models for one bundling invocation."""

import datetime as dt
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator


class DateRequest(BaseModel):
    """Select open orders created on a single UTC calendar day."""

    type: Literal["date"]
    date: dt.date


class OrderRangeRequest(BaseModel):
    """Select open orders whose order number lies in ``[start, end]``."""

    type: Literal["order_range"]
    start: int
    end: int

    @model_validator(mode="after")
    def _check_bounds(self) -> "OrderRangeRequest":
        if self.start > self.end:
            raise ValueError(f"start ({self.start}) must not exceed end ({self.end})")
        return self


BundleRequest = Annotated[DateRequest | OrderRangeRequest, Field(discriminator="type")]

bundle_request_adapter: TypeAdapter[DateRequest | OrderRangeRequest] = TypeAdapter(
    BundleRequest
)


class ArchiveUpload(BaseModel):
    """A finished archive in the storage sink."""

    key: str
    download_url: str
    entry_count: int


class BundleResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    download_url: str | None = Field(default=None, alias="downloadUrl")

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
