from pydantic import BaseModel, Field


class AssetSorting(BaseModel):
    """
    Sort options understood by the DAS enumeration methods, sent as the ``sortBy`` param.
    """
    sort_by: str = Field(default="created", serialization_alias="sortBy")
    sort_direction: str = Field(default="asc", serialization_alias="sortDirection")

    def to_param(self) -> dict:
        return self.model_dump(by_alias=True)
