from pydantic import BaseModel, ConfigDict, Field

class LinkMetadata(BaseModel):
    """Preview record for a link. Missing values are empty strings, never null."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(default="", description="Page title")
    image: str = Field(default="", description="Representative image or icon URL, as found in the page")
    description: str = Field(default="", description="Short page description")

    def is_empty(self) -> bool:
        return not (self.title or self.image or self.description)

class CacheStats(BaseModel):
    total_entries: int
    live_entries: int
    database_path: str
