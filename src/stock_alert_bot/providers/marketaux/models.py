"""Models for the Marketaux news provider."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class MarketauxNewsParams(BaseModel):
    """Params for /news/all."""

    symbols: str
    api_token: str
    limit: int = 5
    filter_entities: str = "true"
    language: str = "en"


class MarketauxEntity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    symbol: str | None = None
    sentiment_score: float | None = None


class MarketauxArticle(BaseModel):
    """One item of the /news/all ``data`` array."""

    model_config = ConfigDict(extra="ignore")

    title: str = ""
    description: str | None = None
    url: str = ""
    published_at: datetime | None = None
    source: str | None = None
    image_url: str | None = None
    entities: list[MarketauxEntity] = Field(default_factory=list)

    @property
    def sentiment(self) -> float | None:
        """Sentiment of the first matched entity, if Marketaux scored one."""
        if not self.entities:
            return None
        return self.entities[0].sentiment_score


class MarketauxNewsResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: list[MarketauxArticle] | None = None
