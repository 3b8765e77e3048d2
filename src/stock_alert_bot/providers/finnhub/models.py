"""Models for the Finnhub provider (API params and payloads)."""
from pydantic import BaseModel, ConfigDict, Field


class FinnhubQuoteParams(BaseModel):
    """Params for /quote and /stock/profile2."""

    symbol: str
    token: str


class FinnhubQuotePayload(BaseModel):
    """Raw /quote response; single-letter keys as returned by Finnhub."""

    current: float | None = Field(default=None, alias="c")
    change: float | None = Field(default=None, alias="d")
    percent_change: float | None = Field(default=None, alias="dp")
    high: float | None = Field(default=None, alias="h")
    low: float | None = Field(default=None, alias="l")
    open: float | None = Field(default=None, alias="o")
    previous_close: float | None = Field(default=None, alias="pc")
    timestamp: int | None = Field(default=None, alias="t")


class FinnhubCompanyProfile(BaseModel):
    """Subset of /stock/profile2 used by the bot."""

    model_config = ConfigDict(extra="ignore")

    ticker: str | None = None
    name: str | None = None
    exchange: str | None = None
    currency: str | None = None
    country: str | None = None
    industry: str | None = Field(default=None, alias="finnhubIndustry")
    weburl: str | None = None
    logo: str | None = None
    market_capitalization: float | None = Field(default=None, alias="marketCapitalization")
