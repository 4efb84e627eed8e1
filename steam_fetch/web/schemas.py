# ===== IMPORTS & DEPENDENCIES =====
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

# ===== TYPES & INTERFACES =====
Category = Literal["action", "adventure", "strategy", "rpg", "simulation", "sports", "racing", "indie", "free"]


# --- Query & path parameters ---

class LimitQuery(BaseModel):
    limit: int = Field(default=20, ge=1, le=100)


class SearchQuery(LimitQuery):
    q: str = Field(..., min_length=1, max_length=100)


class PaginationQuery(LimitQuery):
    offset: int = Field(default=0, ge=0)


class GameQuery(LimitQuery):
    appid: Optional[int] = Field(default=None, gt=0)
    name: Optional[str] = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def _require_appid_or_name(self) -> "GameQuery":
        if not self.appid and not self.name:
            raise ValueError("At least one of appid or name is required")
        return self


class AppIdParams(BaseModel):
    appid: int = Field(..., gt=0)


class CategoryParams(BaseModel):
    category: Category


class TopSellersQuery(BaseModel):
    country_code: str = Field(default="US", min_length=2, max_length=2)
    page_start: int = Field(default=0, ge=0)
    page_count: int = Field(default=20, ge=1, le=100)
    language: str = Field(default="english", min_length=1)


class ChartsQuery(BaseModel):
    language: str = Field(default="english", min_length=1)
    country_code: str = Field(default="US", min_length=2, max_length=2)


class CommunityQuery(BaseModel):
    section: Optional[str] = Field(default=None, pattern=r"^[A-Za-z0-9_/-]+$")


# --- Request bodies ---

class GameCreate(BaseModel):
    appid: int = Field(..., gt=0)
    name: str = Field(..., min_length=1, max_length=255)


class GameUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class GamesBatchCreate(BaseModel):
    games: List[GameCreate] = Field(..., min_length=1, max_length=100)
