"""Aggregated profile data model."""

from datetime import datetime

from pydantic import BaseModel


class AggregatedProfile(BaseModel):
    """Consolidated Roblox profile built from several upstream calls.

    Every field carries a default so the record stays fully populated when
    enrichment calls fail.
    """

    user_id: int
    username: str
    display_name: str = "N/A"
    estimated_creation_date: str = "N/A"
    account_age: str = "N/A"
    age_days: int = 0
    followers: int = 0
    followings: int = 0
    friends: int = 0
    groups_count: int = 0
    verified: bool = False
    description: str = "N/A"
    avatar: str = "https://via.placeholder.com/150"
    previous_usernames: list[str] = []
    active_status: str = "Active"
    online_status: str = "Unknown"
    profile_link: str
    last_updated: datetime
