"""Opportunity and profile records and the stores that serve them."""

from coach.opportunities.models import OpportunityRecord, UserProfilePreferences
from coach.opportunities.profiles import InMemoryProfileStore, ProfileStore, SqlProfileStore
from coach.opportunities.store import InMemoryOpportunityStore, OpportunityStore, SqlOpportunityStore

__all__ = [
    "InMemoryOpportunityStore",
    "InMemoryProfileStore",
    "OpportunityRecord",
    "OpportunityStore",
    "ProfileStore",
    "SqlOpportunityStore",
    "SqlProfileStore",
    "UserProfilePreferences",
]
