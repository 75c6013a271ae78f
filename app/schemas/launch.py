"""
Schemas for the parameters Ton.Place appends to the app URL.
"""
from typing import Mapping

from pydantic import BaseModel, Field


class LaunchParams(BaseModel):
    """
    Launch parameters passed by Ton.Place.

    Example query:
        ?app_id=123&user_id=456&ts=1707981234&first_name=John&last_name=Doe&hash=abc123...
    """

    app_id: str = Field(default="", description="Ton.Place application identifier")
    user_id: str = Field(default="", description="Ton.Place user identifier")
    ts: str = Field(default="", description="Unix timestamp (seconds) of the launch")
    first_name: str = Field(default="", description="User first name, may be empty")
    last_name: str = Field(default="", description="User last name, may be empty")

    @classmethod
    def from_parameter_set(cls, params: Mapping[str, str]) -> "LaunchParams":
        return cls(
            app_id=params.get("app_id", ""),
            user_id=params.get("user_id", ""),
            ts=params.get("ts", ""),
            first_name=params.get("first_name", ""),
            last_name=params.get("last_name", ""),
        )

    @property
    def numeric_user_id(self) -> int:
        """User id as an integer; 0 when it is not numeric."""
        try:
            return int(self.user_id)
        except ValueError:
            return 0
