"""
Document Configuration Model

The caller-supplied description of the POA being drafted. This is what the
wizard screens collect and what the form-submission endpoints post.

CRITICAL: Configurations are never mutated by this library. The model is
frozen and every resolution works from the values as given.
"""

from datetime import date
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class POAType(str, Enum):
    """
    Kind of POA being drafted.

    durable: effective immediately, survives incapacity
    springing: effective only once a triggering condition (incapacity) occurs
    limited: scoped to a specific purpose and time window
    """
    DURABLE = "durable"
    SPRINGING = "springing"
    LIMITED = "limited"


class GrantedPowers(BaseModel):
    """
    Which powers the principal is granting.

    Categories may be given as letters ('H'), numbers (8) or numeric
    strings ('8'). Sub-powers are identified as category letter plus
    sub-power number ('H1').
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    category_ids: list[str] = Field(
        default_factory=list,
        description="Selected power categories"
    )
    sub_power_ids: list[str] = Field(
        default_factory=list,
        description="Selected sub-powers (ignored when grantAllSubPowers is set)"
    )
    grant_all_sub_powers: bool = Field(
        default=True,
        description="Grant every sub-power of the selected categories"
    )

    @field_validator("category_ids", "sub_power_ids", mode="before")
    @classmethod
    def normalize_ids(cls, v: Any) -> Any:
        if not isinstance(v, (list, tuple)):
            return v
        return [str(item).strip().upper() for item in v]


class DocumentConfiguration(BaseModel):
    """
    A POA document as configured by the user.

    Only `state` and `poaType` are always required. The springing and
    limited parameters are checked by the resolver for the POA type
    that needs them.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        str_strip_whitespace=True,
    )

    state: str = Field(
        ...,
        min_length=1,
        max_length=20,
        description="Target jurisdiction (two-letter state code)"
    )
    poa_type: POAType = Field(
        ...,
        description="durable, springing or limited"
    )
    granted_powers: GrantedPowers = Field(
        default_factory=GrantedPowers,
        description="Selected power categories and sub-powers"
    )
    hot_powers_consent: dict[str, bool] = Field(
        default_factory=dict,
        description="Explicit consent flags for dangerous powers"
    )

    # Springing parameters
    springing_condition: Optional[str] = Field(
        default=None,
        description="Condition that makes the POA effective"
    )
    number_of_physicians_required: Optional[int] = Field(
        default=None,
        ge=0,
        le=5,
        description="Physicians the principal wants to certify incapacity"
    )

    # Limited parameters
    specific_purpose: Optional[str] = Field(
        default=None,
        description="What a limited POA is for"
    )
    expiration_date: Optional[date] = Field(
        default=None,
        description="When a limited POA ends"
    )

    use_statutory_form: bool = Field(
        default=True,
        description="Draft on the state's statutory form where one exists"
    )
    recording_acknowledged: bool = Field(
        default=False,
        description="Principal acknowledged the recording obligation"
    )

    @field_validator("state", mode="before")
    @classmethod
    def upper_state(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("springing_condition", "specific_purpose", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def has_consent(self, *keys: str) -> bool:
        """True if any of the given consent flags is explicitly true."""
        return any(self.hot_powers_consent.get(key) is True for key in keys)
