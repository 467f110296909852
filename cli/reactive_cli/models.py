"""Script models for the reactive CLI."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field


class UpdateStep(BaseModel):
    """Deep-merge a patch into state, then render."""

    model_config = {"extra": "forbid"}

    type: Literal["update"]
    patch: dict[str, Any]


class SetStep(BaseModel):
    """Assign one path directly (no merge), then render."""

    model_config = {"extra": "forbid"}

    type: Literal["set"]
    path: str = Field(min_length=1)
    value: Any = None


class InputStep(BaseModel):
    """Type into a bound input and fire its trigger event."""

    model_config = {"extra": "forbid"}

    type: Literal["input"]
    bind: str = Field(min_length=1)  # state path of the bound input
    value: str


class RenderStep(BaseModel):
    """Force a full render."""

    model_config = {"extra": "forbid"}

    type: Literal["render"]


Step = Annotated[Union[UpdateStep, SetStep, InputStep, RenderStep], Field(discriminator="type")]


class Script(BaseModel):
    """What a --script file contains."""

    model_config = {"extra": "forbid"}

    state: dict[str, Any] | None = None  # overrides --state when given
    steps: list[Step] = Field(default_factory=list)
