from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Command(BaseModel):
    """The action a screenshot documents, e.g. ``load`` of a page class."""

    action: str
    using: str | None = None
    value: str | None = None


class CreateExecution(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    test_id: str = Field(..., alias="testID", description="Identifier of the running test")
    browser: str | None = None
    node: str = Field("n/a", description="Host the browser runs on")
    sut_name: str | None = Field(None, alias="softwareUnderTestName")
    sut_version: str | None = Field(None, alias="softwareUnderTestVersion")


class CreateScreenshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    execution_id: str = Field(..., alias="executionID")
    command: Command
    url: str
    error_message: str | None = Field(None, alias="errorMessage")
    screenshot: str = Field(..., description="Base64 encoded PNG")
