"""Pydantic models for Jira API responses."""

from pydantic import BaseModel, Field


class JiraIssueFields(BaseModel):
    """Subset of issue fields requested from search."""

    summary: str = ""


class JiraIssue(BaseModel):
    """Jira issue model."""

    key: str
    fields: JiraIssueFields = Field(default_factory=JiraIssueFields)

    @property
    def summary(self) -> str:
        """Get the issue summary."""
        return self.fields.summary
