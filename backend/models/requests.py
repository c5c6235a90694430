from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AnalyzeRequest(BaseModel):
    # Values are left untyped; input_validator owns missing/type checks
    model_config = ConfigDict(populate_by_name=True)

    resume: Any = Field(None, description="Plain text resume content")
    job_description: Any = Field(None, alias="jobDescription", description="Job description text")
